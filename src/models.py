from dataclasses import dataclass
from enum import Enum
from typing import Optional

from amount import Amount

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ApplyResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    """
    One event from the feed.

    For deposits and withdrawals transaction_id names the transaction itself;
    disputes, resolves and chargebacks use it to reference an earlier deposit.
    The amount is kept as text and parsed by the ledger that applies it.
    """

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[str] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class ClientSnapshot:
    client_id: int
    available: Amount
    held: Amount
    total: Amount
    locked: bool


class ProcessingStats:
    """Counters for a single run."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0

    @property
    def processed(self) -> int:
        return self.applied + self.ignored

    def record(self, result: ApplyResult) -> None:
        if result == ApplyResult.APPLIED:
            self.applied += 1
        else:
            self.ignored += 1
