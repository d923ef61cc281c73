import logging
from typing import Callable, Dict, Optional, Set

from amount import Amount, ZERO
from exceptions import AmountArithmeticError, LedgerArithmeticError, MalformedAmountError, MalformedEventError
from models import Transaction, TransactionType, ApplyResult, ClientSnapshot

logger = logging.getLogger(__name__)


class ClientLedger:
    """
    Balance state machine for a single client.

    Every accepted deposit is remembered by tx id so later disputes can
    recover its amount. A charged back deposit stays in the map with a zero
    amount, which keeps it distinguishable from an unknown tx id.

    Events that are inconsistent with the current state (unknown tx, double
    dispute, insufficient funds, frozen account) are ignored and reported as
    ApplyResult.IGNORED. Arithmetic failures and missing amounts raise.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self.available: Amount = ZERO
        self.held: Amount = ZERO
        self.is_frozen = False
        self._deposits: Dict[int, Amount] = {}
        self._disputes: Set[int] = set()

    @property
    def total(self) -> Amount:
        return self._checked(None, lambda: self.available.checked_add(self.held))

    def deposit_amount(self, transaction_id: int) -> Optional[Amount]:
        """Stored amount of a known deposit, zero if charged back, None if unknown."""
        return self._deposits.get(transaction_id)

    def is_disputed(self, transaction_id: int) -> bool:
        return transaction_id in self._disputes

    def apply(self, transaction: Transaction) -> ApplyResult:
        """
        Apply one event to this ledger.

        Returns:
            APPLIED: the event changed the ledger
            IGNORED: the event is inconsistent with the ledger and had no effect
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                raise MalformedEventError(self.client_id, transaction.transaction_id, f"unknown transaction type {transaction.transaction_type!r}")

    def snapshot(self) -> ClientSnapshot:
        return ClientSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.is_frozen,
        )

    def _handle_deposit(self, transaction: Transaction) -> ApplyResult:
        amount = self._require_amount(transaction)

        if self.is_frozen:
            return self._ignore(transaction, "account is frozen")

        if self.deposit_amount(transaction.transaction_id) is not None:
            return self._ignore(transaction, "duplicate deposit id")

        available = self._checked(transaction.transaction_id, lambda: self.available.checked_add(amount))

        self.available = available
        self._deposits[transaction.transaction_id] = amount
        return self._applied(transaction)

    def _handle_withdrawal(self, transaction: Transaction) -> ApplyResult:
        amount = self._require_amount(transaction)

        if self.is_frozen:
            return self._ignore(transaction, "account is frozen")

        if self.available < amount:
            return self._ignore(transaction, f"insufficient funds ({self.available} available, {amount} requested)")

        self.available = self._checked(transaction.transaction_id, lambda: self.available.checked_sub(amount))
        return self._applied(transaction)

    def _handle_dispute(self, transaction: Transaction) -> ApplyResult:
        transaction_id = transaction.transaction_id
        amount = self.deposit_amount(transaction_id)

        if amount is None:
            return self._ignore(transaction, "no such deposit")

        if amount.is_zero():
            return self._ignore(transaction, "deposit was charged back")

        if self.is_disputed(transaction_id):
            return self._ignore(transaction, "deposit already disputed")

        # both results are computed before either balance is touched
        held = self._checked(transaction_id, lambda: self.held.checked_add(amount))
        available = self._checked(transaction_id, lambda: self.available.checked_sub(amount))

        self.held = held
        self.available = available
        self._disputes.add(transaction_id)
        return self._applied(transaction)

    def _handle_resolve(self, transaction: Transaction) -> ApplyResult:
        transaction_id = transaction.transaction_id

        if not self.is_disputed(transaction_id):
            return self._ignore(transaction, "deposit is not disputed")

        amount = self._deposits[transaction_id]
        available = self._checked(transaction_id, lambda: self.available.checked_add(amount))
        held = self._checked(transaction_id, lambda: self.held.checked_sub(amount))

        self.available = available
        self.held = held
        self._disputes.remove(transaction_id)
        return self._applied(transaction)

    def _handle_chargeback(self, transaction: Transaction) -> ApplyResult:
        transaction_id = transaction.transaction_id

        if not self.is_disputed(transaction_id):
            return self._ignore(transaction, "deposit is not disputed")

        amount = self._deposits[transaction_id]
        self.held = self._checked(transaction_id, lambda: self.held.checked_sub(amount))
        self._deposits[transaction_id] = ZERO
        self._disputes.remove(transaction_id)
        self.is_frozen = True
        return self._applied(transaction)

    def _require_amount(self, transaction: Transaction) -> Amount:
        kind = transaction.transaction_type.value
        if transaction.amount is None or transaction.amount == "":
            raise MalformedEventError(self.client_id, transaction.transaction_id, f"no amount for {kind} tx")
        try:
            return Amount.parse(transaction.amount)
        except MalformedAmountError as e:
            raise MalformedEventError(self.client_id, transaction.transaction_id, f"invalid amount for {kind} tx: {e}") from e

    def _checked(self, transaction_id: Optional[int], operation: Callable[[], Amount]) -> Amount:
        try:
            return operation()
        except AmountArithmeticError as e:
            raise LedgerArithmeticError(self.client_id, transaction_id, str(e)) from e

    def _applied(self, transaction: Transaction) -> ApplyResult:
        logger.debug(f"Applied {transaction}")
        return ApplyResult.APPLIED

    def _ignore(self, transaction: Transaction, reason: str) -> ApplyResult:
        logger.info(f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id} for client {self.client_id} ignored: {reason}")
        return ApplyResult.IGNORED
