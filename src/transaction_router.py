from typing import Dict, List

from client_ledger import ClientLedger
from models import Transaction, ApplyResult, ClientSnapshot


class TransactionRouter:
    """
    Owns one ClientLedger per client id and applies events in arrival order.
    Ledgers are created on first reference; ledgers of different clients
    share no state.
    """

    def __init__(self):
        self._ledgers: Dict[int, ClientLedger] = {}

    def __len__(self) -> int:
        return len(self._ledgers)

    def get_or_create_ledger(self, client_id: int) -> ClientLedger:
        """Get existing ledger or create an empty one."""
        if client_id not in self._ledgers:
            self._ledgers[client_id] = ClientLedger(client_id)
        return self._ledgers[client_id]

    def apply(self, transaction: Transaction) -> ApplyResult:
        """
        Route a transaction to its client's ledger.
        Ledger errors (arithmetic, malformed events) propagate unchanged.
        """
        ledger = self.get_or_create_ledger(transaction.client_id)
        return ledger.apply(transaction)

    def snapshot(self) -> List[ClientSnapshot]:
        """Drain all ledgers into snapshots. The router is empty afterwards."""
        ledgers, self._ledgers = self._ledgers, {}
        return [ledger.snapshot() for ledger in ledgers.values()]
