"""Exception hierarchy for the payments engine.

Every exception here is fatal for a run. Inconsistent but well-formed
events are not errors: the ledger ignores them and reports ApplyResult.IGNORED.
"""

from typing import Optional


class PaymentsEngineError(Exception):
    """Base exception for all payments engine errors."""


class ConfigurationError(PaymentsEngineError):
    """Raised when configuration is invalid."""


class AmountError(PaymentsEngineError):
    """Base for fixed-point amount failures."""


class MalformedAmountError(AmountError):
    """Raised when amount text cannot be parsed into an Amount."""


class AmountArithmeticError(AmountError):
    """Raised when checked amount arithmetic leaves the representable range."""


class AmountOverflowError(AmountArithmeticError):
    pass


class AmountUnderflowError(AmountArithmeticError):
    pass


class LedgerArithmeticError(PaymentsEngineError):
    """Raised when a ledger transition overflows or underflows a balance."""

    def __init__(self, client_id: int, transaction_id: Optional[int], message: str):
        self.client_id = client_id
        self.transaction_id = transaction_id
        location = f"client {client_id}"
        if transaction_id is not None:
            location += f", tx {transaction_id}"
        super().__init__(f"{location}: {message}")


class MalformedEventError(PaymentsEngineError):
    """Raised when a deposit or withdrawal has a missing or invalid amount."""

    def __init__(self, client_id: int, transaction_id: int, message: str):
        self.client_id = client_id
        self.transaction_id = transaction_id
        super().__init__(f"client {client_id}, tx {transaction_id}: {message}")


class MalformedRecordError(PaymentsEngineError):
    """Raised when an input row cannot be decoded into a transaction."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")
