import csv
import logging
from typing import Dict, Iterable, Iterator, List, Optional, TextIO

from config import EngineConfig
from exceptions import MalformedRecordError
from models import Transaction, TransactionType, ClientSnapshot, ProcessingStats, MAX_CLIENT_ID, MAX_TRANSACTION_ID
from transaction_router import TransactionRouter

logger = logging.getLogger(__name__)

CSV_HEADER = "client,available,held,total,locked"
REQUIRED_COLUMNS = ("type", "client", "tx")


def read_transactions(handle: TextIO) -> Iterator[Transaction]:
    """
    Decode CSV rows into transactions, one at a time.
    Raises MalformedRecordError on the first row that cannot be decoded.
    """
    reader = csv.DictReader(handle)
    try:
        fieldnames = reader.fieldnames
        if fieldnames is None:
            return

        columns = [name.strip() for name in fieldnames]
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise MalformedRecordError(reader.line_num, f"missing columns {', '.join(missing)}")

        for row in reader:
            yield parse_csv_row(row, reader.line_num)
    except UnicodeDecodeError as e:
        # decoding is buffered, so the reported line is where reading stopped
        raise MalformedRecordError(reader.line_num + 1, f"not valid UTF-8: {e}") from e
    except csv.Error as e:
        raise MalformedRecordError(reader.line_num, str(e)) from e


def parse_csv_row(row: Dict[Optional[str], str], line_number: int) -> Transaction:
    """Parse CSV row into Transaction."""
    if None in row:
        raise MalformedRecordError(line_number, f"unexpected extra fields {row[None]}")

    normalized = {k.strip(): (v or "").strip() for k, v in row.items()}

    transaction_type_str = normalized["type"].lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError as e:
        raise MalformedRecordError(line_number, f"unknown transaction type {transaction_type_str!r}") from e

    client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID, line_number)

    amount = normalized.get("amount") or None

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, column: str, upper_bound: int, line_number: int) -> int:
    if not value.isascii() or not value.isdigit():
        raise MalformedRecordError(line_number, f"{column} is not an unsigned integer: {value!r}")
    parsed = int(value)
    if parsed > upper_bound:
        raise MalformedRecordError(line_number, f"{column} {parsed} exceeds {upper_bound}")
    return parsed


def format_snapshot_row(snapshot: ClientSnapshot) -> str:
    return (
        f"{snapshot.client_id},"
        f"{snapshot.available.format()},"
        f"{snapshot.held.format()},"
        f"{snapshot.total.format()},"
        f"{str(snapshot.locked).lower()}"
    )


def write_snapshots(handle: TextIO, snapshots: Iterable[ClientSnapshot], flush_every_n_rows: int = 100) -> None:
    """Write the header and one row per client, flushing every N rows."""
    handle.write(CSV_HEADER + "\n")

    for index, snapshot in enumerate(sorted(snapshots, key=lambda s: s.client_id), start=1):
        handle.write(format_snapshot_row(snapshot) + "\n")
        if index % flush_every_n_rows == 0:
            handle.flush()

    handle.flush()


class PaymentsEngine:
    """
    Folds a transaction feed into per-client balances.
    Single pass, single thread: each event is applied before the next is read.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._router = TransactionRouter()
        self.stats = ProcessingStats()

    def process_file(self, filepath: str) -> List[ClientSnapshot]:
        """Process CSV file and return final client snapshots."""
        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            return self.process(f)

    def process(self, handle: TextIO) -> List[ClientSnapshot]:
        logger.info("Starting processing")

        for transaction in read_transactions(handle):
            self.stats.record(self._router.apply(transaction))

        logger.info(f"Processing complete: {self.stats.applied} applied, {self.stats.ignored} ignored, {len(self._router)} clients")
        return self._router.snapshot()

    def write(self, handle: TextIO, snapshots: Iterable[ClientSnapshot]) -> None:
        write_snapshots(handle, snapshots, self._config.flush_every_n_rows)
