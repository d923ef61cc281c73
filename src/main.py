import sys
import logging
from typing import List, Optional

from config import EngineConfig
from exceptions import PaymentsEngineError
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return 1

    try:
        config = EngineConfig.from_env()
    except PaymentsEngineError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    filepath = args[0]
    engine = PaymentsEngine(config)
    try:
        snapshots = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot open csv file {filepath}: {e}")
        return 1
    except PaymentsEngineError as e:
        logger.error(f"Processing aborted: {e}")
        return 1

    engine.write(sys.stdout, snapshots)

    if config.report_stats:
        print(
            f"Processed: {engine.stats.processed}, "
            f"Applied: {engine.stats.applied}, "
            f"Ignored: {engine.stats.ignored}",
            file=sys.stderr
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
