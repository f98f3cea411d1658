import csv
import logging
import os
import sys
from decimal import Decimal
from typing import Dict, TextIO

from account import Client
from payments_engine import PaymentsEngine
from record_source import RecordParseError
from transaction import InvalidTransitionError

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_clients(clients: Dict[int, Client], out: TextIO) -> None:
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for client in sorted(clients.values()):
        client_id, available, held, total, locked = client.to_row()
        writer.writerow([
            client_id,
            format_decimal(available),
            format_decimal(held),
            format_decimal(total),
            str(locked).lower(),
        ])


def log_level() -> int:
    """Level named by PAYMENTS_LOG_LEVEL, WARNING when unset or unknown."""
    level = logging.getLevelName(os.environ.get("PAYMENTS_LOG_LEVEL", "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


def main() -> int:
    logging.basicConfig(
        level=log_level(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    try:
        clients = engine.process_file(filepath)
    except (OSError, UnicodeDecodeError, RecordParseError, InvalidTransitionError) as e:
        logger.error(f"Failed to process {filepath}: {e}")
        return 1

    write_clients(clients, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
