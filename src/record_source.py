import csv
import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Dict, Iterator, Optional, TextIO

from models import QUANTUM, Record, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

ID_PATTERN = re.compile(r"\+?[0-9]+")
AMOUNT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")


class RecordParseError(Exception):
    def __init__(self, line_num: int, message: str):
        super().__init__(f"line {line_num}: {message}")
        self.line_num = line_num


class RecordSource:
    """
    Rewindable CSV record source.
    Every iteration starts again from the first data row, so the same source
    can be scanned any number of times. Fields and headers are trimmed and
    rows may omit trailing columns.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream

    @classmethod
    def open(cls, filepath: str) -> "RecordSource":
        return cls(open(filepath, "r", newline="", encoding="utf-8-sig"))

    def rewind(self) -> None:
        self._stream.seek(0)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "RecordSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[Record]:
        self.rewind()
        reader = csv.DictReader(self._stream, restval="")
        for row in reader:
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}
            if not any(normalized.values()):
                continue
            yield self._parse_row(normalized, reader.line_num)

    def _parse_row(self, row: Dict[str, str], line_num: int) -> Record:
        """Parse a trimmed CSV row into a Record."""
        try:
            transaction_type = TransactionType(row["type"].lower())
            client_id = _parse_id(row["client"], MAX_CLIENT_ID)
            transaction_id = _parse_id(row["tx"], MAX_TRANSACTION_ID)
            amount = _parse_amount(row.get("amount", ""))
        except KeyError as e:
            raise RecordParseError(line_num, f"missing column {e}") from e
        except (ValueError, InvalidOperation) as e:
            raise RecordParseError(line_num, f"invalid row {row}: {e}") from e

        return Record(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )


def _parse_id(value: str, maximum: int) -> int:
    if not ID_PATTERN.fullmatch(value):
        raise ValueError(f"{value!r} is not an unsigned integer")
    parsed = int(value)
    if not 0 <= parsed <= maximum:
        raise ValueError(f"{parsed} out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str) -> Optional[Decimal]:
    """Parse an optional amount, truncated to four decimal places."""
    if not value:
        return None
    if not AMOUNT_PATTERN.fullmatch(value):
        raise ValueError(f"amount {value!r} is not a decimal number")
    return Decimal(value).quantize(QUANTUM, rounding=ROUND_DOWN)


class ScanLookup:
    """
    Finds the amount of the first record with a given tx id by scanning the
    whole source from the start on every lookup.
    """

    def __init__(self, source: RecordSource):
        self._source = source

    def find_amount(self, transaction_id: int) -> Optional[Decimal]:
        try:
            for record in self._source:
                if record.transaction_id == transaction_id and record.amount is not None:
                    return record.amount
            return None
        finally:
            self._source.rewind()


class IndexedLookup:
    """
    Same results as ScanLookup, backed by a tx id -> amount index built from
    one full pass over the source on first use.
    """

    def __init__(self, source: RecordSource):
        self._source = source
        self._index: Optional[Dict[int, Decimal]] = None

    def find_amount(self, transaction_id: int) -> Optional[Decimal]:
        if self._index is None:
            self._index = self._build_index()
        return self._index.get(transaction_id)

    def _build_index(self) -> Dict[int, Decimal]:
        index: Dict[int, Decimal] = {}
        for record in self._source:
            if record.amount is not None:
                index.setdefault(record.transaction_id, record.amount)
        logger.info(f"Indexed {len(index)} transactions for dispute lookups")
        return index
