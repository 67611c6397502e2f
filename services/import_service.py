"""
Import service: load a dated CSV from S3 into the products table.
"""
import csv
import datetime as dt
import math
import uuid
from decimal import Decimal
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from logger_config import get_logger
from models import (
    MAX_PRICE,
    MIN_NONZERO_PRICE,
    Product,
    format_timestamp,
    utc_now,
)
from utils.exceptions import ValidationError
from .dynamodb_service import DynamoDBService
from .s3_service import S3Service

logger = get_logger(__name__)

IMPORT_KEY_TEMPLATE = '{date}/items.csv'
CSV_COLUMNS = ('name', 'description', 'price')


@dataclass
class RowFailure:
    """A CSV row that was not imported."""

    row_number: int
    reason: str


@dataclass
class ImportResult:
    """Outcome of one import run."""

    key: str
    batch_timestamp: str
    parsed: int = 0
    written: int = 0
    failures: List[RowFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, object]:
        return {
            'key': self.key,
            'batchTimestamp': self.batch_timestamp,
            'parsed': self.parsed,
            'written': self.written,
            'failed': self.failed,
            'failures': [
                {'row': f.row_number, 'reason': f.reason} for f in self.failures
            ],
        }


def import_key_for_date(date: str) -> str:
    """
    Object key of the import file for a calendar date.

    Raises:
        ValidationError: If ``date`` is not in YYYY-MM-DD form
    """
    try:
        parsed = dt.datetime.strptime(date, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError(
            'Invalid import date', [f'date: expected YYYY-MM-DD, got {date!r}']
        ) from None
    return IMPORT_KEY_TEMPLATE.format(date=parsed.isoformat())


def parse_price(raw: Optional[str]) -> float:
    """
    Parse a CSV price cell.

    Raises:
        ValueError: If the cell is empty, non-numeric, not finite, or out of
            the range DynamoDB can store
    """
    if raw is None or not raw.strip():
        raise ValueError('price is empty')
    price = float(raw)
    if not math.isfinite(price):
        raise ValueError(f'price is not a finite number: {raw!r}')
    stored = abs(Decimal(str(price)))
    if stored >= MAX_PRICE or 0 < stored < MIN_NONZERO_PRICE:
        raise ValueError(f'price is out of range: {raw!r}')
    return price


def parse_rows(
    lines: Iterable[str],
    batch_timestamp: str
) -> Tuple[List[Tuple[int, Product]], List[RowFailure]]:
    """
    Turn CSV lines into (row number, product record) pairs.

    Every record gets a fresh id and the shared batch timestamp. Rows with
    an unparseable price are returned as failures instead of records.
    Row numbers count data rows from 1, excluding the header.

    Raises:
        ValidationError: If the header lacks a required column
    """
    records: List[Tuple[int, Product]] = []
    failures: List[RowFailure] = []

    reader = csv.DictReader(lines)
    if reader.fieldnames is None:
        return records, failures
    missing = [column for column in CSV_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise ValidationError(
            'Invalid import file',
            [f'header: missing column {column!r}' for column in missing]
        )

    for row_number, row in enumerate(reader, start=1):
        try:
            price = parse_price(row.get('price'))
        except ValueError as e:
            failures.append(RowFailure(row_number, f'invalid price: {e}'))
            continue
        records.append((row_number, {
            'id': str(uuid.uuid4()),
            'name': row.get('name') or '',
            'description': row.get('description') or '',
            'price': price,
            'createdAt': batch_timestamp,
            'updatedAt': batch_timestamp,
        }))
    return records, failures


class ImportService:
    """Service for importing product CSV files."""

    def __init__(
        self,
        s3_service: S3Service,
        dynamodb_service: DynamoDBService,
        max_workers: int = 8,
        clock: Optional[Callable[[], dt.datetime]] = None
    ) -> None:
        """
        Initialize import service.

        Args:
            s3_service: Source bucket for import files
            dynamodb_service: Storage for the products table
            max_workers: Upper bound on concurrent writes
            clock: Returns the current time; defaults to UTC now
        """
        if max_workers < 1:
            raise ValueError(f'max_workers must be at least 1, got {max_workers}')
        self.s3_service = s3_service
        self.dynamodb_service = dynamodb_service
        self.max_workers = max_workers
        self.clock = clock or utc_now

    def import_for_date(self, date: str) -> ImportResult:
        """
        Import ``{date}/items.csv`` into the products table.

        All rows of one run share a single createdAt/updatedAt timestamp.
        Re-running a date imports the rows again under new ids.

        Raises:
            ValidationError: If ``date`` is not YYYY-MM-DD or the CSV
                header lacks a required column
            SourceNotFoundError: If the import object does not exist
        """
        key = import_key_for_date(date)
        batch_timestamp = format_timestamp(self.clock())
        result = ImportResult(key=key, batch_timestamp=batch_timestamp)

        lines = self.s3_service.iter_text_lines(key)
        records, failures = parse_rows(lines, batch_timestamp)
        result.parsed = len(records)
        result.failures.extend(failures)
        for failure in failures:
            logger.warning(f'Skipping {key} row {failure.row_number}: {failure.reason}')

        written, write_failures = self._write_all(records)
        result.written = written
        result.failures.extend(write_failures)
        result.failures.sort(key=lambda f: f.row_number)

        logger.info(
            f'Imported {result.written}/{result.parsed} parsed rows from '
            f's3://{self.s3_service.bucket_name}/{key} ({result.failed} failed)'
        )
        return result

    def _write_all(
        self,
        records: List[Tuple[int, Product]]
    ) -> Tuple[int, List[RowFailure]]:
        """Write records on a bounded pool, collecting every outcome."""
        if not records:
            return 0, []

        written = 0
        failures: List[RowFailure] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.dynamodb_service.put_item, record): (row_number, record)
                for row_number, record in records
            }
            for future in as_completed(futures):
                row_number, record = futures[future]
                try:
                    future.result()
                except Exception as e:
                    logger.error(f'Failed to write imported product {record["id"]}: {str(e)}')
                    failures.append(RowFailure(row_number, str(e)))
                else:
                    written += 1
        return written, failures
