"""
Truncate and bulk-load bronze tables from delimited files
"""

from datetime import date, datetime
import csv
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import logging

import pandas as pd
from sqlalchemy import MetaData, Table, delete, text
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import settings
from core.exceptions import BulkLoadError, InvalidIdentifierError, TruncateError
from core.identifiers import QualifiedTableName

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"t", "true", "y", "yes", "on", "1"}
_FALSE_VALUES = {"f", "false", "n", "no", "off", "0"}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def _parse_decimal(value: str) -> Decimal:
    try:
        return Decimal(value.strip())
    except InvalidOperation:
        raise ValueError(f"invalid numeric {value!r}")


# Column python type -> text parser, the way COPY reads csv text
_PARSERS: Dict[type, Callable[[str], Any]] = {
    int: lambda v: int(v.strip()),
    float: lambda v: float(v.strip()),
    Decimal: _parse_decimal,
    bool: _parse_bool,
    date: lambda v: datetime.fromisoformat(v.strip()).date(),
    datetime: lambda v: datetime.fromisoformat(v.strip()),
    str: lambda v: v,
}


def _column_parser(column) -> Callable[[str], Any]:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return _PARSERS[str]
    return _PARSERS.get(python_type, _PARSERS[str])


def _reflect(sync_conn, name: QualifiedTableName) -> Table:
    return Table(name.name, MetaData(), schema=name.schema, autoload_with=sync_conn)


class TableLoader:
    """
    Destructive reload of one destination table at a time.

    Supports:
    - TRUNCATE (PostgreSQL) or DELETE (other dialects) of all rows
    - CSV bulk load with a header row, columns mapped by position
    - Chunked inserts inside a single transaction per file

    Every failure surfaces as a LoadError subclass carrying the table,
    file and the underlying error text.
    """

    def __init__(self, engine: AsyncEngine, chunk_size: Optional[int] = None):
        self.engine = engine
        self.chunk_size = chunk_size or settings.LOAD_CHUNK_SIZE

    async def truncate(self, table_name: str) -> None:
        """
        Remove every row from the destination table.

        Raises:
            TruncateError: Invalid name, missing table, permission or lock failure
        """
        try:
            name = QualifiedTableName.parse(table_name)
            async with self.engine.begin() as conn:
                table = await conn.run_sync(_reflect, name)
                if conn.dialect.name == "postgresql":
                    quoted = conn.dialect.identifier_preparer.format_table(table)
                    await conn.execute(text(f"TRUNCATE TABLE {quoted}"))
                else:
                    await conn.execute(delete(table))
        except (InvalidIdentifierError, SQLAlchemyError) as e:
            raise TruncateError(
                f"TRUNCATE {table_name} failed: {_error_text(e)}",
                context={"table_name": table_name},
                original_exception=e
            )

        logger.info(f"Truncated {table_name}")

    async def copy_csv(self, table_name: str, file_path: str) -> int:
        """
        Bulk-load a CSV file with a header row into the destination table.

        The header only marks the first line; values are assigned to the
        table's columns in order, there is no mapping by name.

        Returns:
            Number of data rows loaded (header excluded)

        Raises:
            BulkLoadError: Missing/unreadable file, column count or type mismatch,
                or a database error while inserting
        """
        context = {"table_name": table_name, "file_path": file_path}

        try:
            name = QualifiedTableName.parse(table_name)
            if not file_path or not file_path.strip():
                raise BulkLoadError("No source file configured for job", context=context)

            frame = self._read_csv(Path(file_path))

            async with self.engine.begin() as conn:
                table = await conn.run_sync(_reflect, name)
                rows = self._to_rows(table, frame, context)

                for start in range(0, len(rows), self.chunk_size):
                    await conn.execute(table.insert(), rows[start:start + self.chunk_size])

        except BulkLoadError:
            raise
        except (InvalidIdentifierError, SQLAlchemyError, OSError, ValueError) as e:
            raise BulkLoadError(
                f"COPY {table_name} from {file_path} failed: {_error_text(e)}",
                context=context,
                original_exception=e
            )

        logger.info(f"Loaded {len(rows)} rows into {table_name} from {file_path}")
        return len(rows)

    @staticmethod
    def _read_csv(path: Path) -> pd.DataFrame:
        # Field counts are validated first; empty fields read as ""
        _check_field_counts(path)
        return pd.read_csv(
            path,
            header=0,
            index_col=False,
            sep=",",
            quotechar='"',
            doublequote=True,
            dtype=str,
            na_filter=False,
            skip_blank_lines=True,
        )

    @staticmethod
    def _to_rows(table: Table, frame: pd.DataFrame, context: Dict[str, Any]) -> List[Dict[str, Any]]:
        columns = list(table.columns)
        if len(frame.columns) != len(columns):
            raise BulkLoadError(
                f"Column count mismatch: file has {len(frame.columns)}, table has {len(columns)}",
                context={**context, "file_columns": len(frame.columns), "table_columns": len(columns)}
            )

        parsers = [_column_parser(column) for column in columns]
        rows = []
        # Line 1 is the header
        for line_number, values in enumerate(frame.itertuples(index=False, name=None), start=2):
            row = {}
            for column, parse, value in zip(columns, parsers, values):
                if value == "":
                    row[column.key] = None
                    continue
                try:
                    row[column.key] = parse(value)
                except ValueError as e:
                    raise BulkLoadError(
                        f"Invalid value for column {column.name} on line {line_number}: {e}",
                        context={**context, "line_number": line_number, "column_name": column.name},
                        original_exception=e
                    )
            rows.append(row)
        return rows


def _check_field_counts(path: Path) -> None:
    """
    Every record must have as many fields as the header.

    pandas pads short rows and shifts long ones into an index, so the
    shape is checked on the raw records.

    Raises:
        ValueError: Naming the first malformed line
    """
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=",", quotechar='"', doublequote=True)
        expected = None
        for record in reader:
            if not record:
                continue
            if expected is None:
                expected = len(record)
            elif len(record) != expected:
                raise ValueError(
                    f"line {reader.line_num} has {len(record)} field(s), header has {expected}"
                )


def _error_text(exc: Exception) -> str:
    """Short error detail for the audit message"""
    if isinstance(exc, InvalidIdentifierError):
        return exc.message
    if isinstance(exc, NoSuchTableError):
        return f"table {exc} does not exist"
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).strip() or type(exc).__name__
