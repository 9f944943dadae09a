from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..logging import get_logger

LOG = get_logger(__name__)


class ParquetNotAvailable(RuntimeError):
    pass


def _require_pyarrow():
    try:
        import pyarrow as pa  # type: ignore
        import pyarrow.parquet as pq  # type: ignore
    except ImportError as e:  # pragma: no cover
        raise ParquetNotAvailable(
            "pyarrow is required for Parquet export. Install with: pip install .[parquet]"
        ) from e
    return pa, pq


def _column_name(label: str) -> str:
    return "_".join(label.lower().split())


def rows_to_records(rows: Sequence[Sequence[str]]) -> List[Dict[str, str]]:
    """
    Turn header-first tabular rows into column-keyed records.
    Column names are the header labels in snake_case ("VPC CIDR" -> "vpc_cidr").
    """
    if not rows:
        return []
    columns = [_column_name(label) for label in rows[0]]
    return [dict(zip(columns, row)) for row in rows[1:]]


def write_parquet_rows(rows: Sequence[Sequence[str]], path: Path) -> int:
    """
    Write header-first tabular rows to a Parquet file with all-string columns.
    Returns the number of data rows written.
    """
    pa, pq = _require_pyarrow()
    path.parent.mkdir(parents=True, exist_ok=True)

    columns = [_column_name(label) for label in rows[0]] if rows else []
    schema = pa.schema([pa.field(name, pa.string(), nullable=True) for name in columns])
    records = rows_to_records(rows)
    table: Any = pa.Table.from_pylist(records, schema=schema)
    pq.write_table(table, path)
    LOG.debug("Wrote Parquet report", extra={"artifact": "parquet", "path": str(path), "rows": len(records)})
    return len(records)
