from __future__ import annotations

import csv
from typing import IO, Iterable, Sequence


def write_csv_rows(rows: Iterable[Sequence[str]], stream: IO[str]) -> int:
    """
    Write rows (header first) as CSV to an open text stream.
    Returns the number of data rows written, excluding the header.
    """
    writer = csv.writer(stream, lineterminator="\n")
    written = -1
    for row in rows:
        writer.writerow(["" if val is None else str(val) for val in row])
        written += 1
    return max(written, 0)
