"""
Turns an uploaded department CSV into department records for one institute.

Two readings of the same file are supported:

* ``normalize_departments`` parses every data row against the header and keeps
  the full row as metadata. This is what ingestion stores.
* ``split_department_names`` treats each line as a bare department name. This
  is what the upload preview shows before anything is stored.

Neither function raises on malformed input: blank lines are dropped, short
rows are padded, and every row ends up with a non-empty name.
"""

import io
import logging
from dataclasses import dataclass, field

import pandas as pd

logger = logging.getLogger(__name__)

# Header detection is a case-insensitive substring match on the first line
HEADER_MARKER = "department"

# Columns tried in order when resolving a department's display name
NAME_COLUMNS = ("Department", "department")


@dataclass(frozen=True)
class DepartmentRecord:
    """A department ready for bulk insertion."""
    institute_id: int
    name: str
    metadata: dict[str, str] = field(default_factory=dict)


def decode_csv(raw) -> str:
    """Decodes uploaded bytes, dropping a UTF-8 BOM. Text passes through untouched."""
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8-sig", errors="replace")
    return raw or ""


def clean_lines(raw) -> list[str]:
    """Splits on newlines, trims every line and drops the ones left empty."""
    lines = (line.strip() for line in decode_csv(raw).split("\n"))
    return [line for line in lines if line]


def has_header(lines: list[str]) -> bool:
    return bool(lines) and HEADER_MARKER in lines[0].lower()


def split_department_names(raw) -> list[str]:
    """
    Lightweight reading: one department name per line, header skipped.

    Example:
        "Department\\nCSE\\nECE" -> ["CSE", "ECE"]
    """
    lines = clean_lines(raw)
    start = 1 if has_header(lines) else 0
    return lines[start:]


def _parse_line(line: str) -> list[str]:
    """
    Parses one line as a single CSV record, every value kept as a string.

    A line pandas cannot read (an unclosed quote, for one) becomes a
    single cell holding the line itself.
    """
    try:
        df = pd.read_csv(
            io.StringIO(line),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            engine="python",
        )
    except ValueError as e:
        logger.debug(f"Unparseable CSV line kept as one cell: {line!r} ({e})")
        return [line]
    if df.empty:
        return [line]
    return df.fillna("").iloc[0].tolist()


def _column_names(header: list[str] | None, width: int) -> list[str]:
    """
    Names the columns of a parsed table.

    Blank header cells and header-less tables fall back to ``column_<n>``.
    """
    if header is None:
        return [f"column_{i + 1}" for i in range(width)]
    return [
        cell if cell.strip() else f"column_{i + 1}"
        for i, cell in enumerate(header[:width])
    ]


def resolve_name(row: dict[str, str], line: str) -> str:
    """
    Picks a display name for one parsed row.

    Tries ``NAME_COLUMNS`` in order, then the first column, then the first
    non-empty value, and finally the raw line so the name is never empty.
    """
    for key in NAME_COLUMNS:
        if row.get(key):
            return row[key]

    values = list(row.values())
    if values and values[0]:
        return values[0]
    return next((value for value in values if value), line)


def normalize_departments(raw, institute_id) -> list[DepartmentRecord]:
    """
    Structured reading: each data row keyed by the header row.

    Args:
        raw: CSV content, bytes or text.
        institute_id: Owning institute, copied onto every record.

    Returns:
        One DepartmentRecord per non-blank data line, in input order.
    """
    lines = clean_lines(raw)
    if not lines:
        return []

    # one record per line, so a stray quote never spills into the next row
    rows = [_parse_line(line) for line in lines]
    width = len(rows[0])

    if has_header(lines):
        columns = _column_names(rows[0], width)
        rows, lines = rows[1:], lines[1:]
    else:
        columns = _column_names(None, width)

    records = []
    for line, values in zip(lines, rows):
        values = values[:width] + [""] * (width - len(values))
        row: dict[str, str] = {}
        for column, value in zip(columns, values):
            # a repeated header keeps its first column
            row.setdefault(column, value)
        records.append(
            DepartmentRecord(
                institute_id=institute_id,
                name=resolve_name(row, line),
                metadata=row,
            )
        )

    logger.debug(f"Normalized {len(records)} departments for institute {institute_id}")
    return records
