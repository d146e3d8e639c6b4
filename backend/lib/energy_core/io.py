# backend/lib/energy_core/io.py
import csv
import posixpath
import re
from io import StringIO
from typing import Dict, List, Optional

from .models import CsvRow, ParsedRow, SkippedRow

# Not a real account; rows from files whose name carries no user id land here
FALLBACK_USER_ID = "unknown-user"

USAGE_COLUMNS = ('usage', 'energy')

# <userId>_energy_data.csv, <userId>-usage-<millis>.csv
_OWNER_PATTERN = re.compile(r"^([^_-]+)[_-](?:energy|usage)", re.IGNORECASE)


def parse_csv_string(csv_text: str) -> List[ParsedRow]:
    """
    Parse CSV text whose first line is the header, e.g. `date,usage`.

    Each data line is zipped against the header by position. A short line
    leaves the missing columns as None and extra cells are dropped. Lines
    that lack a date or a usage value come back as SkippedRow instead of
    failing the whole file. `energy` is accepted in place of `usage`, and
    when there is no `date` column the date part of `timestamp` is used.
    """
    f = StringIO(csv_text.strip())
    reader = csv.DictReader(f)
    rows: List[ParsedRow] = []
    if not reader.fieldnames:
        return rows

    columns = {name.strip().lower(): name for name in reader.fieldnames if name}
    usage_col = next((columns[c] for c in USAGE_COLUMNS if c in columns), None)
    date_col = columns.get('date')
    timestamp_col = columns.get('timestamp')

    for row in reader:
        # header is line 1
        line_number = reader.line_num
        usage = _cell(row, usage_col)
        timestamp = _cell(row, timestamp_col)
        if date_col:
            date = _cell(row, date_col)
        else:
            date = timestamp[:10] if timestamp else None

        if usage is None:
            rows.append(SkippedRow(line_number=line_number, reason="missing usage"))
            continue
        if date is None:
            rows.append(SkippedRow(line_number=line_number, reason="missing date"))
            continue

        rows.append(CsvRow(
            line_number=line_number,
            date=date,
            usage=usage,
            timestamp=timestamp if date_col else None,
        ))
    return rows


def _cell(row: Dict[Optional[str], object], column: Optional[str]) -> Optional[str]:
    if column is None:
        return None
    value = row.get(column)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def user_id_from_key(key: str) -> str:
    """
    Derive the owning user id from an uploaded object's name.

    Everything before the first `_` or `-` is the user id, provided the
    delimiter introduces the `energy`/`usage` part of the name. Names that
    don't follow that shape map to FALLBACK_USER_ID.
    """
    name = posixpath.basename(key)
    match = _OWNER_PATTERN.match(name)
    if not match:
        return FALLBACK_USER_ID
    return match.group(1)
