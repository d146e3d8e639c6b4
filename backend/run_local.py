# backend/run_local.py
"""
Dry run of the CSV import: parse a file the way process_csv would and print
what would be ingested. Nothing is written to AWS.

    python -m backend.run_local path/to/user123-usage-1700000000000.csv
"""
import sys
from pathlib import Path

from backend.lib.energy_core.io import parse_csv_string, user_id_from_key
from backend.lib.energy_core.models import SkippedRow


def main(csv_path):
    text = Path(csv_path).read_text()
    rows = parse_csv_string(text)
    user_id = user_id_from_key(csv_path)
    skipped = [r for r in rows if isinstance(r, SkippedRow)]
    print(f"Parsed {len(rows) - len(skipped)} readings for {user_id}:")
    for r in rows:
        if isinstance(r, SkippedRow):
            print(f" ! line {r.line_number} skipped: {r.reason}")
        else:
            print(f" - {r.date} : {r.usage} kWh")


if __name__ == "__main__":
    csv = sys.argv[1] if len(sys.argv) > 1 else "tests/user123_energy_data.csv"
    main(csv)
