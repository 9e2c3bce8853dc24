#!/usr/bin/env python3
"""
Script to seed the database with sample land records.

Usage:
    python scripts/seed_database.py                 # Register and verify sample records
    python scripts/seed_database.py --no-verify     # Leave all sample records Pending
    python scripts/seed_database.py --file data.json
"""

import sys
import json
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from landchain.core.database import get_session_local, init_db
from landchain.services.seed import seed_land_records, SAMPLE_RECORDS


def main():
    parser = argparse.ArgumentParser(description="Seed sample land records")
    parser.add_argument("--file", type=str, help="JSON file with a list of land records")
    parser.add_argument("--no-verify", action="store_true", help="Do not verify seeded records")

    args = parser.parse_args()

    entries = SAMPLE_RECORDS
    if args.file:
        path = Path(args.file)
        if not path.exists():
            print(f"Error: File not found: {path}")
            sys.exit(1)
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)

    init_db()
    db = get_session_local()()

    try:
        print(f"Seeding {len(entries)} land records...")
        stats = seed_land_records(db, entries, verify=not args.no_verify)

        print("\n=== Seed Summary ===")
        print(f"  {stats['imported']} imported, {stats['verified']} verified, "
              f"{stats['skipped']} skipped, {stats['errors']} errors")
    finally:
        db.close()


if __name__ == "__main__":
    main()
