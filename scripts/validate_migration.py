#!/usr/bin/env python3
"""
Validate that a SQLite store holds the same entries as a JSON store.

Usage:
    python scripts/validate_migration.py --json data/store.json --db data/companies.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from companydir.storage import JSONFileStore, SQLStore


def validate(json_path: Path, db_path: Path) -> bool:
    """
    Compare both stores entry by entry.

    Returns True if they match, False otherwise.
    """
    source = JSONFileStore(json_path)
    target = SQLStore(db_path)

    json_keys = set(source.keys())
    db_keys = set(target.keys())
    print(f"  JSON: {len(json_keys)} entries")
    print(f"  DB:   {len(db_keys)} entries")

    missing = sorted(json_keys - db_keys)
    mismatches = sorted(
        key for key in json_keys & db_keys
        if source.get_item(key) != target.get_item(key)
    )

    if missing:
        print(f"\n❌ MISSING from DB: {len(missing)} entries")
        for key in missing:
            print(f"   - {key}")

    if mismatches:
        print(f"\n❌ DATA MISMATCHES: {len(mismatches)} entries differ")
        for key in mismatches:
            print(f"   - {key}")

    if not missing and not mismatches:
        print("✅ All entries validated successfully!")
        return True
    return False


def main():
    parser = argparse.ArgumentParser(description="Validate migration from JSON store to SQLite store")
    parser.add_argument("--json", type=Path, default=Path("data/store.json"),
                        help="Path to JSON store file")
    parser.add_argument("--db", type=Path, default=Path("data/companies.db"),
                        help="Path to SQLite database file")

    args = parser.parse_args()

    for label, path in (("JSON file", args.json), ("Database file", args.db)):
        if not path.exists():
            print(f"❌ {label} not found: {path}")
            sys.exit(1)

    sys.exit(0 if validate(args.json, args.db) else 1)


if __name__ == "__main__":
    main()
