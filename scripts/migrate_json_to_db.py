#!/usr/bin/env python3
"""
Copy every entry of a JSON-file store into a SQLite store.

Usage:
    python scripts/migrate_json_to_db.py --json data/store.json --db data/companies.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from companydir.errors import StorageAccessError
from companydir.storage import JSONFileStore, SQLStore


def migrate(json_path: Path, db_path: Path, dry_run: bool = False, overwrite: bool = False) -> bool:
    """
    Copy entries from the JSON store to the SQLite store.

    Args:
        json_path: Path to JSON store file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
        overwrite: Replace entries that already exist in the database

    Returns:
        True when every entry was copied or deliberately skipped
    """
    print(f"Loading entries from {json_path}...")
    source = JSONFileStore(json_path)
    try:
        keys = list(source.keys())
    except StorageAccessError as e:
        print(f"❌ Cannot read JSON store: {e}")
        return False
    print(f"Found {len(keys)} entries in JSON store")

    if dry_run:
        print("\n[DRY RUN] Would migrate the following entries:")
        for key in keys:
            value = source.get_item(key) or ""
            try:
                size = len(json.loads(value))
            except ValueError:
                size = "unparsable"
            print(f"  - {key} ({size} records)")
        return True

    print(f"\nInitializing database at {db_path}...")
    target = SQLStore(db_path)

    migrated = skipped = errors = 0
    for key in keys:
        try:
            if not overwrite and target.get_item(key) is not None:
                print(f"⚠️  {key} already exists, skipping")
                skipped += 1
                continue
            target.set_item(key, source.get_item(key) or "")
            migrated += 1
        except StorageAccessError as e:
            print(f"❌ Error migrating {key}: {e}")
            errors += 1

    print(f"\n✅ Migration complete!")
    print(f"   Migrated: {migrated}")
    print(f"   Skipped:  {skipped}")
    print(f"   Errors:   {errors}")
    return errors == 0


def main():
    parser = argparse.ArgumentParser(description="Migrate a JSON store into a SQLite store")
    parser.add_argument("--json", type=Path, default=Path("data/store.json"),
                        help="Path to JSON store file")
    parser.add_argument("--db", type=Path, default=Path("data/companies.db"),
                        help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be migrated without writing")
    parser.add_argument("--overwrite", action="store_true",
                        help="Replace entries already present in the database")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    ok = migrate(args.json, args.db, dry_run=args.dry_run, overwrite=args.overwrite)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
