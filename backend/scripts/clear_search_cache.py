#!/usr/bin/env python3
"""Delete every cached search history snapshot. Searches are kept.
Run from backend: python scripts/clear_search_cache.py
"""
import sys
from pathlib import Path

# Ensure backend is on path when run as script
backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from catalog.db.session import SessionLocal
from catalog.services.admin_service import clear_search_cache


def main():
    db = SessionLocal()
    try:
        deleted = clear_search_cache(db)
        print("Search cache cleared. Rows deleted:")
        for table, count in deleted.items():
            print(f"  {table}: {count}")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
