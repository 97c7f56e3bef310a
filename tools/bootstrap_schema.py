#!/usr/bin/env python3
"""
Create (or update) the EduConnect tables on a Supabase Postgres database.

What it does
- Creates profiles / questions / answers with the foreign key names the app queries through
- Enables row level security and (re)creates the policies
- Installs the trigger that turns sign-up metadata (full_name, role) into a profile row
- Adds questions and answers to the supabase_realtime publication when it exists

Usage
  python tools/bootstrap_schema.py --database-url postgresql://...
  DATABASE_URL=postgresql://... python tools/bootstrap_schema.py
  python tools/bootstrap_schema.py --print     # just show the SQL

Every statement is idempotent, so running it twice is fine.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import DATABASE_URL  # noqa: E402
from schema import ensure_schema, get_db_driver_type, get_db_engine, schema_statements  # noqa: E402
from utils.logging_utils import setup_logging  # noqa: E402


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create the EduConnect tables, policies and trigger.")
    parser.add_argument("--database-url", type=str, default="", help="Postgres URL (defaults to DATABASE_URL from secrets or the environment).")
    parser.add_argument("--print", dest="print_only", action="store_true", help="Print the SQL instead of running it.")
    args = parser.parse_args(argv)

    if args.print_only:
        for stmt in schema_statements():
            print(stmt.rstrip() + ";\n")
        return 0

    setup_logging()
    db_url = (args.database_url or DATABASE_URL).strip()
    if not db_url:
        print("No database URL. Pass --database-url or set DATABASE_URL.", file=sys.stderr)
        return 2
    if not get_db_driver_type():
        print("No Postgres driver installed. Install psycopg (or psycopg2).", file=sys.stderr)
        return 2

    engine = get_db_engine(db_url)
    try:
        count = ensure_schema(engine)
    except Exception as e:
        print(f"Schema bootstrap failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    print(f"Done. {count} statements applied.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
