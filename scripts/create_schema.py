#!/usr/bin/env python
"""Create the payroll tables in the configured database.

Usage:
    python scripts/create_schema.py
    python scripts/create_schema.py --database-url postgresql+asyncpg://...
"""

import argparse
import asyncio
import sys

from sqlalchemy.exc import SQLAlchemyError

from hrms_payroll.config import get_settings
from hrms_payroll.database import create_schema, get_engine


async def run(database_url: str) -> None:
    engine = get_engine(database_url)
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create payroll tables")
    parser.add_argument(
        "--database-url",
        default=get_settings().database_url,
        help="Async SQLAlchemy URL (default: DATABASE_URL)",
    )
    args = parser.parse_args()

    target = args.database_url.split("@")[-1] if "@" in args.database_url else args.database_url
    print(f"Creating schema on {target}")

    try:
        asyncio.run(run(args.database_url))
    except SQLAlchemyError as e:
        print(f"ERROR: Could not create schema: {e}")
        return 1

    print("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
