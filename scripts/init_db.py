#!/usr/bin/env python3
"""
Create the database schema (clienti, prodotti, ordini, ordini_prodotti)

Idempotent: existing tables are left untouched.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --echo   # print the DDL as it runs
"""
import sys
import logging
import argparse
from pathlib import Path
from dotenv import load_dotenv

# Load environment
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from gestionale.core.database import Base, get_engine
import gestionale.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger("init_db")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the order management schema")
    parser.add_argument("--echo", action="store_true", help="Log emitted SQL")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    engine = get_engine()
    engine.echo = args.echo

    Base.metadata.create_all(engine)
    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
