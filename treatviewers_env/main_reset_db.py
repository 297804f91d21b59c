"""
Reset the treatviewers test database: empty every collection and rebuild its indexes.

Usage (from repo root):
    python -m treatviewers_env.main_reset_db --db treatviewerstest
    python -m treatviewers_env.main_reset_db --verify-only

Run it only against an isolated test/staging database: live traffic on the
same database is not protected from the reset.
"""

import argparse
import logging
import os
from typing import Optional, Sequence

from dotenv import load_dotenv

import treatviewers_env.db.client as client
from treatviewers_env.db.reset import reset_environment, verify_environment

PROTECTED_DB_NAMES = {"treatviewers"}


def get_logger() -> logging.Logger:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    return logging.getLogger("Env_Reset")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Empty the treatviewers test collections and recreate their indexes.")
    parser.add_argument("--uri", default=None, help="MongoDB URI (default: env MONGODB_URI).")
    parser.add_argument("--db", default=None, help="Database name (default: env MONGODB_DB or treatviewerstest).")
    parser.add_argument("--verify-only", action="store_true", help="Only report how the database differs from the expected layout.")
    parser.add_argument("--force", action="store_true", help="Allow resetting a protected (production) database name.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logger = get_logger()

    client.connect(uri=args.uri, db_name=args.db, reset=True)
    db = client.get_db()
    if db is None:
        raise SystemExit("MongoDB connection not available; check MONGODB_URI/MONGODB_DB.")

    try:
        if not args.verify_only:
            if db.name in PROTECTED_DB_NAMES and not args.force:
                raise SystemExit(f"Refusing to reset protected database '{db.name}' (use --force).")
            reset_environment(db)
        problems = verify_environment(db)
    finally:
        client.close_client()

    for problem in problems:
        logger.error(problem)
    if problems:
        raise SystemExit(f"Database '{db.name}' does not match the expected layout ({len(problems)} problems).")
    logger.info("Database '%s' matches the expected layout.", db.name)


if __name__ == "__main__":
    main()
