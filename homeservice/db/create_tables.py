"""Create (or rebuild) the booking schema.

Usage:
  python -m homeservice.db.create_tables [--reset]
"""
from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers tables on Base.metadata


def create_all() -> None:
    Base.metadata.create_all(bind=get_engine())


def drop_all() -> None:
    Base.metadata.drop_all(bind=get_engine())


def main() -> None:
    ap = argparse.ArgumentParser(description="Create the booking tables")
    ap.add_argument("--reset", action="store_true", help="drop every table before creating it again")
    args = ap.parse_args()
    try:
        if args.reset:
            drop_all()
        create_all()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print("Database tables created successfully.")


if __name__ == "__main__":
    main()
