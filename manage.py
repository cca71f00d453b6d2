#!/usr/bin/env python3
"""
Administrative commands for the personal scheduler.

Usage:
    python manage.py create-db
    python manage.py create-admin <username> --password <pw> [--name <display name>]
    python manage.py runserver [--host 127.0.0.1] [--port 8000] [--reload]
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from database import Base, SessionLocal, engine
from dependencies import get_password_hash
from schemas import UserCreate
import crud
import models  # noqa: F401  registers the tables on Base.metadata

cli_logger = logging.getLogger("manage_cli")
cli_logger.setLevel(logging.INFO)

if not cli_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    cli_logger.addHandler(handler)


def create_db() -> int:
    cli_logger.info("Creating tables...")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        cli_logger.error("Could not create tables: %s", e)
        return 1
    cli_logger.info("Tables created.")
    return 0


def create_admin(username: str, password: str, name: str) -> int:
    """Create an admin account, or promote the existing user of that name."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = crud.get_user_by_username(db, username)
        if user is not None:
            crud.set_admin(db, user)
            cli_logger.info("Promoted existing user %s to admin.", username)
            return 0
        if not password:
            cli_logger.error("--password is required when creating a new user.")
            return 1
        crud.create_user(
            db,
            UserCreate(username=username, password=password, name=name or username),
            get_password_hash(password),
            is_admin=True,
        )
        cli_logger.info("Created admin %s.", username)
        return 0
    except SQLAlchemyError as e:
        db.rollback()
        cli_logger.error("Could not create admin %s: %s", username, e)
        return 1
    finally:
        db.close()


def runserver(host: str, port: int, reload: bool) -> int:
    import uvicorn

    uvicorn.run("main:app", host=host, port=port, reload=reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Personal scheduler management commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("create-db", help="Create all database tables")

    admin = sub.add_parser("create-admin", help="Create or promote an admin user")
    admin.add_argument("username")
    admin.add_argument("--password", default="")
    admin.add_argument("--name", default="")

    server = sub.add_parser("runserver", help="Run the development server")
    server.add_argument("--host", default="127.0.0.1")
    server.add_argument("--port", type=int, default=8000)
    server.add_argument("--reload", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "create-db":
        return create_db()
    if args.command == "create-admin":
        return create_admin(args.username, args.password, args.name)
    return runserver(args.host, args.port, args.reload)


if __name__ == "__main__":
    sys.exit(main())
