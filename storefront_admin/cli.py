"""
Database set-up and user management.

Exit status is 0 on success and 1 on any failure, with the error printed
to standard error.
"""
import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from storefront_admin.core.config import Settings
from storefront_admin.core.database import Database
from storefront_admin.core.errors import AppError
from storefront_admin.core.log import configure_logging
from storefront_admin.core.migrate import render_schema, reset_database, run_migrations
from storefront_admin.services.auth_service import AuthService

logger = logging.getLogger(__name__)


def init_db(database: Database, args: argparse.Namespace) -> int:
    logger.info("Initializing database...")
    if not database.ping():
        print("Failed to connect to database. Please check your configuration.", file=sys.stderr)
        return 1

    if args.reset:
        reset_database(database.engine)
    elif args.schema:
        run_migrations(database.engine, Path(args.schema).read_text(encoding="utf-8"))
    else:
        run_migrations(database.engine)
    logger.info("Database initialized successfully!")
    return 0


def dump_schema(database: Database, args: argparse.Namespace) -> int:
    script = render_schema(database.engine)
    if args.output:
        Path(args.output).write_text(script, encoding="utf-8")
        logger.info(f"Schema written to {args.output}")
    else:
        sys.stdout.write(script)
    return 0


def create_user(database: Database, args: argparse.Namespace) -> int:
    with database.session() as db:
        user = AuthService(db).create_user(args.username, args.email, args.password)
        print("User created successfully!")
        print(f"  ID: {user.id}")
        print(f"  Username: {user.username}")
        print(f"  Email: {user.email}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront-admin", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--database-url", help="overrides DATABASE_URL")
    commands = parser.add_subparsers(dest="command", required=True)

    init_parser = commands.add_parser("init-db", help="create the tables")
    init_parser.add_argument("--schema", help="replay this SQL file instead of the generated schema")
    init_parser.add_argument("--reset", action="store_true", help="drop every table first")
    init_parser.set_defaults(handler=init_db)

    dump_parser = commands.add_parser("dump-schema", help="print the schema script")
    dump_parser.add_argument("--output", help="write to this file instead of stdout")
    dump_parser.set_defaults(handler=dump_schema)

    user_parser = commands.add_parser("create-user", help="create a dashboard user")
    user_parser.add_argument("username", help="unique username for the user")
    user_parser.add_argument("email", help="unique email address")
    user_parser.add_argument("password", help="user password")
    user_parser.set_defaults(handler=create_user)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    database_url = args.database_url or settings.database_url
    try:
        database = Database.from_settings(dataclasses.replace(settings, database_url=database_url))
    except (SQLAlchemyError, ImportError) as e:
        print(f"Invalid database configuration: {e}", file=sys.stderr)
        return 1

    try:
        return args.handler(database, args)
    except (AppError, SQLAlchemyError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        database.close()


if __name__ == "__main__":
    sys.exit(main())
