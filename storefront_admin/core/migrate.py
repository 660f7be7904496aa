"""
Flat schema script for the storefront tables.

The script is rendered from the model metadata for the target dialect and
replayed statement by statement in textual order. There is no version
table: every statement is guarded with IF NOT EXISTS, so replaying is safe.
"""
import logging
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateIndex, CreateTable

from storefront_admin.models.database import Base

logger = logging.getLogger(__name__)


def render_schema(engine: Engine) -> str:
    """DDL for every table and index, parents before children"""
    statements = []
    for table in Base.metadata.sorted_tables:
        ddl = CreateTable(table, if_not_exists=True).compile(dialect=engine.dialect)
        statements.append(str(ddl).strip())
        for index in sorted(table.indexes, key=lambda ix: str(ix.name)):
            ddl = CreateIndex(index, if_not_exists=True).compile(dialect=engine.dialect)
            statements.append(str(ddl).strip())
    return ";\n\n".join(statements) + ";\n"


def split_statements(script: str) -> List[str]:
    return [statement.strip() for statement in script.split(";") if statement.strip()]


def run_migrations(engine: Engine, script: Optional[str] = None) -> int:
    """Replay the schema script; returns the number of statements run"""
    logger.info("Running database migrations...")
    statements = split_statements(script if script is not None else render_schema(engine))
    with engine.begin() as connection:
        for statement in statements:
            connection.exec_driver_sql(statement)
    logger.info(f"Migrations completed successfully ({len(statements)} statements)")
    return len(statements)


def reset_database(engine: Engine) -> int:
    logger.info("Resetting database...")
    Base.metadata.drop_all(bind=engine)
    count = run_migrations(engine)
    logger.info("Database reset completed")
    return count
