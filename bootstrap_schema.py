"""
Schema + seed bootstrap for the Recipe Hub database.

Usage (reads db_connection.txt next to the current directory by default):
    python bootstrap_schema.py [--connection-file PATH] [--schema-only]

Safe to re-run; it only creates missing objects and missing seed rows.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from config import get_settings, resolve_database_url
from database import make_engine
from errors import (
    BootstrapError,
    ConnectionDescriptorError,
    SchemaStatementError,
    UnsupportedDialectError,
)
from executor import StatementExecutor
from materializer import materialize_schema
from reconciler import SUPPORTED_DIALECTS, SeedReport, build_rules, reconcile_seed
from seed_data import DEFAULT_SEED

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STATEMENT_FAILED = 1
EXIT_PRECONDITION_FAILED = 2


@dataclass
class BootstrapReport:
    schema_statements: int
    seed: Optional[SeedReport] = None


def run_bootstrap(engine, seed_set=DEFAULT_SEED, schema_only=False, lock_key=None):
    """Materialize the schema, then reconcile the seed set. Stops at the first failure."""
    if not schema_only and engine.dialect.name not in SUPPORTED_DIALECTS:
        raise UnsupportedDialectError(f"Seeding is not supported on the {engine.dialect.name!r} dialect")
    rules = [] if schema_only else build_rules(seed_set)
    try:
        connection = engine.connect()
    except SQLAlchemyError as exc:
        raise SchemaStatementError("connect", exc) from exc
    with connection:
        executor = StatementExecutor(connection)
        if lock_key is None:
            report = _run(executor, rules, schema_only)
        else:
            with executor.advisory_lock(lock_key):
                report = _run(executor, rules, schema_only)
    return report


def _run(executor, rules, schema_only):
    report = BootstrapReport(schema_statements=materialize_schema(executor))
    if not schema_only:
        report.seed = reconcile_seed(executor, rules)
    return report


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create the Recipe Hub schema and seed data.")
    parser.add_argument("--connection-file", help="file holding '[psql] <database url>'")
    parser.add_argument("--database-url", help="use this URL instead of the connection file")
    parser.add_argument("--log-level", help="logging level (default from LOG_LEVEL or INFO)")
    parser.add_argument("--schema-only", action="store_true", help="skip seeding")
    parser.add_argument("--no-lock", action="store_true", help="do not take the advisory lock")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    updates = {}
    if args.connection_file:
        updates["connection_file"] = args.connection_file
    if args.database_url:
        updates["database_url"] = args.database_url
    if args.log_level:
        updates["log_level"] = args.log_level
    if updates:
        settings = settings.model_copy(update=updates)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        url = resolve_database_url(settings)
    except ConnectionDescriptorError as exc:
        logger.error("ERROR: %s", exc)
        logger.error("Write the connection descriptor before running the bootstrap.")
        return EXIT_PRECONDITION_FAILED

    engine = make_engine(url, echo=settings.echo_sql)
    lock_key = None if (args.no_lock or not settings.advisory_lock) else settings.advisory_lock_key
    try:
        run_bootstrap(engine, schema_only=args.schema_only, lock_key=lock_key)
    except UnsupportedDialectError as exc:
        logger.error("✗ Bootstrap aborted: %s", exc)
        return EXIT_PRECONDITION_FAILED
    except BootstrapError as exc:
        logger.error("✗ Bootstrap aborted: %s", exc)
        logger.error("Fix the cause and re-run; every step is safe to repeat.")
        return EXIT_STATEMENT_FAILED
    finally:
        engine.dispose()

    logger.info("Recipe Hub schema + seed complete.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
