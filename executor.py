import logging
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from errors import StatementExecutionError

logger = logging.getLogger(__name__)


class StatementExecutor:
    """
    Runs one statement at a time on a single connection.

    Every statement gets its own transaction and is committed before the
    next one is issued. The first failure raises; nothing after it runs.
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    @property
    def dialect_name(self) -> str:
        return self.connection.dialect.name

    def execute(self, statement, label: str, failure=StatementExecutionError) -> int:
        logger.debug("→ %s", label)
        try:
            with self.connection.begin():
                result = self.connection.execute(statement)
                rowcount = result.rowcount
        except SQLAlchemyError as exc:
            logger.error("✗ %s failed: %s", label, exc)
            raise failure(label, exc) from exc
        return rowcount

    @contextmanager
    def advisory_lock(self, key: int):
        """Hold a Postgres session lock so concurrent bootstraps run one at a time."""
        if self.dialect_name != "postgresql":
            yield
            return

        logger.info("Waiting for bootstrap lock %s...", key)
        self.execute(text("SELECT pg_advisory_lock(:key)").bindparams(key=key), "acquire advisory lock")
        unlock = text("SELECT pg_advisory_unlock(:key)").bindparams(key=key)
        try:
            yield
        except BaseException:
            # the original failure wins over a failed unlock
            try:
                self.execute(unlock, "release advisory lock")
            except StatementExecutionError:
                logger.warning("Could not release advisory lock %s after failure", key)
            raise
        self.execute(unlock, "release advisory lock")
