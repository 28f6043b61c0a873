import pytest

from errors import SeedStatementError, StatementExecutionError
from executor import StatementExecutor


class LockingExecutor(StatementExecutor):
    """Pretends to be on Postgres; the unlock statement can be made to fail."""

    dialect_name = "postgresql"

    def __init__(self, fail_unlock=False):
        super().__init__(connection=None)
        self.fail_unlock = fail_unlock
        self.labels = []

    def execute(self, statement, label, failure=StatementExecutionError):
        self.labels.append(label)
        if self.fail_unlock and label == "release advisory lock":
            raise failure(label, RuntimeError("connection lost"))
        return 1


def test_lock_is_taken_and_released():
    executor = LockingExecutor()

    with executor.advisory_lock(7):
        executor.execute(None, "table app_users")

    assert executor.labels == ["acquire advisory lock", "table app_users", "release advisory lock"]


def test_failed_unlock_does_not_hide_the_run_failure():
    executor = LockingExecutor(fail_unlock=True)

    with pytest.raises(SeedStatementError) as excinfo:
        with executor.advisory_lock(7):
            raise SeedStatementError("insert recipes(title='x')", RuntimeError("server closed"))

    assert excinfo.value.label == "insert recipes(title='x')"
    assert executor.labels[-1] == "release advisory lock"


def test_failed_unlock_after_success_is_reported():
    executor = LockingExecutor(fail_unlock=True)

    with pytest.raises(StatementExecutionError) as excinfo:
        with executor.advisory_lock(7):
            pass

    assert excinfo.value.label == "release advisory lock"
