class BootstrapError(Exception):
    """Base class for every failure that aborts a bootstrap run."""


class ConnectionDescriptorError(BootstrapError):
    """The connection descriptor is missing, unreadable or malformed."""


class UnsupportedDialectError(BootstrapError):
    pass


class StatementExecutionError(BootstrapError):
    phase = "statement"

    def __init__(self, label: str, cause: Exception):
        self.label = label
        self.cause = cause
        super().__init__(f"{self.phase} statement failed ({label}): {cause}")


class SchemaStatementError(StatementExecutionError):
    phase = "schema"


class SeedStatementError(StatementExecutionError):
    phase = "seed"
