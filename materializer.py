"""
Schema materialization: brings every table, index and the summary view into
existence without touching objects that are already there.
"""

import logging

from sqlalchemy.ext.compiler import compiles
from sqlalchemy.schema import CreateIndex, CreateTable, ExecutableDDLElement

from errors import SchemaStatementError
from models import RECIPE_SUMMARY_VIEW, TABLES, recipe_summary_select

logger = logging.getLogger(__name__)


class CreateOrReplaceView(ExecutableDDLElement):
    def __init__(self, name, selectable):
        self.name = name
        self.selectable = selectable


@compiles(CreateOrReplaceView)
def _create_view_if_missing(element, compiler, **kw):
    # SQLite has no OR REPLACE for views
    body = compiler.sql_compiler.process(element.selectable, literal_binds=True)
    return f"CREATE VIEW IF NOT EXISTS {element.name} AS {body}"


@compiles(CreateOrReplaceView, "postgresql")
def _create_or_replace_view(element, compiler, **kw):
    body = compiler.sql_compiler.process(element.selectable, literal_binds=True)
    return f"CREATE OR REPLACE VIEW {element.name} AS {body}"


def schema_statements():
    """Yield (label, statement) pairs in dependency order."""
    for table in TABLES:
        yield f"table {table.name}", CreateTable(table, if_not_exists=True)
        for index in sorted(table.indexes, key=lambda ix: ix.name):
            yield f"index {index.name}", CreateIndex(index, if_not_exists=True)
    yield f"view {RECIPE_SUMMARY_VIEW}", CreateOrReplaceView(RECIPE_SUMMARY_VIEW, recipe_summary_select())


def materialize_schema(executor) -> int:
    logger.info("Initializing Recipe Hub schema...")
    issued = 0
    for label, statement in schema_statements():
        executor.execute(statement, label, failure=SchemaStatementError)
        issued += 1
    logger.info("✓ Schema ready (%d statements)", issued)
    return issued
