"""
Seed reconciliation.

A seed set is compiled into an ordered list of rules. Each rule renders to a
single self-guarding statement: running it against a database that already
holds the record changes nothing. Parents are always resolved by natural key
inside the statement itself, never by ids remembered from an earlier step.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, exists, insert, literal, select, true
from sqlalchemy.dialects import postgresql, sqlite

from errors import SeedStatementError, UnsupportedDialectError
from models import (
    Favorite,
    Recipe,
    RecipeIngredient,
    RecipeStep,
    RecipeTag,
    ShoppingList,
    ShoppingListItem,
    Tag,
    User,
)

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}
SUPPORTED_DIALECTS = frozenset(_DIALECT_INSERTS)


@dataclass(frozen=True)
class Lookup:
    """Finds one parent row by natural key, optionally through its own owner."""

    table: object
    match: Dict[str, object]
    owner: Optional["Lookup"] = None
    owner_column: Optional[str] = None

    def resolve(self, alias_name: str):
        """Return (alias, from-clauses, criteria) for use in an INSERT ... SELECT."""
        alias = self.table.alias(alias_name)
        froms = [alias]
        criteria = [alias.c[column] == value for column, value in self.match.items()]
        if self.owner is not None:
            owner_alias, owner_froms, owner_criteria = self.owner.resolve(f"{alias_name}_owner")
            froms.extend(owner_froms)
            criteria.append(alias.c[self.owner_column] == owner_alias.c.id)
            criteria.extend(owner_criteria)
        return alias, froms, criteria

    def describe(self) -> str:
        keys = ", ".join(f"{k}={v!r}" for k, v in self.match.items())
        if self.owner is not None:
            keys += f" of {self.owner.describe()}"
        return f"{self.table.name}({keys})"


def _cross_join(froms):
    # independent lookups: an explicit cross join rather than a bare FROM list
    joined = froms[0]
    for other in froms[1:]:
        joined = joined.join(other, true())
    return joined


@dataclass(frozen=True)
class UpsertRule:
    """Insert; on a natural-key conflict do nothing or overwrite ``update_columns``."""

    table: object
    values: Dict[str, object]
    conflict_key: Tuple[str, ...]
    update_columns: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        keys = ", ".join(f"{k}={self.values[k]!r}" for k in self.conflict_key)
        return f"upsert {self.table.name}({keys})"

    def statement(self, dialect_name: str):
        try:
            dialect_insert = _DIALECT_INSERTS[dialect_name]
        except KeyError:
            raise UnsupportedDialectError(
                f"Upserts are not supported on the {dialect_name!r} dialect"
            ) from None

        stmt = dialect_insert(self.table).values(**self.values)
        if not self.update_columns:
            return stmt.on_conflict_do_nothing(index_elements=list(self.conflict_key))
        return stmt.on_conflict_do_update(
            index_elements=list(self.conflict_key),
            set_={column: stmt.excluded[column] for column in self.update_columns},
        )


@dataclass(frozen=True)
class GuardedInsertRule:
    """
    Insert a row unless one with the same identity exists.

    ``parents`` maps a foreign key column to the lookup that resolves it.
    When any lookup finds nothing the statement inserts zero rows.
    ``optional_parents`` are resolved the same way but fall back to NULL.
    """

    table: object
    values: Dict[str, object]
    identity: Tuple[str, ...]
    parents: Dict[str, Lookup] = field(default_factory=dict)
    optional_parents: Dict[str, Lookup] = field(default_factory=dict)

    @property
    def label(self) -> str:
        parts = [f"{k}={self.values[k]!r}" for k in self.identity if k in self.values]
        parts += [f"{k}->{self.parents[k].describe()}" for k in self.identity if k in self.parents]
        return f"insert {self.table.name}({', '.join(parts)})"

    def statement(self, dialect_name: str = None):
        columns = []
        selected = []
        criteria = []
        froms = []
        resolved = {}

        for column, lookup in self.parents.items():
            alias, lookup_froms, lookup_criteria = lookup.resolve(f"p_{column}")
            resolved[column] = alias.c.id
            froms.extend(lookup_froms)
            criteria.extend(lookup_criteria)
            columns.append(column)
            selected.append(alias.c.id.label(column))

        for column, lookup in self.optional_parents.items():
            alias, lookup_froms, lookup_criteria = lookup.resolve(f"o_{column}")
            resolved[column] = (
                select(alias.c.id)
                .select_from(_cross_join(lookup_froms))
                .where(*lookup_criteria)
                .limit(1)
                .scalar_subquery()
            )
            columns.append(column)
            selected.append(resolved[column].label(column))

        for column, value in self.values.items():
            resolved[column] = literal(value, self.table.c[column].type)
            columns.append(column)
            selected.append(resolved[column].label(column))

        existing = self.table.alias("existing")
        guard = exists().where(and_(*(existing.c[column] == resolved[column] for column in self.identity)))
        criteria.append(~guard)

        source = select(*selected)
        if froms:
            source = source.select_from(_cross_join(froms))
        return insert(self.table).from_select(columns, source.where(*criteria))


def build_rules(seed_set) -> List[object]:
    """Compile a SeedSet into rules, parents always before their dependents."""
    users = User.__table__
    tags = Tag.__table__
    recipes = Recipe.__table__
    rules = []

    for account in seed_set.accounts:
        rules.append(
            UpsertRule(
                users,
                account.model_dump(),
                conflict_key=("email",),
                update_columns=("display_name",),
            )
        )
    for tag in seed_set.tags:
        rules.append(UpsertRule(tags, tag.model_dump(), conflict_key=("name",)))

    for recipe in seed_set.recipes:
        body = recipe.model_dump(exclude={"author_email", "ingredients", "steps", "tags"})
        author = {}
        if recipe.author_email is not None:
            author["author_user_id"] = Lookup(users, {"email": recipe.author_email})
        rules.append(
            GuardedInsertRule(
                recipes,
                body,
                identity=("title",),
                parents=author,
            )
        )

    for recipe in seed_set.recipes:
        owner = {"recipe_id": Lookup(recipes, {"title": recipe.title})}
        for ingredient in recipe.ingredients:
            rules.append(
                GuardedInsertRule(
                    RecipeIngredient.__table__,
                    ingredient.model_dump(),
                    identity=("recipe_id", "position"),
                    parents=owner,
                )
            )
        for step in recipe.steps:
            rules.append(
                GuardedInsertRule(
                    RecipeStep.__table__,
                    step.model_dump(),
                    identity=("recipe_id", "step_number"),
                    parents=owner,
                )
            )
        for tag_name in recipe.tags:
            rules.append(
                GuardedInsertRule(
                    RecipeTag.__table__,
                    {},
                    identity=("recipe_id", "tag_id"),
                    parents={**owner, "tag_id": Lookup(tags, {"name": tag_name})},
                )
            )

    for shopping_list in seed_set.shopping_lists:
        rules.append(
            GuardedInsertRule(
                ShoppingList.__table__,
                {"name": shopping_list.name},
                identity=("user_id", "name"),
                parents={"user_id": Lookup(users, {"email": shopping_list.owner_email})},
            )
        )

    for shopping_list in seed_set.shopping_lists:
        list_lookup = Lookup(
            ShoppingList.__table__,
            {"name": shopping_list.name},
            owner=Lookup(users, {"email": shopping_list.owner_email}),
            owner_column="user_id",
        )
        for item in shopping_list.items:
            source = {}
            if item.source_recipe_title:
                source["source_recipe_id"] = Lookup(recipes, {"title": item.source_recipe_title})
            rules.append(
                GuardedInsertRule(
                    ShoppingListItem.__table__,
                    item.model_dump(exclude={"source_recipe_title"}),
                    identity=("shopping_list_id", "position"),
                    parents={"shopping_list_id": list_lookup},
                    optional_parents=source,
                )
            )

    for favorite in seed_set.favorites:
        rules.append(
            GuardedInsertRule(
                Favorite.__table__,
                {},
                identity=("user_id", "recipe_id"),
                parents={
                    "user_id": Lookup(users, {"email": favorite.user_email}),
                    "recipe_id": Lookup(recipes, {"title": favorite.recipe_title}),
                },
            )
        )

    return rules


@dataclass
class SeedReport:
    results: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def rows_affected(self) -> int:
        return sum(count for _, count in self.results if count > 0)

    @property
    def noops(self) -> int:
        return sum(1 for _, count in self.results if count == 0)


def reconcile_seed(executor, rules) -> SeedReport:
    logger.info("Seeding Recipe Hub data (idempotent)...")
    report = SeedReport()
    for rule in rules:
        count = executor.execute(
            rule.statement(executor.dialect_name), rule.label, failure=SeedStatementError
        )
        if count == 0:
            logger.debug("  already present or parent missing: %s", rule.label)
        report.results.append((rule.label, count))
    logger.info(
        "✓ Seed reconciled: %d rules, %d rows written, %d no-ops",
        len(report.results),
        report.rows_affected,
        report.noops,
    )
    return report
