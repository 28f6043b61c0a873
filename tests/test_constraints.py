import pytest
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from conftest import count_rows
from models import (
    Favorite,
    Recipe,
    RecipeIngredient,
    RecipeStep,
    RecipeTag,
    ShoppingList,
    ShoppingListItem,
    User,
)
from seed_data import CHEF_EMAIL, DEMO_EMAIL

PASTA = "Classic Tomato Pasta"


def recipe_id(conn, title):
    return conn.execute(select(Recipe.id).where(Recipe.title == title)).scalar_one()


def test_deleting_recipe_cascades_to_children(bootstrapped):
    with bootstrapped.begin() as conn:
        pasta_id = recipe_id(conn, PASTA)
        conn.execute(
            ShoppingListItem.__table__.update()
            .where(ShoppingListItem.item_name == "Bananas")
            .values(source_recipe_id=pasta_id)
        )
        conn.execute(delete(Recipe).where(Recipe.id == pasta_id))

    assert count_rows(bootstrapped, RecipeIngredient, RecipeIngredient.recipe_id == pasta_id) == 0
    assert count_rows(bootstrapped, RecipeStep, RecipeStep.recipe_id == pasta_id) == 0
    assert count_rows(bootstrapped, RecipeTag, RecipeTag.recipe_id == pasta_id) == 0
    assert count_rows(bootstrapped, Favorite) == 0
    # the shopping list item survives with its source cleared
    with bootstrapped.connect() as conn:
        item = conn.execute(select(ShoppingListItem.item_name, ShoppingListItem.source_recipe_id)).one()
    assert tuple(item) == ("Bananas", None)
    assert count_rows(bootstrapped, RecipeIngredient) == 2


def test_deleting_account_nulls_recipes_and_drops_lists(bootstrapped):
    with bootstrapped.begin() as conn:
        conn.execute(delete(User).where(User.email == DEMO_EMAIL))

    assert count_rows(bootstrapped, Recipe) == 3
    assert count_rows(bootstrapped, Recipe, Recipe.author_user_id.is_(None)) == 2
    assert count_rows(bootstrapped, ShoppingList) == 0
    assert count_rows(bootstrapped, ShoppingListItem) == 0
    assert count_rows(bootstrapped, Favorite) == 0


def test_deleting_chef_keeps_favorite_of_other_user(bootstrapped):
    with bootstrapped.begin() as conn:
        conn.execute(delete(User).where(User.email == CHEF_EMAIL))

    assert count_rows(bootstrapped, Favorite) == 1
    assert count_rows(bootstrapped, Recipe, Recipe.title == PASTA, Recipe.author_user_id.is_(None)) == 1


def test_step_number_unique_per_recipe(bootstrapped):
    with bootstrapped.connect() as conn:
        pasta_id = recipe_id(conn, PASTA)

    with pytest.raises(IntegrityError):
        with bootstrapped.begin() as conn:
            conn.execute(insert(RecipeStep).values(recipe_id=pasta_id, step_number=1, instruction="Again"))

    # the same number on another recipe is fine
    with bootstrapped.begin() as conn:
        cake_id = recipe_id(conn, "One-Bowl Chocolate Mug Cake")
        conn.execute(insert(RecipeStep).values(recipe_id=cake_id, step_number=1, instruction="Mix"))
    assert count_rows(bootstrapped, RecipeStep) == 5


def test_ingredient_position_may_repeat(bootstrapped):
    with bootstrapped.begin() as conn:
        pasta_id = recipe_id(conn, PASTA)
        conn.execute(insert(RecipeIngredient).values(recipe_id=pasta_id, position=1, name="Basil"))

    assert count_rows(bootstrapped, RecipeIngredient, RecipeIngredient.recipe_id == pasta_id) == 5


def test_defaults_are_filled_by_the_store(bootstrapped):
    with bootstrapped.begin() as conn:
        conn.execute(insert(Recipe).values(title="Plain Rice"))
        row = conn.execute(
            select(
                Recipe.prep_time_minutes,
                Recipe.cook_time_minutes,
                Recipe.servings,
                Recipe.is_public,
                Recipe.created_at,
                Recipe.updated_at,
            ).where(Recipe.title == "Plain Rice")
        ).one()

    assert (row.prep_time_minutes, row.cook_time_minutes, row.servings, row.is_public) == (0, 0, 1, True)
    assert row.created_at is not None
    assert row.updated_at is not None
