from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    func,
    select,
    text,
    true,
    false,
)
from sqlalchemy.orm import relationship

from database import Base

# BIGSERIAL on Postgres; SQLite only auto-increments INTEGER PRIMARY KEY
BigIdentity = BigInteger().with_variant(Integer, "sqlite")


def _created_at():
    return Column(DateTime(timezone=True), nullable=False, server_default=func.current_timestamp())


def _updated_at():
    # set at row creation only; nothing refreshes it afterwards
    return Column(DateTime(timezone=True), nullable=False, server_default=func.current_timestamp())


class User(Base):
    __tablename__ = "app_users"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    display_name = Column(Text, nullable=True)
    created_at = _created_at()
    updated_at = _updated_at()

    recipes = relationship("Recipe", back_populates="author", passive_deletes=True)
    shopping_lists = relationship("ShoppingList", back_populates="user", passive_deletes=True)


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    author_user_id = Column(
        BigInteger, ForeignKey("app_users.id", ondelete="SET NULL"), nullable=True
    )
    # not unique in the database; seeding treats it as the natural key
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    prep_time_minutes = Column(Integer, nullable=False, server_default=text("0"))
    cook_time_minutes = Column(Integer, nullable=False, server_default=text("0"))
    servings = Column(Integer, nullable=False, server_default=text("1"))
    image_url = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, server_default=true())
    created_at = _created_at()
    updated_at = _updated_at()

    __table_args__ = (
        Index("idx_recipes_author_user_id", "author_user_id"),
        Index("idx_recipes_is_public", "is_public"),
        Index("idx_recipes_title", "title"),
    )

    author = relationship("User", back_populates="recipes")
    ingredients = relationship(
        "RecipeIngredient",
        order_by="RecipeIngredient.position",
        back_populates="recipe",
        passive_deletes=True,
    )
    steps = relationship(
        "RecipeStep",
        order_by="RecipeStep.step_number",
        back_populates="recipe",
        passive_deletes=True,
    )
    tags = relationship("Tag", secondary="recipe_tags", passive_deletes=True)


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    recipe_id = Column(
        BigInteger, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    # application ordered, duplicates allowed
    position = Column(Integer, nullable=False, server_default=text("0"))
    name = Column(Text, nullable=False)
    quantity = Column(Text, nullable=True)
    unit = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (Index("idx_recipe_ingredients_recipe_id", "recipe_id"),)

    recipe = relationship("Recipe", back_populates="ingredients")


class RecipeStep(Base):
    __tablename__ = "recipe_steps"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    recipe_id = Column(
        BigInteger, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_number = Column(Integer, nullable=False)
    instruction = Column(Text, nullable=False)

    __table_args__ = (
        Index("uq_recipe_steps_recipe_step_number", "recipe_id", "step_number", unique=True),
        Index("idx_recipe_steps_recipe_id", "recipe_id"),
    )

    recipe = relationship("Recipe", back_populates="steps")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    created_at = _created_at()


class RecipeTag(Base):
    __tablename__ = "recipe_tags"

    recipe_id = Column(
        BigInteger, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id = Column(BigInteger, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    __table_args__ = (Index("idx_recipe_tags_tag_id", "tag_id"),)


class Favorite(Base):
    __tablename__ = "favorites"

    user_id = Column(
        BigInteger, ForeignKey("app_users.id", ondelete="CASCADE"), primary_key=True
    )
    recipe_id = Column(
        BigInteger, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    created_at = _created_at()

    __table_args__ = (Index("idx_favorites_recipe_id", "recipe_id"),)


class ShoppingList(Base):
    __tablename__ = "shopping_lists"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    user_id = Column(
        BigInteger, ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False
    )
    # unique per user by seeding convention only
    name = Column(Text, nullable=False)
    created_at = _created_at()
    updated_at = _updated_at()

    __table_args__ = (Index("idx_shopping_lists_user_id", "user_id"),)

    user = relationship("User", back_populates="shopping_lists")
    items = relationship(
        "ShoppingListItem",
        order_by="ShoppingListItem.position",
        back_populates="shopping_list",
        passive_deletes=True,
    )


class ShoppingListItem(Base):
    __tablename__ = "shopping_list_items"

    id = Column(BigIdentity, primary_key=True, autoincrement=True)
    shopping_list_id = Column(
        BigInteger, ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, server_default=text("0"))
    item_name = Column(Text, nullable=False)
    quantity = Column(Text, nullable=True)
    unit = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    is_checked = Column(Boolean, nullable=False, server_default=false())
    source_recipe_id = Column(
        BigInteger, ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )
    created_at = _created_at()

    __table_args__ = (Index("idx_shopping_list_items_list_id", "shopping_list_id"),)

    shopping_list = relationship("ShoppingList", back_populates="items")
    source_recipe = relationship("Recipe")


# Creation order: every table after the tables it references
TABLES = [
    User.__table__,
    Recipe.__table__,
    RecipeIngredient.__table__,
    RecipeStep.__table__,
    Tag.__table__,
    RecipeTag.__table__,
    Favorite.__table__,
    ShoppingList.__table__,
    ShoppingListItem.__table__,
]

RECIPE_SUMMARY_VIEW = "v_recipe_summary"


def recipe_summary_select():
    """Recipes with their author's public fields; authorless recipes keep NULLs."""
    recipes = Recipe.__table__
    users = User.__table__
    return select(
        recipes.c.id,
        recipes.c.title,
        recipes.c.description,
        recipes.c.prep_time_minutes,
        recipes.c.cook_time_minutes,
        recipes.c.servings,
        recipes.c.image_url,
        recipes.c.is_public,
        recipes.c.created_at,
        recipes.c.updated_at,
        users.c.id.label("author_id"),
        users.c.display_name.label("author_display_name"),
        users.c.email.label("author_email"),
    ).select_from(recipes.outerjoin(users, users.c.id == recipes.c.author_user_id))
