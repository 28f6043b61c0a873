from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List


# Account Schemas
class AccountSeed(BaseModel):
    email: str
    password_hash: str
    display_name: Optional[str] = None


# Tag Schemas
class TagSeed(BaseModel):
    name: str


# Recipe Schemas
class IngredientSeed(BaseModel):
    position: int
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    notes: Optional[str] = None


class StepSeed(BaseModel):
    step_number: int
    instruction: str


class RecipeSeed(BaseModel):
    title: str
    author_email: Optional[str] = None
    description: Optional[str] = None
    prep_time_minutes: int = 0
    cook_time_minutes: int = 0
    servings: int = 1
    image_url: Optional[str] = None
    is_public: bool = True
    ingredients: List[IngredientSeed] = Field(default_factory=list)
    steps: List[StepSeed] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("steps")
    @classmethod
    def unique_step_numbers(cls, v):
        numbers = [step.step_number for step in v]
        if len(numbers) != len(set(numbers)):
            raise ValueError("step numbers must be unique within a recipe")
        return v


# Shopping List Schemas
class ShoppingListItemSeed(BaseModel):
    position: int
    item_name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    is_checked: bool = False
    source_recipe_title: Optional[str] = None


class ShoppingListSeed(BaseModel):
    owner_email: str
    name: str
    items: List[ShoppingListItemSeed] = Field(default_factory=list)


# Favorite Schemas
class FavoriteSeed(BaseModel):
    user_email: str
    recipe_title: str


class SeedSet(BaseModel):
    """
    The complete demonstration data set, keyed by natural keys only.

    Cross references (emails, titles, tag names) must point at records
    declared in the same set unless ``allow_external_refs`` is set, in which
    case they may name rows that already live in the database.
    """

    accounts: List[AccountSeed] = Field(default_factory=list)
    tags: List[TagSeed] = Field(default_factory=list)
    recipes: List[RecipeSeed] = Field(default_factory=list)
    shopping_lists: List[ShoppingListSeed] = Field(default_factory=list)
    favorites: List[FavoriteSeed] = Field(default_factory=list)
    allow_external_refs: bool = False

    @model_validator(mode="after")
    def check_references(self):
        if self.allow_external_refs:
            return self

        emails = {account.email for account in self.accounts}
        titles = {recipe.title for recipe in self.recipes}
        tag_names = {tag.name for tag in self.tags}

        missing = []
        for recipe in self.recipes:
            if recipe.author_email is not None and recipe.author_email not in emails:
                missing.append(f"account {recipe.author_email!r}")
            missing.extend(f"tag {name!r}" for name in recipe.tags if name not in tag_names)
        for shopping_list in self.shopping_lists:
            if shopping_list.owner_email not in emails:
                missing.append(f"account {shopping_list.owner_email!r}")
            for item in shopping_list.items:
                if item.source_recipe_title and item.source_recipe_title not in titles:
                    missing.append(f"recipe {item.source_recipe_title!r}")
        for favorite in self.favorites:
            if favorite.user_email not in emails:
                missing.append(f"account {favorite.user_email!r}")
            if favorite.recipe_title not in titles:
                missing.append(f"recipe {favorite.recipe_title!r}")

        if missing:
            raise ValueError("undeclared references: " + ", ".join(sorted(set(missing))))
        return self
