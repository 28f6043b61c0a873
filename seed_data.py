"""
Demonstration data loaded by every bootstrap run.

Password hashes are placeholders; the backend creates real ones.
"""

from schemas import (
    AccountSeed,
    FavoriteSeed,
    IngredientSeed,
    RecipeSeed,
    SeedSet,
    ShoppingListItemSeed,
    ShoppingListSeed,
    StepSeed,
    TagSeed,
)

DEMO_EMAIL = "demo@recipehub.local"
CHEF_EMAIL = "chef@recipehub.local"

DEFAULT_SEED = SeedSet(
    accounts=[
        AccountSeed(email=DEMO_EMAIL, password_hash="demo-password-hash", display_name="Demo User"),
        AccountSeed(email=CHEF_EMAIL, password_hash="chef-password-hash", display_name="Chef Alex"),
    ],
    tags=[
        TagSeed(name="Vegetarian"),
        TagSeed(name="Quick"),
        TagSeed(name="Comfort Food"),
        TagSeed(name="Dessert"),
        TagSeed(name="Gluten-Free"),
    ],
    recipes=[
        RecipeSeed(
            title="Classic Tomato Pasta",
            author_email=CHEF_EMAIL,
            description="Simple pantry pasta with a bright tomato sauce.",
            prep_time_minutes=10,
            cook_time_minutes=20,
            servings=2,
            ingredients=[
                IngredientSeed(position=1, name="Spaghetti", quantity="200", unit="g"),
                IngredientSeed(
                    position=2, name="Canned tomatoes", quantity="1", unit="can", notes="Crushed or whole"
                ),
                IngredientSeed(position=3, name="Garlic", quantity="2", unit="cloves", notes="Minced"),
                IngredientSeed(position=4, name="Olive oil", quantity="1", unit="tbsp"),
            ],
            steps=[
                StepSeed(step_number=1, instruction="Boil salted water and cook pasta until al dente."),
                StepSeed(
                    step_number=2,
                    instruction="Sauté garlic in olive oil for 30 seconds, add tomatoes, simmer 10 minutes.",
                ),
                StepSeed(step_number=3, instruction="Toss pasta with sauce, adjust seasoning, serve."),
            ],
            tags=["Quick", "Comfort Food"],
        ),
        RecipeSeed(
            title="Overnight Oats",
            author_email=DEMO_EMAIL,
            description="No-cook breakfast with oats, milk, and toppings.",
            prep_time_minutes=5,
            cook_time_minutes=0,
            servings=1,
            ingredients=[
                IngredientSeed(position=1, name="Rolled oats", quantity="1/2", unit="cup"),
                IngredientSeed(position=2, name="Milk (or dairy-free)", quantity="1/2", unit="cup"),
            ],
            steps=[
                StepSeed(
                    step_number=1,
                    instruction="Mix oats and milk in a jar. Add toppings. Refrigerate overnight.",
                ),
            ],
            tags=["Quick", "Vegetarian"],
        ),
        RecipeSeed(
            title="One-Bowl Chocolate Mug Cake",
            author_email=DEMO_EMAIL,
            description="Fast dessert in a mug.",
            prep_time_minutes=5,
            cook_time_minutes=2,
            servings=1,
            tags=["Dessert"],
        ),
    ],
    shopping_lists=[
        ShoppingListSeed(
            owner_email=DEMO_EMAIL,
            name="Weekly Groceries",
            items=[ShoppingListItemSeed(position=1, item_name="Bananas", quantity="2")],
        ),
    ],
    favorites=[
        FavoriteSeed(user_email=DEMO_EMAIL, recipe_title="Classic Tomato Pasta"),
    ],
)
