from schemas.recipe import (
    DURATION_PRESETS,
    MAX_PEOPLE,
    MIN_PEOPLE,
    Dish,
    Ingredient,
    MealType,
    Nutrition,
    RecipeRequest,
    RecipeResponse,
    Step,
)

__all__ = [
    "DURATION_PRESETS",
    "Dish",
    "Ingredient",
    "MAX_PEOPLE",
    "MIN_PEOPLE",
    "MealType",
    "Nutrition",
    "RecipeRequest",
    "RecipeResponse",
    "Step",
]
