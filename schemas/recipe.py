from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DURATION_PRESETS: tuple[str, ...] = (
    "15 minutes",
    "30 minutes",
    "45 minutes",
    "1 hour",
    "1.5 hours",
    "2 hours",
)
MIN_PEOPLE = 1
MAX_PEOPLE = 10


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


def _strip_required(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Models sometimes emit bare numbers for quantities.
        return str(value)
    return value


class Ingredient(BaseModel):
    name: str = Field(..., min_length=1)
    qty: str

    @field_validator("name", "qty", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> Any:
        return _strip_required(value)

    @property
    def base_name(self) -> str:
        """Name without the parenthesized secondary-language label."""
        match = re.match(r"^([^(]+)", self.name)
        return match.group(1).strip() if match else self.name


class Step(BaseModel):
    primary_text: str = Field(..., alias="english")
    secondary_text: str = Field(..., alias="myanmar")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("primary_text", "secondary_text", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> Any:
        return _strip_required(value)


class Nutrition(BaseModel):
    calories: int
    protein: str
    carbs: str
    fat: str
    fiber: str
    vitamins: str

    @field_validator("calories", mode="before")
    @classmethod
    def _normalize_calories(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        if isinstance(value, str):
            digits = re.search(r"\d+", value.replace(",", ""))
            if digits:
                return int(digits.group(0))
        return value

    @field_validator("protein", "carbs", "fat", "fiber", "vitamins", mode="before")
    @classmethod
    def _normalize_amounts(cls, value: Any) -> Any:
        return _strip_required(value)


class Dish(BaseModel):
    name: str = Field(..., min_length=1)
    ingredients: list[Ingredient] = Field(..., min_length=1)
    steps: list[Step] = Field(..., min_length=1)
    nutrition: Nutrition
    image_prompt: str = Field(..., alias="imagePrompt")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "image_prompt", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> Any:
        return _strip_required(value)

    @property
    def base_name(self) -> str:
        match = re.match(r"^([^(]+)", self.name)
        return match.group(1).strip() if match else self.name

    @property
    def secondary_name(self) -> str | None:
        match = re.search(r"\((.*?)\)", self.name)
        return match.group(1).strip() if match else None


class RecipeResponse(BaseModel):
    """One generated recipe.

    Only the main dish is modelled; any other dish the provider adds to the
    meal plan is ignored during validation.
    """

    main_dish: Dish

    model_config = ConfigDict(extra="ignore")


class RecipeRequest(BaseModel):
    ingredients: list[str] = Field(..., min_length=1)
    meal_type: MealType
    duration: str
    people_count: int = Field(2, ge=MIN_PEOPLE, le=MAX_PEOPLE)
    is_regeneration: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("ingredients", mode="before")
    @classmethod
    def _normalize_ingredients(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = re.split(r"[,\n;]+", value)
        if isinstance(value, (list, tuple)):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("duration")
    @classmethod
    def _check_duration(cls, value: str) -> str:
        normalized = value.strip()
        if normalized not in DURATION_PRESETS:
            raise ValueError(f"duration must be one of: {', '.join(DURATION_PRESETS)}")
        return normalized
