from __future__ import annotations

import unittest

from pydantic import ValidationError

from schemas import MealType, RecipeRequest, RecipeResponse


def _valid_payload() -> dict:
    return {
        "main_dish": {
            "name": "Mohinga (မုန့်ဟင်းခါး)",
            "ingredients": [
                {"name": "Catfish (ငါးခူ)", "qty": "500 g"},
                {"name": "Rice noodles (မုန့်ဖတ်)", "qty": "400 g"},
                {"name": "Lemongrass (စပါးလင်)", "qty": 3},
            ],
            "steps": [
                {
                    "english": "Simmer the fish with lemongrass for 20 minutes.",
                    "myanmar": "ငါးကို စပါးလင်နှင့် မိနစ် ၂၀ ပြုတ်ပါ။",
                },
                {
                    "english": "Serve the broth over the noodles.",
                    "myanmar": "ဟင်းရည်ကို မုန့်ဖတ်ပေါ် လောင်းပြီး တည်ခင်းပါ။",
                },
            ],
            "nutrition": {
                "calories": "450 kcal",
                "protein": "28g",
                "carbs": "60g",
                "fat": "10g",
                "fiber": "4g",
                "vitamins": "Vitamin B12, iron",
            },
            "imagePrompt": "A steaming bowl of mohinga with crispy fritters",
        }
    }


class RecipeResponseSchemaTests(unittest.TestCase):
    def test_accepts_payload_and_maps_wire_names(self) -> None:
        recipe = RecipeResponse.model_validate(_valid_payload())
        dish = recipe.main_dish
        self.assertEqual(dish.name, "Mohinga (မုန့်ဟင်းခါး)")
        self.assertEqual(dish.steps[0].primary_text, "Simmer the fish with lemongrass for 20 minutes.")
        self.assertEqual(dish.steps[1].secondary_text, "ဟင်းရည်ကို မုန့်ဖတ်ပေါ် လောင်းပြီး တည်ခင်းပါ။")
        self.assertEqual(dish.image_prompt, "A steaming bowl of mohinga with crispy fritters")

    def test_coerces_calories_and_numeric_quantities(self) -> None:
        dish = RecipeResponse.model_validate(_valid_payload()).main_dish
        self.assertEqual(dish.nutrition.calories, 450)
        self.assertEqual(dish.ingredients[2].qty, "3")

    def test_splits_bilingual_names(self) -> None:
        dish = RecipeResponse.model_validate(_valid_payload()).main_dish
        self.assertEqual(dish.base_name, "Mohinga")
        self.assertEqual(dish.secondary_name, "မုန့်ဟင်းခါး")
        self.assertEqual(dish.ingredients[0].base_name, "Catfish")

    def test_rejects_empty_steps(self) -> None:
        payload = _valid_payload()
        payload["main_dish"]["steps"] = []
        with self.assertRaises(ValidationError):
            RecipeResponse.model_validate(payload)

    def test_has_no_side_dish_slot(self) -> None:
        payload = _valid_payload()
        payload["side_dish"] = dict(payload["main_dish"], name="Fritters")
        recipe = RecipeResponse.model_validate(payload)
        self.assertNotIn("side_dish", recipe.model_dump())


class RecipeRequestSchemaTests(unittest.TestCase):
    def test_normalizes_ingredients(self) -> None:
        request = RecipeRequest(
            ingredients=[" chicken ", "", "rice"],
            meal_type="dinner",
            duration="30 minutes",
            people_count=4,
        )
        self.assertEqual(request.ingredients, ["chicken", "rice"])
        self.assertIs(request.meal_type, MealType.dinner)
        self.assertFalse(request.is_regeneration)

    def test_rejects_blank_ingredients(self) -> None:
        with self.assertRaises(ValidationError):
            RecipeRequest(ingredients=["  "], meal_type="lunch", duration="15 minutes")

    def test_rejects_unknown_duration_and_meal_type(self) -> None:
        with self.assertRaises(ValidationError):
            RecipeRequest(ingredients=["egg"], meal_type="lunch", duration="3 days")
        with self.assertRaises(ValidationError):
            RecipeRequest(ingredients=["egg"], meal_type="brunch", duration="1 hour")

    def test_rejects_people_count_out_of_range(self) -> None:
        for count in (0, 11):
            with self.assertRaises(ValidationError):
                RecipeRequest(ingredients=["egg"], meal_type="snack", duration="1 hour", people_count=count)

    def test_is_immutable(self) -> None:
        request = RecipeRequest(ingredients=["egg"], meal_type="snack", duration="1 hour")
        with self.assertRaises(ValidationError):
            request.people_count = 5


if __name__ == "__main__":
    unittest.main()
