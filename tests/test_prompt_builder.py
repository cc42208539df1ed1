from __future__ import annotations

import unittest

from core.services.prompt_builder import build_prompt
from schemas import RecipeRequest


def _request(**overrides) -> RecipeRequest:
    values = {
        "ingredients": ["chicken", "rice"],
        "meal_type": "dinner",
        "duration": "30 minutes",
        "people_count": 4,
        "is_regeneration": False,
    }
    values.update(overrides)
    return RecipeRequest(**values)


class BuildPromptTests(unittest.TestCase):
    def test_embeds_all_request_values(self) -> None:
        prompt = build_prompt(_request())
        self.assertIn("chicken, rice", prompt)
        self.assertIn("dinner", prompt)
        self.assertIn("30 minutes", prompt)
        self.assertIn("serves 4 people", prompt)

    def test_contains_output_instructions(self) -> None:
        prompt = build_prompt(_request())
        self.assertIn("DO NOT wrap the JSON in markdown code blocks", prompt)
        self.assertIn("not a side dish", prompt)
        self.assertIn("both English and Myanmar", prompt)

    def test_ends_with_dish_template(self) -> None:
        prompt = build_prompt(_request())
        template_start = prompt.index('"meal_plan"')
        for field in ('"name"', '"ingredients"', '"steps"', '"nutrition"', '"imagePrompt"', '"english"', '"myanmar"'):
            self.assertGreater(prompt.index(field), template_start)
        self.assertTrue(prompt.endswith("}"))

    def test_is_deterministic(self) -> None:
        self.assertEqual(build_prompt(_request()), build_prompt(_request()))

    def test_regeneration_asks_for_improved_version(self) -> None:
        self.assertNotIn("improved version", build_prompt(_request()))
        self.assertIn("improved version", build_prompt(_request(is_regeneration=True)))


if __name__ == "__main__":
    unittest.main()
