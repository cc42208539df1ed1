import unittest

from bot.formatters import fit_text, format_option_card, format_steps, split_text
from schemas import Dish


def _dish(ingredient_count: int) -> Dish:
    return Dish.model_validate(
        {
            "name": "Mohinga (မုန့်ဟင်းခါး)",
            "ingredients": [{"name": f"Item {i}", "qty": "1"} for i in range(ingredient_count)],
            "steps": [
                {"english": "Boil the broth.", "myanmar": "ဟင်းရည်ကို ပြုတ်ပါ။"},
                {"english": "Serve hot.", "myanmar": "ပူပူနွေးနွေး သုံးဆောင်ပါ။"},
            ],
            "nutrition": {
                "calories": "420 kcal",
                "protein": "25g",
                "carbs": "55g",
                "fat": "10g",
                "fiber": "4g",
                "vitamins": "A, C",
            },
            "imagePrompt": "Bowl of mohinga",
        }
    )


class SplitTextTests(unittest.TestCase):
    def test_short_text_is_one_chunk(self) -> None:
        self.assertEqual(split_text("hello"), ["hello"])
        self.assertEqual(split_text(""), [""])

    def test_long_text_is_split_on_line_breaks(self) -> None:
        text = "\n".join(["x" * 30] * 10)
        chunks = split_text(text, limit=100)

        self.assertTrue(all(len(chunk) <= 100 for chunk in chunks))
        self.assertEqual("\n".join(chunks), text)

    def test_fit_text_truncates_with_ellipsis(self) -> None:
        self.assertEqual(fit_text("abcdef", 4), "abc…")
        self.assertEqual(fit_text("abc", 4), "abc")


class OptionCardTests(unittest.TestCase):
    def test_card_shows_three_key_ingredients_and_remainder(self) -> None:
        card = format_option_card(_dish(5), 0)

        self.assertTrue(card.startswith("1. 🍽 Mohinga"))
        self.assertIn("မုန့်ဟင်းခါး", card)
        self.assertIn("420 calories", card)
        self.assertIn("• Item 2", card)
        self.assertNotIn("• Item 3", card)
        self.assertIn("+ 2 more ingredients", card)

    def test_card_without_hidden_ingredients_has_no_remainder(self) -> None:
        self.assertNotIn("more ingredients", format_option_card(_dish(2), 1))

    def test_steps_follow_language(self) -> None:
        dish = _dish(1)
        self.assertIn("1. Boil the broth.", format_steps(dish, "english"))
        self.assertIn("2. ပူပူနွေးနွေး သုံးဆောင်ပါ။", format_steps(dish, "myanmar"))

    def test_long_step_list_is_kept_whole(self) -> None:
        steps = [{"english": f"Stir the pot, round {n}.", "myanmar": "မွှေပါ။"} for n in range(1, 301)]
        dish = Dish.model_validate({**_dish(1).model_dump(by_alias=True), "steps": steps})

        text = format_steps(dish, "english")

        self.assertGreater(len(text), 4096)
        self.assertTrue(text.endswith("300. Stir the pot, round 300."))
        self.assertGreater(len(split_text(text)), 1)


if __name__ == "__main__":
    unittest.main()
