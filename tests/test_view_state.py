from __future__ import annotations

import unittest

from bot.view_state import (
    ImageSlot,
    RecipeViewState,
    failed,
    load_view,
    save_view,
    save_view_if_current,
    select_option,
    start_generation,
    toggle_ingredient,
    with_image_slot,
    with_options,
)
from schemas import RecipeRequest, RecipeResponse


def _recipe(name: str) -> RecipeResponse:
    return RecipeResponse.model_validate(
        {
            "main_dish": {
                "name": name,
                "ingredients": [
                    {"name": "Chicken (ကြက်သား)", "qty": "500 g"},
                    {"name": "Rice (ဆန်)", "qty": "2 cups"},
                ],
                "steps": [{"english": "Cook.", "myanmar": "ချက်ပါ။"}],
                "nutrition": {
                    "calories": 500,
                    "protein": "30g",
                    "carbs": "70g",
                    "fat": "12g",
                    "fiber": "3g",
                    "vitamins": "B6",
                },
                "imagePrompt": f"Photo of {name}",
            }
        }
    )


def _request() -> RecipeRequest:
    return RecipeRequest(ingredients=["chicken", "rice"], meal_type="dinner", duration="30 minutes", people_count=4)


class _FakeState:
    def __init__(self) -> None:
        self.data: dict = {}

    async def get_data(self) -> dict:
        return dict(self.data)

    async def update_data(self, data=None, **kwargs) -> dict:
        self.data.update(data or {})
        self.data.update(kwargs)
        return dict(self.data)


class ReducerTests(unittest.TestCase):
    def test_start_generation_issues_new_token_and_resets(self) -> None:
        previous = with_options(start_generation(RecipeViewState(language="myanmar"), _request()), [_recipe("A")])
        started = start_generation(previous, _request())

        self.assertNotEqual(started.generation_id, previous.generation_id)
        self.assertTrue(started.loading)
        self.assertEqual(started.options, ())
        self.assertEqual(started.language, "myanmar")
        self.assertFalse(previous.is_current(started.generation_id))

    def test_image_slot_update_touches_only_its_slot(self) -> None:
        view = with_options(start_generation(RecipeViewState(), _request()), [_recipe("A"), _recipe("B"), _recipe("C")])
        view = with_image_slot(view, 2, ImageSlot(status="ready", file_id="f2"))
        view = with_image_slot(view, 0, ImageSlot(status="failed"))

        self.assertEqual([slot.status for slot in view.images], ["failed", "pending", "ready"])
        self.assertEqual(view.images[2].file_id, "f2")
        self.assertIs(with_image_slot(view, 5, ImageSlot(status="ready")), view)

    def test_ingredient_toggle_requires_selection(self) -> None:
        view = with_options(start_generation(RecipeViewState(), _request()), [_recipe("A")])
        self.assertIs(toggle_ingredient(view, 0), view)

        view = select_option(view, 0)
        view = toggle_ingredient(view, 1)
        self.assertEqual(view.selected_ingredients, frozenset({1}))
        view = toggle_ingredient(view, 1)
        self.assertEqual(view.selected_ingredients, frozenset())

    def test_failed_keeps_request_for_resubmission(self) -> None:
        request = _request()
        view = failed(start_generation(RecipeViewState(), request), "Failed to generate recipe. Please try again.")
        self.assertFalse(view.loading)
        self.assertEqual(view.request, request)
        self.assertEqual(view.error, "Failed to generate recipe. Please try again.")

    def test_survives_storage_round_trip(self) -> None:
        view = select_option(
            with_options(start_generation(RecipeViewState(), _request()), [_recipe("A"), _recipe("B")]),
            1,
        )
        view = toggle_ingredient(with_image_slot(view, 1, ImageSlot("ready", "file-1", 42)), 0)

        restored = RecipeViewState.from_dict(view.to_dict())

        self.assertEqual(restored, view)


class StaleGuardTests(unittest.IsolatedAsyncioTestCase):
    async def test_superseded_generation_is_not_saved(self) -> None:
        state = _FakeState()
        first = start_generation(RecipeViewState(), _request())
        await save_view(state, first)
        second = start_generation(first, _request())
        await save_view(state, second)

        saved = await save_view_if_current(state, with_options(first, [_recipe("Late")]))

        self.assertFalse(saved)
        current = await load_view(state)
        self.assertEqual(current.generation_id, second.generation_id)
        self.assertEqual(current.options, ())

    async def test_current_generation_is_saved(self) -> None:
        state = _FakeState()
        view = start_generation(RecipeViewState(), _request())
        await save_view(state, view)

        self.assertTrue(await save_view_if_current(state, with_options(view, [_recipe("A")])))
        self.assertEqual(len((await load_view(state)).options), 1)


if __name__ == "__main__":
    unittest.main()
