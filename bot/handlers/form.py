from __future__ import annotations

from typing import Any

import structlog
from aiogram import F, Router
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message
from pydantic import ValidationError

from bot.formatters import format_ingredient_draft
from bot.handlers.menu import FORM_KEY
from bot.handlers.recipe import generate_and_show
from bot.keyboards.form import (
    MEAL_TYPE_LABELS,
    duration_keyboard,
    ingredients_keyboard,
    meal_type_keyboard,
    people_count_keyboard,
)
from bot.states import RecipeForm
from bot.view_state import load_view
from schemas import DURATION_PRESETS, MAX_PEOPLE, MIN_PEOPLE, MealType, RecipeRequest

logger = structlog.get_logger(__name__)
router = Router()


def _split_ingredients(text: str) -> list[str]:
    normalized = text.replace("\n", ",").replace(";", ",")
    return [item.strip() for item in normalized.split(",") if item.strip()]


def _merge_ingredients(current: list[str], added: list[str]) -> list[str]:
    seen = {item.lower() for item in current}
    merged = list(current)
    for item in added:
        if item.lower() not in seen:
            seen.add(item.lower())
            merged.append(item)
    return merged


async def _get_form(state: FSMContext) -> dict[str, Any]:
    data = await state.get_data()
    return dict(data.get(FORM_KEY) or {"ingredients": []})


async def _set_form(state: FSMContext, form: dict[str, Any]) -> None:
    await state.update_data({FORM_KEY: form})


@router.message(RecipeForm.ingredients, F.text)
async def ingredients_input_handler(message: Message, state: FSMContext) -> None:
    added = _split_ingredients(message.text or "")
    if not added:
        await message.answer("I don't see any ingredients. Send them separated by commas or new lines.")
        return

    form = await _get_form(state)
    form["ingredients"] = _merge_ingredients(form.get("ingredients", []), added)
    await _set_form(state, form)
    await message.answer(
        format_ingredient_draft(form["ingredients"]),
        reply_markup=ingredients_keyboard(has_items=True),
    )


@router.callback_query(RecipeForm.ingredients, F.data == "F:clear")
async def ingredients_clear_handler(callback: CallbackQuery, state: FSMContext) -> None:
    await _set_form(state, {"ingredients": []})
    if callback.message:
        await callback.message.edit_text(
            format_ingredient_draft([]),
            reply_markup=ingredients_keyboard(has_items=False),
        )
    await callback.answer("Cleared")


@router.callback_query(RecipeForm.ingredients, F.data == "F:done")
async def ingredients_done_handler(callback: CallbackQuery, state: FSMContext) -> None:
    form = await _get_form(state)
    if not form.get("ingredients"):
        await callback.answer("Please add at least one ingredient", show_alert=True)
        return

    await state.set_state(RecipeForm.meal_type)
    if callback.message:
        await callback.message.answer("🍽 Meal type (အစားအစာအမျိုးအစား):", reply_markup=meal_type_keyboard())
    await callback.answer()


@router.callback_query(RecipeForm.meal_type, F.data.startswith("M:"))
async def meal_type_handler(callback: CallbackQuery, state: FSMContext) -> None:
    value = (callback.data or "").split(":", 1)[1]
    try:
        meal_type = MealType(value)
    except ValueError:
        await callback.answer("Unknown meal type", show_alert=True)
        return

    form = await _get_form(state)
    form["meal_type"] = meal_type.value
    await _set_form(state, form)
    await state.set_state(RecipeForm.duration)
    if callback.message:
        await callback.message.edit_text(f"🍽 Meal type: {MEAL_TYPE_LABELS[meal_type]}")
        await callback.message.answer("⏱ Cooking time (ချက်ပြုတ်ချိန်):", reply_markup=duration_keyboard())
    await callback.answer()


@router.callback_query(RecipeForm.duration, F.data.startswith("D:"))
async def duration_handler(callback: CallbackQuery, state: FSMContext) -> None:
    raw_index = (callback.data or "").split(":", 1)[1]
    if not raw_index.isdigit() or int(raw_index) >= len(DURATION_PRESETS):
        await callback.answer("Unknown cooking time", show_alert=True)
        return

    duration = DURATION_PRESETS[int(raw_index)]
    form = await _get_form(state)
    form["duration"] = duration
    await _set_form(state, form)
    await state.set_state(RecipeForm.people_count)
    if callback.message:
        await callback.message.edit_text(f"⏱ Cooking time: {duration}")
        await callback.message.answer(
            "👥 Number of people (လူဦးရေ):",
            reply_markup=people_count_keyboard(),
        )
    await callback.answer()


async def _submit(target: Message, state: FSMContext, people_count: int) -> None:
    form = await _get_form(state)
    try:
        request = RecipeRequest(
            ingredients=form.get("ingredients", []),
            meal_type=form.get("meal_type"),
            duration=form.get("duration", ""),
            people_count=people_count,
        )
    except ValidationError as exc:
        logger.warning("recipe_form_invalid", error=str(exc))
        await state.set_state(RecipeForm.ingredients)
        await target.answer(
            "Some form fields are missing. Please start again with your ingredients.\n\n"
            + format_ingredient_draft(form.get("ingredients", [])),
            reply_markup=ingredients_keyboard(has_items=bool(form.get("ingredients"))),
        )
        return

    await generate_and_show(target, state, request)


@router.callback_query(RecipeForm.people_count, F.data.startswith("P:"))
async def people_count_handler(callback: CallbackQuery, state: FSMContext) -> None:
    raw_count = (callback.data or "").split(":", 1)[1]
    if not raw_count.isdigit() or not MIN_PEOPLE <= int(raw_count) <= MAX_PEOPLE:
        await callback.answer("Choose between 1 and 10 people", show_alert=True)
        return

    await callback.answer()
    if callback.message:
        await callback.message.edit_text(f"👥 People: {raw_count}")
        await _submit(callback.message, state, int(raw_count))


@router.message(RecipeForm.people_count, F.text)
async def people_count_text_handler(message: Message, state: FSMContext) -> None:
    text = (message.text or "").strip()
    if not text.isdigit() or not MIN_PEOPLE <= int(text) <= MAX_PEOPLE:
        await message.answer(f"Send a number from {MIN_PEOPLE} to {MAX_PEOPLE}.", reply_markup=people_count_keyboard())
        return
    await _submit(message, state, int(text))


@router.callback_query(F.data == "G:retry")
async def retry_generation_handler(callback: CallbackQuery, state: FSMContext) -> None:
    view = await load_view(state)
    if view.request is None or view.loading:
        await callback.answer("Nothing to retry", show_alert=True)
        return

    await callback.answer()
    if callback.message:
        await generate_and_show(callback.message, state, view.request)
