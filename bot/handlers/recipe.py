from __future__ import annotations

import re
from contextlib import aclosing

import structlog
from aiogram import F, Router
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.types import BufferedInputFile, CallbackQuery, Message

from bot.formatters import (
    TELEGRAM_CAPTION_LIMIT,
    fit_text,
    format_dish,
    format_option_card,
    format_recipe_export,
    format_request_summary,
    format_steps,
    split_text,
)
from bot.keyboards.form import retry_generation_keyboard
from bot.keyboards.recipe import (
    image_retry_keyboard,
    ingredient_checklist_keyboard,
    language_keyboard,
    option_card_keyboard,
    options_footer_keyboard,
    short_token,
)
from bot.states import RecipeForm
from bot.view_state import (
    ImageSlot,
    RecipeViewState,
    clear_selection,
    failed,
    load_view,
    save_view,
    save_view_if_current,
    select_option,
    start_generation,
    toggle_ingredient,
    with_card,
    with_image_slot,
    with_language,
    with_options,
)
from core.config import settings
from core.services.image_service import ImageClient, ImageGenerationError, ImageSlotUpdate
from core.services.recipe_service import GENERATION_FAILED_MESSAGE, RecipeGenerationError, RecipeService
from schemas import MealType, RecipeRequest

logger = structlog.get_logger(__name__)
router = Router()

DEFAULT_REGENERATION_DURATION = "45 minutes"
DEFAULT_REGENERATION_PEOPLE = 4
# Prefix, generation token, option index and an optional argument, e.g. "T:1a2b3c4d:0:3".
_INDEXED_CALLBACK_RE = re.compile(r"[A-Z]:([0-9a-f]*):(\d+)(?::(\w+))?")


async def generate_and_show(message: Message, state: FSMContext, request: RecipeRequest) -> None:
    view = start_generation(await load_view(state), request)
    await save_view(state, view)
    await state.set_state(RecipeForm.generating)
    await message.answer(
        f"{format_request_summary(request)}\n\n"
        "🍲 Cooking up your recipe...\n"
        "သင့်မြန်မာဟင်းလျာကို ပြင်ဆင်နေပါသည်..."
    )

    try:
        options = await RecipeService().generate_options(request, settings.recipe_options_count)
    except RecipeGenerationError as exc:
        logger.warning("recipe_generation_failed", error=str(exc.__cause__ or exc))
        await _show_failure(message, state, view, exc.user_message)
        return
    except Exception as exc:
        logger.exception("recipe_generation_failed_unexpected", error=str(exc))
        await _show_failure(message, state, view, GENERATION_FAILED_MESSAGE)
        return

    view = with_options(view, options)
    if not await save_view_if_current(state, view):
        logger.info("stale_generation_ignored", generation_id=view.generation_id)
        return

    await state.set_state(RecipeForm.browsing)
    await show_options(message, state, view)


async def _show_failure(message: Message, state: FSMContext, view: RecipeViewState, text: str) -> None:
    if not await save_view_if_current(state, failed(view, text)):
        logger.info("stale_generation_ignored", generation_id=view.generation_id)
        return
    # The draft is kept, so the form can be resubmitted as is or extended.
    await state.set_state(RecipeForm.ingredients)
    await message.answer(f"⚠️ {text}", reply_markup=retry_generation_keyboard())


async def show_options(
    message: Message,
    state: FSMContext,
    view: RecipeViewState,
    stream_pending: bool = True,
) -> None:
    token = short_token(view.generation_id)
    await message.answer("Choose your recipe\nသင့်စိတ်ကြိုက် ဟင်းလျာကို ရွေးချယ်ပါ")

    pending: list[int] = []
    card_ids: dict[int, int] = {}
    for index, option in enumerate(view.options):
        slot = view.images[index]
        card = await message.answer(
            format_option_card(option.main_dish, index),
            reply_markup=option_card_keyboard(token, index, image_failed=slot.status == "failed"),
        )
        card_ids[index] = card.message_id
        if slot.file_id:
            await message.answer_photo(photo=slot.file_id, caption=_caption(view, index))
        elif slot.status == "pending":
            pending.append(index)

    await message.answer("Not what you wanted?", reply_markup=options_footer_keyboard())

    # Image slots may have changed while the cards were sent; only card ids are written here.
    current = await load_view(state)
    if not current.is_current(view.generation_id):
        return
    for index, message_id in card_ids.items():
        current = with_card(current, index, message_id)
    await save_view(state, current)
    if stream_pending and pending:
        await stream_images(message, state, view, pending)


def _caption(view: RecipeViewState, index: int) -> str:
    return fit_text(f"{index + 1}. {view.options[index].main_dish.name}", TELEGRAM_CAPTION_LIMIT)


async def stream_images(
    message: Message,
    state: FSMContext,
    view: RecipeViewState,
    indexes: list[int],
) -> None:
    """Request the images of the given options concurrently and show each one as it arrives.

    This coroutine is the only writer of these slots while it runs.
    """
    prompts = [view.options[index].main_dish.image_prompt for index in indexes]
    async with aclosing(ImageClient().generate_images(prompts)) as updates:
        async for update in updates:
            slot_update = ImageSlotUpdate(index=indexes[update.index], handle=update.handle, error=update.error)
            if not await apply_image_update(message, state, view.generation_id, slot_update):
                break


async def apply_image_update(
    message: Message,
    state: FSMContext,
    generation_id: str | None,
    update: ImageSlotUpdate,
) -> bool:
    """Display one finished image request and record it in its slot.

    Returns False when the generation is no longer current; the result is
    then dropped.
    """
    current = await load_view(state)
    if not current.is_current(generation_id) or not 0 <= update.index < len(current.options):
        logger.info("stale_image_ignored", generation_id=generation_id, option=update.index)
        if update.handle is not None:
            update.handle.release()
        return False

    token = short_token(generation_id)
    error = update.error
    slot = ImageSlot(status="failed")
    if update.handle is not None:
        try:
            sent = await message.answer_photo(
                photo=update.handle.as_input_file(),
                caption=_caption(current, update.index),
                reply_to_message_id=current.images[update.index].card_message_id,
            )
        except TelegramAPIError as exc:
            error = f"photo not sent: {exc}"
        else:
            file_id = sent.photo[-1].file_id if sent.photo else None
            slot = ImageSlot(status="ready", file_id=file_id)
        finally:
            update.handle.release()

    if slot.status == "failed":
        logger.warning("option_image_failed", option=update.index, error=error)
        await _offer_image_retry(message, current, update.index, token)

    current = await load_view(state)
    if not current.is_current(generation_id):
        return False
    card_message_id = current.images[update.index].card_message_id
    await save_view(
        state,
        with_image_slot(current, update.index, ImageSlot(slot.status, slot.file_id, card_message_id)),
    )
    return True


async def _offer_image_retry(message: Message, view: RecipeViewState, index: int, token: str) -> None:
    if view.selected_index == index:
        try:
            await message.answer(
                "Failed to generate image. Please try again.",
                reply_markup=image_retry_keyboard(token, index),
            )
        except TelegramAPIError as exc:
            logger.warning("image_retry_button_failed", option=index, error=str(exc))
        return

    card_message_id = view.images[index].card_message_id
    if card_message_id is None or message.bot is None:
        return
    try:
        await message.bot.edit_message_reply_markup(
            chat_id=message.chat.id,
            message_id=card_message_id,
            reply_markup=option_card_keyboard(token, index, image_failed=True),
        )
    except TelegramAPIError as exc:
        logger.warning("image_retry_button_failed", option=index, error=str(exc))


def _parse_indexed_callback(data: str | None) -> tuple[str, int, str | None] | None:
    match = _INDEXED_CALLBACK_RE.fullmatch(data or "")
    if match is None:
        return None
    return match.group(1), int(match.group(2)), match.group(3)


async def _current_for_token(
    callback: CallbackQuery,
    state: FSMContext,
) -> tuple[RecipeViewState, int, str | None] | None:
    parsed = _parse_indexed_callback(callback.data)
    view = await load_view(state)
    if parsed is None or view.generation_id is None or short_token(view.generation_id) != parsed[0]:
        await callback.answer("These options are outdated. Generate a new recipe.", show_alert=True)
        return None
    _, index, extra = parsed
    if not 0 <= index < len(view.options):
        await callback.answer("Unknown option", show_alert=True)
        return None
    return view, index, extra


async def _current_selection(
    callback: CallbackQuery,
    state: FSMContext,
) -> tuple[RecipeViewState, str | None] | None:
    """Resolve a recipe-detail button; it must belong to the recipe that is open now."""
    resolved = await _current_for_token(callback, state)
    if resolved is None:
        return None
    view, index, extra = resolved
    if view.selected_index != index:
        await callback.answer("This recipe is no longer open. Choose it again from the options.", show_alert=True)
        return None
    return view, extra


async def _send_steps(message: Message, view: RecipeViewState) -> None:
    recipe = view.selected
    if recipe is None or view.selected_index is None:
        return
    chunks = split_text(format_steps(recipe.main_dish, view.language))
    keyboard = language_keyboard(short_token(view.generation_id), view.selected_index, view.language)
    for chunk in chunks[:-1]:
        await message.answer(chunk)
    await message.answer(chunks[-1], reply_markup=keyboard)


@router.callback_query(F.data.startswith("O:"))
async def select_option_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_for_token(callback, state)
    if resolved is None:
        return
    view, index, _ = resolved
    view = select_option(view, index)
    await save_view(state, view)
    await state.set_state(RecipeForm.browsing)
    await callback.answer()
    if callback.message:
        await show_recipe(callback.message, state, view)


async def show_recipe(message: Message, state: FSMContext, view: RecipeViewState) -> None:
    recipe = view.selected
    if recipe is None or view.selected_index is None:
        return
    dish = recipe.main_dish
    index = view.selected_index
    slot = view.images[index]

    await message.answer("Your recipe")
    if slot.file_id:
        await message.answer_photo(photo=slot.file_id, caption=_caption(view, index))

    for chunk in split_text(format_dish(dish)):
        await message.answer(chunk)
    await _send_steps(message, view)
    await message.answer(
        "Select ingredients you have\nသင့်တွင်ရှိသော ပါဝင်ပစ္စည်းများကို ရွေးချယ်ပါ",
        reply_markup=ingredient_checklist_keyboard(
            dish, view.selected_ingredients, short_token(view.generation_id), index
        ),
    )

    if slot.status == "failed":
        await _regenerate_image(message, state, view, index)


async def _regenerate_image(message: Message, state: FSMContext, view: RecipeViewState, index: int) -> None:
    current = await load_view(state)
    card_message_id = current.images[index].card_message_id
    await save_view(state, with_image_slot(current, index, ImageSlot("pending", None, card_message_id)))
    try:
        handle = await ImageClient().generate_image(view.options[index].main_dish.image_prompt)
    except ImageGenerationError as exc:
        update = ImageSlotUpdate(index=index, error=str(exc))
    else:
        update = ImageSlotUpdate(index=index, handle=handle)
    await apply_image_update(message, state, view.generation_id, update)


@router.callback_query(F.data.startswith("I:"))
async def retry_image_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_for_token(callback, state)
    if resolved is None:
        return
    view, index, _ = resolved
    if view.images[index].status == "pending":
        await callback.answer("The image is still being generated")
        return

    await callback.answer("Generating image...")
    if callback.message:
        await _regenerate_image(callback.message, state, view, index)


@router.callback_query(F.data.startswith("L:"))
async def language_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_selection(callback, state)
    if resolved is None:
        return
    view, language = resolved
    recipe = view.selected
    if language not in ("english", "myanmar") or recipe is None or view.selected_index is None:
        await callback.answer()
        return

    view = with_language(view, language)
    await save_view(state, view)
    await callback.answer()
    if callback.message is None:
        return

    chunks = split_text(format_steps(recipe.main_dish, language))
    if len(chunks) > 1:
        # Steps that need several messages are sent again instead of edited in place.
        await _send_steps(callback.message, view)
        return
    try:
        await callback.message.edit_text(
            chunks[0],
            reply_markup=language_keyboard(short_token(view.generation_id), view.selected_index, language),
        )
    except TelegramBadRequest as exc:
        logger.debug("language_switch_not_modified", error=str(exc))


@router.callback_query(F.data.startswith("T:"))
async def toggle_ingredient_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_selection(callback, state)
    if resolved is None:
        return
    view, raw_index = resolved
    recipe = view.selected
    if recipe is None or view.selected_index is None or not (raw_index or "").isdigit():
        await callback.answer()
        return

    view = toggle_ingredient(view, int(raw_index))
    await save_view(state, view)
    if callback.message:
        await callback.message.edit_reply_markup(
            reply_markup=ingredient_checklist_keyboard(
                recipe.main_dish,
                view.selected_ingredients,
                short_token(view.generation_id),
                view.selected_index,
            ),
        )
    await callback.answer()


def build_regeneration_request(view: RecipeViewState) -> RecipeRequest | None:
    recipe = view.selected
    if recipe is None or not view.selected_ingredients:
        return None
    ingredients = [
        ingredient.base_name
        for index, ingredient in enumerate(recipe.main_dish.ingredients)
        if index in view.selected_ingredients
    ]
    previous = view.request
    return RecipeRequest(
        ingredients=ingredients,
        meal_type=previous.meal_type if previous else MealType.dinner,
        duration=previous.duration if previous else DEFAULT_REGENERATION_DURATION,
        people_count=previous.people_count if previous else DEFAULT_REGENERATION_PEOPLE,
        is_regeneration=True,
    )


@router.callback_query(F.data.startswith("R:"))
async def regenerate_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_selection(callback, state)
    if resolved is None:
        return
    request = build_regeneration_request(resolved[0])
    if request is None:
        await callback.answer("Please select at least one ingredient you have", show_alert=True)
        return

    await callback.answer()
    if callback.message:
        await generate_and_show(callback.message, state, request)


@router.callback_query(F.data.startswith("X:"))
async def export_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_selection(callback, state)
    if resolved is None:
        return
    recipe = resolved[0].selected
    if recipe is None:
        await callback.answer("Choose a recipe first", show_alert=True)
        return

    dish = recipe.main_dish
    slug = re.sub(r"[^a-z0-9]+", "-", dish.base_name.lower()).strip("-") or "recipe"
    await callback.answer()
    if callback.message:
        await callback.message.answer_document(
            document=BufferedInputFile(format_recipe_export(dish).encode("utf-8"), filename=f"{slug}.txt"),
            caption=fit_text(dish.name, TELEGRAM_CAPTION_LIMIT),
        )


@router.callback_query(F.data.startswith("B:"))
async def back_to_options_handler(callback: CallbackQuery, state: FSMContext) -> None:
    resolved = await _current_selection(callback, state)
    if resolved is None:
        return

    view = clear_selection(resolved[0])
    await save_view(state, view)
    await callback.answer()
    if callback.message:
        # Pending images are still owned by the stream that started them.
        await show_options(callback.message, state, view, stream_pending=False)
