from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from bot.formatters import format_ingredient_draft
from bot.handlers.start import HELP_TEXT
from bot.keyboards.form import ingredients_keyboard
from bot.keyboards.main_menu import MENU_HELP, MENU_NEW_RECIPE
from bot.states import RecipeForm
from bot.view_state import RecipeViewState, load_view, save_view

router = Router()

FORM_KEY = "form"


async def open_form(state: FSMContext, target: Message) -> None:
    # A fresh view drops the generation token, so late results of an earlier
    # request are ignored from here on.
    view = await load_view(state)
    await save_view(state, RecipeViewState(language=view.language))
    await state.update_data({FORM_KEY: {"ingredients": []}})
    await state.set_state(RecipeForm.ingredients)
    await target.answer(
        "🍳 Recipe generator (ဟင်းလျာဖန်တီးရန်)\n\n" + format_ingredient_draft([]),
        reply_markup=ingredients_keyboard(has_items=False),
    )


@router.message(F.text == MENU_NEW_RECIPE)
@router.message(Command("new"))
async def new_recipe_handler(message: Message, state: FSMContext) -> None:
    await open_form(state, message)


@router.message(F.text == MENU_HELP)
async def help_menu_handler(message: Message) -> None:
    await message.answer(HELP_TEXT)


@router.callback_query(F.data.in_({"menu:new_recipe", "N:form"}))
async def new_recipe_callback_handler(callback: CallbackQuery, state: FSMContext) -> None:
    if callback.message:
        await open_form(state, callback.message)
    await callback.answer()


@router.callback_query(F.data == "menu:help")
async def help_callback_handler(callback: CallbackQuery) -> None:
    if callback.message:
        await callback.message.answer(HELP_TEXT)
    await callback.answer()
