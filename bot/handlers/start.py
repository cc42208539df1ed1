from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from bot.keyboards.main_menu import main_menu_inline_keyboard, main_menu_keyboard
from bot.states import UserMode

router = Router()

HELP_TEXT = (
    "Commands:\n"
    "/start - open the main menu\n"
    "/new - create a new recipe\n"
    "/cancel - drop the current recipe and start over\n"
    "/help - this help\n\n"
    "Send the ingredients you have, pick a meal type, cooking time and number of people, "
    "and I will suggest Myanmar dishes in English and Myanmar."
)


@router.message(CommandStart())
async def start_handler(message: Message, state: FSMContext) -> None:
    await state.clear()
    await state.set_state(UserMode.main_menu)
    await message.answer(
        "Hi! I am the Myanmar recipe generator.\n"
        "မြန်မာဟင်းလျာ ဖန်တီးရေး\n\n"
        "Generate authentic Myanmar cuisine recipes based on your ingredients.",
        reply_markup=main_menu_keyboard(),
    )
    await message.answer("You can also use the inline menu:", reply_markup=main_menu_inline_keyboard())


@router.message(Command("help"))
async def help_handler(message: Message) -> None:
    await message.answer(HELP_TEXT)


@router.message(Command("cancel"))
async def cancel_handler(message: Message, state: FSMContext) -> None:
    await state.clear()
    await state.set_state(UserMode.main_menu)
    await message.answer("Cancelled. Press 🍳 New recipe to start again.", reply_markup=main_menu_keyboard())
