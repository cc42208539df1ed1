from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

MENU_NEW_RECIPE = "🍳 New recipe"
MENU_HELP = "ℹ️ Help"

MENU_ITEMS = (
    (MENU_NEW_RECIPE, "menu:new_recipe"),
    (MENU_HELP, "menu:help"),
)


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=MENU_NEW_RECIPE), KeyboardButton(text=MENU_HELP)]],
        resize_keyboard=True,
        input_field_placeholder="Choose an action",
    )


def main_menu_inline_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=text, callback_data=callback_data)]
            for text, callback_data in MENU_ITEMS
        ]
    )
