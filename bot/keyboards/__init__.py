from bot.keyboards.form import (
    MEAL_TYPE_LABELS,
    duration_keyboard,
    ingredients_keyboard,
    meal_type_keyboard,
    people_count_keyboard,
    retry_generation_keyboard,
)
from bot.keyboards.main_menu import (
    MENU_HELP,
    MENU_NEW_RECIPE,
    main_menu_inline_keyboard,
    main_menu_keyboard,
)
from bot.keyboards.recipe import (
    image_retry_keyboard,
    ingredient_checklist_keyboard,
    language_keyboard,
    option_card_keyboard,
    options_footer_keyboard,
    short_token,
)

__all__ = [
    "MEAL_TYPE_LABELS",
    "MENU_HELP",
    "MENU_NEW_RECIPE",
    "duration_keyboard",
    "image_retry_keyboard",
    "ingredient_checklist_keyboard",
    "ingredients_keyboard",
    "language_keyboard",
    "main_menu_inline_keyboard",
    "main_menu_keyboard",
    "meal_type_keyboard",
    "option_card_keyboard",
    "options_footer_keyboard",
    "people_count_keyboard",
    "retry_generation_keyboard",
    "short_token",
]
