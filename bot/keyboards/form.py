from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from schemas import DURATION_PRESETS, MAX_PEOPLE, MIN_PEOPLE, MealType

MEAL_TYPE_LABELS = {
    MealType.breakfast: "Breakfast (မနက်စာ)",
    MealType.lunch: "Lunch (နေ့လည်စာ)",
    MealType.dinner: "Dinner (ညစာ)",
    MealType.snack: "Snack (အစားအစာ)",
}
PEOPLE_PER_ROW = 5


def ingredients_keyboard(has_items: bool) -> InlineKeyboardMarkup:
    rows = []
    if has_items:
        rows.append(
            [
                InlineKeyboardButton(text="✅ Done", callback_data="F:done"),
                InlineKeyboardButton(text="🧹 Clear", callback_data="F:clear"),
            ]
        )
    return InlineKeyboardMarkup(inline_keyboard=rows)


def meal_type_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=label, callback_data=f"M:{meal_type.value}")]
            for meal_type, label in MEAL_TYPE_LABELS.items()
        ]
    )


def duration_keyboard() -> InlineKeyboardMarkup:
    buttons = [
        InlineKeyboardButton(text=f"⏱ {duration}", callback_data=f"D:{index}")
        for index, duration in enumerate(DURATION_PRESETS)
    ]
    return InlineKeyboardMarkup(inline_keyboard=[buttons[i : i + 2] for i in range(0, len(buttons), 2)])


def people_count_keyboard() -> InlineKeyboardMarkup:
    buttons = [
        InlineKeyboardButton(text=str(count), callback_data=f"P:{count}")
        for count in range(MIN_PEOPLE, MAX_PEOPLE + 1)
    ]
    return InlineKeyboardMarkup(
        inline_keyboard=[buttons[i : i + PEOPLE_PER_ROW] for i in range(0, len(buttons), PEOPLE_PER_ROW)]
    )


def retry_generation_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🔁 Try again", callback_data="G:retry")],
            [InlineKeyboardButton(text="✏️ Change ingredients", callback_data="N:form")],
        ]
    )
