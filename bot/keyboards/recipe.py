from __future__ import annotations

from collections.abc import Collection

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from schemas import Dish

# Telegram caps callback data at 64 bytes, so only a prefix of the token is sent.
TOKEN_LENGTH = 8


def short_token(generation_id: str | None) -> str:
    return (generation_id or "")[:TOKEN_LENGTH]


def option_card_keyboard(token: str, index: int, image_failed: bool = False) -> InlineKeyboardMarkup:
    rows = [[InlineKeyboardButton(text="✨ Select this recipe", callback_data=f"O:{token}:{index}")]]
    if image_failed:
        rows.append([InlineKeyboardButton(text="🔁 Retry image", callback_data=f"I:{token}:{index}")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def options_footer_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="← Generate different options", callback_data="N:form")]]
    )


def language_keyboard(token: str, option: int, language: str) -> InlineKeyboardMarkup:
    english = "● English" if language == "english" else "English"
    myanmar = "● မြန်မာ" if language == "myanmar" else "မြန်မာ"
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=english, callback_data=f"L:{token}:{option}:english"),
                InlineKeyboardButton(text=myanmar, callback_data=f"L:{token}:{option}:myanmar"),
            ]
        ]
    )


def image_retry_keyboard(token: str, index: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="🔁 Regenerate image", callback_data=f"I:{token}:{index}")]]
    )


def ingredient_checklist_keyboard(
    dish: Dish,
    selected: Collection[int],
    token: str,
    option: int,
) -> InlineKeyboardMarkup:
    """Checklist of one recipe; every button is bound to that recipe's generation and option."""
    rows = [
        [
            InlineKeyboardButton(
                text=f"{'☑️' if index in selected else '⬜'} {ingredient.name} ({ingredient.qty})"[:64],
                callback_data=f"T:{token}:{option}:{index}",
            )
        ]
        for index, ingredient in enumerate(dish.ingredients)
    ]
    rows.append(
        [
            InlineKeyboardButton(
                text="🔁 Regenerate with selected ingredients",
                callback_data=f"R:{token}:{option}",
            )
        ]
    )
    rows.append(
        [
            InlineKeyboardButton(text="📄 Recipe as file", callback_data=f"X:{token}:{option}"),
            InlineKeyboardButton(text="← Choose a different recipe", callback_data=f"B:{token}:{option}"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)
