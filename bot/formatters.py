from __future__ import annotations

from collections.abc import Sequence

from schemas import Dish, RecipeRequest

TELEGRAM_MESSAGE_LIMIT = 4096
TELEGRAM_CAPTION_LIMIT = 1024
KEY_INGREDIENTS_SHOWN = 3

LANGUAGE_TITLES = {
    "english": "Cooking steps",
    "myanmar": "ချက်ပြုတ်နည်း အဆင့်များ",
}


def split_text(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """Split text into chunks that fit one Telegram message, preferring line breaks."""
    chunks: list[str] = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut].rstrip())
        remaining = remaining[cut:].lstrip("\n")
    if remaining or not chunks:
        chunks.append(remaining)
    return chunks


def fit_text(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def format_ingredient_draft(ingredients: Sequence[str]) -> str:
    if not ingredients:
        return "No ingredients yet. Send them as text, separated by commas or new lines."
    items = "\n".join(f"• {item}" for item in ingredients)
    return (
        "Ingredients (ပါဝင်ပစ္စည်းများ):\n"
        f"{items}\n\n"
        "Send more, or press ✅ Done."
    )


def format_request_summary(request: RecipeRequest) -> str:
    kind = "Regenerating" if request.is_regeneration else "Generating"
    return (
        f"{kind} a {request.meal_type.value} recipe with {', '.join(request.ingredients)}\n"
        f"⏱ {request.duration} · 👥 {request.people_count}"
    )


def format_option_card(dish: Dish, index: int) -> str:
    shown = dish.ingredients[:KEY_INGREDIENTS_SHOWN]
    key_ingredients = "\n".join(f"• {item.name}" for item in shown)
    hidden = len(dish.ingredients) - len(shown)
    if hidden > 0:
        key_ingredients += f"\n+ {hidden} more ingredients"
    subtitle = f"\n{dish.secondary_name}" if dish.secondary_name else ""
    return fit_text(
        f"{index + 1}. 🍽 {dish.name}{subtitle}\n"
        f"🔥 {dish.nutrition.calories} calories\n\n"
        "🥘 Key ingredients:\n"
        f"{key_ingredients}\n\n"
        "📊 Nutrition highlights:\n"
        f"Protein: {dish.nutrition.protein} · Carbs: {dish.nutrition.carbs}"
    )


def format_nutrition(dish: Dish) -> str:
    nutrition = dish.nutrition
    return (
        "📊 Nutrition information:\n"
        f"Calories: {nutrition.calories}\n"
        f"Protein: {nutrition.protein}\n"
        f"Carbs: {nutrition.carbs}\n"
        f"Fat: {nutrition.fat}\n"
        f"Fiber: {nutrition.fiber}\n"
        f"Vitamins: {nutrition.vitamins}"
    )


def format_dish(dish: Dish) -> str:
    ingredients = "\n".join(f"• {item.name} ({item.qty})" for item in dish.ingredients)
    return (
        f"🍽 {dish.name}\n"
        f"Main dish · {dish.nutrition.calories} calories\n\n"
        "🥘 Ingredients:\n"
        f"{ingredients}\n\n"
        f"{format_nutrition(dish)}"
    )


def format_steps(dish: Dish, language: str) -> str:
    steps = "\n".join(
        f"{number}. {step.secondary_text if language == 'myanmar' else step.primary_text}"
        for number, step in enumerate(dish.steps, start=1)
    )
    title = LANGUAGE_TITLES.get(language, LANGUAGE_TITLES["english"])
    return f"👩‍🍳 {title}:\n{steps}"


def format_recipe_export(dish: Dish) -> str:
    lines = [dish.name, "=" * len(dish.name), "", "Ingredients:"]
    lines += [f"- {item.name}: {item.qty}" for item in dish.ingredients]
    lines += ["", "Steps:"]
    for number, step in enumerate(dish.steps, start=1):
        lines.append(f"{number}. {step.primary_text}")
        lines.append(f"   {step.secondary_text}")
    lines += ["", format_nutrition(dish).replace("📊 ", ""), ""]
    return "\n".join(lines)
