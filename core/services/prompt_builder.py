from __future__ import annotations

from core.services.prompt_templates import (
    DISH_JSON_TEMPLATE,
    RECIPE_PROMPT_TEMPLATE,
    REGENERATION_NOTE,
)
from schemas import RecipeRequest


def build_prompt(request: RecipeRequest) -> str:
    """Render the user prompt for one recipe request.

    The output depends only on the request, so equal requests always give
    equal prompts. The JSON template of the dish is always the last section.
    """
    return RECIPE_PROMPT_TEMPLATE.format(
        ingredients=", ".join(request.ingredients),
        meal_type=request.meal_type.value,
        duration=request.duration,
        people_count=request.people_count,
        regeneration_note=REGENERATION_NOTE if request.is_regeneration else "",
        schema=DISH_JSON_TEMPLATE,
    ).strip()
