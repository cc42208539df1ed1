from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal

import structlog
from pydantic import ValidationError

from schemas import RecipeResponse

logger = structlog.get_logger(__name__)

_JSON_FENCE_RE = re.compile(r"```json[ \t]*\n?(.*?)```", flags=re.DOTALL | re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)```", flags=re.DOTALL)
REQUIRED_DISH_FIELDS = ("name", "ingredients", "steps", "nutrition", "imagePrompt")


class RecipeParseError(ValueError):
    pass


class ExtractionError(RecipeParseError):
    pass


class NormalizationError(RecipeParseError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(slots=True, frozen=True)
class ParsedRecipe:
    recipe: RecipeResponse


@dataclass(slots=True, frozen=True)
class ParseFailure:
    stage: Literal["extract", "normalize"]
    reason: str


ParseResult = ParsedRecipe | ParseFailure


def _balanced_object(text: str, start: int) -> str | None:
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def extract_json(raw_text: str, *, balanced: bool = False) -> str:
    """Isolate the JSON object in a model reply.

    Tries, in order: a ```json fence, any ``` fence, then the span from the
    first ``{`` to the last ``}``. With ``balanced`` the last step instead
    stops where the first object closes, ignoring braces inside strings.
    """
    match = _JSON_FENCE_RE.search(raw_text)
    if match is None:
        match = _ANY_FENCE_RE.search(raw_text)
    if match is not None:
        return match.group(1).strip()

    start = raw_text.find("{")
    if start == -1:
        raise ExtractionError("LLM returned response without JSON object")

    if balanced:
        candidate = _balanced_object(raw_text, start)
        if candidate is None:
            raise ExtractionError("JSON object in LLM response is not closed")
        return candidate.strip()

    end = raw_text.rfind("}")
    if end < start:
        raise ExtractionError("JSON object in LLM response is not closed")
    return raw_text[start : end + 1].strip()


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(problems)


def _reject_constant(name: str) -> Any:
    raise NormalizationError(f"malformed JSON: non-finite number {name}")


def normalize(json_text: str) -> RecipeResponse:
    try:
        payload: Any = json.loads(json_text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise NormalizationError(f"malformed JSON: {exc.msg} at position {exc.pos}") from exc
    except RecursionError as exc:
        raise NormalizationError("malformed JSON: nesting is too deep") from exc

    if not isinstance(payload, dict):
        raise NormalizationError("top-level JSON value is not an object")

    meal_plan = payload.get("meal_plan")
    if not isinstance(meal_plan, dict) or not isinstance(meal_plan.get("main_dish"), dict):
        raise NormalizationError("meal_plan.main_dish object is missing")

    dish = meal_plan["main_dish"]
    missing = [field for field in REQUIRED_DISH_FIELDS if field not in dish]
    if missing:
        raise NormalizationError(f"main_dish is missing required fields: {', '.join(missing)}")

    if "side_dish" in meal_plan:
        logger.debug("side_dish_dropped")

    try:
        return RecipeResponse.model_validate(meal_plan)
    except ValidationError as exc:
        raise NormalizationError(_describe_validation_error(exc)) from exc
    except (ValueError, TypeError, OverflowError) as exc:
        raise NormalizationError(f"invalid value: {exc}") from exc


def parse_recipe_reply(raw_text: str, *, balanced: bool = False) -> ParseResult:
    try:
        json_text = extract_json(raw_text, balanced=balanced)
    except ExtractionError as exc:
        return ParseFailure(stage="extract", reason=str(exc))

    try:
        return ParsedRecipe(recipe=normalize(json_text))
    except NormalizationError as exc:
        return ParseFailure(stage="normalize", reason=exc.reason)
