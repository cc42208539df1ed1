"""Per-chat view state of the recipe flow.

The state is an immutable snapshot. Handlers derive a new snapshot with the
reducers below and store it in the FSM context; nothing mutates a snapshot in
place. A generation token ties every async result to the request that
started it, so late results of a superseded request can be recognised and
dropped.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from aiogram.fsm.context import FSMContext

from schemas import RecipeRequest, RecipeResponse

VIEW_STATE_KEY = "view"

Language = Literal["english", "myanmar"]
ImageStatus = Literal["pending", "ready", "failed"]


@dataclass(slots=True, frozen=True)
class ImageSlot:
    status: ImageStatus = "pending"
    file_id: str | None = None
    card_message_id: int | None = None


@dataclass(slots=True, frozen=True)
class RecipeViewState:
    generation_id: str | None = None
    loading: bool = False
    request: RecipeRequest | None = None
    options: tuple[RecipeResponse, ...] = ()
    images: tuple[ImageSlot, ...] = ()
    selected_index: int | None = None
    selected_ingredients: frozenset[int] = field(default_factory=frozenset)
    language: Language = "english"
    error: str | None = None

    @property
    def selected(self) -> RecipeResponse | None:
        if self.selected_index is None or not 0 <= self.selected_index < len(self.options):
            return None
        return self.options[self.selected_index]

    def is_current(self, generation_id: str | None) -> bool:
        return generation_id is not None and generation_id == self.generation_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "generation_id": self.generation_id,
            "loading": self.loading,
            "request": self.request.model_dump(mode="json") if self.request else None,
            "options": [option.model_dump(mode="json", by_alias=True) for option in self.options],
            "images": [
                {"status": slot.status, "file_id": slot.file_id, "card_message_id": slot.card_message_id}
                for slot in self.images
            ],
            "selected_index": self.selected_index,
            "selected_ingredients": sorted(self.selected_ingredients),
            "language": self.language,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RecipeViewState":
        if not data:
            return cls()
        request = data.get("request")
        return cls(
            generation_id=data.get("generation_id"),
            loading=bool(data.get("loading", False)),
            request=RecipeRequest.model_validate(request) if request else None,
            options=tuple(RecipeResponse.model_validate(item) for item in data.get("options", [])),
            images=tuple(ImageSlot(**slot) for slot in data.get("images", [])),
            selected_index=data.get("selected_index"),
            selected_ingredients=frozenset(data.get("selected_ingredients", [])),
            language=data.get("language", "english"),
            error=data.get("error"),
        )


def start_generation(state: RecipeViewState, request: RecipeRequest) -> RecipeViewState:
    return RecipeViewState(
        generation_id=uuid.uuid4().hex,
        loading=True,
        request=request,
        language=state.language,
    )


def with_options(state: RecipeViewState, options: list[RecipeResponse]) -> RecipeViewState:
    return replace(
        state,
        loading=False,
        options=tuple(options),
        images=tuple(ImageSlot() for _ in options),
        selected_index=None,
        selected_ingredients=frozenset(),
        error=None,
    )


def failed(state: RecipeViewState, message: str) -> RecipeViewState:
    return replace(state, loading=False, error=message)


def with_image_slot(state: RecipeViewState, index: int, slot: ImageSlot) -> RecipeViewState:
    """Set exactly one image slot, leaving every other slot untouched."""
    if not 0 <= index < len(state.images):
        return state
    images = state.images[:index] + (slot,) + state.images[index + 1 :]
    return replace(state, images=images)


def with_card(state: RecipeViewState, index: int, message_id: int) -> RecipeViewState:
    if not 0 <= index < len(state.images):
        return state
    return with_image_slot(state, index, replace(state.images[index], card_message_id=message_id))


def select_option(state: RecipeViewState, index: int) -> RecipeViewState:
    if not 0 <= index < len(state.options):
        return state
    return replace(state, selected_index=index, selected_ingredients=frozenset(), error=None)


def clear_selection(state: RecipeViewState) -> RecipeViewState:
    return replace(state, selected_index=None, selected_ingredients=frozenset())


def toggle_ingredient(state: RecipeViewState, index: int) -> RecipeViewState:
    recipe = state.selected
    if recipe is None or not 0 <= index < len(recipe.main_dish.ingredients):
        return state
    return replace(state, selected_ingredients=state.selected_ingredients ^ {index})


def with_language(state: RecipeViewState, language: Language) -> RecipeViewState:
    return replace(state, language=language)


async def load_view(fsm: FSMContext) -> RecipeViewState:
    data = await fsm.get_data()
    return RecipeViewState.from_dict(data.get(VIEW_STATE_KEY))


async def save_view(fsm: FSMContext, view: RecipeViewState) -> None:
    await fsm.update_data({VIEW_STATE_KEY: view.to_dict()})


async def save_view_if_current(fsm: FSMContext, view: RecipeViewState) -> bool:
    """Store ``view`` only if its generation is still the chat's current one."""
    current = await load_view(fsm)
    if not current.is_current(view.generation_id):
        return False
    await save_view(fsm, view)
    return True
