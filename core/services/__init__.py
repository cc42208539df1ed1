from core.services.gigachat_service import GigaChatClient, GigaChatError, SamplingConfig, TextGenerator
from core.services.image_service import ImageClient, ImageGenerationError, ImageHandle, ImageSlotUpdate
from core.services.prompt_builder import build_prompt
from core.services.recipe_parser import (
    ExtractionError,
    NormalizationError,
    ParsedRecipe,
    ParseFailure,
    RecipeParseError,
    extract_json,
    normalize,
    parse_recipe_reply,
)
from core.services.recipe_service import SAMPLING_CONFIG, RecipeGenerationError, RecipeService

__all__ = [
    "ExtractionError",
    "GigaChatClient",
    "GigaChatError",
    "ImageClient",
    "ImageGenerationError",
    "ImageHandle",
    "ImageSlotUpdate",
    "NormalizationError",
    "ParseFailure",
    "ParsedRecipe",
    "RecipeGenerationError",
    "RecipeParseError",
    "RecipeService",
    "SAMPLING_CONFIG",
    "SamplingConfig",
    "TextGenerator",
    "build_prompt",
    "extract_json",
    "normalize",
    "parse_recipe_reply",
]
