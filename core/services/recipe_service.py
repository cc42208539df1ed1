from __future__ import annotations

import asyncio

import structlog

from core.config import settings
from core.services.gigachat_service import GigaChatClient, SamplingConfig, TextGenerator
from core.services.prompt_builder import build_prompt
from core.services.recipe_parser import ParsedRecipe, ParseFailure, parse_recipe_reply
from schemas import RecipeRequest, RecipeResponse

logger = structlog.get_logger(__name__)

SAMPLING_CONFIG = SamplingConfig(
    temperature=1.0,
    top_p=0.95,
    top_k=40,
    max_output_tokens=8192,
)
GENERATION_FAILED_MESSAGE = "Failed to generate recipe. Please try again."


class RecipeGenerationError(RuntimeError):
    def __init__(self, message: str = GENERATION_FAILED_MESSAGE) -> None:
        super().__init__(message)
        self.user_message = message


class RecipeService:
    def __init__(
        self,
        generator: TextGenerator | None = None,
        balanced_json_scan: bool | None = None,
    ) -> None:
        self.generator = generator if generator is not None else GigaChatClient()
        self.balanced_json_scan = (
            balanced_json_scan if balanced_json_scan is not None else settings.recipe_balanced_json_scan
        )

    async def generate_recipe(self, request: RecipeRequest) -> RecipeResponse:
        prompt = build_prompt(request)

        try:
            raw_reply = await self.generator.complete(prompt, SAMPLING_CONFIG)
        except Exception as exc:
            logger.warning("recipe_provider_failed", error=str(exc), error_type=exc.__class__.__name__)
            raise RecipeGenerationError() from exc

        logger.debug("recipe_raw_reply", raw_reply=raw_reply)
        try:
            result = parse_recipe_reply(raw_reply, balanced=self.balanced_json_scan)
        except Exception as exc:
            logger.warning("recipe_reply_unparseable", error=str(exc), error_type=exc.__class__.__name__)
            raise RecipeGenerationError() from exc

        match result:
            case ParsedRecipe(recipe=recipe):
                logger.info(
                    "recipe_generated",
                    dish=recipe.main_dish.name,
                    ingredients=len(recipe.main_dish.ingredients),
                    steps=len(recipe.main_dish.steps),
                    regeneration=request.is_regeneration,
                )
                logger.debug("recipe_image_prompt", image_prompt=recipe.main_dish.image_prompt)
                return recipe
            case ParseFailure(stage=stage, reason=reason):
                logger.warning("recipe_reply_rejected", stage=stage, reason=reason)
                raise RecipeGenerationError()

    async def generate_options(self, request: RecipeRequest, count: int) -> list[RecipeResponse]:
        """Generate ``count`` independent recipes for one request.

        Failed generations are skipped; the call fails only when none succeeded.
        """
        results = await asyncio.gather(
            *(self.generate_recipe(request) for _ in range(max(count, 1))),
            return_exceptions=True,
        )
        options: list[RecipeResponse] = []
        for index, result in enumerate(results):
            if isinstance(result, RecipeResponse):
                options.append(result)
            elif isinstance(result, RecipeGenerationError):
                logger.info("recipe_option_skipped", option=index)
            else:
                raise result

        if not options:
            raise RecipeGenerationError()
        return options
