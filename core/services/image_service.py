from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field

import aiohttp
import structlog
from aiogram.types import BufferedInputFile

from core.config import settings

logger = structlog.get_logger(__name__)

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class ImageGenerationError(RuntimeError):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(slots=True, eq=False)
class ImageHandle:
    """Generated image bytes held in memory until the view releases them."""

    data: bytes
    content_type: str = "image/png"
    handle_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    released: bool = False

    @property
    def filename(self) -> str:
        extension = _EXTENSIONS.get(self.content_type.split(";")[0].strip().lower(), "png")
        return f"{self.handle_id}.{extension}"

    def as_input_file(self) -> BufferedInputFile:
        if self.released:
            raise ImageGenerationError(f"Image handle {self.handle_id} was already released")
        return BufferedInputFile(self.data, filename=self.filename)

    def release(self) -> None:
        self.data = b""
        self.released = True


@dataclass(slots=True, frozen=True)
class ImageSlotUpdate:
    index: int
    handle: ImageHandle | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.handle is not None


class ImageClient:
    def __init__(
        self,
        api_url: str | None = None,
        timeout_seconds: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.api_url = api_url if api_url is not None else settings.image_api_url
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.image_timeout_seconds
        )
        self._session = session

    async def _post(self, session: aiohttp.ClientSession, prompt: str) -> ImageHandle:
        async with session.post(
            self.api_url,
            json={"prompt": prompt},
            headers={"Content-Type": "application/json"},
        ) as response:
            if not 200 <= response.status < 300:
                raise ImageGenerationError(
                    f"Image endpoint returned HTTP {response.status}",
                    status=response.status,
                )
            data = await response.read()
            content_type = response.headers.get("Content-Type", "image/png")

        if not data:
            raise ImageGenerationError("Image endpoint returned an empty body")
        return ImageHandle(data=data, content_type=content_type)

    async def generate_image(self, prompt: str) -> ImageHandle:
        prompt = prompt.strip()
        if not prompt:
            raise ImageGenerationError("Image prompt is empty")

        try:
            if self._session is not None:
                handle = await self._post(self._session, prompt)
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    handle = await self._post(session, prompt)
        except ImageGenerationError as exc:
            logger.warning("image_generation_failed", status=exc.status, error=str(exc))
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("image_generation_failed", error=str(exc), error_type=exc.__class__.__name__)
            raise ImageGenerationError(f"Image endpoint is unreachable: {exc}") from exc

        logger.info("image_generated", handle_id=handle.handle_id, size=len(handle.data))
        return handle

    async def _slot(self, index: int, prompt: str) -> ImageSlotUpdate:
        try:
            return ImageSlotUpdate(index=index, handle=await self.generate_image(prompt))
        except ImageGenerationError as exc:
            return ImageSlotUpdate(index=index, error=str(exc))

    async def generate_images(self, prompts: Sequence[str]) -> AsyncIterator[ImageSlotUpdate]:
        """Request all images at once and yield slot updates as they finish.

        Completion order is arbitrary; every update carries its slot index.
        """
        tasks = [asyncio.create_task(self._slot(index, prompt)) for index, prompt in enumerate(prompts)]
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
