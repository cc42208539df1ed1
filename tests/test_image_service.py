from __future__ import annotations

import asyncio
import unittest

import aiohttp

from core.services.image_service import ImageClient, ImageGenerationError, ImageHandle


class _FakeResponse:
    def __init__(self, status: int, body: bytes, content_type: str, delay: float, error: Exception | None) -> None:
        self.status = status
        self.body = body
        self.headers = {"Content-Type": content_type}
        self.delay = delay
        self.error = error

    async def __aenter__(self) -> "_FakeResponse":
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    async def read(self) -> bytes:
        return self.body


class _FakeSession:
    """Answers each prompt according to a table: prompt -> (status, delay, error)."""

    def __init__(self, table: dict[str, tuple[int, float, Exception | None]]) -> None:
        self.table = table
        self.requests: list[tuple[str, dict, dict]] = []

    def post(self, url: str, json: dict, headers: dict) -> _FakeResponse:
        self.requests.append((url, json, headers))
        status, delay, error = self.table[json["prompt"]]
        body = f"image:{json['prompt']}".encode()
        return _FakeResponse(status, body, "image/jpeg", delay, error)


class GenerateImageTests(unittest.IsolatedAsyncioTestCase):
    async def test_posts_prompt_and_returns_handle(self) -> None:
        session = _FakeSession({"mohinga": (200, 0, None)})
        client = ImageClient(api_url="https://images.test/generate", session=session)

        handle = await client.generate_image("  mohinga ")

        self.assertEqual(
            session.requests,
            [("https://images.test/generate", {"prompt": "mohinga"}, {"Content-Type": "application/json"})],
        )
        self.assertEqual(handle.data, b"image:mohinga")
        self.assertTrue(handle.filename.endswith(".jpg"))

    async def test_non_success_status_fails(self) -> None:
        client = ImageClient(api_url="https://images.test", session=_FakeSession({"p": (502, 0, None)}))
        with self.assertRaises(ImageGenerationError) as ctx:
            await client.generate_image("p")
        self.assertEqual(ctx.exception.status, 502)

    async def test_transport_error_fails(self) -> None:
        session = _FakeSession({"p": (200, 0, aiohttp.ClientConnectionError("refused"))})
        client = ImageClient(api_url="https://images.test", session=session)
        with self.assertRaises(ImageGenerationError) as ctx:
            await client.generate_image("p")
        self.assertIsNone(ctx.exception.status)

    async def test_empty_prompt_fails_without_request(self) -> None:
        session = _FakeSession({})
        with self.assertRaises(ImageGenerationError):
            await ImageClient(api_url="https://images.test", session=session).generate_image("   ")
        self.assertEqual(session.requests, [])


class GenerateImagesTests(unittest.IsolatedAsyncioTestCase):
    async def test_updates_arrive_in_completion_order_with_their_slot(self) -> None:
        session = _FakeSession(
            {
                "slow": (200, 0.05, None),
                "broken": (500, 0.02, None),
                "fast": (200, 0, None),
            }
        )
        client = ImageClient(api_url="https://images.test", session=session)

        updates = [update async for update in client.generate_images(["slow", "broken", "fast"])]

        self.assertEqual([update.index for update in updates], [2, 1, 0])
        by_index = {update.index: update for update in updates}
        self.assertTrue(by_index[0].ok)
        self.assertEqual(by_index[0].handle.data, b"image:slow")
        self.assertFalse(by_index[1].ok)
        self.assertIn("500", by_index[1].error)
        self.assertEqual(by_index[2].handle.data, b"image:fast")


class ImageHandleTests(unittest.TestCase):
    def test_release_drops_bytes(self) -> None:
        handle = ImageHandle(data=b"png-bytes", content_type="image/png")
        input_file = handle.as_input_file()
        self.assertEqual(input_file.filename, f"{handle.handle_id}.png")

        handle.release()

        self.assertTrue(handle.released)
        self.assertEqual(handle.data, b"")
        with self.assertRaises(ImageGenerationError):
            handle.as_input_file()


if __name__ == "__main__":
    unittest.main()
