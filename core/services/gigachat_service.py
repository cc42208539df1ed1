from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Protocol

import structlog
from gigachat import GigaChat
from gigachat import exceptions as gigachat_exceptions

from core.config import Settings, settings as default_settings
from core.services.prompt_templates import SYSTEM_PROMPT

logger = structlog.get_logger(__name__)


class _MissingSDKException(Exception):
    pass


# Exception names differ between SDK releases.
AuthenticationError = getattr(gigachat_exceptions, "AuthenticationError", _MissingSDKException)
ForbiddenError = getattr(
    gigachat_exceptions,
    "ForbiddenError",
    getattr(gigachat_exceptions, "PermissionDeniedError", _MissingSDKException),
)
BadRequestError = getattr(gigachat_exceptions, "BadRequestError", _MissingSDKException)

_FATAL_STATUS = ((AuthenticationError, 401), (ForbiddenError, 403), (BadRequestError, 400))


class GigaChatError(RuntimeError):
    pass


@dataclass(slots=True, frozen=True)
class SamplingConfig:
    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int


class TextGenerator(Protocol):
    async def complete(self, prompt: str, sampling: SamplingConfig) -> str: ...


def _status_code(exc: Exception) -> int | None:
    candidates = [getattr(exc, name, None) for name in ("status_code", "status", "code")]
    candidates += list(getattr(exc, "args", ()))
    for value in candidates:
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    found = re.search(r"\b([45]\d{2})\b", str(exc))
    return int(found.group(1)) if found else None


def _describe_error(exc: Exception) -> str:
    details = str(exc) or exc.__class__.__name__
    status = _status_code(exc)
    if status is not None:
        return f"HTTP {status}: {details}"
    if any(marker in details.upper() for marker in ("SSL", "TLS", "CERT")):
        return f"SSL/TLS/CERT: {details}"
    return details


def _reply_text(response: Any) -> str:
    if isinstance(response, dict):
        choices = response.get("choices") or [{}]
        return str(choices[0].get("message", {}).get("content", "")).strip()
    choices = getattr(response, "choices", None) or []
    message = getattr(choices[0], "message", None) if choices else None
    return str(getattr(message, "content", "") or "").strip()


class GigaChatClient:
    """Text generation over the GigaChat SDK.

    Transient provider errors are retried up to ``max_retries`` times.
    Authorization and bad-request errors fail on the first attempt.
    """

    def __init__(
        self,
        auth_key: str | None = None,
        max_retries: int | None = None,
        timeout_seconds: float | None = None,
        system_prompt: str = SYSTEM_PROMPT,
        config: Settings | None = None,
    ) -> None:
        self.config = config or default_settings
        self.auth_key = auth_key if auth_key is not None else self.config.gigachat_authorization_key
        self.max_retries = max_retries if max_retries is not None else self.config.gigachat_max_retries
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else self.config.gigachat_timeout_seconds
        )
        self.system_prompt = system_prompt

    def _sdk_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "credentials": self.auth_key,
            "scope": self.config.gigachat_scope,
            "base_url": self.config.gigachat_api_url.rstrip("/"),
            "auth_url": self.config.gigachat_oauth_url.rstrip("/"),
            "model": self.config.gigachat_model,
            "timeout": self.timeout_seconds,
            "verify_ssl_certs": self.config.gigachat_ssl_verify,
        }
        if self.config.gigachat_ca_bundle.strip():
            options["ca_bundle_file"] = self.config.gigachat_ca_bundle.strip()
        return options

    def _chat_payload(self, prompt: str, sampling: SamplingConfig) -> dict[str, Any]:
        # GigaChat exposes no top-k control; sampling.top_k is not sent.
        return {
            "model": self.config.gigachat_model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "n": 1,
            "stream": False,
            "temperature": sampling.temperature,
            "top_p": sampling.top_p,
            "max_tokens": sampling.max_output_tokens,
            "repetition_penalty": 1,
        }

    @staticmethod
    async def _send(client: Any, payload: dict[str, Any]) -> Any:
        if callable(getattr(client, "achat", None)):
            return await client.achat(payload)
        if callable(getattr(client, "chat", None)):
            return await asyncio.to_thread(client.chat, payload)
        raise GigaChatError("GigaChat SDK client doesn't provide chat/achat methods")

    async def _ask(self, payload: dict[str, Any]) -> str:
        client = GigaChat(**self._sdk_options())
        if hasattr(client, "__aenter__"):
            async with client as session:
                response = await self._send(session, payload)
        elif hasattr(client, "__enter__"):
            with client as session:
                response = await self._send(session, payload)
        else:
            response = await self._send(client, payload)

        text = _reply_text(response)
        if not text:
            raise GigaChatError("LLM returned empty response")
        return text

    async def complete(self, prompt: str, sampling: SamplingConfig) -> str:
        if not self.auth_key:
            raise GigaChatError("GIGACHAT_AUTH_KEY is empty")

        payload = self._chat_payload(prompt, sampling)
        last_error = ""
        for attempt in range(1, self.max_retries + 1):
            try:
                text = await self._ask(payload)
            except Exception as exc:
                for error_type, status in _FATAL_STATUS:
                    if isinstance(exc, error_type):
                        raise GigaChatError(f"HTTP {status}: {exc}") from exc
                last_error = str(exc) if isinstance(exc, GigaChatError) else _describe_error(exc)
                logger.warning(
                    "gigachat_attempt_failed",
                    attempt=attempt,
                    max_retries=self.max_retries,
                    error=last_error,
                )
                continue

            logger.info("gigachat_reply_received", attempt=attempt, length=len(text))
            return text

        raise GigaChatError(f"No reply from GigaChat after {self.max_retries} attempts: {last_error}")
