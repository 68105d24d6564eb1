"""OpenAI-compatible streaming chat model provider."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any
from urllib import error as urllib_error
from urllib import request as urllib_request

from specialist.config import get_settings
from specialist.providers.interfaces import CancellationToken

logger = logging.getLogger(__name__)

_STREAM_DONE = "[DONE]"


class ModelRequestError(RuntimeError):
    """Raised when a model request fails or the provider response is invalid."""


@dataclass(slots=True)
class OpenAIStreamingModel:
    """Chat Completions client that streams deltas over server-sent events."""

    api_key: str
    model: str
    base_url: str = "https://api.openai.com/v1"
    temperature: float = 0.2
    timeout_seconds: int = 60

    @property
    def name(self) -> str:
        return self.model

    async def send_request(
        self,
        messages: list[dict[str, str]],
        cancellation: CancellationToken,
    ) -> AsyncIterator[str]:
        """Yield content fragments until the stream ends or cancellation is requested."""

        response = await asyncio.to_thread(self._open_stream, messages)
        try:
            while not cancellation.is_cancellation_requested:
                raw_line = await asyncio.to_thread(response.readline)
                if not raw_line:
                    break
                fragment = decode_stream_line(raw_line.decode("utf-8", errors="replace"))
                if fragment is None:
                    break
                if fragment:
                    yield fragment
        finally:
            response.close()

    def _open_stream(self, messages: list[dict[str, str]]) -> Any:
        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "stream": True,
            "messages": messages,
        }
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        req = urllib_request.Request(
            url=url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "text/event-stream",
            },
        )
        try:
            return urllib_request.urlopen(req, timeout=self.timeout_seconds)
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            if exc.code in {401, 403}:
                raise ModelRequestError(f"OpenAI HTTP {exc.code} (access denied): {detail}") from exc
            raise ModelRequestError(f"OpenAI HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise ModelRequestError(f"OpenAI request failed: {exc.reason}") from exc


def decode_stream_line(line: str) -> str | None:
    """Decode one server-sent event line into a content fragment.

    Returns ``None`` at the end-of-stream sentinel and ``""`` for lines that
    carry no content (comments, blank keep-alives, role-only deltas).
    """

    stripped = line.strip()
    if not stripped.startswith("data:"):
        return ""
    data = stripped[len("data:") :].strip()
    if data == _STREAM_DONE:
        return None
    try:
        decoded = json.loads(data)
        if "error" in decoded:
            raise ModelRequestError(f"OpenAI stream error: {decoded['error']}")
        choices = decoded.get("choices") or []
        if not choices:
            return ""
        choice = choices[0]
        delta = choice.get("delta") or {}
        refusal = delta.get("refusal")
        if isinstance(refusal, str) and refusal.strip():
            logger.warning("openai.refusal text=%r", refusal.strip())
            raise ModelRequestError("Response blocked by content filter (model refusal)")
        if choice.get("finish_reason") == "content_filter":
            raise ModelRequestError("Response blocked by content filter")
        content = delta.get("content")
    except ModelRequestError:
        raise
    except (AttributeError, TypeError, json.JSONDecodeError) as exc:
        raise ModelRequestError("OpenAI returned an unexpected stream chunk") from exc
    return content if isinstance(content, str) else ""


class OpenAIModelProvider:
    """Provides the configured OpenAI-compatible model, if any."""

    def __init__(self, model: OpenAIStreamingModel | None) -> None:
        self._model = model

    async def select_models(self) -> Sequence[OpenAIStreamingModel]:
        if self._model is None:
            return []
        return [self._model]


def get_default_model_provider() -> OpenAIModelProvider:
    """Return a provider for the configured model; empty when no API key is set."""

    settings = get_settings()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not configured; no chat model is available.")
        return OpenAIModelProvider(None)
    return OpenAIModelProvider(
        OpenAIStreamingModel(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            temperature=settings.openai_temperature,
            timeout_seconds=settings.openai_timeout_seconds,
        )
    )
