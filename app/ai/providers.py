"""Adapters for the two supported LLM HTTP protocols.

Each adapter performs exactly one POST per call and never retries. The API
key travels in a header (OpenAI) or the query string (Gemini) and is never
logged.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from app.config import settings
from app.core.exceptions import (
    ProviderRequestError,
    ProviderUnreachableError,
    UnexpectedResponseShapeError,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Best-effort error text from a provider error body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return response.reason_phrase or "Unknown error"


class ProviderAdapter(ABC):
    name: str
    label: str

    @property
    @abstractmethod
    def default_model(self) -> str: ...

    @abstractmethod
    def build_request(
        self,
        client: httpx.AsyncClient,
        system_prompt: str,
        user_prompt: str,
        api_key: str,
        model: str,
    ) -> httpx.Request: ...

    @abstractmethod
    def extract_text(self, body: Any) -> str: ...

    async def complete(
        self,
        client: httpx.AsyncClient,
        system_prompt: str,
        user_prompt: str,
        api_key: str,
        model: str | None = None,
    ) -> str:
        request = self.build_request(
            client, system_prompt, user_prompt, api_key, model or self.default_model,
        )
        try:
            response = await client.send(request)
        except httpx.TransportError as exc:
            logger.warning("%s unreachable: %s", self.label, exc.__class__.__name__)
            raise ProviderUnreachableError(
                f"Could not reach the {self.label} API. Check your connection and try again."
            ) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.warning("%s returned HTTP %d: %s", self.label, response.status_code, message)
            raise ProviderRequestError(response.status_code, message)

        try:
            body = response.json()
        except ValueError as exc:
            raise UnexpectedResponseShapeError(
                f"{self.label} returned a non-JSON response"
            ) from exc

        try:
            text = self.extract_text(body)
        except (KeyError, IndexError, TypeError) as exc:
            raise UnexpectedResponseShapeError(
                f"{self.label} response did not contain any generated text"
            ) from exc
        if not isinstance(text, str):
            raise UnexpectedResponseShapeError(
                f"{self.label} response did not contain any generated text"
            )
        return text


class OpenAIChatProvider(ProviderAdapter):
    """Bearer-token chat completions."""

    name = "openai"
    label = "OpenAI"

    @property
    def default_model(self) -> str:
        return settings.OPENAI_MODEL

    def build_request(self, client, system_prompt, user_prompt, api_key, model):
        return client.build_request(
            "POST",
            f"{settings.OPENAI_BASE_URL}/chat/completions",
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": settings.AI_GENERATION_TEMPERATURE,
                "max_tokens": settings.AI_MAX_OUTPUT_TOKENS,
            },
        )

    def extract_text(self, body):
        return body["choices"][0]["message"]["content"]


class GeminiProvider(ProviderAdapter):
    """Key-in-query-string generateContent."""

    name = "gemini"
    label = "Gemini"

    @property
    def default_model(self) -> str:
        return settings.GEMINI_MODEL

    def build_request(self, client, system_prompt, user_prompt, api_key, model):
        return client.build_request(
            "POST",
            f"{settings.GEMINI_BASE_URL}/models/{model}:generateContent",
            params={"key": api_key},
            json={
                "contents": [
                    {"parts": [{"text": f"{system_prompt}\n\n{user_prompt}"}]},
                ],
                "generationConfig": {
                    "temperature": settings.AI_GENERATION_TEMPERATURE,
                    "topK": settings.GEMINI_TOP_K,
                    "topP": settings.GEMINI_TOP_P,
                    "maxOutputTokens": settings.AI_MAX_OUTPUT_TOKENS,
                    "responseMimeType": "application/json",
                },
            },
        )

    def extract_text(self, body):
        return body["candidates"][0]["content"]["parts"][0]["text"]


PROVIDERS: dict[str, ProviderAdapter] = {
    OpenAIChatProvider.name: OpenAIChatProvider(),
    GeminiProvider.name: GeminiProvider(),
}


def get_provider(name: str | None = None) -> ProviderAdapter:
    key = (name or settings.LLM_PROVIDER).lower()
    try:
        return PROVIDERS[key]
    except KeyError:
        raise ValueError(f"Unknown LLM provider: {key!r}") from None
