"""Generative model client for the Gemini generateContent endpoint."""

import logging
from typing import Any, Optional

import httpx

from navigator.errors import EmptyResponseError, ModelAPIError, NetworkError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash-exp"

PROBE_PROMPT = 'Say "API working" if you can read this'


def first_candidate_text(data: dict[str, Any]) -> Optional[str]:
    """Return ``candidates[0].content.parts[0].text`` if present."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


class GeminiClient:
    """Single request/response completions keyed by an API key."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate(
        self,
        prompt: str,
        credential: str,
        *,
        temperature: float = 0.1,
        max_output_tokens: int = 200,
    ) -> Optional[str]:
        """
        Complete ``prompt``.

        Returns:
            The first candidate's text, or None if the reply has none

        Raises:
            NetworkError: transport failure
            ModelAPIError: the endpoint answered with an error body
        """
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    params={"key": credential},
                    json=body,
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                raise NetworkError(f"Gemini request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ModelAPIError(
                f"Unexpected response from API: {response.text[:200]}",
                str(response.status_code),
            ) from e

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise ModelAPIError(
                error.get("message") or "Invalid API key",
                error.get("status") or "Unknown",
            )
        if response.status_code != 200 or not isinstance(data, dict):
            raise ModelAPIError("Unexpected response from API", str(response.status_code))

        return first_candidate_text(data)

    async def check_credential(self, credential: str) -> str:
        """Send a short test prompt and return the model's reply."""
        text = await self.generate(
            PROBE_PROMPT, credential, temperature=0.1, max_output_tokens=50
        )
        if not text:
            raise EmptyResponseError("Unexpected response from API: no text returned")
        return text
