"""Intent extraction for free-text navigation requests.

This module uses a generative model for ONE simple task: pulling the start,
destination and travel mode out of natural language. The model's reply is
free text, so it is parsed defensively and nothing is guessed.
"""

import json
import logging
import re
from typing import Optional, Protocol

from navigator.config import is_unset
from navigator.errors import EmptyResponseError, ParseError, ValidationError
from navigator.models import NLExtractionResult, TravelMode
from navigator.utils.request_log import LogType, RequestLog


logger = logging.getLogger(__name__)

MODEL_ENDPOINT = "generateContent"

INTENT_PROMPT = """Extract the starting location and destination from this query. Return ONLY a JSON object with "start" and "destination" fields. If transport mode is mentioned, include a "transportMode" field with one of: DRIVING, WALKING, BICYCLING, or TRANSIT.

Query: "{query}"

Example response format:
{{"start": "New York, NY", "destination": "Boston, MA", "transportMode": "DRIVING"}}"""

# First brace-delimited object; nested objects are not expected
_JSON_OBJECT_RE = re.compile(r"\{[^}]*\}")


class GenerativeModelClient(Protocol):
    """Anything that can complete a prompt."""

    async def generate(
        self,
        prompt: str,
        credential: str,
        *,
        temperature: float,
        max_output_tokens: int,
    ) -> Optional[str]:
        """Return the first candidate's text, or None when there is none."""


def build_prompt(query: str) -> str:
    return INTENT_PROMPT.format(query=query)


def _optional_text(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f'Expected text for "{key}", got {type(value).__name__}')
    return value.strip() or None


def parse_intent_reply(text: str) -> NLExtractionResult:
    """
    Parse the model's reply into an extraction result.

    Only fields present in the reply are set. An unknown ``transportMode``
    is dropped rather than passed on to the provider.

    Raises:
        ParseError: no brace-delimited object, invalid JSON, or a field of
            the wrong type.
    """
    match = _JSON_OBJECT_RE.search(text)
    if not match:
        raise ParseError("Could not parse AI response. Please try rephrasing your query.")

    try:
        data = json.loads(match.group())
    except json.JSONDecodeError as e:
        raise ParseError(f"AI response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("AI response is not a JSON object")

    mode_text = _optional_text(data, "transportMode")
    mode = TravelMode.parse(mode_text)
    if mode_text and mode is None:
        logger.warning("Ignoring unknown transport mode from model: %r", mode_text)

    return NLExtractionResult(
        start=_optional_text(data, "start"),
        destination=_optional_text(data, "destination"),
        transport_mode=mode,
    )


class IntentExtractor:
    """
    Turn a free-text request into navigation fields.

    One prompt, one model call, one parse. Low temperature and a small
    output budget keep replies short and repeatable.
    """

    def __init__(
        self,
        client: GenerativeModelClient,
        log: RequestLog | None = None,
        temperature: float = 0.1,
        max_output_tokens: int = 200,
    ):
        self.client = client
        self.log = log
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def extract(self, query: str, credential: str) -> NLExtractionResult:
        """
        Extract start, destination and mode from ``query``.

        Raises:
            ValidationError: blank query or unset credential (no network call)
            EmptyResponseError: the model returned no text
            ParseError: the reply holds no well-formed JSON object
            NetworkError, ModelAPIError: raised by the client
        """
        if not query or not query.strip():
            raise ValidationError("Please enter a query")
        if is_unset(credential):
            raise ValidationError("Please enter your Gemini API key first")

        prompt = build_prompt(query.strip())
        self._log(LogType.REQUEST, {
            "endpoint": MODEL_ENDPOINT,
            "query": query,
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        })

        text = await self.client.generate(
            prompt,
            credential,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
        self._log(LogType.RESPONSE, {"endpoint": MODEL_ENDPOINT, "text": text})

        if not text:
            raise EmptyResponseError("No response from AI. Please check your API key.")

        result = parse_intent_reply(text)
        logger.info(
            "Extracted start=%r destination=%r mode=%s",
            result.start, result.destination,
            result.transport_mode.value if result.transport_mode else None,
        )
        return result

    def _log(self, type: LogType, payload: dict) -> None:
        if self.log is not None:
            self.log.append(type, payload)
