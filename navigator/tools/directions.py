"""Directions provider backed by the Google Directions web service."""

import logging

import httpx
from pydantic import ValidationError as SchemaError

from navigator.config import is_unset
from navigator.errors import NetworkError, ProviderStatusError
from navigator.models import DirectionsResult, NavigationRequest, TravelMode

logger = logging.getLogger(__name__)

DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

INVALID_RESPONSE = "INVALID_RESPONSE"


class GoogleDirectionsClient:
    """
    Fetch route alternatives for a navigation request.

    Transport failures surface as NetworkError, payloads that do not parse
    as ProviderStatusError. Provider status codes (including non-OK ones)
    are returned in the result for the caller to interpret.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DIRECTIONS_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def route(self, request: NavigationRequest) -> DirectionsResult:
        return await self._directions(
            request.origin,
            request.destination,
            request.mode,
            alternatives=request.want_alternatives,
            api_key=self.api_key,
        )

    async def check_credential(self, api_key: str | None = None) -> str:
        """
        Verify a key with a known route (New York to Boston by car).

        Returns the route's distance and duration text.
        """
        result = await self._directions(
            "New York, NY",
            "Boston, MA",
            TravelMode.DRIVING,
            alternatives=False,
            api_key=api_key or self.api_key,
        )
        if result.status != "OK":
            raise ProviderStatusError(result.status)
        if not result.routes:
            raise ProviderStatusError("ZERO_RESULTS")
        leg = result.routes[0].first_leg
        return f"Distance: {leg.distance.text}, Duration: {leg.duration.text}"

    async def _directions(
        self,
        origin: str,
        destination: str,
        mode: TravelMode,
        alternatives: bool,
        api_key: str | None,
    ) -> DirectionsResult:
        if is_unset(api_key):
            raise ProviderStatusError(
                "REQUEST_DENIED", "Google Maps API key not configured. Enter a key in settings."
            )

        params = {
            "origin": origin,
            "destination": destination,
            "mode": mode.value.lower(),
            "alternatives": "true" if alternatives else "false",
            "key": api_key,
        }

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.get(
                    self.base_url,
                    params=params,
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                raise NetworkError(f"Directions request failed: {e}") from e

        if response.status_code != 200:
            raise ProviderStatusError(
                f"HTTP_{response.status_code}",
                f"Directions service error: {response.status_code} {response.text[:200]}",
            )

        try:
            data = response.json()
            result = DirectionsResult.model_validate({
                "status": data.get("status", "UNKNOWN_ERROR"),
                "routes": data.get("routes", []),
                "error_message": data.get("error_message"),
            })
        except (ValueError, AttributeError, SchemaError) as e:
            logger.error("Malformed directions payload: %s", e)
            raise ProviderStatusError(
                INVALID_RESPONSE, f"Error processing route data: {e}"
            ) from e

        if result.error_message:
            logger.warning("Directions status %s: %s", result.status, result.error_message)
        return result
