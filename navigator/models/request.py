"""Input models for navigation requests."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class TravelMode(str, Enum):
    """Travel modalities understood by the directions provider."""
    DRIVING = "DRIVING"
    WALKING = "WALKING"
    BICYCLING = "BICYCLING"
    TRANSIT = "TRANSIT"

    @classmethod
    def parse(cls, value: str | None) -> "TravelMode | None":
        """Return the mode named by ``value`` (case-insensitive), or None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class NavigationRequest(BaseModel):
    """A route request between two free-text locations."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "origin": "New York, NY",
                "destination": "Boston, MA",
                "mode": "DRIVING",
                "want_alternatives": True,
            }
        },
    )

    origin: str = Field(
        default="",
        description="Starting point: place name, address or 'lat,lng'"
    )
    destination: str = Field(
        default="",
        description="End point: place name, address or 'lat,lng'"
    )
    mode: TravelMode = Field(
        default=TravelMode.DRIVING,
        description="Travel mode for the provider's path search"
    )
    want_alternatives: bool = Field(
        default=True,
        description="Ask the provider for alternative routes"
    )

    def missing_fields(self) -> list[str]:
        """Names of required fields that are blank."""
        missing = []
        if not self.origin.strip():
            missing.append("origin")
        if not self.destination.strip():
            missing.append("destination")
        return missing


class NLExtractionResult(BaseModel):
    """Fields extracted from a free-text request.

    A partial patch: fields the model did not return stay ``None`` and
    leave the target request untouched when applied.
    """

    model_config = ConfigDict(frozen=True)

    start: str | None = None
    destination: str | None = None
    transport_mode: TravelMode | None = None

    def apply(self, request: NavigationRequest) -> NavigationRequest:
        """Return ``request`` with the extracted fields patched in."""
        update = {}
        if self.start:
            update["origin"] = self.start
        if self.destination:
            update["destination"] = self.destination
        if self.transport_mode is not None:
            update["mode"] = self.transport_mode
        return request.model_copy(update=update)
