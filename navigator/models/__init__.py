"""Data models for navigation."""

from .request import NavigationRequest, NLExtractionResult, TravelMode
from .response import (
    DirectionsResult,
    Leg,
    RawRoute,
    RouteCandidate,
    Step,
    TextValue,
)

__all__ = [
    "NavigationRequest",
    "NLExtractionResult",
    "TravelMode",
    "DirectionsResult",
    "Leg",
    "RawRoute",
    "RouteCandidate",
    "Step",
    "TextValue",
]
