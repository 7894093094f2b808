"""Adapters for the external directions and generative model services."""

from .directions import GoogleDirectionsClient
from .gemini import GeminiClient

__all__ = [
    "GoogleDirectionsClient",
    "GeminiClient",
]
