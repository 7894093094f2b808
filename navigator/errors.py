"""Error types raised by the navigation core and its adapters."""

# Human-readable messages for non-OK directions statuses
STATUS_MESSAGES = {
    "REQUEST_DENIED": (
        "Directions API request denied. Please check:\n"
        "1. Directions API is enabled\n"
        "2. API key has proper permissions\n"
        "3. API key restrictions allow this client"
    ),
    "OVER_QUERY_LIMIT": "API quota exceeded. Please check your Google Cloud Console billing and quotas.",
    "ZERO_RESULTS": "No routes found between these locations. Please try different addresses.",
    "UNKNOWN_ERROR": "Unknown error occurred. Please try again.",
}

TIMEOUT_MESSAGE = (
    "Route request timed out. This could indicate:\n"
    "1. Network connectivity issues\n"
    "2. API quota exceeded\n"
    "3. Invalid addresses\n\n"
    "Please try again with different locations."
)


def status_message(status: str) -> str:
    """Map a directions status code to the message shown to the user."""
    return STATUS_MESSAGES.get(status, f"Could not find route: {status}")


class NavigationError(Exception):
    """Base class for all navigator errors."""


class ValidationError(NavigationError):
    """Required input is missing; raised before any network call."""


class SelectionError(NavigationError):
    """A selection operation was attempted in the wrong state."""


class ProviderStatusError(NavigationError):
    """The directions provider answered with a non-OK status."""

    def __init__(self, status: str, message: str | None = None):
        self.status = status
        super().__init__(message or status_message(status))


class DirectionsTimeoutError(NavigationError, TimeoutError):
    """The client-side deadline elapsed before the provider answered."""

    def __init__(self, message: str = TIMEOUT_MESSAGE):
        super().__init__(message)


class NetworkError(NavigationError):
    """Transport failure talking to an external service."""


class ModelAPIError(NavigationError):
    """The generative model endpoint returned an error body."""

    def __init__(self, message: str, status: str = "Unknown"):
        self.status = status
        super().__init__(f"{message} (status: {status})")


class EmptyResponseError(NavigationError):
    """The generative model returned no candidate text."""


class ParseError(NavigationError):
    """The model reply did not contain a well-formed JSON object."""
