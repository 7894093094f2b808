"""Front-end coordinator tying the pending request to both pipelines."""

import itertools
import logging
from typing import Optional

from navigator.config import Settings, settings as default_settings
from navigator.models import NavigationRequest, NLExtractionResult
from navigator.utils.credentials import GEMINI_SLOT, GOOGLE_MAPS_SLOT, CredentialStore
from navigator.utils.request_log import RequestLog

from .intent_parser import IntentExtractor
from .selection import RouteSelectionStateMachine, SelectionState


logger = logging.getLogger(__name__)


class NavigationSession:
    """
    Owns the request being edited and hands it to the selection pipeline.

    Manual edits go through ``update``; free-text requests go through
    ``interpret``, which only touches the pending request once extraction
    has fully succeeded.
    """

    def __init__(
        self,
        selection: RouteSelectionStateMachine,
        extractor: IntentExtractor,
        credentials: CredentialStore | None = None,
        settings: Settings | None = None,
    ):
        self.selection = selection
        self.extractor = extractor
        self.credentials = credentials
        self.settings = settings or default_settings
        self.request = NavigationRequest()
        self._extractions = itertools.count(1)
        self._latest_extraction = 0

    @property
    def log(self) -> RequestLog:
        return self.selection.log

    def gemini_key(self) -> Optional[str]:
        if self.credentials is None:
            return self.settings.gemini_api_key
        return self.credentials.resolve(GEMINI_SLOT, self.settings.gemini_api_key)

    def save_key(self, slot: str, value: str) -> bool:
        """Persist a key and hand a new maps key to the directions client."""
        if self.credentials is None or not self.credentials.save(slot, value):
            return False
        if slot == GOOGLE_MAPS_SLOT and hasattr(self.selection.provider, "api_key"):
            self.selection.provider.api_key = value.strip()
        return True

    def clear_keys(self) -> None:
        if self.credentials is not None:
            self.credentials.clear()
        if hasattr(self.selection.provider, "api_key"):
            self.selection.provider.api_key = self.settings.google_maps_api_key

    def update(self, **fields) -> NavigationRequest:
        """Edit the pending request by hand."""
        self.request = self.request.model_copy(update=fields)
        return self.request

    async def interpret(self, query: str) -> Optional[NLExtractionResult]:
        """
        Fill the pending request from a free-text query.

        If another extraction starts before this one finishes, this one's
        result is discarded and None is returned. Errors propagate with the
        pending request unchanged.
        """
        token = next(self._extractions)
        self._latest_extraction = token

        result = await self.extractor.extract(query, self.gemini_key() or "")

        if token != self._latest_extraction:
            logger.info("Discarding superseded extraction %d", token)
            return None

        self.request = result.apply(self.request)
        return result

    async def navigate(self) -> SelectionState:
        """Submit the pending request for route alternatives."""
        return await self.selection.submit(self.request)


def create_navigation_session(settings: Settings | None = None) -> NavigationSession:
    """
    Wire a session to the Google Directions and Gemini services.

    Keys saved in the credential store take precedence over the
    environment; placeholders count as missing.
    """
    # Imported here so the pipeline package does not depend on the adapters
    from navigator.tools import GeminiClient, GoogleDirectionsClient

    settings = settings or default_settings
    credentials = CredentialStore(settings.credentials_file, settings.credentials_ttl_days)
    log = RequestLog()

    directions = GoogleDirectionsClient(
        api_key=credentials.resolve(GOOGLE_MAPS_SLOT, settings.google_maps_api_key),
        base_url=settings.directions_url,
        timeout=settings.http_timeout_s,
    )
    gemini = GeminiClient(
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.http_timeout_s,
    )

    return NavigationSession(
        selection=RouteSelectionStateMachine(
            directions, log=log, timeout_s=settings.directions_timeout_s
        ),
        extractor=IntentExtractor(
            gemini,
            log=log,
            temperature=settings.intent_temperature,
            max_output_tokens=settings.intent_max_output_tokens,
        ),
        credentials=credentials,
        settings=settings,
    )
