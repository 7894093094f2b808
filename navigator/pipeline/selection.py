"""Request/selection lifecycle for route alternatives.

Pipeline states:
1. IDLE - nothing requested yet (or candidates dismissed)
2. AWAITING_RESPONSE - one provider call in flight for the current attempt
3. PRESENTING_CANDIDATES - annotated alternatives waiting for a pick
4. SELECTED - one candidate is the active route
5. FAILED - the attempt ended with a provider status, timeout or transport error

Every submit opens a new attempt. Provider settlements carry the attempt
they belong to and are discarded when it is no longer the current one.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Optional, Protocol

from navigator.errors import (
    DirectionsTimeoutError,
    NavigationError,
    NetworkError,
    ProviderStatusError,
    SelectionError,
    ValidationError,
    status_message,
)
from navigator.models import DirectionsResult, Leg, NavigationRequest, RouteCandidate
from navigator.utils.request_log import LogType, RequestLog

from .candidates import build_candidates


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0
PROVIDER_ENDPOINT = "DirectionsService.route()"

TIMEOUT = "TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"
INVALID_RESPONSE = "INVALID_RESPONSE"
UNKNOWN_ERROR = "UNKNOWN_ERROR"
CANCELLED = "CANCELLED"
SUPERSEDED = "SUPERSEDED"

CANCELLED_MESSAGE = "Route request was cancelled."
SUPERSEDED_MESSAGE = "Route request was replaced by a newer one."


class DirectionsProvider(Protocol):
    """Anything that can answer a directions request."""

    async def route(self, request: NavigationRequest) -> DirectionsResult:
        ...


class SelectionPhase(str, Enum):
    IDLE = "IDLE"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"
    PRESENTING_CANDIDATES = "PRESENTING_CANDIDATES"
    SELECTED = "SELECTED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class SelectionState:
    """Snapshot of the lifecycle for the current attempt."""
    phase: SelectionPhase
    attempt: int = 0
    reason: Optional[str] = None
    message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.phase is SelectionPhase.FAILED

    @property
    def timed_out(self) -> bool:
        return self.failed and self.reason == TIMEOUT

    @property
    def error(self) -> NavigationError | None:
        """The failure as an exception, or None unless the phase is FAILED."""
        if not self.failed:
            return None
        if self.reason == TIMEOUT:
            return DirectionsTimeoutError(self.message) if self.message else DirectionsTimeoutError()
        if self.reason == NETWORK_ERROR:
            return NetworkError(self.message)
        if self.reason in (CANCELLED, SUPERSEDED):
            return NavigationError(self.message)
        return ProviderStatusError(self.reason, self.message)


class RouteSelectionStateMachine:
    """
    Drive one directions request at a time from submit to selection.

    The candidate list and the selection are replaced wholesale on every
    transition, never edited in place.
    """

    def __init__(
        self,
        provider: DirectionsProvider,
        log: RequestLog | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.provider = provider
        self.log = log if log is not None else RequestLog()
        self.timeout_s = timeout_s

        self._attempts = itertools.count(1)
        self._state = SelectionState(SelectionPhase.IDLE)
        self._request: NavigationRequest | None = None
        self._candidates: tuple[RouteCandidate, ...] = ()
        self._selected: RouteCandidate | None = None
        self._directions: Leg | None = None

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def request(self) -> NavigationRequest | None:
        return self._request

    @property
    def candidates(self) -> tuple[RouteCandidate, ...]:
        return self._candidates

    @property
    def selected(self) -> RouteCandidate | None:
        return self._selected

    @property
    def directions(self) -> Leg | None:
        """First leg of the active route, for step-by-step display."""
        return self._directions

    async def submit(self, request: NavigationRequest) -> SelectionState:
        """
        Request routes for ``request`` and wait for the outcome.

        Raises:
            ValidationError: origin or destination is blank. Nothing is
                changed and the provider is not called.

        Returns:
            The state of this attempt after the provider settled or the
            deadline elapsed. If a newer submit replaced it meanwhile, a
            FAILED state with reason SUPERSEDED; ``state`` holds the newer
            attempt.
        """
        missing = request.missing_fields()
        if missing:
            raise ValidationError(
                "Please enter both starting location and destination "
                f"(missing: {', '.join(missing)})"
            )

        attempt = next(self._attempts)
        self._request = request
        self._candidates = ()
        self._selected = None
        self._directions = None
        self._state = SelectionState(SelectionPhase.AWAITING_RESPONSE, attempt)

        self.log.append(LogType.REQUEST, {
            "endpoint": PROVIDER_ENDPOINT,
            "attempt": attempt,
            "params": {
                "origin": request.origin,
                "destination": request.destination,
                "travelMode": request.mode.value,
                "provideRouteAlternatives": True,
            },
        })
        logger.info(
            "Attempt %d: %s -> %s (%s)",
            attempt, request.origin, request.destination, request.mode.value,
        )

        # The provider always gets alternatives, whatever the form says
        task = asyncio.ensure_future(
            self.provider.route(request.model_copy(update={"want_alternatives": True}))
        )
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout_s)
        except asyncio.CancelledError:
            if not self._is_stale(attempt):
                self._fail(attempt, CANCELLED, CANCELLED_MESSAGE)
            task.add_done_callback(partial(self._settle, attempt))
            raise

        if task in done:
            self._settle(attempt, task)
        else:
            self._expire(attempt)
            # Not cancelled: the late result is recognised as stale instead
            task.add_done_callback(partial(self._settle, attempt))

        if self._state.attempt != attempt:
            return SelectionState(SelectionPhase.FAILED, attempt, SUPERSEDED, SUPERSEDED_MESSAGE)
        return self._state

    def select(self, candidate: RouteCandidate | int) -> SelectionState:
        """Make ``candidate`` (or the candidate at that index) the active route."""
        self._require_presenting("select a route")

        if isinstance(candidate, int):
            if not 0 <= candidate < len(self._candidates):
                raise SelectionError(f"No route candidate with index {candidate}")
            chosen = self._candidates[candidate]
        elif candidate in self._candidates:
            chosen = candidate
        else:
            raise SelectionError("Candidate does not belong to the current request")

        self._selected = chosen
        self._directions = chosen.source_route.first_leg
        self._candidates = ()
        self._state = SelectionState(SelectionPhase.SELECTED, self._state.attempt)
        logger.info("Attempt %d: selected route %d (%s)", self._state.attempt, chosen.index, chosen.summary)
        return self._state

    def cancel(self) -> SelectionState:
        """Dismiss the candidates. Directions already on display are kept."""
        self._require_presenting("cancel route selection")
        self._candidates = ()
        self._state = SelectionState(SelectionPhase.IDLE, self._state.attempt)
        return self._state

    def _require_presenting(self, action: str) -> None:
        if self._state.phase is not SelectionPhase.PRESENTING_CANDIDATES:
            raise SelectionError(
                f"Cannot {action} while {self._state.phase.value.lower().replace('_', ' ')}"
            )

    def _is_stale(self, attempt: int) -> bool:
        return (
            attempt != self._state.attempt
            or self._state.phase is not SelectionPhase.AWAITING_RESPONSE
        )

    def _fail(self, attempt: int, reason: str, message: str) -> None:
        self._state = SelectionState(SelectionPhase.FAILED, attempt, reason, message)
        logger.warning("Attempt %d failed: %s", attempt, reason)

    def _expire(self, attempt: int) -> None:
        if self._is_stale(attempt):
            return
        self._fail(attempt, TIMEOUT, str(DirectionsTimeoutError()))

    def _settle(self, attempt: int, task: asyncio.Future) -> None:
        """Apply the provider outcome of ``attempt`` unless it is stale."""
        if self._is_stale(attempt):
            if not task.cancelled():
                task.exception()  # mark retrieved
            logger.info("Ignoring stale directions response for attempt %d", attempt)
            return

        if task.cancelled():
            self._fail(attempt, CANCELLED, CANCELLED_MESSAGE)
            return

        try:
            result: DirectionsResult = task.result()
        except NetworkError as e:
            self._log_response(attempt, NETWORK_ERROR, error=str(e))
            self._fail(attempt, NETWORK_ERROR, f"Network error: {e}")
            return
        except ProviderStatusError as e:
            self._log_response(attempt, e.status, error=str(e))
            self._fail(attempt, e.status, str(e))
            return
        except Exception as e:
            logger.exception("Directions provider failed")
            self._log_response(attempt, UNKNOWN_ERROR, error=repr(e))
            self._fail(attempt, UNKNOWN_ERROR, status_message(UNKNOWN_ERROR))
            return

        self._log_response(attempt, result.status, result=result)

        if result.status != "OK":
            self._fail(attempt, result.status, status_message(result.status))
            return

        try:
            candidates = build_candidates(result.routes)
        except ValueError as e:
            logger.exception("Error processing routes")
            self._fail(attempt, INVALID_RESPONSE, f"Error processing route data: {e}")
            return

        if not candidates:
            self._fail(attempt, "ZERO_RESULTS", status_message("ZERO_RESULTS"))
            return

        self._candidates = tuple(candidates)
        self._state = SelectionState(SelectionPhase.PRESENTING_CANDIDATES, attempt)
        logger.info("Attempt %d: %d route(s) found", attempt, len(candidates))

    def _log_response(
        self,
        attempt: int,
        status: str,
        result: DirectionsResult | None = None,
        error: str | None = None,
    ) -> None:
        payload = {
            "endpoint": PROVIDER_ENDPOINT,
            "attempt": attempt,
            "status": status,
            "routesCount": len(result.routes) if result else 0,
            "data": None,
        }
        if result is not None:
            payload["data"] = {
                "routes": [
                    {
                        "routeIndex": idx,
                        "summary": route.summary,
                        "distance": route.first_leg.distance.text,
                        "duration": route.first_leg.duration.text,
                        "warnings": route.warnings,
                        "copyrights": route.copyrights,
                    }
                    for idx, route in enumerate(result.routes)
                ]
            }
        if error:
            payload["error"] = error
        self.log.append(LogType.RESPONSE, payload)
