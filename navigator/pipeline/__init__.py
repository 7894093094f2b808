"""Route candidate, selection and intent pipelines."""

from .candidates import build_candidate, build_candidates
from .intent_parser import IntentExtractor, parse_intent_reply
from .selection import RouteSelectionStateMachine, SelectionPhase, SelectionState
from .session import NavigationSession, create_navigation_session

__all__ = [
    "build_candidate",
    "build_candidates",
    "IntentExtractor",
    "parse_intent_reply",
    "RouteSelectionStateMachine",
    "SelectionPhase",
    "SelectionState",
    "NavigationSession",
    "create_navigation_session",
]
