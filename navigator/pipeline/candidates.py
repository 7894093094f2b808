"""Turn raw provider routes into annotated route candidates.

Everything here is pure: no network, no shared state. The text heuristics
are declared as a table of pattern rules and evaluated by small matcher
functions so they can be tested on their own.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from navigator.models import RawRoute, RouteCandidate
from navigator.utils.text import strip_html


MAX_MAJOR_ROADS = 3
MAX_VIA_POINTS = 2
# Only steps longer than this (provider distance units, metres) name a major road
MAJOR_SEGMENT_MIN_DISTANCE = 500
VIA_CONNECTOR = " and "

ROAD_SUFFIXES = (
    r"Highway|Hwy|Road|Rd|Avenue|Ave|Street|St|Boulevard|Blvd"
    r"|Parkway|Pkwy|Freeway|Fwy|Interstate|I-\d+"
)


@dataclass(frozen=True)
class PatternRule:
    """A named regular expression applied to plain instruction text."""
    name: str
    pattern: re.Pattern

    def search(self, text: str) -> Optional[re.Match]:
        return self.pattern.search(text)


ROAD_NAME_RULES = (
    PatternRule(
        "road_reference",
        re.compile(
            r"\b(?:on|onto|via)\s+"
            rf"((?:[A-Z0-9\-]+\s+)*?(?:{ROAD_SUFFIXES})\b(?:\s+[NSEW]\b)?)",
            re.IGNORECASE,
        ),
    ),
)

# "I-95" is the interstate shorthand used in most instructions
HIGHWAY_RULE = PatternRule(
    "highway", re.compile(r"highway|freeway|interstate|\bI-\d+\b", re.IGNORECASE)
)

TOLL_KEYWORD = "toll"


def match_road_name(text: str, rules: Iterable[PatternRule] = ROAD_NAME_RULES) -> Optional[str]:
    """Return the first road name captured by ``rules``, trimmed, or None."""
    for rule in rules:
        match = rule.search(text)
        if match:
            name = match.group(1).strip()
            if name:
                return name
    return None


def mentions_toll(text: str) -> bool:
    return TOLL_KEYWORD in text.lower()


def mentions_highway(text: str) -> bool:
    return HIGHWAY_RULE.search(text) is not None


def extract_major_roads(route: RawRoute) -> list[str]:
    """
    Collect up to three distinct road names from the first leg.

    Steps are scanned in order; only steps with instructions and a
    distance above the major-segment threshold are considered.
    """
    roads: list[str] = []
    for step in route.first_leg.steps:
        if len(roads) >= MAX_MAJOR_ROADS:
            break
        text = strip_html(step.instructions)
        if not text or step.distance.value <= MAJOR_SEGMENT_MIN_DISTANCE:
            continue
        name = match_road_name(text)
        if name and name not in roads:
            roads.append(name)
    return roads


def extract_via_points(summary: str) -> list[str]:
    return [part for part in summary.split(VIA_CONNECTOR) if part][:MAX_VIA_POINTS]


def _instruction_texts(route: RawRoute) -> list[str]:
    texts = (strip_html(step.instructions) for step in route.first_leg.steps)
    return [text for text in texts if text]


def build_candidate(route: RawRoute, index: int) -> RouteCandidate:
    """
    Build the display candidate for one provider route.

    Args:
        route: Raw route as returned by the provider
        index: Position of the route in the provider's response

    Returns:
        RouteCandidate in the same position, never re-ranked
    """
    leg = route.first_leg
    texts = _instruction_texts(route)

    return RouteCandidate(
        index=index,
        summary=route.summary or f"Route {index + 1}",
        distance_text=leg.distance.text,
        duration_text=leg.duration.text,
        duration_seconds=leg.duration.value,
        start_address=leg.start_address,
        end_address=leg.end_address,
        major_roads=tuple(extract_major_roads(route)),
        via_points=tuple(extract_via_points(route.summary)),
        warnings=tuple(route.warnings),
        has_tolls=any(mentions_toll(text) for text in texts),
        has_highway=any(mentions_highway(text) for text in texts),
        step_count=len(leg.steps),
        source_route=route,
    )


def build_candidates(routes: Iterable[RawRoute]) -> list[RouteCandidate]:
    """Build one candidate per route, preserving provider order."""
    return [build_candidate(route, index) for index, route in enumerate(routes)]
