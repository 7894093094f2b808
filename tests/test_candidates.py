"""Tests for route candidate building and the text heuristics."""

from conftest import make_route

from navigator.models import RawRoute
from navigator.pipeline.candidates import (
    build_candidate,
    build_candidates,
    extract_via_points,
    match_road_name,
    mentions_highway,
    mentions_toll,
)


class TestMatchers:
    """Test the pattern rules on plain instruction text."""

    def test_road_after_onto(self):
        assert match_road_name("Merge onto I-95 N") == "I-95 N"

    def test_road_after_on(self):
        assert match_road_name("Head north on Main St toward 1st Ave") == "Main St"

    def test_road_after_via(self):
        assert match_road_name("Continue via Pacific Coast Highway") == "Pacific Coast Highway"

    def test_case_insensitive(self):
        assert match_road_name("turn right ONTO elm street") == "elm street"

    def test_no_introducer_no_match(self):
        assert match_road_name("Take exit 10 toward Boston") is None

    def test_no_suffix_no_match(self):
        assert match_road_name("Turn left onto the ramp") is None

    def test_suffix_must_be_whole_word(self):
        assert match_road_name("Continue on Stanford") is None

    def test_toll(self):
        assert mentions_toll("Toll road ahead")
        assert mentions_toll("Partial TOLL")
        assert not mentions_toll("Turn left onto Main St")

    def test_highway(self):
        assert mentions_highway("Take the Pacific Coast Highway")
        assert mentions_highway("Merge onto the freeway")
        assert mentions_highway("Keep left to stay on Interstate 5")
        assert mentions_highway("Merge onto I-95 N")
        assert not mentions_highway("Turn right onto Elm Street")

    def test_via_points(self):
        assert extract_via_points("I-80 W and I-5 S") == ["I-80 W", "I-5 S"]
        assert extract_via_points("A and B and C") == ["A", "B"]
        assert extract_via_points("") == []


class TestBuildCandidate:
    """Test building one candidate from a raw route."""

    def test_copies_first_leg(self, sample_route):
        candidate = build_candidate(sample_route, 0)

        assert candidate.index == 0
        assert candidate.summary == "I-95 N"
        assert candidate.distance_text == "215 mi"
        assert candidate.duration_text == "1 hour"
        assert candidate.duration_seconds == 3600
        assert candidate.start_address == "New York, NY, USA"
        assert candidate.end_address == "Boston, MA, USA"
        assert candidate.step_count == 3
        assert candidate.source_route is sample_route

    def test_interstate_end_to_end(self, sample_route):
        """Only the long middle step names a road; it is an interstate."""
        candidate = build_candidate(sample_route, 0)

        assert candidate.major_roads == ("I-95 N",)
        assert candidate.has_highway is True
        assert candidate.has_tolls is False

    def test_plain_text_instructions(self):
        route = make_route([
            ("Head north on Main St", 200),
            ("Merge onto I-95 N", 5000),
            ("Take exit 10 toward Boston", 300),
        ])
        candidate = build_candidate(route, 0)

        assert "I-95 N" in candidate.major_roads
        assert candidate.has_highway

    def test_summary_fallback(self):
        route = make_route(["Head north on Main St"], summary="")
        candidate = build_candidate(route, 2)

        assert candidate.summary == "Route 3"
        assert candidate.via_points == ()

    def test_short_steps_do_not_name_roads(self):
        route = make_route([("Turn left onto Main St", 500), ("Turn right onto Elm St", 499)])
        assert build_candidate(route, 0).major_roads == ()

    def test_major_roads_unique_and_capped(self):
        route = make_route([
            ("Turn left onto Main St", 900),
            ("Continue on Main St", 900),
            ("Merge onto I-95 N", 9000),
            ("Take exit onto Route 1 Hwy", 9000),
            ("Keep right on Elm Avenue", 9000),
            ("Turn left onto Oak Rd", 9000),
        ])
        candidate = build_candidate(route, 0)

        assert candidate.major_roads == ("Main St", "I-95 N", "Route 1 Hwy")

    def test_tolls_detected_in_any_step(self):
        route = make_route([("Head west", 10), ("Toll road", 10)])
        assert build_candidate(route, 0).has_tolls

    def test_steps_without_instructions_are_ignored(self):
        route = make_route([(None, 10000), ("", 10000), ("Continue straight", 10000)])
        candidate = build_candidate(route, 0)

        assert candidate.major_roads == ()
        assert not candidate.has_tolls
        assert not candidate.has_highway
        assert candidate.step_count == 3

    def test_warnings_pass_through(self):
        route = make_route(["Go"], warnings=["Walking directions are in beta."])
        assert build_candidate(route, 0).warnings == ("Walking directions are in beta.",)

    def test_accepts_provider_payload(self):
        """Routes parsed from the web service use ``html_instructions``."""
        route = RawRoute.model_validate({
            "summary": "US-101 N and I-280 N and CA-1",
            "legs": [{
                "distance": {"text": "383 mi", "value": 616000},
                "duration": {"text": "5 hours 50 mins", "value": 21000},
                "start_address": "Los Angeles, CA, USA",
                "end_address": "San Francisco, CA, USA",
                "steps": [{
                    "html_instructions": "Merge onto <b>US-101 Freeway</b> (toll)",
                    "distance": {"text": "200 mi", "value": 320000},
                    "duration": {"text": "3 hours", "value": 10800},
                }],
            }],
        })
        candidate = build_candidate(route, 0)

        assert candidate.major_roads == ("US-101 Freeway",)
        assert candidate.via_points == ("US-101 N", "I-280 N")
        assert candidate.has_tolls and candidate.has_highway


class TestBuildCandidates:
    """Test building the full candidate list."""

    def test_preserves_provider_order(self, ok_result):
        candidates = build_candidates(ok_result.routes)

        assert [c.index for c in candidates] == [0, 1]
        assert candidates[0].summary == "I-95 N"
        assert candidates[1].summary == "Merritt Pkwy and CT-15 N"
        assert candidates[1].has_tolls
        assert candidates[1].via_points == ("Merritt Pkwy", "CT-15 N")

    def test_caps_hold_for_every_candidate(self, ok_result):
        for candidate in build_candidates(ok_result.routes):
            assert len(candidate.major_roads) <= 3
            assert len(set(candidate.major_roads)) == len(candidate.major_roads)
            assert len(candidate.via_points) <= 2
            assert candidate.step_count >= 1
