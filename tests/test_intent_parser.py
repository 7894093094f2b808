"""Tests for free-text intent extraction and the navigation session."""

import asyncio

import pytest

from conftest import FakeModel, FakeProvider

from navigator.config import GEMINI_KEY_PLACEHOLDER
from navigator.errors import EmptyResponseError, ModelAPIError, ParseError, ValidationError
from navigator.models import NavigationRequest, NLExtractionResult, TravelMode
from navigator.pipeline.intent_parser import IntentExtractor, build_prompt, parse_intent_reply
from navigator.pipeline.selection import RouteSelectionStateMachine, SelectionPhase
from navigator.pipeline.session import NavigationSession
from navigator.utils.request_log import LogType, RequestLog


LA_TO_SF = '{"start": "Los Angeles", "destination": "San Francisco", "transportMode": "DRIVING"}'


class TestParseReply:
    """Test parsing the model's free-text reply."""

    def test_plain_object(self):
        result = parse_intent_reply(LA_TO_SF)
        assert result == NLExtractionResult(
            start="Los Angeles",
            destination="San Francisco",
            transport_mode=TravelMode.DRIVING,
        )

    def test_code_fenced_object(self):
        reply = 'Sure!\n```json\n{"start": "Riga", "destination": "Vilnius"}\n```'
        result = parse_intent_reply(reply)

        assert result.start == "Riga"
        assert result.destination == "Vilnius"
        assert result.transport_mode is None

    def test_first_object_wins(self):
        result = parse_intent_reply('{"start": "A"} and later {"start": "B"}')
        assert result.start == "A"

    def test_no_object(self):
        with pytest.raises(ParseError):
            parse_intent_reply("I'm sorry, I can't help with that.")

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_intent_reply("{start: Los Angeles}")

    def test_wrong_field_type(self):
        with pytest.raises(ParseError):
            parse_intent_reply('{"start": 42, "destination": "Boston"}')

    def test_mode_is_normalised(self):
        assert parse_intent_reply('{"transportMode": "walking"}').transport_mode is TravelMode.WALKING

    def test_unknown_mode_is_dropped(self):
        result = parse_intent_reply('{"start": "A", "destination": "B", "transportMode": "FLYING"}')

        assert result.transport_mode is None
        assert result.start == "A"

    def test_apply_only_present_fields(self):
        request = NavigationRequest(origin="Home", destination="Work", mode=TravelMode.TRANSIT)

        patched = parse_intent_reply('{"destination": "Gym"}').apply(request)

        assert patched == NavigationRequest(origin="Home", destination="Gym", mode=TravelMode.TRANSIT)
        assert request.destination == "Work"


def test_prompt_embeds_query_and_example():
    prompt = build_prompt("Walk me to the park")

    assert 'Query: "Walk me to the park"' in prompt
    assert '{"start": "New York, NY", "destination": "Boston, MA", "transportMode": "DRIVING"}' in prompt
    for mode in TravelMode:
        assert mode.value in prompt


@pytest.mark.asyncio
class TestIntentExtractor:
    """Test the extractor against a fake model client."""

    async def test_extract(self):
        model = FakeModel((0, LA_TO_SF))
        log = RequestLog()
        extractor = IntentExtractor(model, log=log)

        result = await extractor.extract("Drive me from Los Angeles to San Francisco", "key-123")

        assert result.start == "Los Angeles"
        assert result.destination == "San Francisco"
        assert result.transport_mode is TravelMode.DRIVING
        call = model.calls[0]
        assert call["credential"] == "key-123"
        assert call["temperature"] == 0.1
        assert call["max_output_tokens"] == 200
        assert "Drive me from Los Angeles to San Francisco" in call["prompt"]
        assert [e.type for e in log.entries] == [LogType.REQUEST, LogType.RESPONSE]

    @pytest.mark.parametrize("query,credential", [
        ("", "key"),
        ("   ", "key"),
        ("Drive to Boston", ""),
        ("Drive to Boston", GEMINI_KEY_PLACEHOLDER),
    ])
    async def test_validation(self, query, credential):
        model = FakeModel()
        with pytest.raises(ValidationError):
            await IntentExtractor(model).extract(query, credential)
        assert model.calls == []

    @pytest.mark.parametrize("reply", [None, ""])
    async def test_empty_response(self, reply):
        with pytest.raises(EmptyResponseError):
            await IntentExtractor(FakeModel((0, reply))).extract("Drive to Boston", "key")


def make_session(*replies, gemini_key="key-123"):
    log = RequestLog()
    session = NavigationSession(
        selection=RouteSelectionStateMachine(FakeProvider(), log=log),
        extractor=IntentExtractor(FakeModel(*replies), log=log),
    )
    session.settings = session.settings.model_copy(update={"gemini_api_key": gemini_key})
    return session


@pytest.mark.asyncio
class TestNavigationSession:
    """Test how extraction results reach the pending request."""

    async def test_interpret_applies_result(self):
        session = make_session((0, LA_TO_SF))

        result = await session.interpret("Drive me from Los Angeles to San Francisco")

        assert result is not None
        assert session.request.origin == "Los Angeles"
        assert session.request.destination == "San Francisco"
        assert session.request.mode is TravelMode.DRIVING

    async def test_parse_error_leaves_request_untouched(self):
        session = make_session((0, "Sorry, I could not work that out."))
        session.update(origin="Chicago", destination="Detroit", mode=TravelMode.TRANSIT)
        before = session.request

        with pytest.raises(ParseError):
            await session.interpret("Take me somewhere nice")

        assert session.request == before
        assert session.request.origin == "Chicago"
        assert session.request.destination == "Detroit"

    async def test_model_error_leaves_request_untouched(self):
        session = make_session((0, ModelAPIError("API key not valid", "INVALID_ARGUMENT")))
        session.update(origin="Chicago", destination="Detroit")

        with pytest.raises(ModelAPIError):
            await session.interpret("Drive to Boston")

        assert session.request.origin == "Chicago"

    async def test_missing_key(self):
        session = make_session(gemini_key=None)
        with pytest.raises(ValidationError):
            await session.interpret("Drive to Boston")

    async def test_superseded_extraction_is_discarded(self):
        session = make_session(
            (0.1, '{"start": "Old", "destination": "Request"}'),
            (0, '{"start": "New", "destination": "Request"}'),
        )

        first = asyncio.create_task(session.interpret("first"))
        await asyncio.sleep(0.01)
        second = await session.interpret("second")

        assert await first is None
        assert second.start == "New"
        assert session.request.origin == "New"

    async def test_interpret_then_navigate(self, ok_result):
        session = make_session((0, LA_TO_SF))
        session.selection.provider.responses.append((0, ok_result))

        await session.interpret("Drive me from Los Angeles to San Francisco")
        state = await session.navigate()

        assert state.phase is SelectionPhase.PRESENTING_CANDIDATES
        submitted = session.selection.provider.calls[0]
        assert submitted.origin == "Los Angeles"
        assert submitted.destination == "San Francisco"
