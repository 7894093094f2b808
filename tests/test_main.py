"""Tests for the terminal command handler."""

import pytest

from conftest import FakeModel, FakeProvider

from main import handle
from navigator.pipeline import IntentExtractor, NavigationSession, RouteSelectionStateMachine, SelectionPhase


async def presenting_session(result):
    session = NavigationSession(
        selection=RouteSelectionStateMachine(FakeProvider((0, result))),
        extractor=IntentExtractor(FakeModel()),
    )
    session.update(origin="New York, NY", destination="Boston, MA")
    await session.navigate()
    return session


@pytest.mark.asyncio
class TestHandle:
    """Test commands that act on presented routes."""

    async def test_pick_selects_route(self, ok_result):
        session = await presenting_session(ok_result)

        await handle(session, "pick", "2")

        assert session.selection.state.phase is SelectionPhase.SELECTED
        assert session.selection.selected.index == 1

    async def test_pick_needs_a_number(self, ok_result):
        session = await presenting_session(ok_result)

        await handle(session, "pick", "first")

        assert session.selection.state.phase is SelectionPhase.PRESENTING_CANDIDATES
        assert len(session.selection.candidates) == 2
