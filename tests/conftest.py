"""Shared fixtures: route builders and fakes for the external services."""

import asyncio

import pytest

from navigator.models import DirectionsResult, Leg, RawRoute, Step, TextValue


def make_step(instructions, meters=1000):
    return Step(
        instructions=instructions,
        distance=TextValue(text=f"{meters} m", value=meters),
        duration=TextValue(text="1 min", value=60),
    )


def make_route(steps, summary="I-95 N", warnings=(), duration=3600):
    """Build a one-leg route from ``(instructions, meters)`` pairs or plain strings."""
    built = [
        make_step(*step) if isinstance(step, tuple) else make_step(step)
        for step in steps
    ]
    return RawRoute(
        summary=summary,
        warnings=list(warnings),
        legs=[Leg(
            distance=TextValue(text="215 mi", value=346000),
            duration=TextValue(text="1 hour", value=duration),
            start_address="New York, NY, USA",
            end_address="Boston, MA, USA",
            steps=built,
        )],
    )


class FakeProvider:
    """Directions provider answering from a queue of ``(delay, result)`` pairs."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.settled = 0

    async def route(self, request):
        self.calls.append(request)
        delay, outcome = self.responses.pop(0)
        if delay:
            await asyncio.sleep(delay)
        self.settled += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeModel:
    """Generative model answering from a queue of ``(delay, reply)`` pairs."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def generate(self, prompt, credential, *, temperature, max_output_tokens):
        self.calls.append({
            "prompt": prompt,
            "credential": credential,
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        })
        delay, reply = self.replies.pop(0)
        if delay:
            await asyncio.sleep(delay)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def sample_route():
    return make_route([
        ("Head <b>north</b> on <b>Main St</b>", 300),
        ("Merge onto <b>I-95 N</b>", 120000),
        ("Take exit 10 toward <b>Boston</b>", 400),
    ])


@pytest.fixture
def ok_result(sample_route):
    alternate = make_route(
        [("Turn left onto Merritt Pkwy<div>Toll road</div>", 80000)],
        summary="Merritt Pkwy and CT-15 N",
        warnings=["This route has tolls."],
    )
    return DirectionsResult(status="OK", routes=[sample_route, alternate])
