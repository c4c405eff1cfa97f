"""Test doubles and polling helpers shared by the test modules."""
import asyncio
import time

import pytest


class FakeClock:
    """Manually advanced clock usable as both wall and monotonic time."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingWork:
    """Work function that records the ids it sees, in execution order."""

    def __init__(self, fail_on=None, on_call=None):
        self.seen = []
        self.fail_on = set(fail_on or ())
        self.on_call = on_call

    async def __call__(self, item_id):
        if self.on_call is not None:
            self.on_call(item_id)
        if item_id in self.fail_on:
            raise RuntimeError(f"external API rejected id {item_id}")
        self.seen.append(item_id)
        return {"id": item_id, "data": "processed"}


async def wait_for(predicate, timeout: float = 5.0, step: float = 0.01) -> None:
    """Poll ``predicate`` until it holds or fail the test after ``timeout``."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("condition not met before timeout")
        await asyncio.sleep(step)


