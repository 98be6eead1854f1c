"""Shared fixtures: a seeded world and a fake event loop for timers."""

import heapq
import itertools
import random

import pytest

from infection_server.services.game_service import GameService


class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Deterministic stand-in for ``loop.call_later``; time only moves on ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    def pending(self):
        return [h for _, _, h in self._queue if not h.cancelled]

    def advance(self, seconds):
        """Fire every live callback due within ``seconds``, in deadline order."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                handle.callback(*handle.args)
        self.now = target


class Recorder:
    """Collects broadcast messages."""

    def __init__(self):
        self.messages = []

    def __call__(self, message, exclude=None):
        self.messages.append(message)

    def of_type(self, message_type):
        return [m for m in self.messages if m["type"] == message_type]


@pytest.fixture
def game():
    return GameService(npc_count=0, rng=random.Random(7))


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def recorder():
    return Recorder()
