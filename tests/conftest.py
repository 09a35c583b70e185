"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta

import pytest

from models.entities import DayEntry, Event

# Tuesday evening
NOW = datetime(2026, 3, 10, 20, 0)


class ScriptedRandom:
    """Random source returning scripted values."""

    def __init__(self, ints=(), pick=0):
        self.ints = list(ints)
        self.pick = pick
        self.choices = []

    def randint(self, a, b):
        return self.ints.pop(0) if self.ints else a

    def choice(self, seq):
        self.choices.append(list(seq))
        return seq[self.pick % len(seq)]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def make_event():
    """Factory for events on 2026-03-10 given hh:mm strings."""
    def _make(start, end, title="Event", day=NOW.date(), **kwargs):
        start_h, start_m = (int(p) for p in start.split(":"))
        end_h, end_m = (int(p) for p in end.split(":"))
        base = datetime.combine(day, datetime.min.time())
        return Event(
            title=title,
            start_date=base + timedelta(hours=start_h, minutes=start_m),
            end_date=base + timedelta(hours=end_h, minutes=end_m),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_entry():
    """Factory for highlighted entries a number of days before NOW."""
    def _make(days_ago, text="Good day", mood=None):
        return DayEntry(
            date=NOW.date() - timedelta(days=days_ago),
            highlight_text=text,
            mood_emoji=mood,
        )
    return _make
