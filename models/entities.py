"""Domain models for the planner core."""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Optional, Union

from core.date_utils import local_day


class EventType(Enum):
    """Event categories; OTHER catches tags we don't recognise."""
    WORK = "work"
    PERSONAL = "personal"
    SOCIAL = "social"
    SOLO_DATE = "solo_date"
    CLEANING = "cleaning"
    ADMIN = "admin"
    DEEP_WORK = "deep_work"
    HEALTH = "health"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> Optional["EventType"]:
        """
        Map a stored string tag to an EventType.

        Accepts snake_case ("solo_date") and camelCase ("soloDate") spellings.
        Returns None for a missing tag and OTHER for an unknown one.
        """
        if not tag or not tag.strip():
            return None
        text = tag.strip()
        if not text.isupper():
            text = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", text)
        normalized = text.lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER


class ConflictSeverity(Enum):
    """How badly a candidate collides with an existing event."""
    HARD = "hard"          # more than half of the shorter event overlaps
    SOFT = "soft"          # partial overlap
    ADJACENT = "adjacent"  # inside the buffer window, no overlap

    @property
    def rank(self) -> int:
        return {"hard": 3, "soft": 2, "adjacent": 1}[self.value]


class Season(Enum):
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"


class MoodEmoji:
    """Mood tags a day entry can carry."""
    AMAZING = "🤩"
    HAPPY = "😊"
    GOOD = "🙂"
    OKAY = "😐"
    SAD = "😔"
    STRESSED = "😰"
    EXCITED = "🎉"
    GRATEFUL = "🙏"
    PROUD = "💪"
    RELAXED = "😌"

    ALL = (AMAZING, HAPPY, GOOD, OKAY, SAD, STRESSED, EXCITED, GRATEFUL, PROUD, RELAXED)
    POSITIVE = (AMAZING, HAPPY, EXCITED, PROUD, GRATEFUL)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Event:
    """Represents a calendar event."""
    title: str
    start_date: datetime
    end_date: datetime
    id: str = field(default_factory=_new_id)
    location: Optional[str] = None
    notes: Optional[str] = None
    event_type: Optional[EventType] = None
    custom_type: Optional[str] = None  # user-defined template tag
    is_flexible: bool = False
    is_tentative: bool = False

    @property
    def duration(self) -> timedelta:
        return self.end_date - self.start_date

    @property
    def duration_formatted(self) -> str:
        total = int(self.duration.total_seconds())
        hours = total // 3600
        minutes = (total % 3600) // 60

        if hours > 0 and minutes > 0:
            return f"{hours}h {minutes}m"
        elif hours > 0:
            return f"{hours}h"
        return f"{minutes}m"

    @property
    def is_all_day(self) -> bool:
        return (
            (self.start_date.hour, self.start_date.minute) == (0, 0)
            and (self.end_date.hour, self.end_date.minute) == (23, 59)
        )

    def overlaps(self, other: "Event") -> bool:
        return self.start_date < other.end_date and self.end_date > other.start_date

    def is_on_same_day(self, day: Union[date, datetime]) -> bool:
        if isinstance(day, datetime):
            day = day.date()
        return self.start_date.date() == day


@dataclass
class DayEntry:
    """A calendar day with an optional highlight and mood."""
    date: Union[date, datetime]
    highlight_text: Optional[str] = None
    mood_emoji: Optional[str] = None
    id: str = field(default_factory=_new_id)

    @property
    def has_highlight(self) -> bool:
        return self.highlight_text is not None and bool(self.highlight_text.strip())

    def normalized_date(self, tz: Optional[tzinfo] = None) -> date:
        """The entry's calendar day in tz (or its own zone), time of day discarded."""
        return local_day(self.date, tz)

    def add_highlight(self, text: str, emoji: Optional[str] = None) -> "DayEntry":
        return replace(self, highlight_text=text, mood_emoji=emoji)

    def clear_highlight(self) -> "DayEntry":
        return replace(self, highlight_text=None, mood_emoji=None)


@dataclass(frozen=True)
class Conflict:
    """An existing event the candidate collides with."""
    event: Event
    severity: ConflictSeverity


@dataclass(frozen=True)
class TimeSlotSuggestion:
    """A free slot offered as an alternative time."""
    start_date: datetime
    end_date: datetime


@dataclass
class ParsedEvent:
    """Structured result of quick-add parsing."""
    title: str
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    event_type: Optional[EventType] = None
    confidence: float = 0.0  # heuristic ranking signal, not a probability

    @property
    def duration_minutes(self) -> int:
        return int((self.end_date - self.start_date).total_seconds() // 60)

    def to_event(self, **overrides) -> Event:
        """Build an Event candidate, e.g. to check it for conflicts."""
        values = dict(
            title=self.title,
            start_date=self.start_date,
            end_date=self.end_date,
            location=self.location,
            event_type=self.event_type,
        )
        values.update(overrides)
        return Event(**values)


@dataclass(frozen=True)
class HighlightStats:
    """Aggregate highlight statistics at a point in time."""
    current_streak: int
    longest_streak: int
    total_days: int
    this_week_count: int
    this_month_count: int
