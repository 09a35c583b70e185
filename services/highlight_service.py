"""Highlight streaks, statistics and journaling prompts."""

import logging
import random
from collections import Counter
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional, Union

from core.config import (
    RECENT_MOOD_WINDOW,
    SEASONAL_BASE_THRESHOLD,
    STREAK_MILESTONES,
    TIMEZONE,
    WEEK_START,
)
from core.date_utils import as_local, local_day, now as current_time, resolve_timezone, same_month, same_week
from models.entities import DayEntry, Event, EventType, HighlightStats, MoodEmoji, Season

logger = logging.getLogger(__name__)

DayLike = Union[date, datetime]

# Canonical prompt and alternative phrasings, keyed by date.weekday()
WEEKDAY_PROMPTS: dict[int, tuple[str, list[str]]] = {
    6: ("What made this week special?", [       # Sunday - reflection
        "What are you taking into the new week?",
        "What moment from this week stands out?",
    ]),
    0: ("What are you grateful for today?", [    # Monday - gratitude
        "What's bringing you peace today?",
        "What are you looking forward to this week?",
    ]),
    1: ("What's one thing you learned today?", [  # Tuesday - learning
        "What challenged you in a good way?",
        "What new perspective did you gain?",
    ]),
    2: ("What's your win so far this week?", [   # Wednesday - momentum
        "What progress are you proud of?",
        "What's keeping you motivated?",
    ]),
    3: ("Who made a positive impact on your day?", [  # Thursday - connection
        "What meaningful conversation did you have?",
        "Who are you grateful to have in your life?",
    ]),
    4: ("What brought you joy today?", [         # Friday - joy
        "What made you smile today?",
        "What are you celebrating this week?",
    ]),
    5: ("What surprised you today?", [           # Saturday - adventure
        "What made today unique?",
        "What adventure did you have?",
    ]),
}

SEASONAL_PROMPTS = {
    Season.WINTER: "What brought you warmth today?",
    Season.SPRING: "What felt fresh or new today?",
    Season.SUMMER: "What sunny moment stood out today?",
    Season.FALL: "What are you harvesting from this season?",
}

MILESTONE_PROMPTS = {
    3: "Three days strong! What are you proud of?",
    7: "A whole week! 🔥 What's been your favorite moment?",
    14: "Two weeks! 🔥🔥 What surprised you most recently?",
    30: "30 days! 🏆 What's been your biggest win this month?",
    50: "50 days! You're amazing! What keeps you going?",
    100: "100 days! 🎉 What moment sums up your journey?",
}

# Completed-event prompts in priority order
EVENT_PROMPTS: list[tuple[EventType, list[str]]] = [
    (EventType.SOCIAL, [
        'How was "{title}"?',
        'What was the best part of "{title}"?',
        'Any memorable moments from "{title}"?',
    ]),
    (EventType.WORK, [
        'How did "{title}" go?',
        'What did you accomplish in "{title}"?',
        'Any breakthroughs from "{title}"?',
    ]),
    (EventType.SOLO_DATE, [
        'How was your solo time during "{title}"?',
        'What did you enjoy most about "{title}"?',
        'How did "{title}" make you feel?',
    ]),
    (EventType.HEALTH, [
        'How do you feel after "{title}"?',
        'What did you notice during "{title}"?',
        'Any wins from "{title}"?',
    ]),
    (EventType.DEEP_WORK, [
        'What did you accomplish during "{title}"?',
        "Any insights from your deep work session?",
        'How focused were you during "{title}"?',
    ]),
]

DISCOVERY_PROMPTS = [
    "What small joy did you notice today?",
    "What made you smile, even briefly?",
    "What's something you did well today?",
    "Who or what brought positivity to your day?",
    "What moment would you want to remember?",
]

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class HighlightService:
    """Computes streaks and picks prompts from a caller-supplied entry list."""

    def __init__(
        self,
        timezone: Union[str, tzinfo, None] = TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        week_start: int = WEEK_START
    ):
        """
        Initialize the service.

        Args:
            timezone: Local calendar used to normalize entry dates
            clock: Returns "now"; defaults to the wall clock
            rng: Random source for prompt variation (randint/choice)
            week_start: First day of the week, date.weekday() numbering
        """
        self.tz = resolve_timezone(timezone)
        self.clock = clock or (lambda: current_time(self.tz))
        self.rng = rng or random.Random()
        self.week_start = week_start

    # -------------------------------------------------------------------------
    # Streaks
    # -------------------------------------------------------------------------

    def _day(self, value: DayLike) -> date:
        return local_day(value, self.tz)

    def _entry_day(self, entry: DayEntry) -> date:
        return entry.normalized_date(self.tz)

    def _today(self) -> date:
        return self._day(self.clock())

    def _highlighted(self, entries: list[DayEntry]) -> list[DayEntry]:
        return [e for e in entries if e.has_highlight]

    def calculate_current_streak(self, entries: list[DayEntry]) -> int:
        """
        Count consecutive highlighted days ending at the most recent one.

        The streak is live only if the most recent highlight is today or
        yesterday. Entries are expected to be unique per day.
        """
        highlighted = sorted(
            self._highlighted(entries), key=self._entry_day, reverse=True
        )
        if not highlighted:
            return 0

        most_recent = self._entry_day(highlighted[0])
        if (self._today() - most_recent).days > 1:
            return 0

        streak = 1
        expected = most_recent - timedelta(days=1)
        for entry in highlighted[1:]:
            if self._entry_day(entry) == expected:
                streak += 1
                expected -= timedelta(days=1)
            else:
                break

        return streak

    def calculate_longest_streak(self, entries: list[DayEntry]) -> int:
        """Longest run of consecutive highlighted days ever."""
        days = sorted(self._entry_day(e) for e in self._highlighted(entries))
        if not days:
            return 0

        longest = 1
        current = 1
        for previous, day in zip(days, days[1:]):
            if day - previous == timedelta(days=1):
                current += 1
                longest = max(longest, current)
            else:
                current = 1

        return longest

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def total_highlight_days(self, entries: list[DayEntry]) -> int:
        return len(self._highlighted(entries))

    def _newest_first(self, entries: list[DayEntry]) -> list[DayEntry]:
        return sorted(entries, key=self._entry_day, reverse=True)

    def highlights_for_month(self, day: DayLike, entries: list[DayEntry]) -> list[DayEntry]:
        target = self._day(day)
        return self._newest_first([
            e for e in self._highlighted(entries) if same_month(self._entry_day(e), target)
        ])

    def highlights_for_week(self, day: DayLike, entries: list[DayEntry]) -> list[DayEntry]:
        target = self._day(day)
        return self._newest_first([
            e for e in self._highlighted(entries)
            if same_week(self._entry_day(e), target, self.week_start)
        ])

    def recent_highlights(self, count: int, entries: list[DayEntry]) -> list[DayEntry]:
        return self._newest_first(self._highlighted(entries))[:max(count, 0)]

    def calculate_stats(self, entries: list[DayEntry]) -> HighlightStats:
        """Snapshot of all highlight statistics at the current clock time."""
        today = self._today()
        return HighlightStats(
            current_streak=self.calculate_current_streak(entries),
            longest_streak=self.calculate_longest_streak(entries),
            total_days=self.total_highlight_days(entries),
            this_week_count=len(self.highlights_for_week(today, entries)),
            this_month_count=len(self.highlights_for_month(today, entries)),
        )

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    def contextual_prompt(self, day: Optional[DayLike] = None, current_streak: int = 0) -> str:
        """Milestone prompt when the streak hits one, else the weekday prompt."""
        milestone = self.streak_based_prompt(current_streak)
        if milestone is not None:
            return milestone
        return self.day_of_week_prompt(day if day is not None else self.clock())

    def event_aware_prompt(
        self,
        events: list[Event],
        day: Optional[DayLike] = None,
        current_streak: int = 0
    ) -> str:
        """Prompt about the day's events, falling back to contextual_prompt."""
        prompt = self._event_based_prompt(events)
        if prompt is not None:
            return prompt
        return self.contextual_prompt(day, current_streak)

    def _event_based_prompt(self, events: list[Event]) -> Optional[str]:
        if not events:
            return None

        now = as_local(self.clock(), self.tz)
        completed = [e for e in events if as_local(e.end_date, self.tz) < now]

        for event_type, templates in EVENT_PROMPTS:
            match = next((e for e in completed if e.event_type == event_type), None)
            if match is not None:
                return self.rng.choice(templates).format(title=match.title)

        if completed:
            return f'How did "{completed[0].title}" go today?'

        if any(as_local(e.start_date, self.tz) > now for e in events):
            return "What are you looking forward to today?"

        return None

    def streak_based_prompt(self, streak: int) -> Optional[str]:
        """Prompt for an exact milestone streak, None otherwise."""
        if streak in STREAK_MILESTONES:
            return MILESTONE_PROMPTS.get(streak)
        return None

    def day_of_week_prompt(self, day: DayLike) -> str:
        target = self._day(day)
        base, alternatives = WEEKDAY_PROMPTS[target.weekday()]
        return self._seasonal_variation(base, self.season_for(target), alternatives)

    def _seasonal_variation(self, base: str, season: Season, alternatives: list[str]) -> str:
        # Roughly 70% canonical, 30% alternative wording
        if self.rng.randint(1, 10) <= SEASONAL_BASE_THRESHOLD:
            return base
        return self.rng.choice(alternatives + [SEASONAL_PROMPTS[season]])

    @staticmethod
    def season_for(day: DayLike) -> Season:
        month = day.month
        if month in (12, 1, 2):
            return Season.WINTER
        if month in (3, 4, 5):
            return Season.SPRING
        if month in (6, 7, 8):
            return Season.SUMMER
        return Season.FALL

    def weekly_reflection_prompt(self, week_highlights: list[DayEntry]) -> str:
        """End-of-week prompt based on how many highlights the week had."""
        count = len(week_highlights)

        if count == 0:
            return "What's one thing you'd like to remember from this week?"
        if count >= 5:
            return "Amazing week! What patterns do you notice in your highlights?"
        if count >= 3:
            return "Great momentum this week! What theme connects your highlights?"

        moods = [e.mood_emoji for e in week_highlights if e.mood_emoji]
        if any(mood in MoodEmoji.POSITIVE for mood in moods):
            return "You've had some great moments! What made this week special?"

        return "Looking back at your week, what stands out most?"

    def discovery_prompt(self, all_highlights: list[DayEntry], current_streak: int = 0) -> str:
        """
        Prompt drawn from patterns in the highlight history.

        Checks the favourite weekday (3+ highlights and it's today), then the
        moods of the most recent entries, then picks a generic prompt.
        """
        weekday_counts = Counter(self._entry_day(e).weekday() for e in all_highlights)
        if weekday_counts:
            top_weekday, count = weekday_counts.most_common(1)[0]
            if count >= 3 and self._today().weekday() == top_weekday:
                return f"{WEEKDAY_NAMES[top_weekday]}s seem to bring good moments! What's today's highlight?"

        recent = self._newest_first(all_highlights)[:RECENT_MOOD_WINDOW]
        moods = [e.mood_emoji for e in recent if e.mood_emoji]

        if sum(1 for m in moods if m in (MoodEmoji.AMAZING, MoodEmoji.EXCITED)) >= 3:
            return "You've been having amazing moments lately! What's exciting you?"
        if moods.count(MoodEmoji.GRATEFUL) >= 3:
            return "Gratitude seems important to you. What are you thankful for today?"

        return self.rng.choice(DISCOVERY_PROMPTS)

    @staticmethod
    def encouraging_prompt(current_streak: int, longest_streak: int) -> str:
        if current_streak == 0:
            if longest_streak > 0:
                return f"Ready to start a new streak? You've done {longest_streak} days before!"
            return "Start your highlight streak today!"
        if current_streak == longest_streak and longest_streak >= 7:
            return "You're at your best streak ever! 🌟 Keep going!"
        if current_streak >= 30:
            return f"Incredible dedication! {current_streak} days strong! 🔥🔥🔥"
        if current_streak >= 14:
            return f"You're on fire! {current_streak} days in a row! 🔥🔥"
        if current_streak >= 7:
            return "Amazing! One week streak! 🔥"
        return f"Great momentum! {current_streak} day streak! ⭐️"
