"""Conflict detection and free-slot search."""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union

from core.config import (
    DEFAULT_BUFFER_MINUTES,
    HARD_OVERLAP_RATIO,
    MAX_SLOT_SUGGESTIONS,
    PREFERRED_END_HOUR,
    PREFERRED_START_HOUR,
    SEARCH_DAYS,
    SLOT_INCREMENT_MINUTES,
    SUGGESTION_END_HOUR,
    SUGGESTION_START_HOUR,
    TIMEZONE,
)
from core.date_utils import as_local, at_time, local_day, resolve_timezone, to_local
from models.entities import Conflict, ConflictSeverity, Event, TimeSlotSuggestion

logger = logging.getLogger(__name__)

Duration = Union[timedelta, int, float]


def _as_timedelta(duration: Duration) -> timedelta:
    """Accept a timedelta or a number of minutes."""
    if isinstance(duration, timedelta):
        return duration
    return timedelta(minutes=duration)


class ConflictDetector:
    """Classifies collisions between a candidate event and existing events."""

    def __init__(
        self,
        timezone: Union[str, tzinfo, None] = TIMEZONE,
        buffer_minutes: int = DEFAULT_BUFFER_MINUTES
    ):
        """
        Initialize the detector.

        Args:
            timezone: Local calendar used to place slots on a day
            buffer_minutes: Default gap below which non-overlapping events are adjacent
        """
        self.tz = resolve_timezone(timezone)
        self.buffer_minutes = buffer_minutes

    def detect_conflicts(
        self,
        candidate: Event,
        existing_events: list[Event],
        excluding_id: Optional[str] = None,
        buffer_minutes: Optional[int] = None
    ) -> list[Conflict]:
        """
        Detect conflicts between a candidate and existing events.

        Flexible existing events never conflict; a flexible candidate is
        still checked.

        Args:
            candidate: The event being created or edited
            existing_events: Events to check against (not modified)
            excluding_id: Event id to skip, e.g. the event being edited
            buffer_minutes: Adjacency window (defaults to the detector's)

        Returns:
            Conflicts sorted hard, soft, adjacent; input order within a tier
        """
        if buffer_minutes is None:
            buffer_minutes = self.buffer_minutes
        buffer = timedelta(minutes=buffer_minutes)

        conflicts = []
        for existing in existing_events:
            if excluding_id is not None and existing.id == excluding_id:
                continue
            if existing.is_flexible:
                continue

            severity = self._classify(candidate, existing, buffer)
            if severity is not None:
                conflicts.append(Conflict(event=existing, severity=severity))

        conflicts.sort(key=lambda c: c.severity.rank, reverse=True)

        if conflicts:
            logger.debug(
                "'%s' has %d conflict(s), most severe: %s",
                candidate.title, len(conflicts), conflicts[0].severity.value
            )
        return conflicts

    def _classify(
        self,
        candidate: Event,
        existing: Event,
        buffer: timedelta
    ) -> Optional[ConflictSeverity]:
        """Severity of a single pair, or None when they don't collide."""
        # Naive datetimes are wall-clock times in the configured zone
        new_start = as_local(candidate.start_date, self.tz)
        new_end = as_local(candidate.end_date, self.tz)
        existing_start = as_local(existing.start_date, self.tz)
        existing_end = as_local(existing.end_date, self.tz)

        if new_start < existing_end and new_end > existing_start:
            overlap = min(new_end, existing_end) - max(new_start, existing_start)
            shorter = min(new_end - new_start, existing_end - existing_start)

            # A zero-length event inside another one is fully covered
            if shorter <= timedelta(0):
                return ConflictSeverity.HARD
            if overlap / shorter > HARD_OVERLAP_RATIO:
                return ConflictSeverity.HARD
            return ConflictSeverity.SOFT

        gap = min(abs(new_start - existing_end), abs(existing_start - new_end))
        if timedelta(0) < gap < buffer:
            return ConflictSeverity.ADJACENT

        return None

    def has_conflicts(
        self,
        candidate: Event,
        existing_events: list[Event],
        excluding_id: Optional[str] = None,
        buffer_minutes: Optional[int] = None
    ) -> bool:
        """Quick check if an event has any conflicts."""
        return bool(self.detect_conflicts(candidate, existing_events, excluding_id, buffer_minutes))

    def most_severe_conflict(
        self,
        candidate: Event,
        existing_events: list[Event],
        excluding_id: Optional[str] = None,
        buffer_minutes: Optional[int] = None
    ) -> Optional[Conflict]:
        """Get the most severe conflict, if any."""
        conflicts = self.detect_conflicts(candidate, existing_events, excluding_id, buffer_minutes)
        return conflicts[0] if conflicts else None

    def is_time_slot_available(
        self,
        start: datetime,
        end: datetime,
        existing_events: list[Event],
        buffer_minutes: Optional[int] = None
    ) -> bool:
        """Check whether [start, end) collides with nothing."""
        probe = Event(title="Slot", start_date=start, end_date=end)
        return not self.detect_conflicts(probe, existing_events, buffer_minutes=buffer_minutes)

    def suggest_alternative_time_slots(
        self,
        duration: Duration,
        day: Union[date, datetime],
        existing_events: list[Event],
        start_hour: int = SUGGESTION_START_HOUR,
        end_hour: int = SUGGESTION_END_HOUR
    ) -> list[datetime]:
        """
        Suggest free start times on a day.

        Args:
            duration: Length of the event (timedelta or minutes)
            day: Day to search
            existing_events: Events to avoid
            start_hour: First candidate hour (inclusive)
            end_hour: Last candidate hour (exclusive)

        Returns:
            Up to MAX_SLOT_SUGGESTIONS start times in ascending order
        """
        length = _as_timedelta(duration)
        suggestions = []

        for minute in range(start_hour * 60, end_hour * 60, SLOT_INCREMENT_MINUTES):
            slot_start = at_time(day, minute // 60, minute % 60, self.tz)
            if self.is_time_slot_available(slot_start, slot_start + length, existing_events):
                suggestions.append(slot_start)
            if len(suggestions) >= MAX_SLOT_SUGGESTIONS:
                break

        return suggestions

    def find_next_available_slot(
        self,
        duration: Duration,
        starting_from: datetime,
        existing_events: list[Event],
        search_days: int = SEARCH_DAYS,
        preferred_start_hour: int = PREFERRED_START_HOUR,
        preferred_end_hour: int = PREFERRED_END_HOUR
    ) -> Optional[datetime]:
        """
        Find the first free slot that fits the duration.

        The first day is scanned from starting_from's own time so nothing
        earlier than "now" is proposed; later days start at the preferred hour.

        Args:
            duration: Length of the event (timedelta or minutes)
            starting_from: Earliest acceptable start
            existing_events: Events to avoid
            search_days: Number of days to search, including the first
            preferred_start_hour: Earliest hour on days after the first
            preferred_end_hour: Candidate starts stay before this hour

        Returns:
            Start of the first free slot, or None when the window is exhausted
        """
        length = _as_timedelta(duration)
        local_start = to_local(starting_from, self.tz)
        first_day = local_day(starting_from, self.tz)

        first_minute = local_start.hour * 60 + local_start.minute
        if local_start.second or local_start.microsecond:
            first_minute += 1

        for day_offset in range(search_days):
            search_day = first_day + timedelta(days=day_offset)
            start_minute = first_minute if day_offset == 0 else preferred_start_hour * 60

            for minute in range(start_minute, preferred_end_hour * 60, SLOT_INCREMENT_MINUTES):
                slot_start = at_time(search_day, minute // 60, minute % 60, self.tz, like=starting_from)
                if self.is_time_slot_available(slot_start, slot_start + length, existing_events):
                    return slot_start

        logger.debug(
            "No %s slot in the %d day(s) from %s",
            length, search_days, starting_from.isoformat()
        )
        return None

    def get_formatted_suggestions(
        self,
        duration: Duration,
        day: Union[date, datetime],
        existing_events: list[Event],
        count: int = MAX_SLOT_SUGGESTIONS
    ) -> list[TimeSlotSuggestion]:
        """Alternative slots paired with their end times."""
        length = _as_timedelta(duration)
        starts = self.suggest_alternative_time_slots(length, day, existing_events)
        return [
            TimeSlotSuggestion(start_date=start, end_date=start + length)
            for start in starts[:count]
        ]
