"""
Tests for ConflictDetector.

Tests cover:
- Severity classification and its boundaries
- Flexible and excluded events
- Result ordering
- Slot suggestions and next-available search
"""

from datetime import date, datetime, timedelta

import pytest
import pytz

from models.entities import ConflictSeverity, Event
from services.conflict_detector import ConflictDetector

DAY = date(2026, 3, 10)


@pytest.fixture
def detector():
    return ConflictDetector(timezone=None, buffer_minutes=15)


def _at(hour, minute=0, second=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute, second)


class TestDetectConflicts:
    """Tests for detect_conflicts severity rules."""

    def test_majority_overlap_is_hard(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("10:15", "11:15", title="Standup")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert len(conflicts) == 1
        assert conflicts[0].severity == ConflictSeverity.HARD
        assert conflicts[0].event is existing

    def test_exactly_half_overlap_is_soft(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("10:30", "11:30")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert [c.severity for c in conflicts] == [ConflictSeverity.SOFT]

    def test_just_over_half_overlap_is_hard(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = Event(title="x", start_date=_at(10, 29, 59), end_date=_at(11, 29, 59))

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert [c.severity for c in conflicts] == [ConflictSeverity.HARD]

    def test_ratio_uses_shorter_event(self, detector, make_event):
        candidate = make_event("10:00", "10:30")
        existing = make_event("09:00", "12:00")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert conflicts[0].severity == ConflictSeverity.HARD

    def test_small_overlap_is_soft(self, detector, make_event):
        candidate = make_event("10:00", "12:00")
        existing = make_event("11:50", "13:00")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert conflicts[0].severity == ConflictSeverity.SOFT

    def test_zero_duration_candidate_inside_event_is_hard(self, detector, make_event):
        candidate = make_event("10:30", "10:30")
        existing = make_event("10:00", "11:00")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert [c.severity for c in conflicts] == [ConflictSeverity.HARD]

    def test_zero_duration_existing_inside_candidate_is_hard(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("10:30", "10:30")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert [c.severity for c in conflicts] == [ConflictSeverity.HARD]


class TestAdjacency:
    """Tests for the buffer window around non-overlapping events."""

    def test_gap_equal_to_buffer_is_not_a_conflict(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("11:15", "12:00")

        assert detector.detect_conflicts(candidate, [existing]) == []

    def test_gap_just_under_buffer_is_adjacent(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = Event(title="x", start_date=_at(11, 14, 59), end_date=_at(12))

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert [c.severity for c in conflicts] == [ConflictSeverity.ADJACENT]

    def test_adjacent_before_candidate(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("09:00", "09:50")

        conflicts = detector.detect_conflicts(candidate, [existing])

        assert [c.severity for c in conflicts] == [ConflictSeverity.ADJACENT]

    def test_back_to_back_is_not_a_conflict(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("11:00", "12:00")

        assert detector.detect_conflicts(candidate, [existing]) == []

    def test_buffer_override(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = make_event("11:20", "12:00")

        assert detector.detect_conflicts(candidate, [existing]) == []
        conflicts = detector.detect_conflicts(candidate, [existing], buffer_minutes=30)
        assert [c.severity for c in conflicts] == [ConflictSeverity.ADJACENT]


class TestFilteringAndOrdering:
    """Tests for skipped events and result order."""

    def test_flexible_existing_event_never_conflicts(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        flexible = make_event("10:00", "11:00", is_flexible=True)
        nearby = make_event("11:05", "11:30", is_flexible=True)

        assert detector.detect_conflicts(candidate, [flexible, nearby]) == []

    def test_flexible_candidate_is_still_checked(self, detector, make_event):
        candidate = make_event("10:00", "11:00", is_flexible=True)
        existing = make_event("10:00", "11:00")

        assert detector.has_conflicts(candidate, [existing])

    def test_excluding_id_skips_the_edited_event(self, detector, make_event):
        original = make_event("10:00", "11:00")
        edited = make_event("10:30", "11:30")
        edited.id = original.id

        assert detector.detect_conflicts(edited, [original], excluding_id=original.id) == []
        assert detector.detect_conflicts(edited, [original]) != []

    def test_sorted_by_severity_with_stable_ties(self, detector, make_event):
        candidate = make_event("10:00", "12:00")
        adjacent = make_event("12:05", "12:30", title="adjacent")
        soft = make_event("11:50", "13:00", title="soft")
        hard_a = make_event("10:00", "11:00", title="hard-a")
        hard_b = make_event("11:00", "11:30", title="hard-b")

        conflicts = detector.detect_conflicts(candidate, [adjacent, hard_a, soft, hard_b])

        assert [c.event.title for c in conflicts] == ["hard-a", "hard-b", "soft", "adjacent"]

    def test_existing_events_are_not_modified(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = [make_event("10:30", "11:30"), make_event("09:00", "09:55")]
        snapshot = list(existing)

        detector.detect_conflicts(candidate, existing)

        assert existing == snapshot

    @pytest.mark.parametrize("a, b", [
        (("10:00", "11:00"), ("10:30", "11:30")),
        (("10:00", "11:00"), ("11:00", "12:00")),
        (("10:00", "10:30"), ("09:00", "12:00")),
        (("10:00", "11:00"), ("13:00", "14:00")),
        (("10:00", "11:00"), ("10:59", "11:01")),
    ])
    def test_overlap_detection_is_symmetric(self, detector, make_event, a, b):
        first, second = make_event(*a), make_event(*b)

        forward = detector.has_conflicts(first, [second], buffer_minutes=0)
        backward = detector.has_conflicts(second, [first], buffer_minutes=0)

        assert forward == backward

    def test_most_severe_conflict(self, detector, make_event):
        candidate = make_event("10:00", "11:00")
        existing = [make_event("11:05", "11:30"), make_event("10:00", "11:00", title="clash")]

        worst = detector.most_severe_conflict(candidate, existing)

        assert worst.event.title == "clash"
        assert worst.severity == ConflictSeverity.HARD
        assert detector.most_severe_conflict(candidate, []) is None


class TestSlotSearch:
    """Tests for slot availability and suggestions."""

    def test_time_slot_available(self, detector, make_event):
        existing = [make_event("10:00", "11:00")]

        assert detector.is_time_slot_available(_at(12), _at(13), existing)
        assert not detector.is_time_slot_available(_at(10, 30), _at(11, 30), existing)
        assert not detector.is_time_slot_available(_at(11, 5), _at(12), existing)
        assert detector.is_time_slot_available(_at(11, 5), _at(12), existing, buffer_minutes=0)

    def test_suggestions_on_empty_day(self, detector):
        slots = detector.suggest_alternative_time_slots(timedelta(hours=1), DAY, [])

        assert slots == [_at(9), _at(9, 15), _at(9, 30)]

    def test_suggestions_skip_busy_morning(self, detector, make_event):
        existing = [make_event("09:00", "12:00")]

        slots = detector.suggest_alternative_time_slots(60, DAY, existing)

        assert slots == [_at(12), _at(12, 15), _at(12, 30)]

    def test_suggestions_stay_inside_window(self, detector, make_event):
        existing = [make_event("09:00", "16:30")]

        slots = detector.suggest_alternative_time_slots(30, DAY, existing)

        assert slots == [_at(16, 30), _at(16, 45)]
        assert all(9 <= s.hour < 17 and s.date() == DAY for s in slots)

    def test_no_suggestions_on_full_day(self, detector, make_event):
        existing = [make_event("08:00", "18:00")]

        assert detector.suggest_alternative_time_slots(30, DAY, existing) == []

    def test_custom_hours(self, detector):
        slots = detector.suggest_alternative_time_slots(30, DAY, [], start_hour=14, end_hour=15)

        assert slots == [_at(14), _at(14, 15), _at(14, 30)]

    def test_formatted_suggestions_carry_end_times(self, detector):
        suggestions = detector.get_formatted_suggestions(timedelta(minutes=45), DAY, [], count=2)

        assert len(suggestions) == 2
        assert suggestions[0].start_date == _at(9)
        assert suggestions[0].end_date == _at(9, 45)

    def test_timezone_aware_suggestions(self):
        detector = ConflictDetector(timezone="America/New_York")
        dst_day = date(2026, 3, 8)

        slots = detector.suggest_alternative_time_slots(30, dst_day, [])

        assert slots[0].hour == 9
        assert slots[0].utcoffset() == timedelta(hours=-4)
        assert slots[0] == pytz.timezone("America/New_York").localize(datetime(2026, 3, 8, 9))


class TestFindNextAvailableSlot:
    """Tests for the multi-day next-available search."""

    def test_first_day_starts_from_current_time(self, detector):
        start = _at(10, 7)

        slot = detector.find_next_available_slot(30, start, [])

        assert slot == start

    def test_never_earlier_than_starting_point(self, detector):
        start = _at(10, 7, 30)

        slot = detector.find_next_available_slot(30, start, [])

        assert slot == _at(10, 8)
        assert slot >= start

    def test_skips_busy_block(self, detector, make_event):
        existing = [make_event("10:00", "12:00")]

        slot = detector.find_next_available_slot(60, _at(10), existing)

        assert slot == _at(12)

    def test_late_start_rolls_to_next_morning(self, detector):
        slot = detector.find_next_available_slot(30, _at(21), [])

        assert slot == _at(8, day=DAY + timedelta(days=1))

    def test_returns_none_when_window_is_exhausted(self, detector):
        blocker = Event(title="Trip", start_date=_at(0), end_date=_at(0) + timedelta(days=8))

        assert detector.find_next_available_slot(30, _at(9), [blocker]) is None

    def test_search_days_limits_window(self, detector):
        blocker = Event(title="Trip", start_date=_at(0), end_date=_at(0) + timedelta(days=2))

        assert detector.find_next_available_slot(30, _at(9), [blocker], search_days=2) is None
        slot = detector.find_next_available_slot(30, _at(9), [blocker], search_days=3)
        assert slot == _at(8, day=DAY + timedelta(days=2))


class TestConfiguredTimezone:
    """Naive event times are read as wall-clock time in the configured zone."""

    EASTERN = pytz.timezone("America/New_York")

    def test_suggestions_around_naive_events(self, make_event):
        detector = ConflictDetector(timezone="America/New_York")
        existing = [make_event("09:00", "10:00")]

        slots = detector.suggest_alternative_time_slots(60, DAY, existing)

        assert slots == [
            self.EASTERN.localize(_at(10)),
            self.EASTERN.localize(_at(10, 15)),
            self.EASTERN.localize(_at(10, 30)),
        ]

    def test_aware_candidate_against_naive_event(self, make_event):
        detector = ConflictDetector(timezone="America/New_York")
        candidate = Event(
            title="Call",
            start_date=self.EASTERN.localize(_at(10, 30)),
            end_date=self.EASTERN.localize(_at(11, 30)),
        )

        conflicts = detector.detect_conflicts(candidate, [make_event("10:00", "11:00")])

        assert [c.severity for c in conflicts] == [ConflictSeverity.SOFT]

    def test_next_slot_from_naive_start(self, make_event):
        detector = ConflictDetector(timezone="America/New_York")
        existing = [make_event("09:00", "10:00")]

        slot = detector.find_next_available_slot(30, _at(9, 30), existing)

        assert slot == _at(10)
