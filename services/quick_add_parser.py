"""
Natural-language quick add.

Turns input like "Dinner w/ Asha 7pm Thu" into a ParsedEvent. The text is
tokenized once; each stage (time, day, duration, event type, location,
title) is an ordered rule table over the tokens, so precedence between
overlapping phrasings is explicit and each stage can be tested alone.
"""

import logging
import re
import string
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional, Union

from core.config import DEFAULT_EVENT_DURATION_MINUTES, TIMEZONE
from core.date_utils import at_time, local_day, now as current_time, resolve_timezone, to_local
from models.entities import EventType, ParsedEvent

logger = logging.getLogger(__name__)

# =============================================================================
# TOKENS
# =============================================================================

CLOCK = "clock"
NUMBER = "number"
WORD = "word"
SYMBOL = "symbol"

_TOKEN_PATTERN = re.compile(
    r"(?P<clock>\d{1,2}:\d{2})(?!\d)"
    r"|(?P<number>\d+)"
    r"|(?P<word>[^\W\d_]+(?:'[^\W\d_]+)*)"
    r"|(?P<symbol>\S)"
)


@dataclass(frozen=True)
class Token:
    """A slice of the input with its character span."""
    text: str
    kind: str
    start: int
    end: int

    @property
    def lower(self) -> str:
        return self.text.lower()


def tokenize(text: str) -> list[Token]:
    """Split text into clock, number, word and symbol tokens."""
    return [
        Token(text=m.group(), kind=m.lastgroup, start=m.start(), end=m.end())
        for m in _TOKEN_PATTERN.finditer(text)
    ]


# =============================================================================
# VOCABULARY
# =============================================================================

MERIDIEMS = {"am", "pm"}

# word -> (hour, confidence)
TIME_WORDS = {
    "noon": (12, 0.4),
    "midnight": (0, 0.4),
    "morning": (9, 0.3),
    "afternoon": (14, 0.3),
    "evening": (18, 0.3),
    "night": (20, 0.3),
}
EXACT_TIME_WORDS = {"noon", "midnight"}
PERIOD_WORDS = set(TIME_WORDS) - EXACT_TIME_WORDS

WEEKDAY_WORDS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tues": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thur": 3, "thurs": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}
RELATIVE_DAY_WORDS = {"today": 0, "tomorrow": 1, "tmrw": 1}
DAY_WORDS = set(WEEKDAY_WORDS) | set(RELATIVE_DAY_WORDS)

HOUR_UNITS = {"hours", "hour", "hrs", "hr", "h"}
MINUTE_UNITS = {"minutes", "minute", "mins", "min", "m"}
DURATION_KEYWORDS = {"quick": 15, "short": 30, "long": 120}

# First category with a substring hit wins
EVENT_TYPE_KEYWORDS: list[tuple[list[str], EventType]] = [
    (["meeting", "sync", "standup", "review", "interview", "1:1", "one on one"], EventType.WORK),
    (["dinner", "lunch", "brunch", "breakfast", "coffee", "drinks", "happy hour", "party", "hangout"], EventType.SOCIAL),
    (["gym", "workout", "run", "yoga", "exercise", "fitness"], EventType.HEALTH),
    (["clean", "cleaning", "organize", "laundry", "chores"], EventType.CLEANING),
    (["admin", "bills", "errands", "appointments"], EventType.ADMIN),
    (["focus", "deep work", "writing", "study", "coding", "work on"], EventType.DEEP_WORK),
    (["solo", "me time", "self care", "spa", "relax"], EventType.SOLO_DATE),
]

LOCATION_PREPOSITIONS = ("at", "in", "@")
LOCATION_STOP_WORDS = (
    {"at", "on", "for", "with", "in", "next"} | MERIDIEMS | DAY_WORDS | set(TIME_WORDS)
)
LOCATION_JOINERS = {"-", "&", "."}
NON_LOCATIONS = {"the", "a", "an", "my", "your"}

ORPHAN_PREPOSITIONS = {"at", "on", "for"}
TRAILING_PREPOSITIONS = {"at", "on", "for", "in"}
TITLE_TRIM = " \t\n.,;:-"

# =============================================================================
# STAGE RESULTS
# =============================================================================


@dataclass(frozen=True)
class TimeMatch:
    hour: int
    minute: int
    confidence: float
    first: int  # token index range [first, last)
    last: int


@dataclass(frozen=True)
class DayMatch:
    day: date
    first: int
    last: int


@dataclass(frozen=True)
class DurationMatch:
    minutes: int
    confidence: float


# =============================================================================
# TIME
# =============================================================================


def _to_24h(hour: int, meridiem: str) -> Optional[int]:
    if hour > 12:
        return None
    if meridiem == "pm" and hour != 12:
        return hour + 12
    if meridiem == "am" and hour == 12:
        return 0
    return hour


def _followed_by_meridiem(tokens: list[Token], i: int) -> Optional[str]:
    if i + 1 < len(tokens) and tokens[i + 1].lower in MERIDIEMS:
        return tokens[i + 1].lower
    return None


def _clock_with_meridiem(tokens: list[Token], i: int) -> Optional[TimeMatch]:
    meridiem = _followed_by_meridiem(tokens, i)
    if tokens[i].kind != CLOCK or meridiem is None:
        return None
    hour, minute = (int(part) for part in tokens[i].text.split(":"))
    hour = _to_24h(hour, meridiem)
    if hour is None or minute > 59:
        return None
    return TimeMatch(hour, minute, 0.4, i, i + 2)


def _hour_with_meridiem(tokens: list[Token], i: int) -> Optional[TimeMatch]:
    meridiem = _followed_by_meridiem(tokens, i)
    if tokens[i].kind != NUMBER or len(tokens[i].text) > 2 or meridiem is None:
        return None
    hour = _to_24h(int(tokens[i].text), meridiem)
    if hour is None:
        return None
    return TimeMatch(hour, 0, 0.4, i, i + 2)


def _clock_24h(tokens: list[Token], i: int) -> Optional[TimeMatch]:
    if tokens[i].kind != CLOCK:
        return None
    hour, minute = (int(part) for part in tokens[i].text.split(":"))
    if hour > 23 or minute > 59:
        return None
    return TimeMatch(hour, minute, 0.4, i, i + 1)


def _time_word(word: str) -> Callable[[list[Token], int], Optional[TimeMatch]]:
    hour, confidence = TIME_WORDS[word]

    def match(tokens: list[Token], i: int) -> Optional[TimeMatch]:
        if tokens[i].lower != word:
            return None
        return TimeMatch(hour, 0, confidence, i, i + 1)

    return match


TIME_RULES: list[tuple[str, Callable[[list[Token], int], Optional[TimeMatch]]]] = [
    ("clock_with_meridiem", _clock_with_meridiem),
    ("hour_with_meridiem", _hour_with_meridiem),
    ("clock_24h", _clock_24h),
] + [(word, _time_word(word)) for word in TIME_WORDS]


def extract_time(tokens: list[Token]) -> Optional[TimeMatch]:
    """First rule in TIME_RULES order that matches anywhere in the text."""
    for _, rule in TIME_RULES:
        for i in range(len(tokens)):
            match = rule(tokens, i)
            if match is not None:
                return match
    return None


def _all_time_matches(tokens: list[Token]) -> list[TimeMatch]:
    matches = []
    i = 0
    while i < len(tokens):
        match = next(
            (m for m in (rule(tokens, i) for _, rule in TIME_RULES) if m is not None),
            None,
        )
        if match is None:
            i += 1
        else:
            matches.append(match)
            i = match.last
    return matches


# =============================================================================
# DAY
# =============================================================================


def _next_weekday(target: int, reference: date) -> date:
    """Next occurrence strictly after reference."""
    days_ahead = (target - reference.weekday()) % 7 or 7
    return reference + timedelta(days=days_ahead)


DAY_RULES: list[tuple[tuple[str, ...], Callable[[date], date]]] = [
    (("today",), lambda ref: ref),
    (("tomorrow",), lambda ref: ref + timedelta(days=1)),
    (("tmrw",), lambda ref: ref + timedelta(days=1)),
    (("mon", "monday"), lambda ref: _next_weekday(0, ref)),
    (("tue", "tues", "tuesday"), lambda ref: _next_weekday(1, ref)),
    (("wed", "wednesday"), lambda ref: _next_weekday(2, ref)),
    (("thu", "thur", "thurs", "thursday"), lambda ref: _next_weekday(3, ref)),
    (("fri", "friday"), lambda ref: _next_weekday(4, ref)),
    (("sat", "saturday"), lambda ref: _next_weekday(5, ref)),
    (("sun", "sunday"), lambda ref: _next_weekday(6, ref)),
]


def extract_day(tokens: list[Token], reference: date) -> Optional[DayMatch]:
    """First rule in DAY_RULES order that matches a word token."""
    for words, resolve in DAY_RULES:
        for i, token in enumerate(tokens):
            if token.kind == WORD and token.lower in words:
                return DayMatch(resolve(reference), i, i + 1)
    return None


# =============================================================================
# DURATION
# =============================================================================


def extract_duration(tokens: list[Token]) -> Optional[DurationMatch]:
    """
    Sum every "<n> hours" / "<n> min" mention.

    quick/short/long only apply when no numeric duration was given.
    """
    total = 0
    numeric = False
    for i, token in enumerate(tokens[:-1]):
        if token.kind != NUMBER:
            continue
        unit = tokens[i + 1].lower
        if unit in HOUR_UNITS:
            total += int(token.text) * 60
            numeric = True
        elif unit in MINUTE_UNITS:
            total += int(token.text)
            numeric = True

    if numeric:
        return DurationMatch(total, 0.2) if total > 0 else None

    for token in tokens:
        if token.lower in DURATION_KEYWORDS:
            return DurationMatch(DURATION_KEYWORDS[token.lower], 0.1)
    return None


def _duration_spans(tokens: list[Token]) -> list[tuple[int, int]]:
    spans = []
    for i, token in enumerate(tokens):
        if (token.kind == NUMBER and i + 1 < len(tokens)
                and tokens[i + 1].lower in HOUR_UNITS | MINUTE_UNITS):
            spans.append(_with_preceding(tokens, i, i + 2, {"for"}))
        elif token.lower in DURATION_KEYWORDS:
            spans.append((i, i + 1))
    return spans


# =============================================================================
# EVENT TYPE
# =============================================================================


def extract_event_type(text: str) -> Optional[EventType]:
    lowered = text.lower()
    for keywords, event_type in EVENT_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return event_type
    return None


# =============================================================================
# LOCATION
# =============================================================================


def _is_location_word(token: Token) -> bool:
    return token.kind == WORD and token.lower not in LOCATION_STOP_WORDS


def extract_location(tokens: list[Token], text: str) -> Optional[str]:
    """
    Words after at/in/@ up to the next preposition, number, day or time word.

    Prepositions are tried in LOCATION_PREPOSITIONS order.
    """
    for preposition in LOCATION_PREPOSITIONS:
        for i, token in enumerate(tokens):
            if token.lower != preposition:
                continue

            j = i + 1
            last = None
            while j < len(tokens):
                if _is_location_word(tokens[j]):
                    last = j
                    j += 1
                elif (last is not None and tokens[j].text in LOCATION_JOINERS
                        and j + 1 < len(tokens) and _is_location_word(tokens[j + 1])):
                    j += 1
                else:
                    break

            if last is None:
                continue
            location = text[tokens[i + 1].start:tokens[last].end].strip()
            if location.lower() in NON_LOCATIONS or len(location) <= 1:
                continue
            return string.capwords(location)

    return None


# =============================================================================
# TITLE
# =============================================================================


def _with_preceding(tokens: list[Token], first: int, last: int, words: set[str]) -> tuple[int, int]:
    """Extend [first, last) backwards over one token from words."""
    if first > 0 and tokens[first - 1].lower in words:
        return first - 1, last
    return first, last


def _time_spans(tokens: list[Token]) -> list[tuple[int, int]]:
    spans = []
    for match in _all_time_matches(tokens):
        first, last = match.first, match.last
        word = tokens[first].lower
        if word in PERIOD_WORDS:
            # "Movie night" keeps its period word; "tomorrow evening" doesn't
            previous = tokens[first - 1].lower if first > 0 else None
            if previous in {"at", "this"}:
                first -= 1
            elif previous == "the" and first > 1 and tokens[first - 2].lower == "in":
                first -= 2
            elif previous not in DAY_WORDS:
                continue
        else:
            first, last = _with_preceding(tokens, first, last, {"at"})
        spans.append((first, last))
    return spans


def _day_spans(tokens: list[Token]) -> list[tuple[int, int]]:
    spans = []
    for i, token in enumerate(tokens):
        if token.kind != WORD or token.lower not in DAY_WORDS:
            continue
        first, last = i, i + 1
        if token.lower in WEEKDAY_WORDS:
            first, last = _with_preceding(tokens, first, last, {"next", "this"})
        spans.append(_with_preceding(tokens, first, last, {"on"}))
    return spans


def _remove_tokens(text: str, tokens: list[Token], spans: list[tuple[int, int]]) -> str:
    """Blank out the characters covered by token index spans."""
    chars = list(text)
    for first, last in spans:
        for k in range(tokens[first].start, tokens[last - 1].end):
            chars[k] = " "
    return "".join(chars)


def _drop_orphan_prepositions(text: str) -> str:
    tokens = tokenize(text)
    orphans = []
    for i, token in enumerate(tokens):
        if token.lower not in ORPHAN_PREPOSITIONS:
            continue
        following = tokens[i + 1].lower if i + 1 < len(tokens) else None
        if following is None or following in ORPHAN_PREPOSITIONS | {"with"}:
            orphans.append((i, i + 1))
    return _remove_tokens(text, tokens, orphans)


def _strip_trailing_prepositions(text: str) -> str:
    words = text.split(" ")
    while len(words) > 1 and words[-1].lower() in TRAILING_PREPOSITIONS:
        words.pop()
    return " ".join(words)


def extract_title(tokens: list[Token], text: str) -> str:
    """What's left of the text once time, day and duration phrases are removed."""
    spans = _time_spans(tokens) + _day_spans(tokens) + _duration_spans(tokens)
    title = _remove_tokens(text, tokens, spans)
    title = _drop_orphan_prepositions(title)
    title = re.sub(r"\s+", " ", title).strip(TITLE_TRIM)
    title = _strip_trailing_prepositions(title).strip(TITLE_TRIM)

    if title:
        title = title[0].upper() + title[1:]
    return title


# =============================================================================
# PARSER
# =============================================================================


class QuickAddParser:
    """Parses quick-add text into a ParsedEvent."""

    def __init__(
        self,
        timezone: Union[str, tzinfo, None] = TIMEZONE,
        default_duration_minutes: int = DEFAULT_EVENT_DURATION_MINUTES
    ):
        self.tz = resolve_timezone(timezone)
        self.default_duration_minutes = default_duration_minutes

    def parse(self, text: str, reference_date: Optional[datetime] = None) -> Optional[ParsedEvent]:
        """
        Parse a natural language event description.

        Args:
            text: Input like "Dinner w/ Asha 7pm Thu"
            reference_date: "Now" for relative days and the default time

        Returns:
            ParsedEvent, or None when no title is left after stripping
            the recognised time, day and duration phrases
        """
        if not isinstance(text, str):
            raise TypeError(f"Quick add text must be a string, got {type(text).__name__}")

        reference = reference_date if reference_date is not None else current_time(self.tz)
        local_reference = to_local(reference, self.tz)
        tokens = tokenize(text)
        confidence = 0.0

        # 1. Time
        time_match = extract_time(tokens)
        if time_match is not None:
            hour, minute = time_match.hour, time_match.minute
            confidence += time_match.confidence
        else:
            hour, minute = min(local_reference.hour + 1, 23), 0

        # 2. Day
        reference_day = local_day(reference, self.tz)
        day_match = extract_day(tokens, reference_day)
        if day_match is not None:
            confidence += 0.3

        # 3. Combine
        day = day_match.day if day_match is not None else reference_day
        start = at_time(day, hour, minute, self.tz, like=reference)

        # 4. Duration
        duration_match = extract_duration(tokens)
        if duration_match is not None:
            minutes = duration_match.minutes
            confidence += duration_match.confidence
        else:
            minutes = self.default_duration_minutes
        end = start + timedelta(minutes=minutes)

        # 5. Event type
        event_type = extract_event_type(text)
        if event_type is not None:
            confidence += 0.1

        # 6. Location
        location = extract_location(tokens, text)
        if location is not None:
            confidence += 0.1

        # 7. Title
        title = extract_title(tokens, text)
        if not title:
            logger.debug("No title left in quick add text %r", text)
            return None

        return ParsedEvent(
            title=title,
            start_date=start,
            end_date=end,
            location=location,
            event_type=event_type,
            confidence=max(0.0, min(1.0, confidence)),
        )

    def suggestions(self, time: Optional[datetime] = None) -> list[str]:
        """Example inputs suited to the time of day."""
        hour = to_local(time if time is not None else current_time(self.tz), self.tz).hour

        if hour < 12:
            return [
                "Coffee chat 10am",
                "Team standup 9:30am",
                "Gym session tomorrow morning",
            ]
        elif hour < 17:
            return [
                "Lunch with Sarah 12:30pm",
                "Focus time 2pm 2hr",
                "Quick call at 3pm",
            ]
        return [
            "Dinner 7pm",
            "Yoga class tomorrow evening",
            "Movie night Friday",
        ]
