"""Structured text for conflict, slot, quick-add and streak results."""

from datetime import date, datetime
from typing import List, Optional

from models.entities import (
    Conflict,
    ConflictSeverity,
    HighlightStats,
    ParsedEvent,
    TimeSlotSuggestion,
)


class ResponseFormatter:
    """Formats planner results as short markdown messages."""

    @staticmethod
    def format_time(value: datetime) -> str:
        """Short 12-hour time, e.g. '7:00 PM' (no zero padding)."""
        hour = value.hour % 12 or 12
        return f"{hour}:{value.minute:02d} {'AM' if value.hour < 12 else 'PM'}"

    @staticmethod
    def format_date(value: date) -> str:
        """Medium date, e.g. 'Oct 19, 2026'."""
        return f"{value.strftime('%b')} {value.day}, {value.year}"

    @staticmethod
    def describe_conflict(conflict: Conflict) -> str:
        title = conflict.event.title
        if conflict.severity == ConflictSeverity.HARD:
            return f"You're double-booked with '{title}'"
        elif conflict.severity == ConflictSeverity.SOFT:
            return f"You're tight here with '{title}'"
        return f"Back-to-back with '{title}'"

    @staticmethod
    def severity_color(severity: ConflictSeverity) -> str:
        return {
            ConflictSeverity.HARD: "red",
            ConflictSeverity.SOFT: "orange",
            ConflictSeverity.ADJACENT: "blue",
        }[severity]

    @staticmethod
    def severity_icon(severity: ConflictSeverity) -> str:
        return {
            ConflictSeverity.HARD: "🔴",
            ConflictSeverity.SOFT: "🟠",
            ConflictSeverity.ADJACENT: "🔵",
        }[severity]

    @staticmethod
    def format_time_range(start: datetime, end: datetime) -> str:
        return f"{ResponseFormatter.format_time(start)} - {ResponseFormatter.format_time(end)}"

    @staticmethod
    def display_date(start: datetime, now: datetime) -> str:
        """'Today', 'Tomorrow' or the medium date relative to now."""
        delta = (start.date() - now.date()).days
        if delta == 0:
            return "Today"
        elif delta == 1:
            return "Tomorrow"
        return ResponseFormatter.format_date(start.date())

    @staticmethod
    def format_slot_suggestions(suggestions: List[TimeSlotSuggestion], now: datetime) -> List[str]:
        """One 'Tomorrow, 9:00 AM - 10:00 AM' line per suggestion."""
        return [
            f"{ResponseFormatter.display_date(s.start_date, now)}, "
            f"{ResponseFormatter.format_time_range(s.start_date, s.end_date)}"
            for s in suggestions
        ]

    @staticmethod
    def format_conflict_warning(
        conflicts: List[Conflict],
        suggestions: Optional[List[TimeSlotSuggestion]] = None,
        now: Optional[datetime] = None
    ) -> str:
        """Format a conflict warning with optional alternative times."""
        if not conflicts:
            return ResponseFormatter.format_success("No Conflicts", "This time is free.")

        worst = conflicts[0]
        lines = [
            f"**{ResponseFormatter.severity_icon(worst.severity)} Scheduling Conflict**",
            "",
            ResponseFormatter.describe_conflict(worst),
        ]

        if len(conflicts) > 1:
            lines.append("")
            lines.append("**Also overlapping:**")
            for conflict in conflicts[1:]:
                event = conflict.event
                lines.append(
                    f"• {ResponseFormatter.severity_icon(conflict.severity)} {event.title} "
                    f"({ResponseFormatter.format_time_range(event.start_date, event.end_date)})"
                )

        if suggestions:
            reference = now or suggestions[0].start_date
            lines.append("")
            lines.append("**Try instead:**")
            for i, line in enumerate(ResponseFormatter.format_slot_suggestions(suggestions, reference), 1):
                lines.append(f"{i}. {line}")

        return "\n".join(lines)

    @staticmethod
    def format_next_slot(slot: Optional[datetime], duration_minutes: int, now: datetime) -> str:
        """Format the result of a next-available-slot search."""
        if slot is None:
            return ResponseFormatter.format_info(
                "No Availability",
                f"No free {duration_minutes}-minute slot in the search window.",
                items=[
                    "Try a shorter duration",
                    "Mark an existing event as flexible",
                ],
            )
        return (
            f"**🗓️ Next Free Slot:** {ResponseFormatter.display_date(slot, now)} at "
            f"{ResponseFormatter.format_time(slot)}"
        )

    @staticmethod
    def summarize_parsed_event(parsed: ParsedEvent) -> str:
        """e.g. 'Dinner - Sat, Oct 19 at 7:00 PM (60 min)'."""
        start = parsed.start_date
        return (
            f"{parsed.title} - {start.strftime('%a, %b')} {start.day} at "
            f"{ResponseFormatter.format_time(start)} ({parsed.duration_minutes} min)"
        )

    @staticmethod
    def format_parsed_event(parsed: Optional[ParsedEvent]) -> str:
        if parsed is None:
            return ResponseFormatter.format_error(
                "Couldn't Understand That",
                "Add a short title along with the time, e.g. 'Dinner 7pm'.",
            )

        details = [f"When: {ResponseFormatter.summarize_parsed_event(parsed)}"]
        if parsed.location:
            details.append(f"Where: {parsed.location}")
        if parsed.event_type:
            details.append(f"Type: {parsed.event_type.value.replace('_', ' ').title()}")
        details.append(f"Confidence: {int(round(parsed.confidence * 100))}%")
        return ResponseFormatter.format_success(parsed.title, "Ready to add.", details)

    @staticmethod
    def streak_emoji(current_streak: int) -> str:
        if current_streak >= 30:
            return "🔥🔥🔥"
        elif current_streak >= 14:
            return "🔥🔥"
        elif current_streak >= 7:
            return "🔥"
        elif current_streak >= 3:
            return "⭐️"
        return "✨"

    @staticmethod
    def encouragement_message(current_streak: int) -> str:
        if current_streak == 0:
            return "Start your streak today!"
        elif current_streak == 1:
            return "Great start! Keep it going!"
        elif current_streak < 7:
            return f"You're on a roll! {7 - current_streak} more days to a week!"
        elif current_streak < 30:
            return f"Amazing streak! {30 - current_streak} more to hit 30 days!"
        return "Incredible! You're a highlight champion! 🏆"

    @staticmethod
    def format_stats(stats: HighlightStats) -> str:
        """Format highlight statistics."""
        lines = [
            f"**{ResponseFormatter.streak_emoji(stats.current_streak)} Highlight Streak**",
            "",
            f"• Current streak: {stats.current_streak} day(s)",
            f"• Longest streak: {stats.longest_streak} day(s)",
            f"• Total highlights: {stats.total_days}",
            f"• This week: {stats.this_week_count}",
            f"• This month: {stats.this_month_count}",
            "",
            f"*{ResponseFormatter.encouragement_message(stats.current_streak)}*",
        ]
        return "\n".join(lines)

    @staticmethod
    def format_success(title: str, message: str, details: Optional[List[str]] = None) -> str:
        """Format a success message."""
        lines = [
            f"**✅ {title}**",
            "",
            message
        ]

        if details:
            lines.append("")
            lines.append("**Details:**")
            for detail in details:
                lines.append(f"• {detail}")

        return "\n".join(lines)

    @staticmethod
    def format_error(title: str, message: str, suggestions: Optional[List[str]] = None) -> str:
        """Format an error message."""
        lines = [
            f"**❌ {title}**",
            "",
            message
        ]

        if suggestions:
            lines.append("")
            lines.append("**Suggestions:**")
            for suggestion in suggestions:
                lines.append(f"• {suggestion}")

        return "\n".join(lines)

    @staticmethod
    def format_info(title: str, message: str, items: Optional[List[str]] = None) -> str:
        """Format an informational message."""
        lines = [
            f"**ℹ️ {title}**",
            "",
            message
        ]

        if items:
            lines.append("")
            for item in items:
                lines.append(f"• {item}")

        return "\n".join(lines)
