"""Functional core - pure business logic with no I/O."""

from .calendar import Event, month_window, parse_instant, sort_events_by_start
from .recurrence import (
    MAX_OCCURRENCES,
    Occurrence,
    RecurrenceKind,
    RecurrenceRule,
    expand_events,
    expand_to_events,
    next_occurrence,
    parse_rule,
    rule_label,
    serialize_rule,
    source_event_id,
)

__all__ = [
    # Calendar
    "Event",
    "month_window",
    "parse_instant",
    "sort_events_by_start",
    # Recurrence
    "MAX_OCCURRENCES",
    "Occurrence",
    "RecurrenceKind",
    "RecurrenceRule",
    "expand_events",
    "expand_to_events",
    "next_occurrence",
    "parse_rule",
    "rule_label",
    "serialize_rule",
    "source_event_id",
]
