"""Recurring event expansion - pure functions, no I/O.

A recurrence descriptor is stored as JSON text on the event row, e.g.
``{"type": "weekly", "interval": 2, "endDate": "2024-06-30"}``. Events are
expanded on demand into occurrences for a visible window; occurrences are
never persisted.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from .calendar import Event, format_instant, overlaps_window, parse_instant

logger = logging.getLogger(__name__)

# Upper bound on generated occurrences per event when the rule sets no count.
# Bounds worst-case work to len(events) * MAX_OCCURRENCES stepper calls.
MAX_OCCURRENCES = 52

OCCURRENCE_SEPARATOR = "_"


class RecurrenceKind(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


_UNIT_NAMES = {
    RecurrenceKind.DAILY: ("Daily", "days"),
    RecurrenceKind.WEEKLY: ("Weekly", "weeks"),
    RecurrenceKind.MONTHLY: ("Monthly", "months"),
}


def _positive_int(value) -> int | None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


@dataclass(frozen=True)
class RecurrenceRule:
    """How a base event repeats."""

    kind: RecurrenceKind = RecurrenceKind.NONE
    interval: int = 1
    end_date: datetime | None = None
    count: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "kind", RecurrenceKind(self.kind))
        if _positive_int(self.interval) is None:
            raise ValueError(f"Interval must be a positive integer, got {self.interval!r}")
        if self.count is not None and _positive_int(self.count) is None:
            raise ValueError(f"Count must be a positive integer, got {self.count!r}")
        if self.end_date is not None:
            object.__setattr__(self, "end_date", parse_instant(self.end_date))

    @property
    def is_recurring(self) -> bool:
        return self.kind is not RecurrenceKind.NONE


NO_RECURRENCE = RecurrenceRule()


# ============== Codec ==============


def parse_rule(raw: str | None) -> RecurrenceRule:
    """
    Parse a persisted recurrence descriptor.

    Never raises: absent, empty or malformed descriptors all come back as
    the non-recurring default rule.
    """
    if not raw:
        return NO_RECURRENCE

    try:
        data = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        logger.debug(f"Ignoring unparseable recurrence rule {raw!r}: {e}")
        return NO_RECURRENCE

    if not isinstance(data, dict):
        logger.debug(f"Ignoring non-object recurrence rule {raw!r}")
        return NO_RECURRENCE

    try:
        kind = RecurrenceKind(data.get("type", RecurrenceKind.NONE.value))
    except ValueError:
        logger.debug(f"Ignoring recurrence rule with unknown type {raw!r}")
        return NO_RECURRENCE

    if kind is RecurrenceKind.NONE:
        return NO_RECURRENCE

    interval = _positive_int(data.get("interval", 1))
    if interval is None:
        logger.debug(f"Ignoring recurrence rule with bad interval {raw!r}")
        return NO_RECURRENCE

    end_date = None
    if data.get("endDate") is not None:
        try:
            end_date = parse_instant(data["endDate"])
        except ValueError:
            logger.debug(f"Ignoring recurrence rule with bad endDate {raw!r}")
            return NO_RECURRENCE

    count = None
    if data.get("count") is not None:
        count = _positive_int(data["count"])
        if count is None:
            logger.debug(f"Ignoring recurrence rule with bad count {raw!r}")
            return NO_RECURRENCE

    return RecurrenceRule(kind=kind, interval=interval, end_date=end_date, count=count)


def _format_end_date(end_date: datetime) -> str:
    if end_date.time() == time(0, 0):
        return end_date.date().isoformat()
    if end_date.microsecond:
        return end_date.isoformat().replace("+00:00", "Z")
    return format_instant(end_date)


def serialize_rule(rule: RecurrenceRule) -> str | None:
    """Encode a rule for storage. Non-recurring rules are stored as None."""
    if not rule.is_recurring:
        return None

    data: dict = {"type": rule.kind.value, "interval": rule.interval}
    if rule.end_date is not None:
        data["endDate"] = _format_end_date(rule.end_date)
    if rule.count is not None:
        data["count"] = rule.count
    return json.dumps(data, separators=(",", ":"))


def rule_label(rule: RecurrenceRule) -> str:
    """Human-readable description, e.g. "Weekly" or "Every 3 days"."""
    if not rule.is_recurring:
        return "Does not repeat"
    single, plural = _UNIT_NAMES[rule.kind]
    if rule.interval == 1:
        return single
    return f"Every {rule.interval} {plural}"


# ============== Stepper ==============


def next_occurrence(current: datetime, rule: RecurrenceRule) -> datetime:
    """
    Start of the occurrence following `current`.

    Monthly steps clamp to the last valid day of the target month
    (Jan 31 + 1 month = Feb 29 in a leap year). Since each step starts
    from the previous occurrence, a clamped series stays on the clamped day.
    """
    match rule.kind:
        case RecurrenceKind.DAILY:
            return current + timedelta(days=rule.interval)
        case RecurrenceKind.WEEKLY:
            return current + timedelta(weeks=rule.interval)
        case RecurrenceKind.MONTHLY:
            return current + relativedelta(months=rule.interval)
    raise ValueError(f"Cannot step a {rule.kind.value!r} recurrence rule")


# ============== Expansion ==============


@dataclass(frozen=True)
class Occurrence:
    """
    One concrete instance of an event inside a window.

    `sequence` is None for the original instance of a non-recurring event,
    and the 0-based generation index for instances of a recurring series.
    """

    event: Event
    start: datetime
    end: datetime
    sequence: int | None = None

    @property
    def is_generated(self) -> bool:
        return self.sequence is not None

    @property
    def id(self) -> str:
        if self.sequence is None:
            return self.event.id
        return f"{self.event.id}{OCCURRENCE_SEPARATOR}{self.sequence}"

    def to_event(self) -> Event:
        """Flatten into an Event carrying the occurrence's id and span."""
        if self.sequence is None:
            return self.event
        return self.event.with_span(self.id, self.start, self.end)


def source_event_id(occurrence_id: str) -> str:
    """Recover the base event id from an occurrence id."""
    base, sep, suffix = occurrence_id.rpartition(OCCURRENCE_SEPARATOR)
    if sep and base and suffix.isdigit():
        return base
    return occurrence_id


def _expand_series(
    event: Event,
    rule: RecurrenceRule,
    range_start: datetime,
    range_end: datetime,
    max_occurrences: int,
) -> list[Occurrence]:
    duration = timedelta(minutes=event.duration_minutes())
    limit = rule.count or max_occurrences

    occurrences = []
    current = event.start_time
    sequence = 0
    while sequence < limit:
        if current > range_end:
            break
        if rule.end_date is not None and current > rule.end_date:
            break

        end = current + duration
        if overlaps_window(current, end, range_start, range_end):
            occurrences.append(Occurrence(event=event, start=current, end=end, sequence=sequence))

        try:
            current = next_occurrence(current, rule)
        except (OverflowError, ValueError):
            # stepped past datetime.max
            break
        sequence += 1

    return occurrences


def expand_events(
    events: list[Event],
    range_start: datetime,
    range_end: datetime,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Occurrence]:
    """
    Expand events into the occurrences intersecting [range_start, range_end].

    Pure function - no I/O, inputs are not mutated.

    Args:
        events: Base events, each optionally carrying a recurrence descriptor
        range_start: Window start
        range_end: Window end
        max_occurrences: Cap on generated instances for rules without a count

    Returns:
        Occurrences sorted by start time (stable for equal starts)

    Callers rendering a month should pass a window padded by a month on each
    side (see month_window) or boundary occurrences will be missed.
    """
    range_start = parse_instant(range_start)
    range_end = parse_instant(range_end)

    expanded: list[Occurrence] = []
    for event in events:
        rule = parse_rule(event.recurrence_rule)

        if not rule.is_recurring:
            if overlaps_window(event.start_time, event.end_time, range_start, range_end):
                expanded.append(Occurrence(event=event, start=event.start_time, end=event.end_time))
            continue

        expanded.extend(_expand_series(event, rule, range_start, range_end, max_occurrences))

    return sorted(expanded, key=lambda o: o.start)


def expand_to_events(
    events: list[Event],
    range_start: datetime,
    range_end: datetime,
    max_occurrences: int = MAX_OCCURRENCES,
) -> list[Event]:
    """Expand and flatten into Events keyed by occurrence id."""
    return [
        o.to_event()
        for o in expand_events(events, range_start, range_end, max_occurrences)
    ]
