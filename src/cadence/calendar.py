"""Calendar facade - wires config, storage and expansion together."""

import logging
from datetime import datetime

from .adapters.file_calendar import FileCalendarStore
from .adapters.supabase_calendar import SupabaseCalendarAdapter
from .config import Config
from .core.calendar import format_instant, month_window, overlaps_window, parse_instant
from .core.recurrence import (
    Occurrence,
    RecurrenceKind,
    RecurrenceRule,
    expand_events,
    serialize_rule,
)
from .ports.calendar_repo import CalendarRepository

logger = logging.getLogger(__name__)


def get_repository(config: Config) -> CalendarRepository:
    """Supabase when configured, otherwise the local events file."""
    if config.uses_supabase:
        return SupabaseCalendarAdapter(config)
    return FileCalendarStore(
        config.events_path(),
        workspace_id=config.workspace_id,
        user_id=config.user_id,
        default_color=config.default_color,
    )


def fetch_range(
    config: Config,
    start: datetime,
    end: datetime,
    repo: CalendarRepository | None = None,
) -> list[Occurrence]:
    """Occurrences intersecting an explicit window."""
    repo = repo or get_repository(config)
    events = repo.fetch_events()
    occurrences = expand_events(events, start, end, max_occurrences=config.max_occurrences)
    logger.debug(f"Expanded {len(events)} events into {len(occurrences)} occurrences")
    return occurrences


def fetch_month(
    config: Config,
    year: int,
    month: int,
    repo: CalendarRepository | None = None,
) -> list[Occurrence]:
    """
    Occurrences for a month view.

    Expansion runs over the month padded by config.month_padding months on
    each side, so the result includes neighbouring-month occurrences; use
    occurrences_in_month to narrow it down for display.
    """
    start, end = month_window(year, month, config.month_padding)
    return fetch_range(config, start, end, repo)


def occurrences_in_month(occurrences: list[Occurrence], year: int, month: int) -> list[Occurrence]:
    """Keep occurrences that intersect the (unpadded) month."""
    start, end = month_window(year, month, padding_months=0)
    return [o for o in occurrences if overlaps_window(o.start, o.end, start, end)]


def build_rule(
    repeat: str | None,
    every: int = 1,
    until: str | None = None,
    count: int | None = None,
) -> RecurrenceRule:
    """Build a rule from user-facing options."""
    if not repeat or repeat == RecurrenceKind.NONE.value:
        return RecurrenceRule()
    return RecurrenceRule(
        kind=RecurrenceKind(repeat),
        interval=every,
        end_date=parse_instant(until) if until else None,
        count=count,
    )


def build_event_fields(
    title: str,
    start: str | datetime,
    end: str | datetime,
    rule: RecurrenceRule | None = None,
    description: str | None = None,
    location: str | None = None,
    color: str | None = None,
    is_all_day: bool = False,
) -> dict:
    """Insert payload for a new event."""
    start_dt = parse_instant(start)
    end_dt = parse_instant(end)
    if end_dt < start_dt:
        raise ValueError("Event end must not be before its start")

    return {
        "title": title.strip(),
        "description": (description or "").strip() or None,
        "start_time": format_instant(start_dt),
        "end_time": format_instant(end_dt),
        "location": (location or "").strip() or None,
        "color": color,
        "is_all_day": is_all_day,
        "recurrence_rule": serialize_rule(rule or RecurrenceRule()),
    }
