"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone

from dateutil.relativedelta import relativedelta

DEFAULT_COLOR = "#6366f1"
DEFAULT_TITLE = "Untitled Event"


def parse_instant(value: datetime | date | str) -> datetime:
    """
    Parse an instant into a timezone-aware UTC datetime.

    Accepts datetimes, dates (midnight), ISO datetime strings (a trailing
    "Z" is allowed) and ISO date strings. Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time(0, 0))
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid instant: {value!r}") from None
    else:
        raise ValueError(f"Invalid instant: {value!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError(f"Instant out of range: {value!r}") from None


def format_instant(dt: datetime) -> str:
    """Render an instant as YYYY-MM-DDTHH:MM:SSZ."""
    return parse_instant(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class Event:
    """A calendar event as stored in the calendar_events table."""

    id: str
    title: str
    start_time: datetime
    end_time: datetime
    description: str | None = None
    is_all_day: bool = False
    location: str | None = None
    color: str = DEFAULT_COLOR
    recurrence_rule: str | None = None
    user_id: str = ""
    workspace_id: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    extra: dict = field(default_factory=dict)

    def __post_init__(self):
        self.start_time = parse_instant(self.start_time)
        self.end_time = parse_instant(self.end_time)

    def duration_minutes(self) -> int:
        """Event duration in whole minutes."""
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def with_span(self, event_id: str, start: datetime, end: datetime) -> "Event":
        """Copy of this event at a different id and start/end pair."""
        return replace(self, id=event_id, start_time=start, end_time=end)

    @classmethod
    def from_row(cls, row: dict) -> "Event":
        """Create Event from a calendar_events row."""
        start = parse_instant(row["start_time"])
        end = parse_instant(row["end_time"])
        if end < start:
            raise ValueError(f"Event {row.get('id')!r} ends before it starts")

        known = {
            "id", "title", "description", "start_time", "end_time", "is_all_day",
            "location", "color", "recurrence_rule", "user_id", "workspace_id",
            "created_at", "updated_at",
        }
        return cls(
            id=str(row["id"]),
            title=row.get("title") or DEFAULT_TITLE,
            start_time=start,
            end_time=end,
            description=row.get("description"),
            is_all_day=bool(row.get("is_all_day")),
            location=row.get("location"),
            color=row.get("color") or DEFAULT_COLOR,
            recurrence_rule=row.get("recurrence_rule"),
            user_id=row.get("user_id") or "",
            workspace_id=row.get("workspace_id") or "",
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            extra={k: v for k, v in row.items() if k not in known},
        )

    def to_row(self) -> dict:
        """Serialize back to a calendar_events row."""
        row = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "start_time": format_instant(self.start_time),
            "end_time": format_instant(self.end_time),
            "is_all_day": self.is_all_day,
            "location": self.location,
            "color": self.color,
            "recurrence_rule": self.recurrence_rule,
            "user_id": self.user_id,
            "workspace_id": self.workspace_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        row.update(self.extra)
        return row


def sort_events_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start_time)


def overlaps_window(
    start: datetime, end: datetime, range_start: datetime, range_end: datetime
) -> bool:
    """
    Check whether a span intersects a window.

    Both boundaries are strict: a span ending exactly at range_start, or
    starting exactly at range_end, does not intersect.
    """
    return end > range_start and start < range_end


def month_window(year: int, month: int, padding_months: int = 1) -> tuple[datetime, datetime]:
    """
    Query window for a visible calendar month.

    The window is padded by `padding_months` on each side so that series
    crossing a month boundary and multi-day events starting before the
    visible month are still picked up. Returns (start, end) where start is
    midnight UTC on the first day of the earliest month and end is the last
    second of the latest month.
    """
    first = datetime(year, month, 1, tzinfo=timezone.utc)
    start = first - relativedelta(months=padding_months)
    end = first + relativedelta(months=padding_months + 1) - relativedelta(seconds=1)
    return start, end
