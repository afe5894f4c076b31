"""File-based calendar storage adapter."""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from cadence.core.calendar import DEFAULT_COLOR, DEFAULT_TITLE, Event, format_instant, sort_events_by_start
from cadence.ports.calendar_repo import CalendarRepositoryError

logger = logging.getLogger(__name__)


class FileCalendarStore:
    """
    File-based calendar storage.

    Implements CalendarRepository protocol. All events live in one JSON file
    holding a list of calendar_events rows.
    """

    def __init__(
        self,
        path: Path | str,
        workspace_id: str = "",
        user_id: str = "",
        default_color: str = DEFAULT_COLOR,
    ):
        self.path = Path(path).expanduser()
        self.workspace_id = workspace_id
        self.user_id = user_id
        self.default_color = default_color

    def _load_rows(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise CalendarRepositoryError(f"Corrupt events file {self.path}: {e}") from e
        if not isinstance(data, list):
            raise CalendarRepositoryError(f"Events file {self.path} must hold a JSON list")
        return data

    def _save_rows(self, rows: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(rows, indent=2))

    def _now(self) -> str:
        return format_instant(datetime.now(timezone.utc))

    def fetch_events(self) -> list[Event]:
        """Read all events, skipping rows that cannot be parsed."""
        events = []
        for row in self._load_rows():
            if self.workspace_id and row.get("workspace_id") not in ("", None, self.workspace_id):
                continue
            try:
                events.append(Event.from_row(row))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed event row {row.get('id')}: {e}")
        return sort_events_by_start(events)

    def create_event(self, fields: dict) -> Event:
        """Append a new event with a fresh id."""
        now = self._now()
        row = {
            "id": str(uuid.uuid4()),
            "title": fields.get("title") or DEFAULT_TITLE,
            "description": fields.get("description"),
            "start_time": format_instant(fields["start_time"]),
            "end_time": format_instant(fields["end_time"]),
            "is_all_day": fields.get("is_all_day") or False,
            "location": fields.get("location"),
            "color": fields.get("color") or self.default_color,
            "recurrence_rule": fields.get("recurrence_rule"),
            "workspace_id": self.workspace_id,
            "user_id": self.user_id,
            "created_at": now,
            "updated_at": now,
        }
        # Validate before writing
        event = Event.from_row(row)

        rows = self._load_rows()
        rows.append(row)
        self._save_rows(rows)
        return event

    def update_event(self, event_id: str, updates: dict) -> Event:
        """Apply partial updates to an existing event."""
        rows = self._load_rows()
        for i, row in enumerate(rows):
            if row.get("id") == event_id:
                updated = {**row, **updates, "id": event_id, "updated_at": self._now()}
                event = Event.from_row(updated)
                rows[i] = updated
                self._save_rows(rows)
                return event
        raise CalendarRepositoryError(f"No event with id {event_id}")

    def delete_event(self, event_id: str) -> bool:
        """Remove an event. Returns False if not found."""
        rows = self._load_rows()
        remaining = [r for r in rows if r.get("id") != event_id]
        if len(remaining) == len(rows):
            return False
        self._save_rows(remaining)
        return True
