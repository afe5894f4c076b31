"""Supabase adapter - PostgREST client for the calendar_events table."""

import logging

import requests

from cadence.config import Config, load_config
from cadence.core.calendar import DEFAULT_TITLE, Event, format_instant, sort_events_by_start
from cadence.ports.calendar_repo import CalendarRepositoryError

logger = logging.getLogger(__name__)

TABLE = "calendar_events"


class SupabaseCalendarAdapter:
    """
    Supabase calendar adapter.

    Implements CalendarRepository protocol. Talks to the REST endpoint of a
    Supabase project, scoped to one workspace. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        if not self.config.supabase_url or not self.config.supabase_key:
            raise CalendarRepositoryError(
                "Missing Supabase credentials. Add SUPABASE_URL and SUPABASE_KEY to config/cadence.conf"
            )
        if not self.config.workspace_id:
            raise CalendarRepositoryError("No WORKSPACE_ID configured.")

        self._session = session or requests.Session()
        self._endpoint = f"{self.config.supabase_url}/rest/v1/{TABLE}"

    def _headers(self, returning: bool = False) -> dict:
        token = self.config.supabase_access_token or self.config.supabase_key
        headers = {
            "apikey": self.config.supabase_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    def _request(self, method: str, params: dict | None = None, payload: dict | None = None) -> list:
        """Make an authenticated REST request, returning the decoded rows."""
        try:
            resp = self._session.request(
                method,
                self._endpoint,
                params=params,
                json=payload,
                headers=self._headers(returning=method != "GET"),
            )
        except requests.RequestException as e:
            logger.warning(f"Supabase {method} {TABLE} failed: {e}")
            raise CalendarRepositoryError(f"Could not reach Supabase: {e}") from e

        if resp.status_code >= 400:
            logger.warning(f"Supabase {method} {TABLE} returned {resp.status_code}: {resp.text}")
            raise CalendarRepositoryError(f"Supabase request failed ({resp.status_code}): {resp.text}")

        if not resp.text:
            return []
        return resp.json()

    def _single(self, rows: list, action: str) -> Event:
        if not rows:
            raise CalendarRepositoryError(f"Supabase returned no row to {action}")
        return Event.from_row(rows[0])

    def fetch_events(self) -> list[Event]:
        """Fetch all events in the workspace."""
        rows = self._request(
            "GET",
            params={
                "select": "*",
                "workspace_id": f"eq.{self.config.workspace_id}",
                "order": "start_time.asc",
            },
        )

        events = []
        for row in rows:
            try:
                events.append(Event.from_row(row))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed event row {row.get('id')}: {e}")
        return sort_events_by_start(events)

    def create_event(self, fields: dict) -> Event:
        """Insert an event into the workspace."""
        payload = {
            "title": fields.get("title") or DEFAULT_TITLE,
            "description": fields.get("description"),
            "start_time": format_instant(fields["start_time"]),
            "end_time": format_instant(fields["end_time"]),
            "is_all_day": fields.get("is_all_day") or False,
            "location": fields.get("location"),
            "color": fields.get("color") or self.config.default_color,
            "recurrence_rule": fields.get("recurrence_rule"),
            "workspace_id": self.config.workspace_id,
            "user_id": self.config.user_id,
        }
        rows = self._request("POST", payload=payload)
        return self._single(rows, "create")

    def update_event(self, event_id: str, updates: dict) -> Event:
        """Patch an event by id."""
        rows = self._request("PATCH", params={"id": f"eq.{event_id}"}, payload=updates)
        return self._single(rows, f"update (no event with id {event_id})")

    def delete_event(self, event_id: str) -> bool:
        """Delete an event by id."""
        rows = self._request("DELETE", params={"id": f"eq.{event_id}"})
        return bool(rows)
