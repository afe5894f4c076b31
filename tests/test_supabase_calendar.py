"""Tests for the Supabase calendar adapter."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from cadence.adapters.supabase_calendar import SupabaseCalendarAdapter
from cadence.config import Config
from cadence.ports.calendar_repo import CalendarRepositoryError


@pytest.fixture
def config():
    return Config(
        supabase_url="https://abc.supabase.co",
        supabase_key="anon-key",
        workspace_id="ws-1",
        user_id="u-1",
    )


def _response(rows, status_code: int = 200) -> MagicMock:
    resp = MagicMock(status_code=status_code)
    resp.text = json.dumps(rows) if rows is not None else ""
    resp.json.return_value = rows
    return resp


def _row(event_id: str, start: str, **extra) -> dict:
    return {
        "id": event_id,
        "title": "Review",
        "start_time": start,
        "end_time": start.replace("T10", "T11"),
        "is_all_day": False,
        "color": "#6366f1",
        "recurrence_rule": None,
        "workspace_id": "ws-1",
        "user_id": "u-1",
        **extra,
    }


class TestSupabaseCalendarAdapter:
    def test_requires_credentials(self):
        with pytest.raises(CalendarRepositoryError):
            SupabaseCalendarAdapter(Config(workspace_id="ws-1"), session=MagicMock())

    def test_requires_workspace(self):
        config = Config(supabase_url="https://abc.supabase.co", supabase_key="k")
        with pytest.raises(CalendarRepositoryError):
            SupabaseCalendarAdapter(config, session=MagicMock())

    def test_fetch_events_queries_workspace(self, config):
        session = MagicMock()
        session.request.return_value = _response(
            [_row("b", "2024-01-02T10:00:00+00:00"), _row("a", "2024-01-01T10:00:00+00:00")]
        )
        adapter = SupabaseCalendarAdapter(config, session=session)

        events = adapter.fetch_events()

        assert [e.id for e in events] == ["a", "b"]
        method, url = session.request.call_args[0]
        kwargs = session.request.call_args[1]
        assert method == "GET"
        assert url == "https://abc.supabase.co/rest/v1/calendar_events"
        assert kwargs["params"]["workspace_id"] == "eq.ws-1"
        assert kwargs["params"]["order"] == "start_time.asc"
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"
        assert "Prefer" not in kwargs["headers"]

    def test_access_token_used_for_authorization(self, config):
        config.supabase_access_token = "user-jwt"
        session = MagicMock()
        session.request.return_value = _response([])
        SupabaseCalendarAdapter(config, session=session).fetch_events()

        headers = session.request.call_args[1]["headers"]
        assert headers["Authorization"] == "Bearer user-jwt"
        assert headers["apikey"] == "anon-key"

    def test_fetch_skips_malformed_rows(self, config):
        session = MagicMock()
        session.request.return_value = _response(
            [_row("ok", "2024-01-01T10:00:00+00:00"), {"id": "bad", "title": "x"}]
        )
        events = SupabaseCalendarAdapter(config, session=session).fetch_events()
        assert [e.id for e in events] == ["ok"]

    def test_create_event_applies_defaults(self, config):
        session = MagicMock()
        session.request.return_value = _response([_row("new", "2024-01-05T10:00:00+00:00")])
        adapter = SupabaseCalendarAdapter(config, session=session)

        event = adapter.create_event(
            {"title": "", "start_time": "2024-01-05T10:00:00Z", "end_time": "2024-01-05T11:00:00Z"}
        )

        assert event.id == "new"
        method = session.request.call_args[0][0]
        kwargs = session.request.call_args[1]
        payload = kwargs["json"]
        assert method == "POST"
        assert payload["title"] == "Untitled Event"
        assert payload["color"] == "#6366f1"
        assert payload["is_all_day"] is False
        assert payload["workspace_id"] == "ws-1"
        assert payload["user_id"] == "u-1"
        assert payload["start_time"] == "2024-01-05T10:00:00Z"
        assert kwargs["headers"]["Prefer"] == "return=representation"

    def test_update_event(self, config):
        session = MagicMock()
        session.request.return_value = _response(
            [_row("evt", "2024-01-05T10:00:00+00:00", title="Renamed")]
        )
        event = SupabaseCalendarAdapter(config, session=session).update_event("evt", {"title": "Renamed"})

        assert event.title == "Renamed"
        assert session.request.call_args[0][0] == "PATCH"
        assert session.request.call_args[1]["params"] == {"id": "eq.evt"}

    def test_update_missing_event(self, config):
        session = MagicMock()
        session.request.return_value = _response([])
        with pytest.raises(CalendarRepositoryError):
            SupabaseCalendarAdapter(config, session=session).update_event("evt", {"title": "x"})

    def test_delete_event(self, config):
        session = MagicMock()
        session.request.return_value = _response([_row("evt", "2024-01-05T10:00:00+00:00")])
        assert SupabaseCalendarAdapter(config, session=session).delete_event("evt") is True

        session.request.return_value = _response([])
        assert SupabaseCalendarAdapter(config, session=session).delete_event("evt") is False

    def test_http_error_raises(self, config):
        session = MagicMock()
        session.request.return_value = _response({"message": "JWT expired"}, status_code=401)
        with pytest.raises(CalendarRepositoryError, match="401"):
            SupabaseCalendarAdapter(config, session=session).fetch_events()

    def test_connection_error_raises(self, config):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("boom")
        with pytest.raises(CalendarRepositoryError):
            SupabaseCalendarAdapter(config, session=session).fetch_events()

    def test_empty_body(self, config):
        session = MagicMock()
        session.request.return_value = _response(None, status_code=204)
        assert SupabaseCalendarAdapter(config, session=session).delete_event("evt") is False
