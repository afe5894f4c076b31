"""Tests for core calendar logic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from cadence.core.calendar import (
    DEFAULT_COLOR,
    DEFAULT_TITLE,
    Event,
    format_instant,
    month_window,
    overlaps_window,
    parse_instant,
    sort_events_by_start,
)

UTC = timezone.utc


@pytest.fixture
def row():
    """A calendar_events row as the backend returns it."""
    return {
        "id": "0b6c3f5e-1d2a-4c1e-9d7a-7f0f2d1e8a11",
        "title": "Planning",
        "description": None,
        "start_time": "2024-01-15T14:00:00+00:00",
        "end_time": "2024-01-15T15:30:00+00:00",
        "is_all_day": False,
        "location": "Room B",
        "color": "#ec4899",
        "recurrence_rule": '{"type":"weekly","interval":1}',
        "user_id": "user-1",
        "workspace_id": "ws-1",
        "created_at": "2024-01-01T09:00:00+00:00",
        "updated_at": "2024-01-01T09:00:00+00:00",
    }


class TestParseInstant:
    def test_z_suffix(self):
        assert parse_instant("2024-01-01T10:00:00.000Z") == datetime(2024, 1, 1, 10, tzinfo=UTC)

    def test_offset_converted_to_utc(self):
        dt = parse_instant("2024-01-01T10:00:00-05:00")
        assert dt == datetime(2024, 1, 1, 15, tzinfo=UTC)
        assert dt.tzinfo == UTC

    def test_naive_string_is_utc(self):
        assert parse_instant("2024-01-01T10:00") == datetime(2024, 1, 1, 10, tzinfo=UTC)

    def test_date_string_is_midnight(self):
        assert parse_instant("2024-01-10") == datetime(2024, 1, 10, tzinfo=UTC)

    def test_date_object_is_midnight(self):
        assert parse_instant(date(2024, 1, 10)) == datetime(2024, 1, 10, tzinfo=UTC)

    def test_naive_datetime_is_utc(self):
        assert parse_instant(datetime(2024, 1, 10, 8)).tzinfo == UTC

    @pytest.mark.parametrize("value", ["", "tomorrow", "2024-13-01", None, 12])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_instant(value)

    def test_out_of_range_offset(self):
        with pytest.raises(ValueError):
            parse_instant("0001-01-01T00:00:00+05:00")

    def test_format_instant(self):
        assert format_instant(datetime(2024, 1, 1, 10, 5, 7, tzinfo=UTC)) == "2024-01-01T10:05:07Z"


class TestEvent:
    def test_from_row(self, row):
        event = Event.from_row(row)

        assert event.id == row["id"]
        assert event.title == "Planning"
        assert event.start_time == datetime(2024, 1, 15, 14, tzinfo=UTC)
        assert event.end_time == datetime(2024, 1, 15, 15, 30, tzinfo=UTC)
        assert event.location == "Room B"
        assert event.color == "#ec4899"
        assert event.recurrence_rule == '{"type":"weekly","interval":1}'
        assert event.workspace_id == "ws-1"

    def test_from_row_defaults(self, row):
        row.update(title="", color=None, is_all_day=None)
        event = Event.from_row(row)

        assert event.title == DEFAULT_TITLE
        assert event.color == DEFAULT_COLOR
        assert event.is_all_day is False

    def test_from_row_rejects_inverted_span(self, row):
        row["end_time"] = "2024-01-15T13:00:00+00:00"
        with pytest.raises(ValueError):
            Event.from_row(row)

    def test_from_row_rejects_bad_instant(self, row):
        row["start_time"] = "not a date"
        with pytest.raises(ValueError):
            Event.from_row(row)

    def test_to_row_round_trip(self, row):
        event = Event.from_row(row)
        out = event.to_row()

        assert out["start_time"] == "2024-01-15T14:00:00Z"
        assert Event.from_row(out) == event

    def test_unknown_columns_pass_through(self, row):
        row["attendees"] = ["a@example.com"]
        event = Event.from_row(row)

        assert event.extra == {"attendees": ["a@example.com"]}
        assert event.to_row()["attendees"] == ["a@example.com"]

    def test_duration_minutes(self, row):
        assert Event.from_row(row).duration_minutes() == 90

    def test_duration_truncates_seconds(self, row):
        row["end_time"] = "2024-01-15T14:10:59+00:00"
        assert Event.from_row(row).duration_minutes() == 10

    def test_with_span_copies(self, row):
        event = Event.from_row(row)
        start = event.start_time + timedelta(days=7)
        copy = event.with_span("x_1", start, start + timedelta(hours=1))

        assert copy.id == "x_1"
        assert copy.title == event.title
        assert event.start_time == datetime(2024, 1, 15, 14, tzinfo=UTC)

    def test_sort_events_by_start(self, row):
        late = Event.from_row(row)
        early = Event.from_row({**row, "id": "e", "start_time": "2024-01-01T09:00:00Z"})
        assert sort_events_by_start([late, early]) == [early, late]


class TestOverlapsWindow:
    start = datetime(2024, 1, 1, tzinfo=UTC)
    end = datetime(2024, 1, 31, tzinfo=UTC)

    def test_inside(self):
        assert overlaps_window(
            datetime(2024, 1, 5, tzinfo=UTC), datetime(2024, 1, 6, tzinfo=UTC), self.start, self.end
        )

    def test_ends_at_start(self):
        assert not overlaps_window(datetime(2023, 12, 31, tzinfo=UTC), self.start, self.start, self.end)

    def test_starts_at_end(self):
        assert not overlaps_window(self.end, self.end + timedelta(hours=1), self.start, self.end)

    def test_spans_window(self):
        assert overlaps_window(
            datetime(2023, 12, 1, tzinfo=UTC), datetime(2024, 2, 1, tzinfo=UTC), self.start, self.end
        )


class TestMonthWindow:
    def test_padded_by_one_month(self):
        start, end = month_window(2024, 1)
        assert start == datetime(2023, 12, 1, tzinfo=UTC)
        assert end == datetime(2024, 2, 29, 23, 59, 59, tzinfo=UTC)

    def test_unpadded(self):
        start, end = month_window(2024, 3, padding_months=0)
        assert start == datetime(2024, 3, 1, tzinfo=UTC)
        assert end == datetime(2024, 3, 31, 23, 59, 59, tzinfo=UTC)

    def test_year_end(self):
        start, end = month_window(2024, 12, padding_months=2)
        assert start == datetime(2024, 10, 1, tzinfo=UTC)
        assert end == datetime(2025, 2, 28, 23, 59, 59, tzinfo=UTC)
