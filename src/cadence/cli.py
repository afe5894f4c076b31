"""Cadence CLI - calendar with recurring events."""

import json
import logging
import sys
from datetime import date

import click

from . import calendar as cal
from .config import load_config
from .core.calendar import format_instant, parse_instant
from .core.recurrence import Occurrence, parse_rule, rule_label, source_event_id
from .ports.calendar_repo import CalendarRepositoryError


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="cadence")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Cadence - calendar with recurring events."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


def _show_occurrences(
    occurrences: list[Occurrence], as_json: bool, empty_msg: str = "No events."
) -> None:
    """Shared occurrence display logic."""
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": o.id,
                        "event_id": o.event.id,
                        "title": o.event.title,
                        "start": format_instant(o.start),
                        "end": format_instant(o.end),
                        "all_day": o.event.is_all_day,
                        "location": o.event.location,
                        "color": o.event.color,
                        "recurring": o.is_generated,
                    }
                    for o in occurrences
                ],
                indent=2,
            )
        )
        return

    if not occurrences:
        click.echo(empty_msg)
        return

    current_date = None
    for occurrence in occurrences:
        occurrence_date = occurrence.start.date()
        if occurrence_date != current_date:
            if current_date is not None:
                click.echo()
            click.echo(f"### {occurrence_date.strftime('%A, %B %d')}")
            current_date = occurrence_date

        event = occurrence.event
        time_str = "All day" if event.is_all_day else occurrence.start.strftime("%H:%M")
        loc = f" @ {event.location}" if event.location else ""
        repeat = " (repeats)" if occurrence.is_generated else ""
        click.echo(f"  {time_str:8} {event.title}{loc}{repeat}")


@main.group(invoke_without_command=True)
@click.pass_context
def calendar(ctx):
    """Show calendar occurrences."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(calendar_month)


@calendar.command("month")
@click.option("--year", type=click.IntRange(2, 9998), default=None, help="Year (defaults to current)")
@click.option("--month", type=click.IntRange(1, 12), default=None, help="Month 1-12 (defaults to current)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_month(year: int | None = None, month: int | None = None, as_json: bool = False):
    """Show a month, including recurring events."""
    config = load_config()
    today = date.today()
    year = year or today.year
    month = month or today.month

    try:
        occurrences = cal.fetch_month(config, year, month)
    except (CalendarRepositoryError, ValueError, OverflowError) as e:
        _fail(str(e))

    visible = cal.occurrences_in_month(occurrences, year, month)
    _show_occurrences(visible, as_json, f"No events in {date(year, month, 1).strftime('%B %Y')}.")


@calendar.command("range")
@click.argument("start")
@click.argument("end")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_range(start: str, end: str, as_json: bool = False):
    """Show occurrences between START and END (ISO dates or datetimes)."""
    config = load_config()
    try:
        range_start = parse_instant(start)
        range_end = parse_instant(end)
        occurrences = cal.fetch_range(config, range_start, range_end)
    except (CalendarRepositoryError, ValueError) as e:
        _fail(str(e))

    _show_occurrences(occurrences, as_json, "No events in range.")


@main.group()
def events():
    """Manage stored events."""
    pass


@events.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def events_list(as_json: bool):
    """List base events and their recurrence."""
    config = load_config()
    try:
        stored = cal.get_repository(config).fetch_events()
    except CalendarRepositoryError as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps([e.to_row() for e in stored], indent=2))
        return

    if not stored:
        click.echo("No events.")
        return

    for event in stored:
        label = rule_label(parse_rule(event.recurrence_rule))
        click.echo(f"{event.id}  {format_instant(event.start_time)}  {event.title}  [{label}]")


@events.command("add")
@click.option("--title", required=True, help="Event title")
@click.option("--start", required=True, help="Start (ISO datetime)")
@click.option("--end", required=True, help="End (ISO datetime)")
@click.option("--description", default=None, help="Description")
@click.option("--location", default=None, help="Location")
@click.option("--color", default=None, help="Display color, e.g. #6366f1")
@click.option("--all-day", is_flag=True, help="All-day event")
@click.option(
    "--repeat",
    type=click.Choice(["none", "daily", "weekly", "monthly"]),
    default="none",
    help="Recurrence frequency",
)
@click.option("--every", type=int, default=1, help="Repeat every N days/weeks/months")
@click.option("--until", default=None, help="Last date a recurrence may start (YYYY-MM-DD)")
@click.option("--count", type=int, default=None, help="Maximum number of occurrences")
def events_add(
    title: str,
    start: str,
    end: str,
    description: str | None,
    location: str | None,
    color: str | None,
    all_day: bool,
    repeat: str,
    every: int,
    until: str | None,
    count: int | None,
):
    """Schedule a new event."""
    config = load_config()
    try:
        rule = cal.build_rule(repeat, every, until, count)
        fields = cal.build_event_fields(
            title,
            start,
            end,
            rule=rule,
            description=description,
            location=location,
            color=color,
            is_all_day=all_day,
        )
        event = cal.get_repository(config).create_event(fields)
    except (CalendarRepositoryError, ValueError) as e:
        _fail(str(e))

    click.echo(f"Created {event.id}: {event.title} ({rule_label(rule)})")


@events.command("delete")
@click.argument("event_id")
def events_delete(event_id: str):
    """Delete an event. Occurrence ids delete the whole series."""
    config = load_config()
    target = event_id
    try:
        repo = cal.get_repository(config)
        deleted = repo.delete_event(target)
        if not deleted and source_event_id(event_id) != event_id:
            target = source_event_id(event_id)
            deleted = repo.delete_event(target)
    except CalendarRepositoryError as e:
        _fail(str(e))

    if not deleted:
        _fail(f"No event with id {event_id}")
    click.echo(f"Deleted {target}")


@main.group()
def rule():
    """Inspect recurrence descriptors."""
    pass


@rule.command("describe")
@click.argument("raw")
def rule_describe(raw: str):
    """Describe a stored recurrence descriptor."""
    click.echo(rule_label(parse_rule(raw)))
