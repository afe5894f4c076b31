"""Calendar repository interface."""

from typing import Protocol

from cadence.core.calendar import Event


class CalendarRepositoryError(Exception):
    """Raised when a calendar backend cannot complete a request."""

    pass


class CalendarRepository(Protocol):
    """Interface for storing calendar events in any backend."""

    def fetch_events(self) -> list[Event]:
        """Fetch all base events for the workspace, ordered by start."""
        ...

    def create_event(self, fields: dict) -> Event:
        """Insert a new event and return it as stored."""
        ...

    def update_event(self, event_id: str, updates: dict) -> Event:
        """Apply partial updates to an event and return it as stored."""
        ...

    def delete_event(self, event_id: str) -> bool:
        """Delete an event. Returns False if it did not exist."""
        ...
