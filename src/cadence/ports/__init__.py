"""Ports - interfaces/protocols for external dependencies."""

from .calendar_repo import CalendarRepository, CalendarRepositoryError

__all__ = [
    "CalendarRepository",
    "CalendarRepositoryError",
]
