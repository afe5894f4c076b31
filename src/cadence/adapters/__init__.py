"""Adapters - I/O implementations of ports."""

from .supabase_calendar import SupabaseCalendarAdapter
from .file_calendar import FileCalendarStore

__all__ = [
    "SupabaseCalendarAdapter",
    "FileCalendarStore",
]
