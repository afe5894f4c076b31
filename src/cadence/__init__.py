"""Cadence - calendar events with on-demand recurrence expansion."""
