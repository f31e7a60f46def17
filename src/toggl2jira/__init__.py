"""Sync Toggl Track time entries to Jira work logs."""

__version__ = "1.0.0"
