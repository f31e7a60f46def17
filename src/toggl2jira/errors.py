"""Error types shared by the clients, the ledger and the reconciliation engine."""

from typing import Optional


class Toggl2JiraError(Exception):
    """Base class for all toggl2jira errors."""


class ValidationError(Toggl2JiraError):
    """Issue key does not match the expected format."""

    def __init__(self, issue_key: str) -> None:
        self.issue_key = issue_key
        super().__init__(f"Invalid Jira issue key format: '{issue_key}' (e.g., PROJ-123)")


class NotFoundError(Toggl2JiraError):
    """Well-formed issue key that does not exist in Jira."""

    def __init__(self, issue_key: str) -> None:
        self.issue_key = issue_key
        super().__init__(f"Issue {issue_key} not found in Jira")


class TransportError(Toggl2JiraError):
    """Network, auth or server failure talking to a remote API."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None) -> None:
        self.service = service
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"{service} API error: {status_code} - {message}")
        else:
            super().__init__(f"{service} API error: {message}")


class PersistenceError(Toggl2JiraError):
    """Ledger file could not be read or written."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Sync history file {path}: {message}")
