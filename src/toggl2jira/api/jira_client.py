"""Minimal Jira API client for work log creation and issue validation."""

import logging
from datetime import timezone
from typing import Any, Optional

import requests

from toggl2jira.domain.models import WorkLogDraft
from toggl2jira.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_COMMENT = "Logged from Toggl Track"


def build_comment_document(comment: str) -> dict[str, Any]:
    """Convert a multi-line comment into an Atlassian Document Format body.

    Each non-blank line becomes one paragraph.
    """
    lines = [line for line in comment.split("\n") if line.strip()] or [DEFAULT_COMMENT]
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": line}]} for line in lines
        ],
    }


class JiraClient:
    """Simple Jira API client."""

    def __init__(self, base_url: str, email: str, api_token: str) -> None:
        """Initialize Jira client.

        Args:
            base_url: Jira base URL (e.g., https://company.atlassian.net)
            email: User email for authentication
            api_token: Jira API token
        """
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.api_token = api_token
        self.headers = {"Accept": "application/json", "Content-Type": "application/json"}

    def _make_request(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        """Make authenticated request to Jira API.

        Args:
            method: HTTP method
            endpoint: API endpoint
            **kwargs: Additional request arguments

        Returns:
            Response object

        Raises:
            requests.RequestException: On transport or HTTP errors
        """
        url = f"{self.base_url}/rest/api/3{endpoint}"
        auth = (self.email, self.api_token)

        response = requests.request(
            method, url, headers=self.headers, auth=auth, timeout=30, **kwargs
        )
        response.raise_for_status()
        return response

    def create_worklog(self, draft: WorkLogDraft) -> str:
        """Create a work log on the draft's issue.

        Args:
            draft: Work log draft

        Returns:
            ID of the created work log

        Raises:
            TransportError: Jira rejected the work log or could not be reached
        """
        started = draft.started_at.astimezone(timezone.utc)
        payload = {
            "timeSpentSeconds": draft.duration_seconds,
            "started": started.strftime("%Y-%m-%dT%H:%M:%S.000+0000"),
            "comment": build_comment_document(draft.comment),
        }

        try:
            response = self._make_request("POST", f"/issue/{draft.issue_key}/worklog", json=payload)
            work_log_id = str(response.json().get("id", ""))
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            message = _error_message(e.response)
            logger.error(f"Failed to create work log for {draft.issue_key}: {status} - {message}")
            raise TransportError(
                "Jira", f"Failed to create work log for {draft.issue_key}: {message}", status
            ) from e
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to create work log for {draft.issue_key}: {e}")
            raise TransportError("Jira", f"Failed to create work log for {draft.issue_key}: {e}") from e

        logger.info(
            f"Created work log {work_log_id} on {draft.issue_key} "
            f"({draft.duration_seconds}s, {draft.entry_count} entries)"
        )
        return work_log_id

    def validate_issue_key(self, issue_key: str) -> bool:
        """Check that an issue exists.

        Args:
            issue_key: Issue key (e.g., 'PROJ-123')

        Returns:
            True if the issue exists, False if Jira answers 404

        Raises:
            TransportError: Any other failure (auth, network, server)
        """
        try:
            self._make_request("GET", f"/issue/{issue_key}", params={"fields": "key"})
            return True
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 404:
                logger.debug(f"Issue {issue_key} not found")
                return False
            raise TransportError("Jira", _error_message(e.response), status) from e
        except requests.RequestException as e:
            raise TransportError("Jira", str(e)) from e

    def test_connection(self) -> bool:
        """Test if API connection works.

        Returns:
            True if connection is successful
        """
        try:
            response = self._make_request("GET", "/myself")
            return response.status_code == 200
        except Exception as e:
            logger.error(f"Jira connection test failed: {e}")
            return False


def _error_message(response: Optional[requests.Response]) -> str:
    if response is None:
        return "no response"
    try:
        body = response.json()
    except ValueError:
        return response.reason or response.text or ""
    messages = body.get("errorMessages") if isinstance(body, dict) else None
    if messages:
        return ", ".join(str(m) for m in messages)
    return response.reason or ""
