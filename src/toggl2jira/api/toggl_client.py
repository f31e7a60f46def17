"""Minimal Toggl Track API client for time entry retrieval."""

import logging
from datetime import datetime
from typing import Any, Optional

import requests

from toggl2jira.errors import TransportError

logger = logging.getLogger(__name__)

TOGGL_API_URL = "https://api.track.toggl.com/api/v9"


class TogglClient:
    """Simple Toggl Track API client."""

    def __init__(
        self,
        api_token: str,
        workspace_id: Optional[str] = None,
        project_id: Optional[str] = None,
        base_url: str = TOGGL_API_URL,
    ) -> None:
        """Initialize Toggl client.

        Args:
            api_token: Toggl API token
            workspace_id: Only keep entries of this workspace
            project_id: Only keep entries of this project
            base_url: Toggl Track API base URL
        """
        self.api_token = api_token
        self.workspace_id = int(workspace_id) if workspace_id else None
        self.project_id = int(project_id) if project_id else None
        self.base_url = base_url.rstrip("/")
        self.auth = (api_token, "api_token")
        self.headers = {"Content-Type": "application/json"}

    def _matches_scope(self, entry: dict[str, Any]) -> bool:
        if self.workspace_id is not None and entry.get("workspace_id") != self.workspace_id:
            return False
        if self.project_id is not None and entry.get("project_id") != self.project_id:
            return False
        return True

    def get_time_entries(self, start_date: datetime, end_date: datetime) -> list[dict[str, Any]]:
        """Get time entries for date range.

        The end date is inclusive: entries up to 23:59:59 UTC are returned.

        Args:
            start_date: Start date
            end_date: End date

        Returns:
            List of time entries (empty list if there are none)

        Raises:
            TransportError: Toggl could not be reached or rejected the request
        """
        url = f"{self.base_url}/me/time_entries"
        params = {
            "start_date": start_date.strftime("%Y-%m-%dT00:00:00Z"),
            "end_date": end_date.strftime("%Y-%m-%dT23:59:59Z"),
        }

        try:
            response = requests.get(
                url, headers=self.headers, auth=self.auth, params=params, timeout=30
            )
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Error fetching time entries from Toggl: {e}")
            raise TransportError("Toggl", _error_message(e.response), status) from e
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching time entries from Toggl: {e}")
            raise TransportError("Toggl", str(e)) from e

        entries = [
            {
                "id": entry.get("id"),
                "description": entry.get("description") or "",
                "duration": entry.get("duration", 0),
                "start": entry.get("start"),
                "stop": entry.get("stop"),
                "projectId": entry.get("project_id"),
                "workspaceId": entry.get("workspace_id"),
            }
            for entry in data or []
            if self._matches_scope(entry)
        ]
        logger.info(f"Retrieved {len(entries)} time entries from Toggl")
        return entries

    def test_connection(self) -> bool:
        """Test if API connection works.

        Returns:
            True if connection is successful
        """
        try:
            response = requests.get(
                f"{self.base_url}/me", headers=self.headers, auth=self.auth, timeout=10
            )
            return response.status_code == 200
        except Exception as e:
            logger.error(f"Toggl connection test failed: {e}")
            return False


def _error_message(response: Optional[requests.Response]) -> str:
    if response is None:
        return "no response"
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or ""
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason or str(body)
