"""Connectivity checks for the Toggl and Jira APIs."""

import logging
from typing import Dict, Tuple

from ..api.jira_client import JiraClient
from ..api.toggl_client import TogglClient

logger = logging.getLogger(__name__)

SERVICES = ("toggl", "jira")


class HealthChecker:
    """Checks that both remote APIs accept our credentials."""

    def __init__(self, toggl_client: TogglClient, jira_client: JiraClient):
        self.clients = {"toggl": toggl_client, "jira": jira_client}

    def check(self, service: str) -> Tuple[bool, str]:
        """Run the connection test of one service.

        A failing client is reported, never raised.
        """
        try:
            if self.clients[service].test_connection():
                return True, "OK"
            return False, "Connection test failed"
        except Exception as e:
            logger.error(f"{service.capitalize()} health check failed: {e}")
            return False, str(e)

    def check_all(self) -> Dict[str, Dict[str, str]]:
        """Check every service; 'overall' is healthy only if all are."""
        status: Dict[str, Dict[str, str]] = {}
        for service in SERVICES:
            healthy, message = self.check(service)
            status[service] = {"status": "healthy" if healthy else "unhealthy", "message": message}

        all_healthy = all(status[service]["status"] == "healthy" for service in SERVICES)
        status["overall"] = {
            "status": "healthy" if all_healthy else "unhealthy",
            "message": "All services healthy" if all_healthy else "One or more services unhealthy",
        }
        return status
