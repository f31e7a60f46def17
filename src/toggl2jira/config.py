"""Environment-based configuration for toggl2jira."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from toggl2jira.sync.ledger import DEFAULT_LEDGER_FILE


@dataclass(frozen=True)
class TogglConfig:
    api_token: str = ""
    workspace_id: Optional[str] = None
    project_id: Optional[str] = None


@dataclass(frozen=True)
class JiraConfig:
    api_token: str = ""
    email: str = ""
    domain: str = ""
    base_url_override: Optional[str] = None

    @property
    def base_url(self) -> str:
        """Jira base URL, derived from the domain unless set explicitly."""
        if self.base_url_override:
            return self.base_url_override.rstrip("/")
        if self.domain:
            return f"https://{self.domain}"
        return ""


@dataclass(frozen=True)
class SyncConfig:
    history_file: str = DEFAULT_LEDGER_FILE
    log_level: str = "INFO"
    log_dir: str = "./logs"
    metrics_dir: Optional[str] = None


@dataclass(frozen=True)
class AppConfig:
    toggl: TogglConfig
    jira: JiraConfig
    sync: SyncConfig

    def validate(self) -> tuple[bool, list[str]]:
        """Validate required configuration fields.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors: list[str] = []

        # Check required Toggl fields
        if not self.toggl.api_token:
            errors.append("TOGGL_API_TOKEN is required")
        if not self.toggl.workspace_id:
            errors.append("TOGGL_WORKSPACE_ID is required")
        if not self.toggl.project_id:
            errors.append("TOGGL_PROJECT_ID is required")

        # Check required Jira fields
        if not self.jira.api_token:
            errors.append("JIRA_API_TOKEN is required")
        if not self.jira.email:
            errors.append("JIRA_EMAIL is required")
        if not self.jira.base_url:
            errors.append("JIRA_DOMAIN (or JIRA_BASE_URL) is required")

        return len(errors) == 0, errors

    def to_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Return configuration as dictionary, with tokens masked by default."""

        def secret(value: str) -> str:
            if not value:
                return "Not set"
            return f"***{value[-4:]}" if mask_secrets else value

        return {
            "toggl": {
                "api_token": secret(self.toggl.api_token),
                "workspace_id": self.toggl.workspace_id or "Not set",
                "project_id": self.toggl.project_id or "Not set",
            },
            "jira": {
                "api_token": secret(self.jira.api_token),
                "email": self.jira.email or "Not set",
                "base_url": self.jira.base_url or "Not set",
            },
            "sync": {
                "history_file": self.sync.history_file,
                "log_level": self.sync.log_level,
                "log_dir": self.sync.log_dir,
                "metrics_dir": self.sync.metrics_dir or "Not set",
            },
        }


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build configuration from environment variables.

    When no mapping is given, a local .env file is loaded into the process
    environment first.

    Args:
        env: Explicit variables to read instead of os.environ

    Returns:
        Immutable AppConfig
    """
    if env is None:
        load_dotenv()
        env = os.environ

    return AppConfig(
        toggl=TogglConfig(
            api_token=env.get("TOGGL_API_TOKEN", ""),
            workspace_id=env.get("TOGGL_WORKSPACE_ID") or None,
            project_id=env.get("TOGGL_PROJECT_ID") or None,
        ),
        jira=JiraConfig(
            api_token=env.get("JIRA_API_TOKEN", ""),
            email=env.get("JIRA_EMAIL", ""),
            domain=env.get("JIRA_DOMAIN", ""),
            base_url_override=env.get("JIRA_BASE_URL") or None,
        ),
        sync=SyncConfig(
            history_file=env.get("SYNC_HISTORY_FILE") or DEFAULT_LEDGER_FILE,
            log_level=env.get("LOG_LEVEL") or "INFO",
            log_dir=env.get("LOG_DIR") or "./logs",
            metrics_dir=env.get("METRICS_DIR") or None,
        ),
    )
