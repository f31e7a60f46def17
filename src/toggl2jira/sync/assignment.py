"""Interactive assignment of issue keys to entries without one.

Each description group goes through PROMPTING -> VALIDATING ->
{VALID, INVALID, ERROR}. INVALID returns to PROMPTING, ERROR returns to
PROMPTING or ends in ABANDONED depending on the user. There is no retry cap.
The prompter and validator are injected so the flow runs without a terminal.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol

from toggl2jira.domain.models import Assignment, DescriptionGroup
from toggl2jira.errors import NotFoundError, Toggl2JiraError, TransportError, ValidationError
from toggl2jira.sync.parser import is_valid_issue_key, normalize_issue_key

logger = logging.getLogger(__name__)

ACTION_ASSIGN = "assign"
ACTION_SKIP = "skip"


class AssignmentState(Enum):
    PROMPTING = "prompting"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"
    ABANDONED = "abandoned"
    SKIPPED = "skipped"


TERMINAL_STATES = frozenset(
    {AssignmentState.VALID, AssignmentState.ABANDONED, AssignmentState.SKIPPED}
)


class Prompter(Protocol):
    """User decisions needed during assignment."""

    def confirm_assignment(self, group_count: int) -> bool: ...

    def choose_action(self, group: DescriptionGroup) -> str: ...

    def ask_issue_key(self, group: DescriptionGroup) -> Optional[str]: ...

    def report_invalid(self, issue_key: str, error: Toggl2JiraError) -> None: ...

    def ask_retry_after_error(self, issue_key: str, error: TransportError) -> bool: ...


Validator = Callable[[str], bool]


@dataclass
class AssignmentOutcome:
    """Final state of one group's assignment, with the states it went through."""

    group: DescriptionGroup
    state: AssignmentState
    issue_key: Optional[str] = None
    history: list[AssignmentState] = field(default_factory=list)

    @property
    def assignment(self) -> Optional[Assignment]:
        if self.state is AssignmentState.VALID and self.issue_key:
            return Assignment(issue_key=self.issue_key, group=self.group)
        return None


class IssueAssigner:
    """Drives issue key assignment for groups of entries without one."""

    def __init__(self, prompter: Prompter, validator: Validator) -> None:
        """Initialize assigner.

        Args:
            prompter: Source of user decisions
            validator: Returns False when an issue does not exist, raises
                TransportError on any other failure
        """
        self.prompter = prompter
        self.validator = validator

    def validate(self, raw_key: str) -> str:
        """Normalize and validate a user-supplied issue key.

        Returns:
            Normalized issue key

        Raises:
            ValidationError: Key is malformed
            NotFoundError: Key does not exist in Jira
            TransportError: Jira could not be reached
        """
        issue_key = normalize_issue_key(raw_key)
        if not is_valid_issue_key(issue_key):
            raise ValidationError(issue_key)
        if not self.validator(issue_key):
            raise NotFoundError(issue_key)
        return issue_key

    def assign_group(self, group: DescriptionGroup) -> AssignmentOutcome:
        """Prompt for an issue key until it validates or the user gives up."""
        outcome = AssignmentOutcome(group=group, state=AssignmentState.PROMPTING)
        raw_key = ""
        last_error: Optional[TransportError] = None

        while True:
            outcome.history.append(outcome.state)

            if outcome.state in TERMINAL_STATES:
                return outcome

            if outcome.state is AssignmentState.PROMPTING:
                answer = self.prompter.ask_issue_key(group)
                if answer is None:
                    outcome.state = AssignmentState.ABANDONED
                else:
                    raw_key = answer
                    outcome.state = AssignmentState.VALIDATING

            elif outcome.state is AssignmentState.VALIDATING:
                try:
                    outcome.issue_key = self.validate(raw_key)
                    outcome.state = AssignmentState.VALID
                except (ValidationError, NotFoundError) as e:
                    self.prompter.report_invalid(e.issue_key, e)
                    outcome.state = AssignmentState.INVALID
                except TransportError as e:
                    logger.warning(f"Validation of {raw_key} failed: {e}")
                    last_error = e
                    outcome.state = AssignmentState.ERROR

            elif outcome.state is AssignmentState.INVALID:
                outcome.state = AssignmentState.PROMPTING

            elif outcome.state is AssignmentState.ERROR:
                # ERROR is only entered from VALIDATING with the error recorded
                assert last_error is not None
                retry = self.prompter.ask_retry_after_error(normalize_issue_key(raw_key), last_error)
                outcome.state = AssignmentState.PROMPTING if retry else AssignmentState.ABANDONED

    def assign_all(self, groups: Iterable[DescriptionGroup]) -> list[AssignmentOutcome]:
        """Offer every group for assignment.

        Abandoning or skipping a group never stops the pass.

        Returns:
            One outcome per group, or an empty list if the user declined
        """
        groups = list(groups)
        if not groups or not self.prompter.confirm_assignment(len(groups)):
            return []

        outcomes = []
        for group in groups:
            if self.prompter.choose_action(group) != ACTION_ASSIGN:
                outcomes.append(
                    AssignmentOutcome(
                        group=group,
                        state=AssignmentState.SKIPPED,
                        history=[AssignmentState.SKIPPED],
                    )
                )
                continue

            outcome = self.assign_group(group)
            if outcome.state is AssignmentState.VALID:
                logger.info(
                    f"Assigned {len(group.entries)} entries '{group.description}' to {outcome.issue_key}"
                )
            else:
                logger.info(f"Abandoned assignment for '{group.description}'")
            outcomes.append(outcome)

        return outcomes
