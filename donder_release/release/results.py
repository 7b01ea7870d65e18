"""Contains results of a release run."""

from enum import IntEnum

from donder_release.configuration.exceptions import ConfigurationError
from donder_release.exceptions import (
    AuthorizationError,
    DuplicateReleaseError,
    RepositoryAccessError,
    TransientNetworkError,
    ValidationError,
)
from donder_release.versioning.models import NoReleaseNeeded

from .models import PublishOutcome, RunContext, RunState


class ExitCode(IntEnum):
    """Process exit codes of the command line interface."""

    SUCCESS = 0
    UNEXPECTED_ERROR = 1
    CONFIGURATION_ERROR = 2
    REPOSITORY_ERROR = 3
    AUTHORIZATION_ERROR = 4
    VALIDATION_ERROR = 5
    NETWORK_ERROR = 6
    DUPLICATE_RELEASE = 7


# Checked in order, so subclasses must come before their parents.
ERROR_EXIT_CODES: tuple[tuple[type[Exception], ExitCode], ...] = (
    (ConfigurationError, ExitCode.CONFIGURATION_ERROR),
    (RepositoryAccessError, ExitCode.REPOSITORY_ERROR),
    (AuthorizationError, ExitCode.AUTHORIZATION_ERROR),
    (ValidationError, ExitCode.VALIDATION_ERROR),
    (TransientNetworkError, ExitCode.NETWORK_ERROR),
    (DuplicateReleaseError, ExitCode.DUPLICATE_RELEASE),
)


def exit_code_for_error(error: Exception) -> ExitCode:
    """Map an error that ended a run to its exit code."""
    for error_type, exit_code in ERROR_EXIT_CODES:
        if isinstance(error, error_type):
            return exit_code
    return ExitCode.UNEXPECTED_ERROR


class RunResult:
    """Contains the terminal context of a release run."""

    def __init__(self, context: RunContext, dry_run: bool = False) -> None:
        """Initialize the result with the terminal context of the run."""
        self.context = context
        self.dry_run = dry_run

    @property
    def state(self) -> RunState:
        """Terminal state of the run."""
        return self.context.state

    @property
    def exit_code(self) -> ExitCode:
        """Exit code of the run. NO_RELEASE_NEEDED is a success."""
        if self.context.state is RunState.FAILED:
            return exit_code_for_error(self.context.error) if self.context.error is not None else ExitCode.UNEXPECTED_ERROR
        return ExitCode.SUCCESS

    @property
    def message(self) -> str:
        """Single human-readable line describing how the run ended."""
        context = self.context
        if context.state is RunState.FAILED:
            return f"Release failed: {context.error}"
        if context.state is RunState.NO_RELEASE_NEEDED:
            resolution = context.resolution
            reason = resolution.reason if isinstance(resolution, NoReleaseNeeded) else "No releasable commits found"
            return f"No release needed: {reason} (current version {context.current_version})"
        plan = context.plan
        if plan is None:
            return f"Release run ended in state {context.state.value}"
        if self.dry_run or context.publish_result is None:
            return f"Dry run: would release {plan.tag_name} ({plan.bump.value} bump, {len(plan.commits)} commits)"
        publish_result = context.publish_result
        location = f" {publish_result.release.html_url}" if publish_result.release.html_url else ""
        if publish_result.outcome is PublishOutcome.UNCHANGED:
            return f"Release {plan.tag_name} is already published and up to date{location}"
        return f"Release {plan.tag_name} {publish_result.outcome.value}{location}"
