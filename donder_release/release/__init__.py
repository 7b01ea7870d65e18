"""Plans and publishes releases."""

from .models import PublishOutcome, PublishResult, ReleasePlan, RunContext, RunState
from .orchestrator import ReleaseOrchestrator
from .publisher import ReleasePublisher
from .results import ExitCode, RunResult

__all__ = [
    "ExitCode",
    "PublishOutcome",
    "PublishResult",
    "ReleaseOrchestrator",
    "ReleasePlan",
    "ReleasePublisher",
    "RunContext",
    "RunResult",
    "RunState",
]
