"""check-gate - wait for the other checks on a commit to finish, then pass or fail."""

__version__ = "1.0.0"

from .errors import GateError, GateTimeoutError, RegistryError, UnsuccessfulCheckError
from .models import (
    CheckConclusion,
    CheckFilter,
    CheckRun,
    CheckRunPage,
    CheckStatus,
    RefContext,
)
from .poller import ConvergencePoller, PollPhase, PollState, await_other_checks
from .registry import CheckRegistry, GitHubCheckRegistry

__all__ = [
    "GateError",
    "GateTimeoutError",
    "RegistryError",
    "UnsuccessfulCheckError",
    "CheckConclusion",
    "CheckFilter",
    "CheckRun",
    "CheckRunPage",
    "CheckStatus",
    "RefContext",
    "ConvergencePoller",
    "PollPhase",
    "PollState",
    "await_other_checks",
    "CheckRegistry",
    "GitHubCheckRegistry",
]
