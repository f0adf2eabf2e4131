"""Data model for check runs reported against a commit reference."""

from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckStatus(str, Enum):
    """Lifecycle status of a check run.

    Only ``COMPLETED`` is terminal. GitHub reports a few extra non-terminal
    values for runs that are gated behind deployments or approvals.
    """

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"


class CheckConclusion(str, Enum):
    """Final outcome of a completed check run."""

    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    STALE = "stale"
    STARTUP_FAILURE = "startup_failure"


class CheckFilter(str, Enum):
    """Which runs of each check name the registry returns."""

    LATEST = "latest"
    ALL = "all"


class RefContext(BaseModel):
    """Identifies the gated commit and the gate's own check."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(..., description="Repository in 'owner/name' format")
    ref: str = Field(..., description="Commit SHA, branch or tag")
    check_name: str = Field(..., description="Name of the gate's own check run")

    @field_validator("repository")
    @classmethod
    def _validate_repository(cls, value: str) -> str:
        owner, sep, name = value.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"repository must be 'owner/name', got {value!r}")
        return f"{owner}/{name}"

    @field_validator("ref", "check_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class CheckRun(BaseModel):
    """One named check's current status and, once completed, its conclusion.

    Status and conclusion are kept as plain strings so values the registry
    adds later do not break parsing; compare them against ``CheckStatus`` and
    ``CheckConclusion``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    status: str
    conclusion: Optional[str] = None
    id: Optional[int] = None
    details_url: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == CheckStatus.COMPLETED

    def passed(self, allowed_conclusions: Iterable[str]) -> bool:
        """True if the run completed with one of the allowed conclusions."""
        return self.is_completed and self.conclusion in conclusion_set(
            allowed_conclusions
        )

    @classmethod
    def from_github(cls, run: Any) -> "CheckRun":
        """Build from a PyGithub ``CheckRun`` object."""
        return cls(
            name=run.name,
            status=run.status,
            conclusion=run.conclusion,
            id=run.id,
            details_url=run.details_url,
        )


class CheckRunPage(BaseModel):
    """One page of check runs plus the registry's total count for the query."""

    entries: List[CheckRun] = Field(default_factory=list)
    total_count: int = 0


def conclusion_set(conclusions: Iterable[str]) -> FrozenSet[str]:
    """Normalize conclusions (enum members or strings) to lowercase values."""
    return frozenset(
        c.value if isinstance(c, Enum) else str(c).strip().lower()
        for c in conclusions
    )
