"""Settings and configuration management."""

from typing import List, Optional

from github.Consts import DEFAULT_BASE_URL
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from check_gate.config.logging import LOG_FORMATS
from check_gate.models import CheckConclusion, RefContext

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Gate settings, read from the CI environment.

    The ``GITHUB_*`` fields use the variables GitHub Actions sets for every
    job; ``GATE_*`` fields tune the poller.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # GitHub context
    github_token: Optional[str] = Field(
        None, description="Token used to read check runs"
    )
    github_repository: Optional[str] = Field(
        None, description="Repository in 'owner/name' format"
    )
    github_sha: Optional[str] = Field(None, description="Commit to gate")
    github_job: Optional[str] = Field(
        None, description="Job id of the running workflow job"
    )
    github_api_url: str = Field(DEFAULT_BASE_URL, description="GitHub API base URL")

    # Gate behaviour
    gate_check_name: Optional[str] = Field(
        None, description="Name of this gate's own check run (defaults to GITHUB_JOB)"
    )
    gate_timeout_minutes: float = Field(
        10.0, gt=0, description="Fail if checks have not finished after this long"
    )
    gate_page_size: int = Field(
        100, ge=1, le=100, description="Check runs fetched per page"
    )
    gate_poll_interval_seconds: float = Field(
        0.1, ge=0, description="Wait between polls of an unsettled page"
    )
    gate_allowed_conclusions: str = Field(
        CheckConclusion.SUCCESS.value,
        description="Comma-separated conclusions that count as passing",
    )
    gate_require_other_checks: bool = Field(
        False, description="Keep waiting until at least one other check exists"
    )
    gate_registry_retries: int = Field(
        0, ge=0, description="Transport retries for GitHub API calls (0 = none)"
    )
    gate_request_timeout_seconds: int = Field(
        15, gt=0, description="HTTP timeout for each GitHub API call"
    )

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field(
        "text", description="Log format: 'text', 'json' or 'actions'"
    )
    sanitize_logs: bool = Field(True, description="Redact tokens from logs")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return value

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return value

    @property
    def check_name(self) -> Optional[str]:
        """The gate's own check name, used for self-exclusion."""
        return self.gate_check_name or self.github_job

    @property
    def allowed_conclusions(self) -> List[str]:
        return parse_conclusions(self.gate_allowed_conclusions)

    def ref_context(self) -> RefContext:
        """Build the ``RefContext`` for this invocation.

        Raises:
            ValueError: If the repository, ref or check name is missing
        """
        missing = [
            name
            for name, value in (
                ("GITHUB_REPOSITORY", self.github_repository),
                ("GITHUB_SHA", self.github_sha),
                ("GATE_CHECK_NAME or GITHUB_JOB", self.check_name),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"missing required configuration: {', '.join(missing)}")
        return RefContext(
            repository=self.github_repository,
            ref=self.github_sha,
            check_name=self.check_name,
        )


def parse_conclusions(value: str) -> List[str]:
    """Split a comma-separated conclusion list, rejecting unknown values."""
    known = {c.value for c in CheckConclusion}
    conclusions = []
    for item in value.split(","):
        item = item.strip().lower()
        if not item:
            continue
        if item not in known:
            raise ValueError(f"unknown check conclusion: {item!r}")
        conclusions.append(item)
    if not conclusions:
        raise ValueError("at least one allowed conclusion is required")
    return conclusions
