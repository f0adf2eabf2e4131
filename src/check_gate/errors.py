"""Exception hierarchy for the check gate.

Every terminal outcome of a gate invocation other than success is a
``GateError``. The CLI surfaces ``str(error)`` verbatim to the CI host.
"""

from typing import List, Optional, Sequence, Tuple


class GateError(Exception):
    """Base class for gate failures."""


class GateTimeoutError(GateError):
    """Other checks did not converge before the deadline."""

    def __init__(
        self,
        deadline_minutes: float,
        elapsed_seconds: float,
        pending: Optional[Sequence[str]] = None,
    ):
        self.deadline_minutes = deadline_minutes
        self.elapsed_seconds = elapsed_seconds
        self.pending: List[str] = list(pending or [])
        unit = "minute" if deadline_minutes == 1 else "minutes"
        message = (
            f"timed out after {deadline_minutes:g} {unit} "
            f"waiting for checks to finish"
        )
        if self.pending:
            message += f" (still pending: {', '.join(self.pending)})"
        super().__init__(message)


class UnsuccessfulCheckError(GateError):
    """At least one other check completed with a non-passing conclusion."""

    def __init__(self, failed: Sequence[Tuple[str, Optional[str]]]):
        self.failed: List[Tuple[str, Optional[str]]] = list(failed)
        message = "there were unsuccessful checks"
        if self.failed:
            details = ", ".join(
                f"{name} ({conclusion or 'no conclusion'})"
                for name, conclusion in self.failed
            )
            message += f": {details}"
        super().__init__(message)

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.failed]


class RegistryError(GateError):
    """The check registry could not be queried (network, auth, rate limit)."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        if status is not None:
            message = f"{message} (HTTP {status})"
        super().__init__(message)
