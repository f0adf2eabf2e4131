"""Convergence poller: wait for every other check on a ref to finish.

The poller walks the registry's pages in order. A page is re-fetched in
place until every entry on it (other than the gate's own check) is
completed; only then are conclusions inspected and the cursor advanced.
The first page with a non-passing conclusion fails the gate.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional

from check_gate.errors import GateTimeoutError, UnsuccessfulCheckError
from check_gate.models import (
    CheckConclusion,
    CheckFilter,
    CheckRun,
    CheckRunPage,
    RefContext,
    conclusion_set,
)
from check_gate.registry import CheckRegistry

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_MINUTES = 10.0
DEFAULT_PAGE_SIZE = 100
DEFAULT_POLL_INTERVAL = 0.1

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class PollPhase(str, Enum):
    """Where the poller is in its per-page state machine."""

    FETCHING = "fetching"
    BACKOFF = "backoff"
    CHECKING_OUTCOME = "checking_outcome"
    ADVANCE = "advance"
    DONE = "done"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (PollPhase.DONE, PollPhase.FAILED, PollPhase.TIMED_OUT)


@dataclass
class PollState:
    """State owned by a single poller run."""

    start_time: float
    page: int = 1
    phase: PollPhase = PollPhase.FETCHING
    fetches: int = 0
    pages_settled: int = 0
    last_page: Optional[CheckRunPage] = None
    pending: List[str] = field(default_factory=list)


class ConvergencePoller:
    """Blocks until all other checks on a ref have completed.

    Args:
        ref_context: The gated repository, ref and the gate's own check name
        registry: Where check runs are listed
        deadline_minutes: Give up after this long (default: 10)
        page_size: Entries per registry page (default: 100)
        poll_interval: Seconds to wait before re-fetching an unsettled page
        allowed_conclusions: Conclusions that count as passing
        require_other_checks: Keep waiting while no other check exists yet
        clock: Monotonic time source in seconds
        sleep: Coroutine function used to wait between polls
    """

    def __init__(
        self,
        ref_context: RefContext,
        registry: CheckRegistry,
        deadline_minutes: float = DEFAULT_DEADLINE_MINUTES,
        page_size: int = DEFAULT_PAGE_SIZE,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        allowed_conclusions: Iterable[str] = (CheckConclusion.SUCCESS,),
        require_other_checks: bool = False,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ):
        if deadline_minutes <= 0:
            raise ValueError("deadline_minutes must be positive")
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")

        self.ref_context = ref_context
        self.registry = registry
        self.deadline_minutes = deadline_minutes
        self.page_size = page_size
        self.poll_interval = poll_interval
        self.allowed_conclusions = conclusion_set(allowed_conclusions)
        if not self.allowed_conclusions:
            raise ValueError("at least one allowed conclusion is required")
        self.require_other_checks = require_other_checks
        self._clock = clock
        self._sleep = sleep

    @property
    def deadline_seconds(self) -> float:
        return self.deadline_minutes * 60

    async def run(self) -> PollState:
        """Poll until convergence.

        Returns:
            The final state (phase ``DONE``)

        Raises:
            GateTimeoutError: The deadline passed before convergence
            UnsuccessfulCheckError: Another check did not pass
            RegistryError: The registry could not be queried
        """
        ctx = self.ref_context
        state = PollState(start_time=self._clock())
        others: List[CheckRun] = []

        logger.info(
            "Waiting for checks on %s@%s (excluding %r, deadline %g min)",
            ctx.repository,
            ctx.ref,
            ctx.check_name,
            self.deadline_minutes,
        )

        while not state.phase.is_terminal:
            if state.phase is PollPhase.FETCHING:
                elapsed = self._clock() - state.start_time
                if elapsed > self.deadline_seconds:
                    state.phase = PollPhase.TIMED_OUT
                    logger.warning(
                        "Timed out after %.1fs on page %d; pending: %s",
                        elapsed,
                        state.page,
                        ", ".join(state.pending) or "none",
                        extra={"page": state.page, "fetches": state.fetches},
                    )
                    raise GateTimeoutError(
                        self.deadline_minutes, elapsed, state.pending
                    )

                page = await self.registry.list_checks_async(
                    ctx.repository,
                    ctx.ref,
                    page=state.page,
                    page_size=self.page_size,
                    filter=CheckFilter.LATEST,
                )
                state.fetches += 1
                state.last_page = page
                others = [run for run in page.entries if run.name != ctx.check_name]
                logger.debug(
                    "Fetched page %d: %d entries, %d other checks",
                    state.page,
                    len(page.entries),
                    len(others),
                )

                pending = [run.name for run in others if not run.is_completed]
                if pending != state.pending:
                    if pending:
                        logger.info(
                            "Page %d still running: %s",
                            state.page,
                            ", ".join(pending),
                            extra={"page": state.page, "pending": pending},
                        )
                    state.pending = pending

                if pending or self._awaiting_registration(state, others):
                    state.phase = PollPhase.BACKOFF
                else:
                    state.phase = PollPhase.CHECKING_OUTCOME

            elif state.phase is PollPhase.BACKOFF:
                await self._sleep(self.poll_interval)
                state.phase = PollPhase.FETCHING

            elif state.phase is PollPhase.CHECKING_OUTCOME:
                failed = [
                    (run.name, run.conclusion)
                    for run in others
                    if not run.passed(self.allowed_conclusions)
                ]
                if failed:
                    state.phase = PollPhase.FAILED
                    logger.warning(
                        "Unsuccessful checks on page %d: %s",
                        state.page,
                        ", ".join(f"{name}={conclusion}" for name, conclusion in failed),
                    )
                    raise UnsuccessfulCheckError(failed)

                state.pages_settled += 1
                logger.info(
                    "Page %d settled: %d other checks passed",
                    state.page,
                    len(others),
                    extra={"page": state.page, "fetches": state.fetches},
                )
                # Short page means no more pages; counted before self-exclusion
                if len(state.last_page.entries) < self.page_size:
                    state.phase = PollPhase.DONE
                else:
                    state.phase = PollPhase.ADVANCE

            elif state.phase is PollPhase.ADVANCE:
                state.page += 1
                state.phase = PollPhase.FETCHING

        elapsed = self._clock() - state.start_time
        logger.info(
            "All other checks passed on %s@%s (%d fetches, %.1fs)",
            ctx.repository,
            ctx.ref,
            state.fetches,
            elapsed,
            extra={
                "repository": ctx.repository,
                "ref": ctx.ref,
                "fetches": state.fetches,
                "elapsed_seconds": round(elapsed, 3),
            },
        )
        return state

    def _awaiting_registration(self, state: PollState, others: List[CheckRun]) -> bool:
        """True while no other check has been registered on the ref yet."""
        return self.require_other_checks and state.page == 1 and not others


async def await_other_checks(
    ref_context: RefContext,
    registry: CheckRegistry,
    deadline_minutes: float = DEFAULT_DEADLINE_MINUTES,
    **options,
) -> PollState:
    """Wait for all other checks on ``ref_context`` to pass.

    Keyword options are passed to ``ConvergencePoller``.
    """
    poller = ConvergencePoller(
        ref_context, registry, deadline_minutes=deadline_minutes, **options
    )
    return await poller.run()
