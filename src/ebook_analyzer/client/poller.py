"""Client-side polling loop with reload recovery."""

import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import BaseModel

from ebook_analyzer.client.api_client import AnalyzerApiClient, FinalResult
from ebook_analyzer.client.estimator import EstimatorState, LocalProgressEstimator
from ebook_analyzer.client.state import ClientStateStore
from ebook_analyzer.config.models import PollerConfig
from ebook_analyzer.models.report import Report

logger = logging.getLogger("ebook_analyzer.client.poller")

ProgressCallback = Callable[[int, str], None]


class PollState(str, Enum):
    """How a polling loop ended."""

    COMPLETED = "completed"
    OPTIMISTIC = "optimistic"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class PollOutcome(BaseModel):
    """Result of waiting on one job."""

    job_id: str
    state: PollState
    report: Optional[Report] = None
    error: Optional[str] = None
    elapsed_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Everything except a confirmed failure is shown as complete."""
        return self.state != PollState.FAILED

    @property
    def confirmed(self) -> bool:
        """Whether the server actually reported the terminal state."""
        return self.state in (PollState.COMPLETED, PollState.FAILED)


class ClientPoller:
    """Waits on analysis jobs without trusting any single server answer.

    Progress shown to the user comes from a local estimate. The server is
    only asked for the terminal result every ``check_interval`` seconds,
    and a job whose estimate has sat at the cap past ``grace_period`` is
    treated as done even without confirmation.
    """

    def __init__(
        self,
        api: AnalyzerApiClient,
        state: ClientStateStore,
        config: Optional[PollerConfig] = None,
        on_progress: Optional[ProgressCallback] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the poller.

        Args:
            api: Client for the analyzer API.
            state: Durable client state (active slot, completed set).
            config: Timing configuration (defaults used if not provided).
            on_progress: Called with ``(percent, stage_label)`` on every change.
            clock: Monotonic time source.
            sleep: Async sleep used between ticks.
        """
        self.api = api
        self.state = state
        self.config = config or PollerConfig()
        self.on_progress = on_progress
        self._clock = clock
        self._sleep = sleep
        self._loops: dict[str, asyncio.Task] = {}

    def start(self, job_id: str) -> asyncio.Task:
        """Start polling a job, or return the loop already polling it."""
        existing = self._loops.get(job_id)
        if existing is not None and not existing.done():
            logger.debug(f"Polling already active for job {job_id}")
            return existing

        task = asyncio.create_task(self.poll(job_id))
        self._loops[job_id] = task
        task.add_done_callback(lambda t: self._forget(job_id, t))
        return task

    def _forget(self, job_id: str, task: asyncio.Task) -> None:
        if self._loops.get(job_id) is task:
            del self._loops[job_id]

    def is_polling(self, job_id: str) -> bool:
        task = self._loops.get(job_id)
        return task is not None and not task.done()

    async def submit_and_wait(self, source, filename: Optional[str] = None) -> PollOutcome:
        """Upload a document, persist its job ID, then wait for the outcome."""
        job_id = await self.api.submit(source, filename=filename)
        await self.state.set_active(job_id)
        return await self.start(job_id)

    async def resume(self, job_id: Optional[str] = None) -> Optional[PollOutcome]:
        """Recover after a reload or a regained focus.

        Args:
            job_id: Job to recover; the persisted active job if omitted.

        Returns:
            The outcome, or None when there is nothing to resume.
        """
        if job_id is None:
            job_id = await self.state.get_active()
        if job_id is None:
            return None

        if await self.state.is_completed(job_id):
            logger.info(f"Job {job_id} already known complete, fetching result")
            return await self._fetch_known_completed(job_id)

        return await self.start(job_id)

    async def poll(self, job_id: str) -> PollOutcome:
        """Run the polling loop for one job until an outcome is reached."""
        config = self.config
        estimator = LocalProgressEstimator(
            step=config.tick_step,
            cap=config.estimate_cap,
            clock=self._clock,
        )
        estimator.start()
        self._emit(estimator.value, estimator.stage_label)

        started = self._clock()
        last_check = started

        while True:
            now = self._clock()
            elapsed = now - started

            if elapsed >= config.max_duration:
                logger.warning(f"Job {job_id} still unconfirmed after {elapsed:.0f}s, giving up")
                return await self._finish(estimator, job_id, PollState.TIMED_OUT, elapsed)

            if now - last_check >= config.check_interval:
                last_check = now
                result = await self._check(job_id)
                if result is not None and result.status == "completed":
                    return await self._finish(
                        estimator, job_id, PollState.COMPLETED, elapsed, report=result.report
                    )
                if result is not None and result.status == "failed":
                    return await self._finish(
                        estimator,
                        job_id,
                        PollState.FAILED,
                        elapsed,
                        error=result.error_detail or result.error,
                    )

            if (
                estimator.state == EstimatorState.PINNED
                and estimator.pinned_for() >= config.grace_period
            ):
                logger.info(f"Job {job_id} pinned for {estimator.pinned_for():.0f}s, assuming complete")
                return await self._finish(estimator, job_id, PollState.OPTIMISTIC, elapsed)

            before = estimator.value
            estimator.tick()
            if estimator.value != before:
                self._emit(estimator.value, estimator.stage_label)

            await self._sleep(config.tick_interval)

    async def _check(self, job_id: str) -> Optional[FinalResult]:
        """Ask for the terminal result; None means keep waiting."""
        try:
            return await self.api.final_result(job_id)
        except httpx.HTTPError as e:
            logger.warning(f"Status check for job {job_id} failed: {e}")
            return None
        except ValueError as e:
            # Non-JSON or wrongly shaped reply, e.g. a gateway error page
            logger.warning(f"Unreadable status reply for job {job_id}: {e}")
            return None

    async def _fetch_known_completed(self, job_id: str) -> PollOutcome:
        report: Optional[Report] = None
        result = await self._check(job_id)
        if result is not None and result.status == "completed":
            report = result.report
            await self.state.mark_completed(job_id, report)
        if report is None:
            report = await self.state.get_report(job_id)

        await self.state.clear_active(job_id)
        self._emit(100, "Analysis complete!")
        return PollOutcome(job_id=job_id, state=PollState.COMPLETED, report=report)

    async def _finish(
        self,
        estimator: LocalProgressEstimator,
        job_id: str,
        poll_state: PollState,
        elapsed: float,
        report: Optional[Report] = None,
        error: Optional[str] = None,
    ) -> PollOutcome:
        estimator.finish()

        if poll_state == PollState.FAILED:
            self._emit(estimator.value, "Analysis failed!")
        else:
            # Optimistic and timed-out outcomes are shown as complete too
            await self.state.mark_completed(job_id, report)
            self._emit(estimator.value, estimator.stage_label)

        await self.state.clear_active(job_id)
        return PollOutcome(
            job_id=job_id,
            state=poll_state,
            report=report,
            error=error,
            elapsed_seconds=elapsed,
        )

    def _emit(self, percent: int, label: str) -> None:
        if self.on_progress is not None:
            self.on_progress(percent, label)
