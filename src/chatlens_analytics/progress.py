"""Sentiment-analysis progress jobs.

A job moves through an explicit state machine driven by external events
(server pushes or poll ticks)::

    starting -> in_progress -> completed
                            -> cancelled
                            -> failed

Cancellation is cooperative: :meth:`ProgressRegistry.cancel` only sets the
handle's token, and the job moves to ``cancelled`` at the next tick.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from chatlens_analytics.models import JobSnapshot, ProgressData

logger = logging.getLogger(__name__)

TickCallback = Callable[[ProgressData], None]
CompleteCallback = Callable[[], None]
ErrorCallback = Callable[[str], None]


class JobState(str, Enum):
    STARTING = "starting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.CANCELLED, JobState.FAILED)


class UnknownJobError(KeyError):
    """Raised when an event or request names a job that was never started."""


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class JobHandle:
    job_id: str
    token: CancellationToken = field(default_factory=CancellationToken, compare=False)


@dataclass
class ProgressJob:
    handle: JobHandle
    on_tick: TickCallback | None = None
    on_complete: CompleteCallback | None = None
    on_error: ErrorCallback | None = None
    state: JobState = JobState.STARTING
    progress: ProgressData | None = None
    error: str | None = None

    def snapshot(self) -> JobSnapshot:
        return JobSnapshot(
            job_id=self.handle.job_id,
            state=self.state.value,
            progress=self.progress,
            error=self.error,
            cancel_requested=self.handle.token.cancelled,
        )


class ProgressRegistry:
    """Owns every live progress job, keyed by job id (the chat id).

    Every state check and write happens under the registry lock, so a job
    reaches a terminal state exactly once.  Callbacks run after the lock is
    released, in the thread that delivered the event.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, ProgressJob] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(
        self,
        job_id: str,
        on_tick: TickCallback | None = None,
        on_complete: CompleteCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> JobHandle:
        """Register a new job; a live job with the same id is cancelled first."""
        handle = JobHandle(job_id=job_id)
        job = ProgressJob(
            handle=handle, on_tick=on_tick, on_complete=on_complete, on_error=on_error
        )
        superseded = None
        with self._lock:
            previous = self._jobs.get(job_id)
            self._jobs[job_id] = job
            if previous is not None and not previous.state.is_terminal:
                previous.handle.token.cancel()
                self._transition(previous, JobState.CANCELLED, "Superseded by a newer analysis")
                superseded = previous
        if superseded is not None:
            self._notify(superseded)
        logger.info("Started progress job %s", job_id)
        return handle

    def cancel(self, handle: JobHandle) -> None:
        """Request cancellation; honoured at the job's next tick."""
        handle.token.cancel()
        logger.info("Cancellation requested for job %s", handle.job_id)

    def get(self, job_id: str) -> ProgressJob:
        with self._lock:
            try:
                return self._jobs[job_id]
            except KeyError:
                raise UnknownJobError(job_id) from None

    def find(self, job_id: str) -> ProgressJob | None:
        with self._lock:
            return self._jobs.get(job_id)

    def discard(self, job_id: str) -> None:
        with self._lock:
            job = self._jobs.pop(job_id, None)
        if job is not None and not job.state.is_terminal:
            job.handle.token.cancel()
            logger.info("Discarded live job %s", job_id)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def tick(self, job_id: str, progress: ProgressData) -> JobState:
        """Record a progress report, or apply a pending cancellation."""
        job = self.get(job_id)
        # Read before taking the lock; the token may be set from any thread.
        cancelled = job.handle.token.cancelled
        with self._lock:
            if job.state.is_terminal:
                logger.debug("Ignoring tick for %s job %s", job.state.value, job_id)
                return job.state
            if cancelled:
                self._transition(job, JobState.CANCELLED, "Analysis cancelled.")
            else:
                job.state = JobState.IN_PROGRESS
                job.progress = progress
            state = job.state
        if cancelled:
            self._notify(job)
        elif job.on_tick is not None:
            job.on_tick(progress)
        return state

    def complete(self, job_id: str) -> JobState:
        return self._finish(self.get(job_id), JobState.COMPLETED)

    def fail(self, job_id: str, error: str) -> JobState:
        return self._finish(self.get(job_id), JobState.FAILED, error)

    def dispatch(self, job_id: str, event: str, payload: dict[str, Any] | None = None) -> JobState:
        """Apply a server-pushed event (``progress``, ``completed``, ``cancelled``, ``error``)."""
        payload = payload or {}
        if event == "progress":
            return self.tick(job_id, ProgressData.model_validate(payload))
        if event == "completed":
            return self.complete(job_id)
        if event == "cancelled":
            error = payload.get("error") or "Analysis cancelled by user"
            return self._finish(self.get(job_id), JobState.CANCELLED, error)
        if event == "error":
            return self.fail(job_id, payload.get("error") or "Unknown backend error")
        raise ValueError(f"Unknown progress event '{event}'")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _finish(self, job: ProgressJob, state: JobState, error: str | None = None) -> JobState:
        with self._lock:
            changed = self._transition(job, state, error)
            current = job.state
        if changed:
            self._notify(job)
        return current

    def _transition(self, job: ProgressJob, state: JobState, error: str | None = None) -> bool:
        """Move *job* to a terminal *state*; the caller must hold ``_lock``."""
        if job.state.is_terminal:
            logger.debug(
                "Job %s already %s; ignoring %s", job.handle.job_id, job.state.value, state.value
            )
            return False
        job.state = state
        job.error = error
        logger.info("Job %s -> %s", job.handle.job_id, state.value)
        return True

    def _notify(self, job: ProgressJob) -> None:
        """Fire the terminal callback of *job*; called without ``_lock`` held."""
        if job.state is JobState.COMPLETED:
            if job.on_complete is not None:
                job.on_complete()
        elif job.on_error is not None:
            job.on_error(job.error or job.state.value)
