"""
@file: poller.py
@description:
Polls a prediction job until it leaves the `processing` state.

One PredictionPoller runs at most one poll session at a time on the current
asyncio event loop. Starting a new session cancels the previous one.

Session outcome:
- pending / won / lost: the job is delivered to `on_result`
- failed: a GenerationError with the stored message is delivered to `on_error`
- fetch error: the error (as a PitchsideError) is delivered to `on_error`
- attempt ceiling reached: a PollTimeoutError is delivered to `on_error`

@dependencies:
- asyncio: For the timer loop
- pitchside.schemas.predictions: For the job model

@notes:
- Each session delivers at most once; nothing is delivered after stop().
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from pitchside.core.config import settings
from pitchside.core.exceptions import GenerationError, PitchsideError, PollTimeoutError, ServiceError
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import JobStatus, PredictionJob

logger = setup_logger("pitchside.client.poller")

DEFAULT_FAILURE_MESSAGE = "The AI failed to generate a prediction for this match."

FetchJob = Callable[[str], Awaitable[PredictionJob]]
ResultCallback = Callable[[PredictionJob], Any]
ErrorCallback = Callable[[PitchsideError], Any]


class PollSession:
    """State of one poll run: its task, its outcome future and its callbacks."""

    def __init__(self, job_id: str, on_result: Optional[ResultCallback], on_error: Optional[ErrorCallback]):
        self.job_id = job_id
        self.on_result = on_result
        self.on_error = on_error
        self.stopped = False
        self.task: Optional[asyncio.Task] = None
        self.future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.future.add_done_callback(_mark_retrieved)

    @property
    def finished(self) -> bool:
        return self.stopped or self.future.done()

    def deliver_result(self, job: PredictionJob) -> None:
        if self.finished:
            return
        self.future.set_result(job)
        if self.on_result is not None:
            self.on_result(job)

    def deliver_error(self, error: PitchsideError) -> None:
        if self.finished:
            return
        self.future.set_exception(error)
        if self.on_error is not None:
            self.on_error(error)

    def stop(self) -> None:
        self.stopped = True
        if self.task is not None and not self.task.done():
            self.task.cancel()
        if not self.future.done():
            self.future.cancel()


def _mark_retrieved(future: asyncio.Future) -> None:
    # Outcomes are also delivered through callbacks; nobody has to await wait()
    if not future.cancelled():
        future.exception()


class PredictionPoller:
    """
    Periodically fetches a job until it reaches a final state.

    Args:
        fetch_job: Coroutine function returning the current job for an id
        interval: Seconds between fetches
        max_attempts: Maximum number of fetches per session
    """

    def __init__(
        self,
        fetch_job: FetchJob,
        interval: float = settings.POLL_INTERVAL_SECONDS,
        max_attempts: int = settings.POLL_MAX_ATTEMPTS,
    ):
        self.fetch_job = fetch_job
        self.interval = interval
        self.max_attempts = max_attempts
        self._session: Optional[PollSession] = None

    @property
    def active(self) -> bool:
        return self._session is not None and not self._session.finished

    def start(
        self,
        job_id: str,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        """
        Start polling `job_id`, cancelling any session already running.

        Must be called from a running event loop.
        """
        self.stop()
        session = PollSession(job_id, on_result, on_error)
        session.task = asyncio.get_running_loop().create_task(self._run(session))
        self._session = session
        logger.debug(f"Started polling job {job_id}")

    def stop(self) -> None:
        """Cancel the current session; nothing further is delivered."""
        if self._session is not None:
            self._session.stop()

    async def wait(self) -> PredictionJob:
        """
        Wait for the current session's outcome.

        Returns:
            PredictionJob: The finished job.

        Raises:
            GenerationError, PollTimeoutError, ServiceError: The delivered error.
            asyncio.CancelledError: If the session was stopped.
        """
        if self._session is None:
            raise RuntimeError("No poll session has been started.")
        return await self._session.future

    async def _run(self, session: PollSession) -> None:
        for attempt in range(1, self.max_attempts + 1):
            await asyncio.sleep(self.interval)
            if session.finished:
                return

            try:
                job = await self.fetch_job(session.job_id)
            except PitchsideError as e:
                logger.error(f"Polling job {session.job_id} failed: {str(e)}")
                session.deliver_error(e)
                return
            except Exception as e:
                logger.error(f"Polling job {session.job_id} failed: {str(e)}")
                session.deliver_error(ServiceError(f"An unknown error occurred while polling for results: {str(e)}"))
                return

            logger.debug(f"Poll {attempt}/{self.max_attempts} for job {session.job_id}: {job.status}")
            if job.status == JobStatus.PROCESSING.value:
                continue
            if job.status == JobStatus.FAILED.value:
                message = (job.result_payload or {}).get("error") or DEFAULT_FAILURE_MESSAGE
                session.deliver_error(GenerationError(message))
                return
            session.deliver_result(job)
            return

        logger.warning(f"Polling job {session.job_id} timed out after {self.max_attempts} attempts")
        session.deliver_error(PollTimeoutError())
