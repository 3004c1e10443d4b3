"""
@file: test_poller.py
@description:
Tests for the prediction poller: completion, failure, timeout, fetch errors,
cancellation and single delivery per session.

@dependencies:
- pytest / pytest-asyncio: For test framework
- pitchside.client.poller: Module being tested

@notes:
- Intervals are shortened to milliseconds
"""

import asyncio

import pytest

from pitchside.client.poller import DEFAULT_FAILURE_MESSAGE, PredictionPoller
from pitchside.core.exceptions import GenerationError, JobNotFoundError, PollTimeoutError, ServiceError
from pitchside.schemas.predictions import PredictionJob

INTERVAL = 0.001


def job(status, payload=None):
    return PredictionJob(id="job-1", teamA="Arsenal", teamB="Chelsea", status=status, resultPayload=payload or {})


class ScriptedFetch:
    """Returns the scripted statuses in order, repeating the last one."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    async def __call__(self, job_id):
        response = self.responses[min(self.calls, len(self.responses) - 1)]
        self.calls += 1
        if isinstance(response, Exception):
            raise response
        return response


@pytest.mark.asyncio
async def test_poll_until_pending():
    fetch = ScriptedFetch(job("processing"), job("processing"), job("pending", {"prediction": "Draw"}))
    results, errors = [], []
    poller = PredictionPoller(fetch, interval=INTERVAL, max_attempts=20)

    poller.start("job-1", on_result=results.append, on_error=errors.append)
    finished = await poller.wait()

    assert finished.status == "pending"
    assert results == [finished]
    assert errors == []
    assert fetch.calls == 3
    assert poller.active is False


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["won", "lost"])
async def test_resolved_job_is_delivered(status):
    poller = PredictionPoller(ScriptedFetch(job(status)), interval=INTERVAL, max_attempts=5)

    poller.start("job-1")

    assert (await poller.wait()).status == status


@pytest.mark.asyncio
async def test_failed_job_delivers_stored_error():
    errors = []
    poller = PredictionPoller(
        ScriptedFetch(job("processing"), job("failed", {"error": "[Content Filtered] blocked"})),
        interval=INTERVAL,
        max_attempts=20,
    )

    poller.start("job-1", on_error=errors.append)
    with pytest.raises(GenerationError) as exc_info:
        await poller.wait()

    assert str(exc_info.value) == "[Content Filtered] blocked"
    assert errors == [exc_info.value]


@pytest.mark.asyncio
async def test_failed_job_without_message_uses_default():
    poller = PredictionPoller(ScriptedFetch(job("failed")), interval=INTERVAL, max_attempts=20)

    poller.start("job-1")
    with pytest.raises(GenerationError) as exc_info:
        await poller.wait()

    assert str(exc_info.value) == DEFAULT_FAILURE_MESSAGE


@pytest.mark.asyncio
async def test_timeout_after_max_attempts():
    fetch = ScriptedFetch(job("processing"))
    errors = []
    poller = PredictionPoller(fetch, interval=INTERVAL, max_attempts=4)

    poller.start("job-1", on_error=errors.append)
    with pytest.raises(PollTimeoutError):
        await poller.wait()

    assert fetch.calls == 4
    assert len(errors) == 1


@pytest.mark.asyncio
async def test_application_fetch_error_is_delivered_as_is():
    poller = PredictionPoller(ScriptedFetch(JobNotFoundError("job-1")), interval=INTERVAL, max_attempts=20)

    poller.start("job-1")
    with pytest.raises(JobNotFoundError):
        await poller.wait()


@pytest.mark.asyncio
async def test_unexpected_fetch_error_becomes_service_error():
    poller = PredictionPoller(ScriptedFetch(KeyError("status")), interval=INTERVAL, max_attempts=20)

    poller.start("job-1")
    with pytest.raises(ServiceError) as exc_info:
        await poller.wait()

    assert "An unknown error occurred while polling for results" in str(exc_info.value)


@pytest.mark.asyncio
async def test_stop_prevents_delivery():
    fetch = ScriptedFetch(job("pending"))
    results, errors = [], []
    poller = PredictionPoller(fetch, interval=0.05, max_attempts=20)

    poller.start("job-1", on_result=results.append, on_error=errors.append)
    poller.stop()
    await asyncio.sleep(0.1)

    assert results == []
    assert errors == []
    assert fetch.calls == 0
    assert poller.active is False
    with pytest.raises(asyncio.CancelledError):
        await poller.wait()


@pytest.mark.asyncio
async def test_new_session_cancels_previous():
    first_results, second_results = [], []
    poller = PredictionPoller(ScriptedFetch(job("pending")), interval=0.02, max_attempts=20)

    poller.start("job-1", on_result=first_results.append)
    poller.start("job-2", on_result=second_results.append)
    await poller.wait()

    assert first_results == []
    assert len(second_results) == 1


@pytest.mark.asyncio
async def test_wait_without_session():
    with pytest.raises(RuntimeError):
        await PredictionPoller(ScriptedFetch(job("pending"))).wait()


def test_start_requires_running_loop():
    with pytest.raises(RuntimeError):
        PredictionPoller(ScriptedFetch(job("pending"))).start("job-1")
