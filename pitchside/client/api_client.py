"""
@file: api_client.py
@description:
Asynchronous HTTP client for the Pitchside API, plus an end-to-end
`predict_match` helper that requests a prediction and polls it to completion.

Key features:
- Typed responses using the API's pydantic schemas
- HTTP errors mapped back onto the application's error types
- Request timeout on every call

@dependencies:
- httpx: For HTTP requests
- pitchside.client.poller: For polling new jobs

@usage:
    $ python -m pitchside.client.api_client "Man Utd" "Liverpool"
"""

import asyncio
import sys
from typing import Any, Dict, List, Optional

import httpx

from pitchside.client.poller import PredictionPoller
from pitchside.core.config import settings
from pitchside.core.exceptions import (
    ConfigurationError,
    JobNotFoundError,
    PitchsideError,
    ServiceError,
    TeamValidationError,
)
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import (
    DispatchResponse,
    LiveMatch,
    PredictionJob,
    TeamPerformanceStats,
)

logger = setup_logger("pitchside.client.api_client")

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"


class PitchsideClient:
    """
    Client for the Pitchside HTTP API.

    Args:
        base_url: API root including the version prefix
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport, used by tests
        poll_interval: Seconds between job polls in predict_match
        poll_max_attempts: Maximum polls in predict_match
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = settings.SPORTS_API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval: float = settings.POLL_INTERVAL_SECONDS,
        poll_max_attempts: int = settings.POLL_MAX_ATTEMPTS,
    ):
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        self.poll_interval = poll_interval
        self.poll_max_attempts = poll_max_attempts

    async def __aenter__(self) -> "PitchsideClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {path}: {str(e)}")
            raise ServiceError(f"Failed to reach the prediction service: {str(e)}")

        if response.is_success:
            return response.json()

        detail = _error_detail(response)
        logger.warning(f"{method} {path} failed with {response.status_code}: {detail}")
        if response.status_code == 404:
            raise JobNotFoundError(path.rsplit("/", 1)[-1])
        if response.status_code == 422:
            raise TeamValidationError(detail)
        if response.status_code == 500 and "not configured" in detail:
            raise ConfigurationError(detail)
        raise ServiceError(detail)

    async def request_prediction(
        self, team_a: str, team_b: str, category: str = "men", force_refresh: bool = False
    ) -> DispatchResponse:
        """POST /predictions."""
        body = {"teamA": team_a, "teamB": team_b, "category": category, "forceRefresh": force_refresh}
        return DispatchResponse.model_validate(await self._request("POST", "/predictions", json=body))

    async def get_prediction(self, job_id: str) -> PredictionJob:
        """GET /predictions/{job_id}."""
        return PredictionJob.model_validate(await self._request("GET", f"/predictions/{job_id}"))

    async def sync_statuses(self) -> str:
        """POST /predictions/sync; returns the summary message."""
        data = await self._request("POST", "/predictions/sync")
        return data["message"]

    async def live_scores(self, league: Optional[str] = None) -> List[LiveMatch]:
        """GET /live-scores."""
        params = {"league": league} if league else None
        data = await self._request("GET", "/live-scores", params=params)
        return [LiveMatch.model_validate(m) for m in data.get("matches", [])]

    async def team_stats(self, team_name: str) -> TeamPerformanceStats:
        """GET /teams/{team_name}/stats."""
        return TeamPerformanceStats.model_validate(await self._request("GET", f"/teams/{team_name}/stats"))

    async def predict_match(
        self, team_a: str, team_b: str, category: str = "men", force_refresh: bool = False
    ) -> PredictionJob:
        """
        Request a prediction and wait for it.

        Returns:
            PredictionJob: The cached job, or the new job once it has finished.

        Raises:
            GenerationError: If generation failed.
            PollTimeoutError: If the job did not finish within the poll ceiling.
        """
        dispatched = await self.request_prediction(team_a, team_b, category, force_refresh)
        if dispatched.is_cached:
            return PredictionJob.model_validate(dispatched.data)

        job_id = dispatched.data["jobId"]
        logger.info(f"Prediction job {job_id} started; polling for the result")
        poller = PredictionPoller(self.get_prediction, self.poll_interval, self.poll_max_attempts)
        poller.start(job_id)
        return await poller.wait()


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(detail, list):
        # FastAPI request validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail)
    return str(detail or f"HTTP {response.status_code}")


def _print_job(job: PredictionJob) -> None:
    payload: Dict[str, Any] = job.result_payload
    print(f"{job.team_a} vs {job.team_b} [{job.status}]")
    print(f"  Prediction: {payload.get('prediction')} ({payload.get('confidence')})")
    print(
        f"  Win/Draw/Win: {payload.get('teamA_winProbability')} / "
        f"{payload.get('drawProbability')} / {payload.get('teamB_winProbability')}"
    )
    for bet in payload.get("bestBets", []):
        print(f"  - {bet.get('category')}: {bet.get('value')} ({bet.get('confidence')})")


async def main(team_a: str, team_b: str) -> None:
    async with PitchsideClient() as client:
        print(f"Requesting prediction for {team_a} vs {team_b}...")
        try:
            job = await client.predict_match(team_a, team_b)
            _print_job(job)
        except PitchsideError as e:
            print(f"Prediction failed: {e}")

        print("\nLive scores:")
        try:
            for match in await client.live_scores():
                print(f"  [{match.status}] {match.teamA} {match.scoreA}-{match.scoreB} {match.teamB} ({match.league})")
        except PitchsideError as e:
            print(f"Live scores unavailable: {e}")


if __name__ == '__main__':
    args = sys.argv[1:] or ["Arsenal", "Chelsea"]
    if len(args) != 2:
        print("Usage: python -m pitchside.client.api_client <team A> <team B>")
        sys.exit(1)
    asyncio.run(main(*args))
