"""
@file: sports_db.py
@description:
This module provides an asynchronous client for TheSportsDB v1 JSON API.
It is used by the status sync worker (event search by team) and the live
scores feed (events of the day).

API Documentation: https://www.thesportsdb.com/documentation

Key features:
- Team event search (`searchevents.php`)
- Events of a day for one sport (`eventsday.php`)
- Request timeout on every call
- Errors wrapped in SportsDataError (a ServiceError)

@dependencies:
- httpx: For HTTP requests
- pitchside.core.logger: For logging

@notes:
- The API answers `{"event": null}` / `{"events": null}` when nothing matches;
  both are returned as empty lists.
- A missing THESPORTSDB_API_KEY raises ConfigurationError before any request.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from pitchside.core.config import Settings, settings as default_settings
from pitchside.core.exceptions import ConfigurationError, ServiceError
from pitchside.core.logger import setup_logger

logger = setup_logger("pitchside.services.sports_db")

MISSING_KEY_MESSAGE = "The application administrator has not configured the API key for live scores."


class SportsDataError(ServiceError):
    """Custom exception for TheSportsDB request errors."""
    pass


class SportsDBClient:
    """
    Thin async client for TheSportsDB.

    Args:
        api_key: TheSportsDB API key (part of the URL path)
        base_url: API root, without the key
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://www.thesportsdb.com/api/v1/json",
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SportsDBClient":
        settings = settings or default_settings
        return cls(
            api_key=settings.THESPORTSDB_API_KEY,
            base_url=settings.THESPORTSDB_BASE_URL,
            timeout=settings.SPORTS_API_TIMEOUT,
        )

    def ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

    async def fetch_json(self, endpoint: str, params: Dict[str, str]) -> Dict[str, Any]:
        """
        GET an endpoint and decode its JSON body.

        Raises:
            ConfigurationError: If no API key is configured
            SportsDataError: If the request fails or the body is not JSON
        """
        self.ensure_configured()

        url = f"{self.base_url}/{self.api_key}/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                logger.debug(f"Fetched {endpoint} with {params}")
                return response.json() or {}
        except httpx.TimeoutException as e:
            logger.error(f"Timed out calling TheSportsDB {endpoint}: {str(e)}")
            raise SportsDataError(f"TheSportsDB request timed out: {endpoint}")
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error {e.response.status_code} from TheSportsDB {endpoint}: {e.response.text}")
            raise SportsDataError(f"Failed to fetch from TheSportsDB. Status: {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"Request error calling TheSportsDB {endpoint}: {str(e)}")
            raise SportsDataError(f"Failed to reach TheSportsDB: {str(e)}")
        except ValueError as e:
            logger.error(f"Invalid JSON from TheSportsDB {endpoint}: {str(e)}")
            raise SportsDataError(f"Invalid response from TheSportsDB: {endpoint}")

    async def search_events(self, team_name: str) -> List[Dict[str, Any]]:
        """
        Search events by team name.

        Returns:
            List[Dict[str, Any]]: Raw event objects, possibly empty.
        """
        data = await self.fetch_json("searchevents.php", {"e": team_name})
        return data.get("event") or []

    async def events_for_day(self, day: date, sport: str = "Soccer") -> List[Dict[str, Any]]:
        """
        Fetch all events of a given day for a sport.

        Returns:
            List[Dict[str, Any]]: Raw event objects, possibly empty.
        """
        data = await self.fetch_json("eventsday.php", {"d": day.strftime("%Y-%m-%d"), "s": sport})
        return data.get("events") or []
