"""
@file: live_scores.py
@description:
Builds the live scores feed from today's soccer events on TheSportsDB.

Events are kept when their league is on the allow-list and they are live or
recently played, then ordered live minute > half time > finished > other,
then by league and kickoff time, and capped.

@dependencies:
- pitchside.services.sports_db: For event data
- pitchside.core.logger: For logging

@notes:
- Nothing is persisted; every call hits TheSportsDB.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pytz

from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import LiveMatch
from pitchside.services.sports_db import SportsDBClient

logger = setup_logger("pitchside.services.live_scores")

ALLOWED_LEAGUE_KEYWORDS = [
    "premier league", "la liga", "bundesliga", "serie a", "ligue 1", "eredivisie", "primeira liga",
    "champions league", "europa league", "conference league", "fifa world cup", "uefa european championship",
    "copa america", "africa cup of nations", "major league soccer", "mls", "liga mx", "brasileirão",
    "argentine primera división", "copa libertadores", "scottish premiership", "saudi pro league", "psl",
]

NOT_PLAYING = re.compile(r"not started|postponed|cancelled|abandoned", re.IGNORECASE)
MINUTE_PREFIX = re.compile(r"^\d+'")


def is_allowed_league(league: Optional[str]) -> bool:
    if not league:
        return False
    league = league.lower()
    return any(keyword in league for keyword in ALLOWED_LEAGUE_KEYWORDS)


def is_live_or_recent(status: Optional[str]) -> bool:
    return bool(status) and not NOT_PLAYING.search(status)


def status_priority(status: Optional[str]) -> int:
    """Sort rank of an event status: 1 live minute, 2 half time, 3 finished, 4 other."""
    if not status:
        return 4
    lowered = status.lower()
    if MINUTE_PREFIX.match(lowered):
        return 1
    if "half time" in lowered or lowered == "ht":
        return 2
    if "finished" in lowered or lowered == "ft":
        return 3
    return 4


def parse_score(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def to_live_match(event: Dict[str, Any]) -> LiveMatch:
    """
    Map a TheSportsDB event onto the LiveMatch shape.
    """
    raw_status = event.get("strStatus") or ""
    time = raw_status if MINUTE_PREFIX.match(raw_status) else (raw_status or "NS")

    if "'" in time:
        status = "LIVE"
    elif "half time" in time.lower() or time == "HT":
        status = "HT"
    elif "finished" in time.lower() or time == "FT":
        status = "FT"
    else:
        status = "Not Started"

    return LiveMatch(
        id=str(event.get("idEvent") or ""),
        league=event.get("strLeague") or "",
        teamA=event.get("strHomeTeam") or "",
        teamB=event.get("strAwayTeam") or "",
        scoreA=parse_score(event.get("intHomeScore")),
        scoreB=parse_score(event.get("intAwayScore")),
        time=time,
        status=status,
    )


def select_live_events(events: List[Dict[str, Any]], limit: int = 15, league: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Filter and order raw events for the feed.

    Args:
        events: Raw TheSportsDB events
        limit: Maximum number of events kept
        league: Optional case-insensitive substring matched against league or event name
    """
    selected = [
        e for e in events
        if is_allowed_league(e.get("strLeague")) and is_live_or_recent(e.get("strStatus"))
    ]
    if league:
        query = league.strip().lower()
        selected = [
            e for e in selected
            if query in (e.get("strLeague") or "").lower() or query in (e.get("strEvent") or "").lower()
        ]
    selected.sort(key=lambda e: (
        status_priority(e.get("strStatus")),
        e.get("strLeague") or "",
        e.get("strTime") or "",
    ))
    return selected[:limit]


class LiveScoresService:
    """
    Serves the live scores feed.

    Args:
        client: TheSportsDB client
        limit: Maximum number of matches returned
    """

    def __init__(self, client: SportsDBClient, limit: int = 15):
        self.client = client
        self.limit = limit

    async def fetch_live_scores(self, league: Optional[str] = None, day: Optional[date] = None) -> List[LiveMatch]:
        """
        Fetch today's soccer events and return the filtered, ordered feed.

        Raises:
            ConfigurationError: If TheSportsDB is not configured
            SportsDataError: If the request fails
        """
        day = day or datetime.now(pytz.UTC).date()
        events = await self.client.events_for_day(day, sport="Soccer")
        matches = [to_live_match(e) for e in select_live_events(events, self.limit, league)]
        logger.info(f"Live scores for {day.isoformat()}: {len(matches)} of {len(events)} events")
        return matches
