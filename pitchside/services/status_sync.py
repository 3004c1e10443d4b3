"""
@file: status_sync.py
@description:
Settles pending predictions against real match results from TheSportsDB.

Workflow:
1. Load `pending` jobs created within the sync lookback (7 days).
2. Search TheSportsDB events once per distinct team name.
3. For each job, find a finished event with the same two teams (either order).
4. Decide the main outcome and every best bet, backfill team logos, and move
   the job pending -> won/lost.

@dependencies:
- pitchside.services.sports_db: For match results
- pitchside.services.prediction_store: For job reads and updates
- pitchside.services.team_names: For matching event teams to job teams
- pitchside.core.logger: For logging

@notes:
- The structured `outcome` selector is used when the payload has one; older
  payloads fall back to reading the prediction text.
- A prediction whose outcome cannot be determined stays `pending`.
- Per-team fetch errors and per-job update errors are logged and skipped.
- Store calls block, so they run in the default executor; the sync also runs
  inside the API event loop.
"""

import asyncio
import re
from typing import Any, Dict, List, Optional, Tuple

from pitchside.core.config import Settings, settings as default_settings
from pitchside.core.exceptions import DatabaseError, ServiceError
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import JobStatus, SyncSummary
from pitchside.services.prediction_store import PredictionStore, utc_now
from pitchside.services.sports_db import SportsDBClient
from pitchside.services.team_names import normalize_team_name

logger = setup_logger("pitchside.services.status_sync")

FINISHED_STATUSES = ("Match Finished", "FT")
OVER_UNDER = re.compile(r"(over|under)\s*(\d+\.?\d*)")
DEFAULT_GOAL_LINE = 2.5
LOGO_PREVIEW_SUFFIX = "/preview"

NOTHING_TO_SYNC_MESSAGE = "No recent pending predictions found to update."


def clean_logo_url(url: Optional[str]) -> Optional[str]:
    """Strip TheSportsDB's '/preview' suffix from a badge URL."""
    if isinstance(url, str) and url.endswith(LOGO_PREVIEW_SUFFIX):
        return url[:-len(LOGO_PREVIEW_SUFFIX)]
    return url or None


def is_finished(event: Dict[str, Any]) -> bool:
    return (
        event.get("strStatus") in FINISHED_STATUSES
        and event.get("intHomeScore") not in (None, "")
        and event.get("intAwayScore") not in (None, "")
    )


def find_finished_event(row: Dict[str, Any], events: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Return the first finished event between the job's two teams, in either order.
    """
    for event in events:
        home, away = event.get("strHomeTeam"), event.get("strAwayTeam")
        if not home or not away or not is_finished(event):
            continue
        home, away = normalize_team_name(home), normalize_team_name(away)
        if (home, away) in ((row["team_a"], row["team_b"]), (row["team_b"], row["team_a"])):
            return event
    return None


class MatchScore:
    """Final score of an event seen from the job's team A / team B."""

    def __init__(self, row: Dict[str, Any], event: Dict[str, Any]):
        self.home = int(event["intHomeScore"])
        self.away = int(event["intAwayScore"])
        self.team_a_is_home = normalize_team_name(event.get("strHomeTeam")) == row["team_a"]
        self.team_a = self.home if self.team_a_is_home else self.away
        self.team_b = self.away if self.team_a_is_home else self.home

    @property
    def total(self) -> int:
        return self.home + self.away


def goal_line_correct(direction: str, line: float, score: MatchScore) -> bool:
    if direction == "over":
        return score.total > line
    return score.total < line


def evaluate_main_prediction(row: Dict[str, Any], score: MatchScore) -> Optional[bool]:
    """
    Decide whether the headline prediction came true.

    Returns:
        Optional[bool]: True/False, or None when the prediction cannot be read.
    """
    payload = row.get("prediction_data") or {}
    outcome = payload.get("outcome")
    text = (payload.get("prediction") or "").lower()

    if outcome == "teamA_win":
        return score.team_a > score.team_b
    if outcome == "teamB_win":
        return score.team_b > score.team_a
    if outcome == "draw":
        return score.team_a == score.team_b
    if outcome in ("over", "under"):
        line = payload.get("outcomeLine")
        if line is None:
            found = OVER_UNDER.search(text)
            line = float(found.group(2)) if found else DEFAULT_GOAL_LINE
        return goal_line_correct(outcome, float(line), score)

    team_a = row["team_a"].lower()
    team_b = row["team_b"].lower()
    if team_a in text and "win" in text:
        return score.team_a > score.team_b
    if team_b in text and "win" in text:
        return score.team_b > score.team_a
    if "draw" in text:
        return score.team_a == score.team_b
    found = OVER_UNDER.search(text)
    if found:
        return goal_line_correct(found.group(1), float(found.group(2)), score)
    return None


def evaluate_bet(bet: Dict[str, Any], row: Dict[str, Any], score: MatchScore) -> str:
    """
    Settle one best bet. Unknown markets are settled as lost.
    """
    value = str(bet.get("value") or "").lower()
    team_a = row["team_a"].lower()
    team_b = row["team_b"].lower()
    category = bet.get("category")
    correct = False

    if category == "Match Winner":
        if team_a in value and score.team_a > score.team_b:
            correct = True
        elif team_b in value and score.team_b > score.team_a:
            correct = True
        elif "draw" in value and score.team_a == score.team_b:
            correct = True
    elif category in ("Total Goals", "Over/Under"):
        found = OVER_UNDER.search(value)
        if found:
            correct = goal_line_correct(found.group(1), float(found.group(2)), score)
    elif category == "Both Teams to Score":
        if value == "yes":
            correct = score.home > 0 and score.away > 0
        elif value == "no":
            correct = score.home == 0 or score.away == 0

    return "won" if correct else "lost"


def evaluate_bets(row: Dict[str, Any], event: Dict[str, Any]) -> Tuple[Optional[str], List[Dict[str, Any]]]:
    """
    Settle a pending prediction against a finished event.

    Returns:
        Tuple of the main outcome ('won', 'lost' or None when unreadable) and
        the best bets with `betStatus` set.
    """
    score = MatchScore(row, event)
    payload = row.get("prediction_data") or {}

    main = evaluate_main_prediction(row, score)
    outcome = None if main is None else ("won" if main else "lost")
    bets = [
        {**bet, "betStatus": evaluate_bet(bet, row, score)}
        for bet in payload.get("bestBets") or []
    ]
    return outcome, bets


class StatusSyncService:
    """
    Resolves pending predictions once their matches have finished.

    Args:
        store: The prediction store
        client: TheSportsDB client
        settings: Application settings (sync lookback)
    """

    def __init__(self, store: PredictionStore, client: SportsDBClient, settings: Optional[Settings] = None):
        self.store = store
        self.client = client
        self.settings = settings or default_settings

    async def sync_pending_predictions(self) -> SyncSummary:
        """
        Run one sync pass over recent pending predictions.

        Raises:
            ConfigurationError: If TheSportsDB is not configured
            DatabaseError: If pending predictions cannot be loaded
        """
        self.client.ensure_configured()

        since = utc_now() - self.settings.SYNC_LOOKBACK
        loop = asyncio.get_running_loop()
        pending = await loop.run_in_executor(None, lambda: self.store.list_pending(since))
        if not pending:
            logger.info(NOTHING_TO_SYNC_MESSAGE)
            return SyncSummary(checked=0, updated=0, message=NOTHING_TO_SYNC_MESSAGE)

        events = await self._fetch_events(pending)

        updated = 0
        for row in pending:
            if await self._settle(row, events):
                updated += 1

        message = f"Sync complete. Checked {len(pending)} predictions and updated {updated}."
        logger.info(message)
        return SyncSummary(checked=len(pending), updated=updated, message=message)

    async def _fetch_events(self, pending: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        teams: List[str] = []
        for row in pending:
            for team in (row["team_a"], row["team_b"]):
                if team not in teams:
                    teams.append(team)

        events: List[Dict[str, Any]] = []
        for team in teams:
            try:
                events.extend(await self.client.search_events(team))
            except ServiceError as e:
                logger.warning(f"Could not fetch events for {team}: {str(e)}")
        return events

    async def _settle(self, row: Dict[str, Any], events: List[Dict[str, Any]]) -> bool:
        event = find_finished_event(row, events)
        if event is None:
            return False

        outcome, bets = evaluate_bets(row, event)
        if outcome is None:
            logger.warning(
                f"Prediction {row['id']} ({row['team_a']} vs {row['team_b']}) could not be "
                f"matched to an outcome; leaving it pending"
            )
            return False

        score = MatchScore(row, event)
        home_logo = clean_logo_url(event.get("strHomeBadge"))
        away_logo = clean_logo_url(event.get("strAwayBadge"))
        payload = {
            **(row.get("prediction_data") or {}),
            "bestBets": bets,
            "teamA_logo": home_logo if score.team_a_is_home else away_logo,
            "teamB_logo": away_logo if score.team_a_is_home else home_logo,
        }

        try:
            loop = asyncio.get_running_loop()
            changed = await loop.run_in_executor(
                None, lambda: self.store.update_status(row["id"], JobStatus.PENDING.value, outcome, payload)
            )
        except DatabaseError as e:
            logger.error(f"Failed to update prediction {row['id']}: {str(e)}")
            return False
        if changed:
            logger.info(f"Prediction {row['id']} settled as {outcome} ({score.team_a}-{score.team_b})")
        return changed
