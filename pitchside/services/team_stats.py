"""
Track record of resolved predictions for a single team.

A prediction counts as a win for the team only when it was settled `won` and
it had picked that team to win.
"""

from typing import Any, Dict

from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import TeamPerformanceStats
from pitchside.services.prediction_store import PredictionStore
from pitchside.services.team_names import normalize_team_name

logger = setup_logger("pitchside.services.team_stats")

RECENT_OUTCOMES_LIMIT = 5


def predicted_to_win(row: Dict[str, Any], team_name: str) -> bool:
    payload = row.get("prediction_data") or {}
    outcome = payload.get("outcome")
    if outcome == "teamA_win":
        return row.get("team_a") == team_name
    if outcome == "teamB_win":
        return row.get("team_b") == team_name
    text = (payload.get("prediction") or "").lower()
    return team_name.lower() in text and "win" in text


def get_team_stats(store: PredictionStore, team_name: str) -> TeamPerformanceStats:
    """
    Summarize resolved predictions involving a team.

    Args:
        store: The prediction store
        team_name: Free-text team name; normalized before lookup

    Returns:
        TeamPerformanceStats: total resolved, wins for the team and the five
        most recent outcomes from the team's point of view.
    """
    team = normalize_team_name(team_name)
    rows = store.list_resolved_for_team(team)

    outcomes = [
        "won" if row.get("status") == "won" and predicted_to_win(row, team) else "lost"
        for row in rows
    ]
    stats = TeamPerformanceStats(
        total=len(rows),
        wins=outcomes.count("won"),
        recent_outcomes=outcomes[:RECENT_OUTCOMES_LIMIT],
    )
    logger.debug(f"Team stats for {team}: {stats.wins}/{stats.total}")
    return stats
