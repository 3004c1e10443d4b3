"""
@file: team_names.py
@description:
Canonical team names and team-name input rules.

Naming variants such as "Man Utd", "Man United" and "Manchester United" must
collapse to one canonical name so that job reuse, team stats and matching
against TheSportsDB events all key on the same string.

@notes:
- Lookup is case-insensitive and whitespace-trimmed
- Unknown names are returned trimmed and otherwise unchanged
"""

import re
from typing import Any, Dict

from pitchside.core.exceptions import TeamValidationError

TEAM_NAME_ALIASES: Dict[str, str] = {
    # Premier League
    "arsenal": "Arsenal",
    "aston villa": "Aston Villa",
    "bournemouth": "Bournemouth",
    "brentford": "Brentford",
    "brighton & hove albion": "Brighton",
    "brighton": "Brighton",
    "chelsea": "Chelsea",
    "crystal palace": "Crystal Palace",
    "everton": "Everton",
    "fulham": "Fulham",
    "ipswich town": "Ipswich",
    "ipswich": "Ipswich",
    "leicester city": "Leicester",
    "leicester": "Leicester",
    "liverpool": "Liverpool",
    "manchester city": "Manchester City",
    "man city": "Manchester City",
    "mancity": "Manchester City",
    "manchester united": "Manchester United",
    "man utd": "Manchester United",
    "man united": "Manchester United",
    "newcastle united": "Newcastle",
    "newcastle": "Newcastle",
    "nottingham forest": "Nottingham Forest",
    "southampton": "Southampton",
    "tottenham hotspur": "Tottenham",
    "spurs": "Tottenham",
    "tottenham": "Tottenham",
    "west ham united": "West Ham",
    "west ham": "West Ham",
    "wolverhampton wanderers": "Wolves",
    "wolves": "Wolves",

    # La Liga
    "alavés": "Alavés",
    "alaves": "Alavés",
    "athletic bilbao": "Athletic Bilbao",
    "atlético madrid": "Atlético Madrid",
    "atletico madrid": "Atlético Madrid",
    "fc barcelona": "Barcelona",
    "barcelona": "Barcelona",
    "celta vigo": "Celta Vigo",
    "getafe": "Getafe",
    "girona": "Girona",
    "mallorca": "Mallorca",
    "osasuna": "Osasuna",
    "rayo vallecano": "Rayo Vallecano",
    "real betis": "Real Betis",
    "real madrid": "Real Madrid",
    "real sociedad": "Real Sociedad",
    "sevilla": "Sevilla",
    "valencia": "Valencia",
    "villarreal": "Villarreal",

    # Serie A
    "ac milan": "AC Milan",
    "milan": "AC Milan",
    "as roma": "Roma",
    "roma": "Roma",
    "atalanta": "Atalanta",
    "bologna": "Bologna",
    "fiorentina": "Fiorentina",
    "inter milan": "Inter Milan",
    "internazionale": "Inter Milan",
    "inter": "Inter Milan",
    "juventus": "Juventus",
    "lazio": "Lazio",
    "napoli": "Napoli",
    "torino": "Torino",
    "udinese": "Udinese",

    # Bundesliga
    "bayer leverkusen": "Bayer Leverkusen",
    "bayern munich": "Bayern Munich",
    "bayern": "Bayern Munich",
    "borussia dortmund": "Borussia Dortmund",
    "dortmund": "Borussia Dortmund",
    "borussia mönchengladbach": "Borussia Mönchengladbach",
    "eintracht frankfurt": "Eintracht Frankfurt",
    "rb leipzig": "RB Leipzig",
    "sc freiburg": "SC Freiburg",
    "tsg hoffenheim": "TSG Hoffenheim",
    "union berlin": "Union Berlin",
    "vfb stuttgart": "VfB Stuttgart",
    "vfl bochum": "VfL Bochum",
    "vfl wolfsburg": "VfL Wolfsburg",

    # Ligue 1
    "as monaco": "Monaco",
    "monaco": "Monaco",
    "lens": "Lens",
    "lille": "Lille",
    "lyon": "Lyon",
    "marseille": "Marseille",
    "nice": "Nice",
    "paris saint-germain": "Paris Saint-Germain",
    "psg": "Paris Saint-Germain",
    "reims": "Reims",
    "rennes": "Rennes",
    "strasbourg": "Strasbourg",

    # Other major clubs
    "ajax": "Ajax",
    "benfica": "Benfica",
    "celtic": "Celtic",
    "fc porto": "Porto",
    "porto": "Porto",
    "psv eindhoven": "PSV Eindhoven",
    "psv": "PSV Eindhoven",
    "rangers": "Rangers",
    "sporting cp": "Sporting CP",
    "sporting lisbon": "Sporting CP",

    # International
    "united states": "USA",
    "usa": "USA",
    "england": "England",
    "brazil": "Brazil",
    "germany": "Germany",
    "argentina": "Argentina",
    "france": "France",
    "spain": "Spain",
    "italy": "Italy",
    "portugal": "Portugal",
    "belgium": "Belgium",
    "netherlands": "Netherlands",
}

MIN_TEAM_NAME_LENGTH = 2
MAX_TEAM_NAME_LENGTH = 50

# Letters and digits in any script, plus spaces and . ' & ( ) -
VALID_TEAM_NAME = re.compile(r"^(?:[^\W_]|[\s.'&()\-])+$")


def normalize_team_name(name: Any) -> str:
    """
    Return the canonical name for a raw team name.

    Args:
        name: Free-text team name as typed by a user or returned by an API.

    Returns:
        str: The canonical name, the trimmed input when it has no alias,
        or an empty string for empty or non-string input.
    """
    if not name or not isinstance(name, str):
        return ""
    trimmed = name.strip()
    return TEAM_NAME_ALIASES.get(trimmed.lower(), trimmed)


def validate_team_names(team_a: str, team_b: str) -> None:
    """
    Apply the input rules for a prediction request.

    Raises:
        TeamValidationError: With a user-facing message for the first rule broken.
    """
    trimmed_a = (team_a or "").strip()
    trimmed_b = (team_b or "").strip()

    if not trimmed_a or not trimmed_b:
        raise TeamValidationError("Please enter names for both teams.")
    for name in (trimmed_a, trimmed_b):
        if not MIN_TEAM_NAME_LENGTH <= len(name) <= MAX_TEAM_NAME_LENGTH:
            raise TeamValidationError(
                f"Team names must be between {MIN_TEAM_NAME_LENGTH} and "
                f"{MAX_TEAM_NAME_LENGTH} characters long."
            )
        if not VALID_TEAM_NAME.match(name):
            raise TeamValidationError(
                "Team names can only include letters, numbers, spaces, and .'-&()"
            )
    if trimmed_a.lower() == trimmed_b.lower():
        raise TeamValidationError("Please enter two different team names.")


def fixture_key(team_a: str, team_b: str, category: str) -> str:
    """
    Order-independent key for a fixture, used by the in-flight job unique index.
    """
    first, second = sorted((team_a.lower(), team_b.lower()))
    return f"{category}|{first}|{second}"
