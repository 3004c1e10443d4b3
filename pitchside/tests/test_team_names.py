"""
@file: test_team_names.py
@description:
Tests for team name normalization and team-name input validation.

@dependencies:
- pytest: For test framework
- pitchside.services.team_names: Module being tested
"""

import pytest

from pitchside.core.exceptions import TeamValidationError
from pitchside.services.team_names import fixture_key, normalize_team_name, validate_team_names


@pytest.mark.parametrize("raw,expected", [
    ("Man Utd", "Manchester United"),
    ("man united", "Manchester United"),
    ("  MANCHESTER UNITED  ", "Manchester United"),
    ("Spurs", "Tottenham"),
    ("PSG", "Paris Saint-Germain"),
    ("Inter", "Inter Milan"),
    ("united states", "USA"),
])
def test_normalize_known_aliases(raw, expected):
    """Aliases are matched case-insensitively after trimming."""
    assert normalize_team_name(raw) == expected


def test_normalize_unknown_name_is_trimmed_only():
    assert normalize_team_name("  Forest Green Rovers ") == "Forest Green Rovers"


@pytest.mark.parametrize("raw", [None, "", 42])
def test_normalize_empty_or_non_string(raw):
    assert normalize_team_name(raw) == ""


def test_normalize_is_idempotent():
    once = normalize_team_name("man city")
    assert normalize_team_name(once) == once


def test_validate_accepts_valid_names():
    validate_team_names("Brighton & Hove Albion", "St. Mirren")
    validate_team_names("Atlético Madrid", "1. FC Köln")


@pytest.mark.parametrize("team_a,team_b,message", [
    ("", "Chelsea", "Please enter names for both teams."),
    ("Arsenal", "   ", "Please enter names for both teams."),
    ("A", "Chelsea", "Team names must be between 2 and 50 characters long."),
    ("Arsenal", "x" * 51, "Team names must be between 2 and 50 characters long."),
    ("Arsenal!", "Chelsea", "Team names can only include letters, numbers, spaces, and .'-&()"),
    ("Arsenal", "Chelsea_FC", "Team names can only include letters, numbers, spaces, and .'-&()"),
    ("Arsenal", " arsenal ", "Please enter two different team names."),
])
def test_validate_rejects_invalid_names(team_a, team_b, message):
    with pytest.raises(TeamValidationError) as exc_info:
        validate_team_names(team_a, team_b)
    assert str(exc_info.value) == message


def test_fixture_key_is_order_independent():
    assert fixture_key("Chelsea", "Arsenal", "men") == fixture_key("Arsenal", "Chelsea", "men")
    assert fixture_key("Arsenal", "Chelsea", "men") == "men|arsenal|chelsea"
    assert fixture_key("Arsenal", "Chelsea", "women") != fixture_key("Arsenal", "Chelsea", "men")
