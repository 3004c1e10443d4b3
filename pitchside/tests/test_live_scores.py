"""
@file: test_live_scores.py
@description:
Tests for TheSportsDB client and the live scores feed:
- Request URLs, empty results and error wrapping
- League allow-list, status filtering, ordering and the result cap
- Mapping of events onto LiveMatch

@dependencies:
- pytest / pytest-asyncio: For test framework
- httpx: MockTransport stands in for TheSportsDB
"""

from datetime import date

import httpx
import pytest

from pitchside.core.exceptions import ConfigurationError
from pitchside.services.live_scores import (
    LiveScoresService,
    select_live_events,
    status_priority,
    to_live_match,
)
from pitchside.services.sports_db import MISSING_KEY_MESSAGE, SportsDataError, SportsDBClient


def event(event_id, league, status, home="Arsenal", away="Chelsea", home_score="1", away_score="0", time="15:00:00"):
    return {
        "idEvent": event_id,
        "strEvent": f"{home} vs {away}",
        "strLeague": league,
        "strStatus": status,
        "strHomeTeam": home,
        "strAwayTeam": away,
        "intHomeScore": home_score,
        "intAwayScore": away_score,
        "strTime": time,
    }


def client_for(handler, api_key="123"):
    return SportsDBClient(api_key, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_search_events_builds_request():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        return httpx.Response(200, json={"event": [{"idEvent": "1"}]})

    events = await client_for(handler).search_events("Arsenal")

    assert events == [{"idEvent": "1"}]
    assert seen["url"].path == "/api/v1/json/123/searchevents.php"
    assert seen["url"].params["e"] == "Arsenal"


@pytest.mark.asyncio
async def test_null_results_become_empty_lists():
    def handler(request):
        if "eventsday" in request.url.path:
            return httpx.Response(200, json={"events": None})
        return httpx.Response(200, json={"event": None})

    client = client_for(handler)
    assert await client.search_events("Nobody FC") == []
    assert await client.events_for_day(date(2026, 10, 19)) == []


@pytest.mark.asyncio
async def test_events_for_day_params():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"events": []})

    await client_for(handler).events_for_day(date(2026, 10, 19))

    assert seen["params"] == {"d": "2026-10-19", "s": "Soccer"}


@pytest.mark.asyncio
async def test_http_error_is_wrapped():
    client = client_for(lambda request: httpx.Response(500, text="Internal Server Error"))

    with pytest.raises(SportsDataError) as exc_info:
        await client.search_events("Arsenal")
    assert "Status: 500" in str(exc_info.value)


@pytest.mark.asyncio
async def test_network_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SportsDataError):
        await client_for(handler).search_events("Arsenal")


@pytest.mark.asyncio
async def test_missing_key_fails_before_request():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(ConfigurationError) as exc_info:
        await client_for(handler, api_key=None).events_for_day(date(2026, 10, 19))
    assert str(exc_info.value) == MISSING_KEY_MESSAGE


@pytest.mark.parametrize("status,expected", [
    ("67'", 1),
    ("45'+2", 1),
    ("Half Time", 2),
    ("HT", 2),
    ("Match Finished", 3),
    ("FT", 3),
    ("2H", 4),
    (None, 4),
])
def test_status_priority(status, expected):
    assert status_priority(status) == expected


@pytest.mark.parametrize("status,expected_time,expected_status", [
    ("45'", "45'", "LIVE"),
    ("45'+2", "45'+2", "LIVE"),
    ("Half Time", "Half Time", "HT"),
    ("HT", "HT", "HT"),
    ("Match Finished", "Match Finished", "FT"),
    ("FT", "FT", "FT"),
    ("", "NS", "Not Started"),
])
def test_to_live_match_status_mapping(status, expected_time, expected_status):
    match = to_live_match(event("1", "English Premier League", status))
    assert match.time == expected_time
    assert match.status == expected_status


def test_to_live_match_scores():
    match = to_live_match(event("9", "English Premier League", "12'", home_score="", away_score=None))
    assert match.id == "9"
    assert match.teamA == "Arsenal"
    assert match.scoreA is None
    assert match.scoreB is None

    assert to_live_match(event("9", "English Premier League", "FT", home_score="3", away_score="2")).scoreA == 3


def test_select_live_events_filters_and_orders():
    events = [
        event("finished", "Spanish La Liga", "Match Finished"),
        event("not-started", "English Premier League", "Not Started"),
        event("postponed", "Italian Serie A", "Match Postponed"),
        event("halftime", "German Bundesliga", "Half Time"),
        event("live-epl", "English Premier League", "55'"),
        event("live-ucl", "UEFA Champions League", "12'"),
        event("lower-league", "English League Two", "30'"),
        event("no-league", None, "30'"),
    ]

    ids = [e["idEvent"] for e in select_live_events(events)]

    assert ids == ["live-epl", "live-ucl", "halftime", "finished"]


def test_select_live_events_orders_short_status_codes():
    events = [
        event("ft", "English Premier League", "FT"),
        event("ht", "Spanish La Liga", "HT"),
        event("stoppage", "UEFA Champions League", "90'+3"),
    ]

    matches = [to_live_match(e) for e in select_live_events(events)]

    assert [m.status for m in matches] == ["LIVE", "HT", "FT"]


def test_select_live_events_caps_results():
    events = [event(str(i), "English Premier League", f"{i}'") for i in range(1, 31)]
    assert len(select_live_events(events, limit=15)) == 15


def test_select_live_events_league_filter():
    events = [
        event("epl", "English Premier League", "55'"),
        event("liga", "Spanish La Liga", "55'", home="Real Madrid", away="Barcelona"),
    ]
    assert [e["idEvent"] for e in select_live_events(events, league="la liga")] == ["liga"]
    assert [e["idEvent"] for e in select_live_events(events, league="Barcelona")] == ["liga"]


@pytest.mark.asyncio
async def test_fetch_live_scores():
    def handler(request):
        return httpx.Response(200, json={"events": [
            event("1", "English Premier League", "Match Finished"),
            event("2", "English Premier League", "78'", home="Liverpool", away="Everton", home_score="2", away_score="2"),
            event("3", "Welsh Cymru Premier", "78'"),
        ]})

    service = LiveScoresService(client_for(handler), limit=15)

    matches = await service.fetch_live_scores(day=date(2026, 10, 19))

    assert [m.id for m in matches] == ["2", "1"]
    assert matches[0].status == "LIVE"
    assert matches[0].scoreA == 2
