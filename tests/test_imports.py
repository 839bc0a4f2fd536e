"""Tests for CSV fixture and team imports."""
from datetime import date, time

import pytest

from league.models import PlayingPosition
from league.services.imports import parse_date, parse_fixture_csv, parse_team_csv


def test_fixture_csv_with_header():
    text = "Team A,Team B,Date,Time\nLions,Tigers,2024-07-01,18:30\nTigers,Eagles\n"
    records, errors = parse_fixture_csv(text)
    assert errors == []
    assert [(r.team_a_name, r.team_b_name) for r in records] == [("Lions", "Tigers"), ("Tigers", "Eagles")]
    assert records[0].date == date(2024, 7, 1)
    assert records[0].time == time(18, 30)
    assert records[1].date is None and records[1].time is None


def test_fixture_csv_errors_name_the_line():
    text = "Lions,Tigers\nLions\nLions,Eagles,not-a-date\nEagles,Tigers,01/08/2024,25:99\n"
    records, errors = parse_fixture_csv(text)
    assert len(records) == 1
    assert errors[0] == "Line 2: Not enough fields"
    assert errors[1].startswith("Line 3: Invalid date")
    assert errors[2].startswith("Line 4: Invalid time")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-07-01", date(2024, 7, 1)),
        ("01-07-2024", date(2024, 7, 1)),
        ("01/07/2024", date(2024, 7, 1)),
        ("2024/07/01", date(2024, 7, 1)),
        ("July 1", None),
    ],
)
def test_parse_date_formats(value, expected):
    assert parse_date(value) == expected


def test_team_csv_blocks():
    text = (
        "TEAM: Lions FC, https://img.example/lions.png\n"
        "Rahim, GK, 1, 01711000000\n"
        "Karim, MID, 8\n"
        "\n"
        "TEAM: Tigers\n"
        "Jamal, striker, x\n"
    )
    teams, errors = parse_team_csv(text)
    assert [t.name for t in teams] == ["Lions FC", "Tigers"]
    lions, tigers = teams
    assert lions.logo == "https://img.example/lions.png"
    assert [(p.name, p.position, p.jersey) for p in lions.players] == [
        ("Rahim", PlayingPosition.GOALKEEPER, 1),
        ("Karim", PlayingPosition.MIDFIELDER, 8),
    ]
    assert lions.players[0].mobile == "01711000000"
    assert tigers.players[0].position == PlayingPosition.FORWARD
    assert tigers.players[0].jersey is None
    assert len(errors) == 1 and "Invalid jersey" in errors[0]


def test_team_csv_bare_team_line_and_empty_team():
    text = "Eagles\nSabbir, DEF, 4\n\nTEAM: Nobody\n\nPlayer Without Team, GK, 1\n"
    teams, errors = parse_team_csv(text)
    assert [t.name for t in teams] == ["Eagles"]
    assert any("No team defined" in e for e in errors)


@pytest.mark.asyncio
async def test_import_teams_creates_players_and_teams(engine):
    records, _ = parse_team_csv("TEAM: Lions\nRahim, GK, 1\nKarim, MID\n")
    report = await engine.import_teams(records)
    assert report.created_count == 1
    team = report.created[0]
    players = {p.id: p for p in await engine.list_players()}
    assert [players[pid].name for pid in team.player_ids] == ["Rahim", "Karim"]
    assert players[team.player_ids[1]].jersey_number == 2
    assert team.captain_id == team.player_ids[0]
    assert [t.name for t in await engine.list_teams()] == ["Lions"]
