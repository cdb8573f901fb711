"""Tests for the hot-seat command-line driver."""

import pytest

from seabattle import cli
from seabattle.config import GameConfig
from seabattle.engine.ship import Coordinate
from seabattle.service import SessionRegistry


@pytest.mark.parametrize(
    ("text", "size", "expected"),
    [
        ("A1", 10, Coordinate(0, 0)),
        ("c10", 10, Coordinate(9, 2)),
        ("T20", 20, Coordinate(19, 19)),
        ("3 7", 10, Coordinate(3, 7)),
    ],
)
def test_coordinate_parsing(text: str, size: int, expected: Coordinate) -> None:
    assert cli._coordinate_from_input(text, size) == expected


@pytest.mark.parametrize("text", ["", "K1", "A0", "A11", "Az", "1 2 3", "x y", "10 0"])
def test_coordinate_parsing_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        cli._coordinate_from_input(text, 10)


def test_format_board_marks_ships_hits_and_misses() -> None:
    registry = SessionRegistry(GameConfig(rng_seed=2))
    created = registry.create_local_game(10)
    registry.local_shoot(created.game_id, 0, 0)
    status = registry.game_status(created.game_id, created.player2_id)

    rendered = cli._format_board(status.your_board)
    lines = rendered.splitlines()
    assert len(lines) == 11
    assert lines[1].startswith("A |")
    assert lines[1].split("|")[1].split()[0] in {"X", "o"}
    assert rendered.count("S") + rendered.count("X") == 19


def test_play_game_quits_on_q(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setattr("builtins.input", lambda prompt="": "q")
    with pytest.raises(SystemExit):
        cli.play_game(board_size=12, seed=1)
    out = capsys.readouterr().out
    assert "12x12" in out
    assert "=== Player 1 ===" in out


def test_play_game_reports_rejected_shot(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    answers = iter(["bogus", "q"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    with pytest.raises(SystemExit):
        cli.play_game(seed=1)
    assert "Invalid input" in capsys.readouterr().out
