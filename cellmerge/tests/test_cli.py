"""
Tests for the terminal front end.
"""

import pytest

from ..cli import _handle_command, main
from ..engine_core.grid import CellCoordinate
from ..movement import MovementMode, PushPositionSource
from ..session.game_loop import GameLoop


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CELLMERGE_ORIGIN_SCHEME", "CELLMERGE_SEED", "CELLMERGE_EVICT_OFFSCREEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def terminal_loop(make_state):
    source = PushPositionSource(name="terminal")
    loop = GameLoop(make_state({(0, 0): 4}), position_source=source)
    loop.start()
    return loop, source


class TestGridCommand:
    """Tests for `cellmerge grid`."""

    def test_prints_frame(self, capsys):
        main(["grid", "--radius", "2", "--seed", "demo"])
        out = capsys.readouterr().out
        lines = out.strip().splitlines()

        assert "@" in out
        assert lines[-1].startswith("Empty-handed")
        assert "Cell (0,0)" in lines[-1]

    def test_global_origin(self, capsys):
        main(["grid", "--global", "--lat", "0.00005", "--lng", "0.00005", "--radius", "1"])
        assert "Cell (0,0)" in capsys.readouterr().out

    def test_invalid_start(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["grid", "--lat", "95", "--radius", "1"])
        assert exc_info.value.code == 1
        assert "Latitude out of range" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])


class TestPlayCommands:
    """Tests for REPL command handling."""

    def test_cell_click(self, terminal_loop):
        loop, source = terminal_loop
        _handle_command("0 0", loop, source)
        assert loop.state.player.held_value == 4

    def test_far_click_reports_outcome(self, terminal_loop, capsys):
        loop, source = terminal_loop
        _handle_command("9,9", loop, source)
        assert "out_of_range" in capsys.readouterr().out

    def test_direction(self, terminal_loop):
        loop, source = terminal_loop
        _handle_command("w", loop, source)
        assert loop.state.player_cell == CellCoordinate(1, 0)

    def test_goto_needs_feed(self, terminal_loop, capsys):
        loop, source = terminal_loop
        _handle_command("goto 0.00105 0.00005", loop, source)
        assert "feed mode first" in capsys.readouterr().out
        assert loop.state.player_cell == CellCoordinate(0, 0)

    def test_feed_and_goto(self, terminal_loop, capsys):
        loop, source = terminal_loop
        _handle_command("feed", loop, source)
        assert loop.mode == MovementMode.FEED

        _handle_command("goto 0.00105 0.00005", loop, source)
        assert loop.state.player_cell == CellCoordinate(10, 0)

        _handle_command("goto 100 0", loop, source)
        assert "Rejected" in capsys.readouterr().out

        _handle_command("d", loop, source)
        assert "ignored in feed mode" in capsys.readouterr().out

    def test_unknown(self, terminal_loop, capsys):
        loop, source = terminal_loop
        _handle_command("dance", loop, source)
        assert "Unknown command" in capsys.readouterr().out
