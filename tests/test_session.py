from __future__ import annotations

from pathlib import Path

import pytest

from skirmish.engine.commands import AdvancePhaseCommand, FlipSelectedCommand, UndoCommand
from skirmish.engine.types import HistoryEmptyError
from skirmish.services.session import GameSession
from skirmish.services.telemetry import TelemetryService


def test_session_logs_each_command(catalog, tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "logs" / "telemetry.jsonl")
    session = GameSession(catalog, seed=8, telemetry=telemetry)

    assert not session.can_undo
    res = session.dispatch(AdvancePhaseCommand())
    assert res.ok
    assert session.state.phase == "encounter"
    assert session.can_undo

    rejected = session.dispatch(FlipSelectedCommand())
    assert not rejected.ok

    records = telemetry.read_all()
    assert [r["type"] for r in records] == ["game_started", "command", "command"]
    first = records[1]["payload"]
    assert isinstance(first, dict)
    assert first["command"] == {"type": "advance_phase"}
    assert first["ok"] is True
    assert "ENEMY_DEALT" in first["events"]
    second = records[2]["payload"]
    assert isinstance(second, dict)
    assert second["ok"] is False
    assert second["error"] == "Selected card cannot flip."


def test_session_undo_swaps_state(catalog) -> None:
    session = GameSession(catalog, seed=8)
    before = session.state
    session.dispatch(AdvancePhaseCommand())
    session.dispatch(UndoCommand())
    assert session.state is not before
    assert session.state.phase == "game_start"
    assert not session.can_undo

    with pytest.raises(HistoryEmptyError):
        session.dispatch(UndoCommand())


def test_session_records_game_end(catalog, tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "t.jsonl")
    session = GameSession(catalog, seed=1, telemetry=telemetry)
    while not session.state.is_over:
        session.dispatch(AdvancePhaseCommand())

    records = telemetry.read_all()
    assert records[-1]["type"] == "game_ended"
    payload = records[-1]["payload"]
    assert isinstance(payload, dict)
    assert payload["result"] in ("win", "loss")


def test_telemetry_numbers_and_filters_records(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "journal.jsonl")
    assert telemetry.read_all() == []

    first = telemetry.log("command", {"ok": True})
    telemetry.log("game_ended", {"result": "win"})
    telemetry.log("command", {"ok": False})

    assert first["seq"] == 1
    assert [r["seq"] for r in telemetry.read_all()] == [1, 2, 3]
    commands = telemetry.read_all("command")
    assert [r["payload"] for r in commands] == [{"ok": True}, {"ok": False}]

    # A second writer on the same file starts counting again.
    TelemetryService(telemetry.path).log("game_started", {})
    assert telemetry.read_all()[-1]["seq"] == 1
