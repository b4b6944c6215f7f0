from __future__ import annotations

from dataclasses import replace

from .state import GameState
from .types import HistoryEmptyError


def capture(state: GameState) -> GameState:
    """Independent copy of the game position, without history or logs.

    The command and event logs belong to the live state and follow it
    through undo, so snapshots leave them empty.
    """
    return replace(
        state,
        board=state.board.clone(),
        deck=list(state.deck),
        history=[],
        discard=list(state.discard),
        command_log=[],
        event_log=[],
    )


def push_history(state: GameState) -> None:
    if len(state.history) >= state.config.undo_depth:
        state.history.pop(0)
    state.history.append(capture(state))


def can_undo(state: GameState) -> bool:
    return len(state.history) > 0


def undo(state: GameState) -> GameState:
    """Return the most recent snapshot as the new live state.

    The game position is restored exactly as captured; its history becomes
    the remaining older snapshots and it takes over the live logs.
    """
    if not state.history:
        raise HistoryEmptyError("Tried to undo with empty history")
    remaining = list(state.history)
    restored = remaining.pop()
    restored.history = remaining
    restored.command_log = state.command_log
    restored.event_log = state.event_log
    return restored
