from __future__ import annotations

from .commands import (
    AdvancePhaseCommand,
    AttackCommand,
    Command,
    FlipSelectedCommand,
    MoveCommand,
    ResetCommand,
    SelectCommand,
    UndoCommand,
)
from .state import GameState
from .types import Card, EnemyCard, PlayerCard, Position


def _pos(p: Position | None) -> list[int] | None:
    if p is None:
        return None
    return [p[0], p[1]]


def command_to_dict(c: Command) -> dict[str, object]:
    if isinstance(c, ResetCommand):
        return {"type": "reset"}
    if isinstance(c, UndoCommand):
        return {"type": "undo"}
    if isinstance(c, AdvancePhaseCommand):
        return {"type": "advance_phase"}
    if isinstance(c, FlipSelectedCommand):
        return {"type": "flip_selected"}
    if isinstance(c, MoveCommand):
        return {"type": "move", "source": _pos(c.source), "destination": _pos(c.destination)}
    if isinstance(c, SelectCommand):
        return {"type": "select", "card_id": c.card_id, "position": _pos(c.position)}
    if isinstance(c, AttackCommand):
        return {"type": "attack", "enemy_id": c.enemy_id}
    # should be unreachable
    return {"type": "unknown"}


def card_to_dict(c: Card | None) -> dict[str, object] | None:
    if c is None:
        return None
    if isinstance(c, PlayerCard):
        return {
            "kind": "player",
            "id": c.id,
            "name": c.name,
            "strength": c.strength,
            "effective_strength": c.effective_strength,
            "face_down": c.face_down,
            "rotation": c.rotation,
            "position": _pos(c.position),
        }
    assert isinstance(c, EnemyCard)
    return {
        "kind": "enemy",
        "id": c.id,
        "name": c.name,
        "strength": c.strength,
        "health": c.health,
        "deploy_column": c.deploy_column,
        "position": _pos(c.position),
    }


def snapshot(state: GameState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    board = state.board
    return {
        "seed": state.seed,
        "phase": state.phase,
        "win_state": state.win_state,
        "selected": state.selected,
        "can_flip": state.can_flip,
        "board": [
            [[card_to_dict(card) for card in board.cell((r, c))] for c in range(board.columns)]
            for r in range(board.rows)
        ],
        "deck": [card.id for card in state.deck],
        "discard": [card.id for card in state.discard],
        "history_depth": len(state.history),
        "command_log": [command_to_dict(c) for c in state.command_log],
    }
