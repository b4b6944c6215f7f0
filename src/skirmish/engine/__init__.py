"""Deterministic, headless rules engine for Skirmish.

IMPORTANT: This package must never import from skirmish.services.
"""

from .board import Board
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
from .game import StepResult, new_game, replay, step
from .state import GameState
from .types import (
    CardCatalog,
    EngineError,
    EnemyCard,
    GameConfig,
    HistoryEmptyError,
    Phase,
    PlayerCard,
    WinState,
)

__all__ = [
    "AdvancePhaseCommand",
    "AttackCommand",
    "Board",
    "CardCatalog",
    "Command",
    "EngineError",
    "EnemyCard",
    "FlipSelectedCommand",
    "GameConfig",
    "GameState",
    "HistoryEmptyError",
    "MoveCommand",
    "Phase",
    "PlayerCard",
    "ResetCommand",
    "SelectCommand",
    "StepResult",
    "UndoCommand",
    "WinState",
    "new_game",
    "replay",
    "step",
]
