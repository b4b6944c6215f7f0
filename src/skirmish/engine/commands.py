from __future__ import annotations

from dataclasses import dataclass

from .types import Position


@dataclass(frozen=True)
class ResetCommand:
    pass


@dataclass(frozen=True)
class UndoCommand:
    pass


@dataclass(frozen=True)
class AdvancePhaseCommand:
    pass


@dataclass(frozen=True)
class FlipSelectedCommand:
    pass


@dataclass(frozen=True)
class MoveCommand:
    source: Position
    destination: Position


@dataclass(frozen=True)
class SelectCommand:
    """Select a card by id or by the base card at a position.

    Selecting an enemy while an eligible player card is selected attacks it.
    Passing neither clears the selection.
    """

    card_id: str | None = None
    position: Position | None = None

    @staticmethod
    def card(card_id: str) -> "SelectCommand":
        return SelectCommand(card_id=card_id)

    @staticmethod
    def at(position: Position) -> "SelectCommand":
        return SelectCommand(position=position)

    @staticmethod
    def clear() -> "SelectCommand":
        return SelectCommand()


@dataclass(frozen=True)
class AttackCommand:
    enemy_id: str


Command = (
    ResetCommand
    | UndoCommand
    | AdvancePhaseCommand
    | FlipSelectedCommand
    | MoveCommand
    | SelectCommand
    | AttackCommand
)
