from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

Position = tuple[int, int]

Phase = Literal["game_start", "encounter", "maneuver", "attack", "counter_attack"]
WinState = Literal["none", "last_turn", "win", "loss"]

# Ordinary cards go ready -> spent; The Athlete passes through half_spent.
Rotation = Literal["ready", "half_spent", "spent"]

PlayerAbility = Literal[
    "none",
    "hammer",
    "anvil",
    "pacifist",
    "joker",
    "mouse",
    "leader",
    "athlete",
    "natural",
]
EnemyAbility = Literal["none", "infantry", "machine_gun", "tank", "mortar", "flare"]


class EngineError(RuntimeError):
    """The engine was asked to work on a state that breaks its invariants."""


class HistoryEmptyError(EngineError):
    pass


@dataclass(frozen=True)
class GameConfig:
    rows: int = 4
    columns: int = 7
    undo_depth: int = 3

    @property
    def centre(self) -> float:
        return (self.columns - 1) / 2


@dataclass(frozen=True)
class PlayerTemplate:
    name: str
    strength: int
    ability: PlayerAbility


@dataclass(frozen=True)
class EnemyTemplate:
    name: str
    strength: int
    positions: tuple[int | None, ...]
    can_stack: bool
    discard_end_of_round: bool
    hits_face_down: bool
    ability: EnemyAbility


@dataclass(frozen=True)
class CardCatalog:
    """Immutable card roster and deal-order groups used to start a game."""

    row_groups: tuple[tuple[int, ...], ...]
    column_groups: tuple[tuple[int, ...], ...]
    players: tuple[PlayerTemplate, ...]
    enemies: tuple[EnemyTemplate, ...]

    def player(self, name: str) -> PlayerTemplate:
        for t in self.players:
            if t.name == name:
                return t
        raise KeyError(name)

    def enemy(self, name: str) -> EnemyTemplate:
        for t in self.enemies:
            if t.name == name:
                return t
        raise KeyError(name)

    def deck_size(self) -> int:
        return sum(len(t.positions) for t in self.enemies)

    def player_names(self) -> Sequence[str]:
        return [t.name for t in self.players]


@dataclass(frozen=True)
class PlayerCard:
    id: str
    name: str
    strength: int
    ability: PlayerAbility
    effective_strength: int
    face_down: bool = False
    rotation: Rotation = "ready"
    position: Position | None = None

    @property
    def rotated(self) -> bool:
        return self.rotation == "spent"

    @property
    def half_rotated(self) -> bool:
        return self.rotation == "half_spent"


@dataclass(frozen=True)
class EnemyCard:
    id: str
    name: str
    strength: int
    ability: EnemyAbility
    deploy_column: int | None
    can_stack: bool
    # Leaves the board when the counter-attack phase ends.
    discard_end_of_round: bool
    # Counter-attacks also remove face-down player cards.
    hits_face_down: bool
    health: int
    position: Position | None = None
    # Set while a face-up Joker is holding this card's health down.
    weakened: bool = False


Card = PlayerCard | EnemyCard
