from __future__ import annotations

import random
from dataclasses import dataclass, field

from .board import Board
from .commands import Command
from .types import (
    Card,
    CardCatalog,
    EngineError,
    EnemyCard,
    GameConfig,
    Phase,
    PlayerCard,
    WinState,
)

Event = dict[str, object]


@dataclass
class GameState:
    catalog: CardCatalog
    config: GameConfig
    seed: int | None
    rng: random.Random
    board: Board
    deck: list[EnemyCard]
    phase: Phase = "game_start"
    selected: str | None = None
    win_state: WinState = "none"
    # Derived after every step; never trusted from history.
    can_flip: bool = False
    history: list["GameState"] = field(default_factory=list)
    discard: list[Card] = field(default_factory=list)
    command_log: list[Command] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def is_over(self) -> bool:
        return self.win_state in ("win", "loss")

    def selected_card(self) -> PlayerCard | None:
        if self.selected is None:
            return None
        card = self.board.get(self.selected)
        if not isinstance(card, PlayerCard):
            raise EngineError(f"Selection {self.selected!r} is not a player card")
        return card

    def emit(self, event: Event) -> None:
        self.event_log.append(event)
