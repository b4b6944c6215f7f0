from __future__ import annotations

import logging

from skirmish.engine.commands import Command, UndoCommand
from skirmish.engine.game import StepResult, new_game, step
from skirmish.engine.history import can_undo
from skirmish.engine.serialize import command_to_dict
from skirmish.engine.state import GameState
from skirmish.engine.types import CardCatalog, GameConfig, HistoryEmptyError

from .telemetry import TelemetryService

logger = logging.getLogger(__name__)


class GameSession:
    """Owns the live GameState and is the only thing that writes to it.

    A UI holds one session, dispatches commands into it and reads
    `session.state` back to paint the board.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        seed: int | None = None,
        config: GameConfig | None = None,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self._state = new_game(catalog, seed=seed, config=config)
        self._telemetry = telemetry
        self._record("game_started", {"seed": seed, "deck": len(self._state.deck)})

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def can_undo(self) -> bool:
        return can_undo(self._state)

    def dispatch(self, command: Command) -> StepResult:
        if isinstance(command, UndoCommand) and not self.can_undo:
            # The UI is expected to disable its undo control instead.
            logger.warning("Undo dispatched with empty history")
            raise HistoryEmptyError("Tried to undo with empty history")

        result = step(self._state, command)
        self._state = result.state

        if not result.ok:
            logger.debug("Rejected %s: %s", type(command).__name__, result.error)
        self._record(
            "command",
            {
                "command": command_to_dict(command),
                "ok": result.ok,
                "error": result.error,
                "phase": self._state.phase,
                "events": [e.get("type") for e in result.events],
            },
        )
        if result.ok and self._state.is_over:
            self._record("game_ended", {"result": self._state.win_state})
        return result

    def _record(self, record_type: str, payload: dict[str, object]) -> None:
        if self._telemetry is None:
            return
        self._telemetry.log(record_type, payload)
