from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Iterable

from .abilities import (
    can_attack_enemy,
    can_flip,
    can_move_to,
    is_moveable,
    refresh_derived,
    spend,
)
from .board import BASE
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
from .deck import build_board, build_deck, check_catalog
from .history import push_history, undo
from .phases import advance_phase
from .state import Event, GameState
from .types import (
    Card,
    CardCatalog,
    EngineError,
    EnemyCard,
    GameConfig,
    PlayerCard,
    Position,
)


@dataclass
class StepResult:
    ok: bool
    state: GameState
    events: list[Event]
    error: str | None = None


def _deal_new_game(
    catalog: CardCatalog, config: GameConfig, seed: int | None, rng: random.Random
) -> GameState:
    board, left_out = build_board(catalog, config, rng)
    deck = build_deck(catalog, rng)
    state = GameState(catalog=catalog, config=config, seed=seed, rng=rng, board=board, deck=deck)
    if left_out is not None:
        state.discard.append(left_out)
    return state


def new_game(catalog: CardCatalog, seed: int | None = None, config: GameConfig | None = None) -> GameState:
    cfg = config or GameConfig()
    check_catalog(catalog, cfg)
    return _deal_new_game(catalog, cfg, seed, random.Random(seed))


def _reject(state: GameState, error: str) -> StepResult:
    return StepResult(ok=False, state=state, events=[], error=error)


def can_card_flip(state: GameState, card: PlayerCard) -> bool:
    return can_flip(state.phase, state.board, card)


def _compute_can_flip(state: GameState) -> bool:
    card = state.selected_card()
    if card is None:
        return False
    return can_card_flip(state, card)


def _flip_selected(state: GameState, _: FlipSelectedCommand) -> str | None:
    if not state.can_flip:
        return "Selected card cannot flip."
    card = state.selected_card()
    if card is None:
        raise EngineError("can_flip is set but nothing is selected")

    push_history(state)
    state.board.update(replace(card, face_down=not card.face_down, rotation="spent"))
    refresh_derived(state.board)
    state.emit({"type": "CARD_FLIPPED", "card_id": card.id, "face_down": not card.face_down})
    state.selected = None
    return None


def _move(state: GameState, command: MoveCommand) -> str | None:
    board = state.board
    if state.phase != "maneuver":
        return "Cards can only move during the maneuver phase."
    if not board.in_bounds(command.source) or not board.in_bounds(command.destination):
        return "Position off the board."
    if not can_move_to(board, command.source, command.destination):
        return "Illegal move."

    push_history(state)
    mover = board.base(command.source)
    other = board.base(command.destination)
    assert isinstance(mover, PlayerCard)

    board.place(command.destination, BASE, spend(mover))
    if isinstance(other, PlayerCard):
        board.place(command.source, BASE, spend(other))
    else:
        board.place(command.source, BASE, other)
    refresh_derived(board)

    state.emit(
        {
            "type": "CARD_MOVED",
            "card_id": mover.id,
            "from": list(command.source),
            "to": list(command.destination),
            "swapped_with": other.id if other is not None else None,
        }
    )

    moved = {mover.id} if other is None else {mover.id, other.id}
    if state.selected in moved:
        selected = state.selected_card()
        if selected is not None and selected.face_down:
            state.selected = None
    return None


def _attack(state: GameState, enemy_id: str) -> str | None:
    if state.phase != "attack":
        return "Cards can only attack during the attack phase."
    attacker = state.selected_card()
    if attacker is None:
        return "Select a card to attack with."
    target = state.board.get(enemy_id)
    if not isinstance(target, EnemyCard):
        return "Only enemy cards can be attacked."
    if not can_attack_enemy(state.board, attacker, target):
        return "Selected card cannot attack that enemy."

    push_history(state)
    damage = attacker.effective_strength
    health = target.health - damage
    state.emit({"type": "ENEMY_DAMAGED", "card_id": target.id, "amount": damage, "health": health})
    if health <= 0:
        pos, slot = state.board.locate(target.id)
        state.board.remove(pos, slot)
        state.discard.append(replace(target, health=health))
        state.emit({"type": "ENEMY_DEFEATED", "card_id": target.id, "by": attacker.id})
    else:
        state.board.update(replace(target, health=health))

    state.board.update(spend(attacker))
    state.selected = None
    return None


def _select(state: GameState, command: SelectCommand) -> str | None:
    card: Card | None = None
    if command.card_id is not None:
        card = state.board.get(command.card_id)
    elif command.position is not None:
        if not state.board.in_bounds(command.position):
            return "Position off the board."
        card = state.board.base(command.position)

    if isinstance(card, EnemyCard):
        return _attack(state, card.id)

    state.selected = card.id if card is not None else None
    return None


def _dispatch(state: GameState, command: Command) -> str | None:
    if isinstance(command, AdvancePhaseCommand):
        push_history(state)
        advance_phase(state)
        return None
    if isinstance(command, FlipSelectedCommand):
        return _flip_selected(state, command)
    if isinstance(command, MoveCommand):
        return _move(state, command)
    if isinstance(command, SelectCommand):
        return _select(state, command)
    if isinstance(command, AttackCommand):
        return _attack(state, command.enemy_id)
    return "Unknown command."


def step(state: GameState, command: Command) -> StepResult:
    """Apply one command.

    Reset and Undo hand back a different GameState; every other command
    mutates `state` in place. A rejected command only lands in the command
    log; board, selection and history stay as they were.
    Raises HistoryEmptyError on Undo with nothing to undo.
    """
    if isinstance(command, ResetCommand):
        fresh = _deal_new_game(state.catalog, state.config, state.seed, state.rng)
        fresh.command_log = state.command_log
        fresh.command_log.append(command)
        fresh.emit({"type": "GAME_RESET"})
        return StepResult(ok=True, state=fresh, events=list(fresh.event_log))

    if isinstance(command, UndoCommand):
        restored = undo(state)
        restored.command_log.append(command)
        restored.can_flip = _compute_can_flip(restored)
        return StepResult(ok=True, state=restored, events=[])

    state.command_log.append(command)
    if state.is_over:
        return _reject(state, "Game already ended.")

    mark = len(state.event_log)
    error = _dispatch(state, command)
    state.can_flip = _compute_can_flip(state)
    if error is not None:
        return _reject(state, error)
    return StepResult(ok=True, state=state, events=state.event_log[mark:])


def replay(
    catalog: CardCatalog,
    seed: int | None,
    commands: Iterable[Command],
    config: GameConfig | None = None,
) -> GameState:
    state = new_game(catalog, seed=seed, config=config)
    for command in commands:
        state = step(state, command).state
    return state


def get_move_targets(state: GameState, source: Position) -> list[Position]:
    card = state.board.base(source)
    if card is None or not is_moveable(state.phase, card):
        return []
    return [
        pos
        for pos in state.board.positions()
        if can_move_to(state.board, source, pos)
    ]


def get_attack_targets(state: GameState) -> list[str]:
    if state.phase != "attack":
        return []
    attacker = state.selected_card()
    if attacker is None:
        return []
    return [
        enemy.id
        for enemy in state.board.enemies()
        if can_attack_enemy(state.board, attacker, enemy)
    ]


def card_is_moveable(state: GameState, card: Card) -> bool:
    return is_moveable(state.phase, card)
