from __future__ import annotations

from dataclasses import replace

from .abilities import (
    enemy_profile,
    refresh_braced_strength,
    refresh_derived,
    refresh_rotation,
    reset_enemy_health,
)
from .board import BASE, OVERLAY, Board, is_face_up_player, is_player
from .deck import deal_enemies
from .state import GameState
from .types import Card, EnemyCard, Phase, PlayerCard, Position

NEXT_PHASE: dict[Phase, Phase] = {
    "game_start": "encounter",
    "encounter": "maneuver",
    "maneuver": "attack",
    "attack": "counter_attack",
    "counter_attack": "encounter",
}


def _discard(state: GameState, pos: Position, slot: int) -> None:
    card = state.board.remove(pos, slot)
    if card is None:
        return
    state.discard.append(card)
    state.emit({"type": "CARD_DISCARDED", "card_id": card.id, "row": pos[0], "column": pos[1]})


def _enter_encounter(state: GameState) -> None:
    if len(state.deck) < state.config.rows:
        if state.win_state == "last_turn":
            won = not state.board.enemies()
            state.win_state = "win" if won else "loss"
            state.emit({"type": "GAME_ENDED", "result": state.win_state})
        else:
            state.win_state = "last_turn"
            state.emit({"type": "LAST_TURN", "deck": len(state.deck)})
        return

    for event in deal_enemies(state.board, state.deck, state.config, state.discard):
        state.emit(event)
    refresh_derived(state.board)


def _resolve_mortars(state: GameState) -> None:
    board = state.board
    targets = [
        pos
        for pos in board.positions()
        if any(isinstance(c, EnemyCard) and enemy_profile(c).bombards for c in board.cell(pos))
    ]
    for pos in targets:
        under = board.base(pos)
        if isinstance(under, PlayerCard):
            board.update(replace(under, face_down=True, rotation="spent"))

        for neighbour in board.adjacent(pos, is_player):
            assert isinstance(neighbour, PlayerCard)
            board.update(replace(neighbour, face_down=True))

        top = board.overlay(pos)
        slot = OVERLAY if isinstance(top, EnemyCard) and enemy_profile(top).bombards else BASE
        state.emit({"type": "MORTAR_RESOLVED", "row": pos[0], "column": pos[1]})
        _discard(state, pos, slot)

    refresh_derived(board)


def _enter_attack(state: GameState) -> None:
    for pos, slot, card in list(state.board.slots()):
        if isinstance(card, EnemyCard) and enemy_profile(card).burns_out_before_attack:
            _discard(state, pos, slot)
    refresh_rotation(state.board)


def _counter_attack_victims(board: Board) -> list[PlayerCard]:
    victims: dict[str, PlayerCard] = {}
    for enemy in board.enemies(include_overlay=False):
        mode = enemy_profile(enemy).counter_attack
        assert enemy.position is not None
        target = is_player if enemy.hits_face_down else is_face_up_player
        hit: list[Card] = []
        if mode == "adjacent":
            hit = board.adjacent(enemy.position, target)
        elif mode == "row":
            hit = [c for c in board.row(enemy.position[0]) if target(c)]
        for card in hit:
            assert isinstance(card, PlayerCard)
            victims[card.id] = card
    return list(victims.values())


def _enter_counter_attack(state: GameState) -> None:
    board = state.board
    refresh_rotation(board)

    for victim in _counter_attack_victims(board):
        assert victim.position is not None
        board.remove(victim.position)
        state.discard.append(victim)
        state.emit({"type": "PLAYER_REMOVED", "card_id": victim.id})

    reset_enemy_health(board)
    refresh_braced_strength(board)

    # Whatever reached the margin column this round leaves the board, and so
    # does any enemy that only lasts one round.
    for pos, slot, card in list(board.slots()):
        if pos[1] == 0 or (isinstance(card, EnemyCard) and card.discard_end_of_round):
            _discard(state, pos, slot)


_ON_ENTER = {
    "encounter": _enter_encounter,
    "maneuver": _resolve_mortars,
    "attack": _enter_attack,
    "counter_attack": _enter_counter_attack,
}


def advance_phase(state: GameState) -> None:
    """Run the side effects of leaving the current phase and enter the next one."""
    nxt = NEXT_PHASE[state.phase]
    _ON_ENTER[nxt](state)
    state.emit({"type": "PHASE_CHANGED", "from": state.phase, "to": nxt})
    state.phase = nxt
    state.selected = None
