from __future__ import annotations

import pytest

from skirmish.engine.abilities import refresh_derived
from skirmish.engine.board import BASE, OVERLAY
from skirmish.engine.commands import (
    AttackCommand,
    FlipSelectedCommand,
    MoveCommand,
    SelectCommand,
)
from skirmish.engine.game import get_attack_targets, get_move_targets, step
from skirmish.engine.types import EngineError


def test_select_recomputes_flip_flag(blank_state, player) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Hammer", face_down=True))
    state.board.place((2, 4), BASE, player("The Leader", face_down=True))

    res = step(state, SelectCommand.card("The Hammer"))
    assert res.ok
    assert state.selected == "The Hammer"
    assert not state.can_flip

    step(state, SelectCommand.at((2, 4)))
    assert state.selected == "The Leader"
    assert state.can_flip

    step(state, SelectCommand.clear())
    assert state.selected is None
    assert not state.can_flip
    assert state.history == []


def test_flip_selected_is_noop_without_eligibility(blank_state, player) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Hammer", face_down=True))
    step(state, SelectCommand.card("The Hammer"))

    res = step(state, FlipSelectedCommand())
    assert not res.ok
    assert state.board.get("The Hammer").face_down
    assert state.history == []


def test_flip_toggles_and_spends(blank_state, player) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Leader", face_down=True))
    step(state, SelectCommand.card("The Leader"))

    res = step(state, FlipSelectedCommand())
    assert res.ok
    leader = state.board.get("The Leader")
    assert not leader.face_down
    assert leader.rotated
    assert state.selected is None
    assert not state.can_flip
    assert len(state.history) == 1


def test_joker_flip_moves_enemy_health_by_one(blank_state, player, enemy) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Joker"))
    gun = state.board.place((1, 3), BASE, enemy("Machine Gun"))
    refresh_derived(state.board)
    assert state.board.get(gun.id).health == 1

    step(state, SelectCommand.card("The Joker"))
    assert step(state, FlipSelectedCommand()).ok
    assert state.board.get(gun.id).health == 2


def test_move_swaps_and_spends_both_cards(blank_state, player) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Hammer"))
    state.board.place((1, 3), BASE, player("The Athlete"))

    res = step(state, MoveCommand((1, 2), (1, 3)))
    assert res.ok
    hammer = state.board.get("The Hammer")
    athlete = state.board.get("The Athlete")
    assert hammer.position == (1, 3) and hammer.rotated
    assert athlete.position == (1, 2) and athlete.rotation == "half_spent"
    assert [e["type"] for e in res.events] == ["CARD_MOVED"]
    assert len(state.history) == 1

    # The half-spent Athlete still has a move left.
    assert step(state, MoveCommand((1, 2), (2, 2))).ok
    assert state.board.get("The Athlete").rotated


def test_illegal_moves_leave_board_untouched(blank_state, player, enemy) -> None:
    state = blank_state("maneuver")
    board = state.board
    board.place((1, 2), BASE, player("The Leader"))
    board.place((1, 3), BASE, enemy("Infantry"))
    board.place((2, 2), BASE, enemy("Infantry"))
    before = board.clone()

    for destination in [(1, 3), (2, 3), (1, 4), (1, 2), (1, 0)]:
        res = step(state, MoveCommand((1, 2), destination))
        assert not res.ok
    assert state.board == before
    assert state.history == []


def test_moves_only_during_maneuver(blank_state, player) -> None:
    state = blank_state("attack")
    state.board.place((1, 2), BASE, player("The Leader"))
    res = step(state, MoveCommand((1, 2), (1, 3)))
    assert not res.ok
    assert res.error is not None and "maneuver" in res.error


def test_moving_joker_rebinds_weakened_enemies(blank_state, player, enemy) -> None:
    state = blank_state("maneuver")
    board = state.board
    board.place((1, 2), BASE, player("The Joker"))
    left = board.place((1, 1), BASE, enemy("Infantry"))
    below = board.place((3, 2), BASE, enemy("Machine Gun"))
    refresh_derived(board)
    assert board.get(left.id).health == 0

    assert step(state, MoveCommand((1, 2), (2, 2))).ok
    assert board.get(left.id).health == 1
    assert board.get(below.id).health == 1


def test_face_down_selection_clears_after_move(blank_state, player) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Mouse", face_down=True))
    step(state, SelectCommand.card("The Mouse"))

    assert step(state, MoveCommand((1, 2), (1, 3))).ok
    assert state.selected is None


def test_moving_another_card_keeps_face_down_selection(blank_state, player) -> None:
    state = blank_state("maneuver")
    state.board.place((2, 1), BASE, player("The Hammer", face_down=True))
    state.board.place((2, 3), BASE, player("The Leader"))
    step(state, SelectCommand.card("The Hammer"))
    assert not state.can_flip

    # The Leader lands next to the Hammer, which can now flip up.
    assert step(state, MoveCommand((2, 3), (2, 2))).ok
    assert state.selected == "The Hammer"
    assert state.can_flip
    assert step(state, FlipSelectedCommand()).ok
    assert not state.board.get("The Hammer").face_down


def test_card_under_flare_can_move(blank_state, player, enemy) -> None:
    state = blank_state("maneuver")
    state.board.place((1, 2), BASE, player("The Leader"))
    flare = state.board.place((1, 2), OVERLAY, enemy("Flare"))

    assert (1, 3) in get_move_targets(state, (1, 2))
    assert step(state, MoveCommand((1, 2), (1, 3))).ok
    assert state.board.get("The Leader").position == (1, 3)
    assert state.board.locate(flare.id) == ((1, 2), OVERLAY)
    assert state.board.base((1, 2)) is None


def test_select_enemy_attacks_with_effective_strength(blank_state, player, enemy) -> None:
    state = blank_state("attack")
    board = state.board
    board.place((1, 2), BASE, player("The Hammer"))
    board.place((0, 2), BASE, player("The Pacifist"))
    gun = board.place((1, 3), BASE, enemy("Machine Gun", health=3))
    refresh_derived(board)

    step(state, SelectCommand.card("The Hammer"))
    assert get_attack_targets(state) == [gun.id]
    res = step(state, SelectCommand.card(gun.id))

    assert res.ok
    assert board.find(gun.id) is None
    assert [e["type"] for e in res.events] == ["ENEMY_DAMAGED", "ENEMY_DEFEATED"]
    assert board.get("The Hammer").rotated
    assert state.selected is None
    assert len(state.history) == 1


def test_attack_that_does_not_kill(blank_state, player, enemy) -> None:
    state = blank_state("attack")
    board = state.board
    board.place((1, 2), BASE, player("The Joker"))
    tough = board.place((2, 2), BASE, enemy("Machine Gun", health=3))

    step(state, SelectCommand.card("The Joker"))
    assert step(state, AttackCommand(tough.id)).ok
    assert board.get(tough.id).health == 2
    assert board.get("The Joker").rotated

    # Spent cards cannot attack again.
    step(state, SelectCommand.card("The Joker"))
    assert not step(state, AttackCommand(tough.id)).ok


def test_attack_rejections(blank_state, player, enemy) -> None:
    state = blank_state("maneuver")
    board = state.board
    board.place((1, 2), BASE, player("The Hammer"))
    target = board.place((1, 3), BASE, enemy("Infantry"))

    res = step(state, SelectCommand.card(target.id))
    assert not res.ok

    step(state, SelectCommand.card("The Hammer"))
    res = step(state, AttackCommand(target.id))
    assert not res.ok
    assert res.error is not None and "attack phase" in res.error

    state.phase = "attack"
    step(state, SelectCommand.clear())
    res = step(state, AttackCommand(target.id))
    assert not res.ok
    assert board.get(target.id).health == 1
    assert state.history == []


def test_move_targets_for_ui(blank_state, player, enemy) -> None:
    state = blank_state("maneuver")
    board = state.board
    board.place((0, 1), BASE, player("The Leader"))
    board.place((0, 2), BASE, enemy("Infantry"))
    assert get_move_targets(state, (0, 1)) == [(1, 1), (1, 2)]
    assert get_move_targets(state, (0, 2)) == []


def test_unknown_card_is_an_engine_error(blank_state) -> None:
    state = blank_state("maneuver")
    with pytest.raises(EngineError):
        step(state, SelectCommand.card("The Nobody"))
