"""Per-card special rules.

Each ability kind maps to a small frozen profile, and the rules below read
profile fields instead of comparing card names. Names are only looked at
once, when the catalog is loaded (see `player_ability_for`).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from .board import Board, is_enemy, is_face_up_player
from .types import (
    Card,
    EngineError,
    EnemyAbility,
    EnemyCard,
    Phase,
    PlayerAbility,
    PlayerCard,
    Position,
    Rotation,
)

FlipRule = Literal["needs_face_up_neighbour", "always", "free_flip_down"]
AttackReach = Literal["orthogonal", "surrounding"]
CounterAttack = Literal["none", "adjacent", "row"]


@dataclass(frozen=True)
class PlayerProfile:
    flip_rule: FlipRule = "needs_face_up_neighbour"
    acts_face_down: bool = False
    three_state_rotation: bool = False
    attack_reach: AttackReach = "orthogonal"
    braced_by_pacifist: bool = False
    braces_neighbours: bool = False
    weakens_neighbours: bool = False


@dataclass(frozen=True)
class EnemyProfile:
    counter_attack: CounterAttack = "none"
    bombards: bool = False
    burns_out_before_attack: bool = False


PLAYER_PROFILES: dict[PlayerAbility, PlayerProfile] = {
    "none": PlayerProfile(),
    "hammer": PlayerProfile(braced_by_pacifist=True),
    "anvil": PlayerProfile(braced_by_pacifist=True),
    "pacifist": PlayerProfile(braces_neighbours=True),
    "joker": PlayerProfile(weakens_neighbours=True),
    "mouse": PlayerProfile(flip_rule="free_flip_down", acts_face_down=True),
    "leader": PlayerProfile(flip_rule="always"),
    "athlete": PlayerProfile(three_state_rotation=True),
    "natural": PlayerProfile(attack_reach="surrounding"),
}

ENEMY_PROFILES: dict[EnemyAbility, EnemyProfile] = {
    "none": EnemyProfile(),
    "infantry": EnemyProfile(counter_attack="adjacent"),
    "machine_gun": EnemyProfile(counter_attack="adjacent"),
    "tank": EnemyProfile(counter_attack="row"),
    "mortar": EnemyProfile(bombards=True),
    "flare": EnemyProfile(burns_out_before_attack=True),
}

_PLAYER_ABILITY_BY_NAME: dict[str, PlayerAbility] = {
    "The Hammer": "hammer",
    "The Anvil": "anvil",
    "The Pacifist": "pacifist",
    "The Joker": "joker",
    "The Mouse": "mouse",
    "The Leader": "leader",
    "The Athlete": "athlete",
    "The Natural": "natural",
}

_ENEMY_ABILITY_BY_NAME: dict[str, EnemyAbility] = {
    "Infantry": "infantry",
    "Machine Gun": "machine_gun",
    "Tank": "tank",
    "Mortar": "mortar",
    "Flare": "flare",
}


def player_ability_for(name: str) -> PlayerAbility:
    return _PLAYER_ABILITY_BY_NAME.get(name, "none")


def enemy_ability_for(name: str) -> EnemyAbility:
    return _ENEMY_ABILITY_BY_NAME.get(name, "none")


def player_profile(card: PlayerCard) -> PlayerProfile:
    return PLAYER_PROFILES[card.ability]


def enemy_profile(card: EnemyCard) -> EnemyProfile:
    return ENEMY_PROFILES[card.ability]


def _require_position(card: Card) -> Position:
    if card.position is None:
        raise EngineError(f"Card {card.id!r} has no board position")
    return card.position


# ---------------------------------------------------------------------------
# Derivation passes. Both are pure recomputations from the current board and
# may be run any number of times.
# ---------------------------------------------------------------------------


def refresh_braced_strength(board: Board) -> None:
    """Hammer/Anvil get +1 effective strength next to a face-up Pacifist."""

    def is_bracing(card: Card) -> bool:
        return (
            isinstance(card, PlayerCard)
            and not card.face_down
            and player_profile(card).braces_neighbours
        )

    for card in board.players():
        if not player_profile(card).braced_by_pacifist:
            continue
        bonus = 1 if board.has_adjacent(_require_position(card), is_bracing) else 0
        target = card.strength + bonus
        if card.effective_strength != target:
            board.update(replace(card, effective_strength=target))


def refresh_joker_health(board: Board) -> None:
    """Enemies next to a face-up Joker have one less health than their strength."""
    jokers = [c for c in board.players() if player_profile(c).weakens_neighbours]
    if len(jokers) > 1:
        raise EngineError("More than one Joker on the board")

    touched: set[str] = set()
    if jokers:
        joker = jokers[0]
        for enemy in board.adjacent(_require_position(joker), is_enemy):
            assert isinstance(enemy, EnemyCard)
            touched.add(enemy.id)
            if joker.face_down:
                board.update(replace(enemy, health=enemy.strength, weakened=False))
            else:
                board.update(replace(enemy, health=enemy.strength - 1, weakened=True))

    # Enemies the Joker has walked away from get their health back.
    for enemy in board.enemies():
        if enemy.weakened and enemy.id not in touched:
            board.update(replace(enemy, health=enemy.strength, weakened=False))


def refresh_derived(board: Board) -> None:
    refresh_joker_health(board)
    refresh_braced_strength(board)


def reset_enemy_health(board: Board) -> None:
    for enemy in board.enemies(include_overlay=False):
        board.update(replace(enemy, health=enemy.strength, weakened=False))
    refresh_joker_health(board)


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------


def spend(card: PlayerCard) -> PlayerCard:
    """Advance a card's rotation after it moves or attacks."""
    nxt: Rotation = "spent"
    if player_profile(card).three_state_rotation and card.rotation == "ready":
        nxt = "half_spent"
    return replace(card, rotation=nxt)


def refresh_rotation(board: Board) -> None:
    for card in board.players():
        if card.rotation != "ready":
            board.update(replace(card, rotation="ready"))


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


def can_flip(phase: Phase, board: Board, card: PlayerCard) -> bool:
    if phase != "maneuver":
        return False

    profile = player_profile(card)

    if profile.flip_rule == "free_flip_down" and not card.face_down:
        return True

    # A half-spent Athlete is locked as well.
    if card.rotation != "ready":
        return False

    if profile.flip_rule == "always":
        return True
    if not card.face_down:
        return True

    return board.has_adjacent(_require_position(card), is_face_up_player)


def can_player_attack(card: PlayerCard) -> bool:
    return (
        not card.rotated
        and (not card.face_down or player_profile(card).acts_face_down)
        and card.strength > 0
    )


def can_attack_enemy(board: Board, card: PlayerCard, enemy: EnemyCard) -> bool:
    if not can_player_attack(card):
        return False
    if enemy.strength < 0:
        return False

    enemy_pos = _require_position(enemy)
    card_pos = _require_position(card)
    if not board.in_play(enemy_pos):
        return False

    dr = abs(enemy_pos[0] - card_pos[0])
    dc = abs(enemy_pos[1] - card_pos[1])
    if dr + dc == 1:
        return True
    return player_profile(card).attack_reach == "surrounding" and dr == 1 and dc == 1


def is_moveable(phase: Phase, card: Card) -> bool:
    return (
        phase == "maneuver"
        and isinstance(card, PlayerCard)
        and (not card.face_down or player_profile(card).acts_face_down)
        and not card.rotated
    )


def _blocks_move(card: Card | None) -> bool:
    if not isinstance(card, PlayerCard):
        return False
    if card.face_down and not player_profile(card).acts_face_down:
        return True
    return card.rotated


def can_move_to(board: Board, source: Position, destination: Position) -> bool:
    if source == destination:
        return False
    if not board.in_bounds(source) or not board.in_play(destination):
        return False

    dr = destination[0] - source[0]
    dc = destination[1] - source[1]
    if max(abs(dr), abs(dc)) != 1:
        return False

    mover = board.base(source)
    if not isinstance(mover, PlayerCard):
        return False

    target = board.base(destination)
    if _blocks_move(mover) or _blocks_move(target):
        return False

    if dr != 0 and dc != 0:
        flank_a = (source[0], destination[1])
        flank_b = (destination[0], source[1])
        if board.has_enemy(flank_a) and board.has_enemy(flank_b):
            return False

    if is_enemy(target):
        return False
    if board.overlay(destination) is not None:
        return False
    return True
