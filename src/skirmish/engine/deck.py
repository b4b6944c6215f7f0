from __future__ import annotations

import random
from dataclasses import replace
from typing import Sequence

from .abilities import refresh_braced_strength
from .board import BASE, OVERLAY, Board
from .types import (
    Card,
    CardCatalog,
    EnemyCard,
    EnemyTemplate,
    GameConfig,
    PlayerCard,
    PlayerTemplate,
    Position,
)

Event = dict[str, object]


def new_player_card(template: PlayerTemplate) -> PlayerCard:
    return PlayerCard(
        id=template.name,
        name=template.name,
        strength=template.strength,
        ability=template.ability,
        effective_strength=template.strength,
    )


def new_enemy_cards(template: EnemyTemplate, group_index: int) -> list[EnemyCard]:
    """One card per declared position; ids stay stable across shuffles."""
    return [
        EnemyCard(
            id=f"enemy{group_index}:{copy_index}",
            name=template.name,
            strength=template.strength,
            ability=template.ability,
            deploy_column=column,
            can_stack=template.can_stack,
            discard_end_of_round=template.discard_end_of_round,
            hits_face_down=template.hits_face_down,
            health=template.strength,
        )
        for copy_index, column in enumerate(template.positions)
    ]


def build_deck(catalog: CardCatalog, rng: random.Random) -> list[EnemyCard]:
    deck: list[EnemyCard] = []
    for i, template in enumerate(catalog.enemies):
        deck.extend(new_enemy_cards(template, i))
    rng.shuffle(deck)
    return deck


def _group_index(groups: Sequence[Sequence[int]], number: int) -> int:
    for i, group in enumerate(groups):
        if number in group:
            return i
    raise ValueError(f"Player number {number} is missing from the deal groups")


def check_catalog(catalog: CardCatalog, config: GameConfig) -> None:
    """Raise ValueError if the catalog cannot be laid out on this board."""
    if len(catalog.row_groups) > config.rows:
        raise ValueError(f"At most {config.rows} row groups are allowed.")
    if len(catalog.column_groups) > config.columns - 1:
        raise ValueError(f"At most {config.columns - 1} column groups are allowed.")

    seen: set[Position] = set()
    for number in range(1, len(catalog.players) + 1):
        cell = (_group_index(catalog.row_groups, number), _group_index(catalog.column_groups, number))
        if cell in seen:
            raise ValueError(f"Player number {number} shares a cell with another player.")
        seen.add(cell)

    for template in catalog.enemies:
        for column in template.positions:
            if column is not None and not 0 <= column < config.columns:
                raise ValueError(f"{template.name} deploys outside the board (column {column}).")


def build_board(
    catalog: CardCatalog, config: GameConfig, rng: random.Random
) -> tuple[Board, PlayerCard | None]:
    """Deal the starting player layout.

    Returns the board and the player card left out of the game.
    """
    board = Board.empty(config)
    if not catalog.players:
        return board, None

    row_groups = list(catalog.row_groups)
    column_groups = list(catalog.column_groups)
    rng.shuffle(row_groups)
    rng.shuffle(column_groups)

    players = [new_player_card(t) for t in catalog.players]
    rng.shuffle(players)

    for i, card in enumerate(players):
        number = i + 1
        pos = (_group_index(row_groups, number), _group_index(column_groups, number) + 1)
        board.place(pos, BASE, card)

    # The last card dealt sits out, and its neighbours start face-down.
    last = players[-1]
    last_pos = (
        _group_index(row_groups, len(players)),
        _group_index(column_groups, len(players)) + 1,
    )
    board.remove(last_pos)
    for neighbour in board.adjacent(last_pos):
        if isinstance(neighbour, PlayerCard):
            board.update(replace(neighbour, face_down=True))

    refresh_braced_strength(board)
    return board, last


def find_deploy_column(board: Board, row: int, column: int, config: GameConfig) -> int:
    """Nearest free column in `row`, searching towards the board centre first.

    Falls back to `column` itself when the whole row is occupied.
    """
    direction = -1 if column > config.centre else 1
    forward_done = False
    backward_done = False
    k = 1
    while not (forward_done and backward_done):
        for sign in (direction, -direction):
            candidate = column + k * sign
            if not 1 <= candidate < config.columns:
                if sign == direction:
                    forward_done = True
                else:
                    backward_done = True
                continue
            if board.base((row, candidate)) is None:
                return candidate
        k += 1
    return column


def deal_enemies(
    board: Board, deck: list[EnemyCard], config: GameConfig, discard: list[Card] | None = None
) -> list[Event]:
    """Deal one card from the top of the deck into each row."""
    events: list[Event] = []
    for row in range(config.rows):
        card = deck.pop()
        column = card.deploy_column

        if column is None:
            if discard is not None:
                discard.append(card)
            events.append({"type": "ENEMY_DISCARDED", "card_id": card.id, "row": row})
            continue

        occupied = board.base((row, column)) is not None
        if occupied and not card.can_stack:
            column = find_deploy_column(board, row, column, config)
            occupied = board.base((row, column)) is not None

        # Non-stacking cards overwrite whatever is still in the base slot.
        slot = OVERLAY if card.can_stack and occupied else BASE
        board.place((row, column), slot, card)
        events.append(
            {"type": "ENEMY_DEALT", "card_id": card.id, "row": row, "column": column, "slot": slot}
        )
    return events
