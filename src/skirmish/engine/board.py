from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterator

from .types import Card, EngineError, EnemyCard, GameConfig, PlayerCard, Position

BASE = 0
OVERLAY = 1

Cell = tuple[Card | None, Card | None]
Predicate = Callable[[Card], bool]

EMPTY_CELL: Cell = (None, None)

ORTHOGONAL: tuple[Position, ...] = ((-1, 0), (0, -1), (0, 1), (1, 0))
DIAGONAL: tuple[Position, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))


def is_player(card: Card | None) -> bool:
    return isinstance(card, PlayerCard)


def is_enemy(card: Card | None) -> bool:
    return isinstance(card, EnemyCard)


def is_face_up_player(card: Card | None) -> bool:
    return isinstance(card, PlayerCard) and not card.face_down


class Board:
    """Grid of two-slot cells.

    Cells are tuples and cards are frozen, so every mutation swaps in a new
    cell value. Nothing reachable from a cloned board can change under it.
    """

    def __init__(self, rows: int, columns: int, cells: list[list[Cell]] | None = None) -> None:
        self.rows = rows
        self.columns = columns
        if cells is None:
            cells = [[EMPTY_CELL for _ in range(columns)] for _ in range(rows)]
        self._cells = cells

    @classmethod
    def empty(cls, config: GameConfig) -> "Board":
        return cls(config.rows, config.columns)

    def clone(self) -> "Board":
        return Board(self.rows, self.columns, [list(row) for row in self._cells])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def in_bounds(self, pos: Position) -> bool:
        r, c = pos
        return 0 <= r < self.rows and 0 <= c < self.columns

    def in_play(self, pos: Position) -> bool:
        """True for cells a card may be moved to or attacked in (column 0 is the margin)."""
        r, c = pos
        return 0 <= r < self.rows and 1 <= c < self.columns

    def cell(self, pos: Position) -> Cell:
        if not self.in_bounds(pos):
            raise EngineError(f"Position off the board: {pos}")
        return self._cells[pos[0]][pos[1]]

    def base(self, pos: Position) -> Card | None:
        return self.cell(pos)[BASE]

    def overlay(self, pos: Position) -> Card | None:
        return self.cell(pos)[OVERLAY]

    def place(self, pos: Position, slot: int, card: Card | None) -> Card | None:
        """Put a copy of `card` at `pos`/`slot` with its position refreshed.

        Returns the copy actually stored (or None when clearing the slot).
        """
        old = self.cell(pos)
        stored = replace(card, position=pos) if card is not None else None
        new = list(old)
        new[slot] = stored
        self._cells[pos[0]][pos[1]] = (new[BASE], new[OVERLAY])
        return stored

    def remove(self, pos: Position, slot: int = BASE) -> Card | None:
        removed = self.cell(pos)[slot]
        self.place(pos, slot, None)
        return removed

    def update(self, card: Card) -> Card:
        """Store a changed version of a card that is already on the board."""
        pos, slot = self.locate(card.id)
        stored = self.place(pos, slot, card)
        assert stored is not None
        return stored

    def positions(self) -> Iterator[Position]:
        for r in range(self.rows):
            for c in range(self.columns):
                yield (r, c)

    def slots(self) -> Iterator[tuple[Position, int, Card]]:
        for pos in self.positions():
            for slot, card in enumerate(self.cell(pos)):
                if card is not None:
                    yield pos, slot, card

    def find(self, card_id: str) -> tuple[Position, int] | None:
        for pos, slot, card in self.slots():
            if card.id == card_id:
                return pos, slot
        return None

    def locate(self, card_id: str) -> tuple[Position, int]:
        found = self.find(card_id)
        if found is None:
            raise EngineError(f"Card {card_id!r} is not on the board")
        return found

    def get(self, card_id: str) -> Card:
        pos, slot = self.locate(card_id)
        card = self.cell(pos)[slot]
        assert card is not None
        return card

    def players(self) -> list[PlayerCard]:
        return [c for _, slot, c in self.slots() if slot == BASE and isinstance(c, PlayerCard)]

    def enemies(self, *, include_overlay: bool = True) -> list[EnemyCard]:
        return [
            c
            for _, slot, c in self.slots()
            if isinstance(c, EnemyCard) and (include_overlay or slot == BASE)
        ]

    def row(self, r: int) -> list[Card]:
        return [cell[BASE] for cell in self._cells[r] if cell[BASE] is not None]

    def has_enemy(self, pos: Position) -> bool:
        return any(is_enemy(card) for card in self.cell(pos))

    def _neighbours(self, pos: Position, offsets: tuple[Position, ...], predicate: Predicate | None) -> list[Card]:
        out: list[Card] = []
        for dr, dc in offsets:
            adj = (pos[0] + dr, pos[1] + dc)
            if not self.in_play(adj):
                continue
            card = self.base(adj)
            if card is None:
                continue
            if predicate is None or predicate(card):
                out.append(card)
        return out

    def adjacent(self, pos: Position, predicate: Predicate | None = None) -> list[Card]:
        """Base-slot cards in the four orthogonal neighbours of `pos`."""
        return self._neighbours(pos, ORTHOGONAL, predicate)

    def has_adjacent(self, pos: Position, predicate: Predicate | None = None) -> bool:
        return len(self.adjacent(pos, predicate)) > 0

    def diagonal(self, pos: Position, predicate: Predicate | None = None) -> list[Card]:
        return self._neighbours(pos, DIAGONAL, predicate)
