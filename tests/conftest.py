from __future__ import annotations

from dataclasses import replace
from typing import Callable

import pytest

from skirmish.engine.board import Board
from skirmish.engine.deck import new_enemy_cards, new_player_card
from skirmish.engine.game import new_game
from skirmish.engine.state import GameState
from skirmish.engine.types import CardCatalog, EnemyCard, Phase, PlayerCard
from skirmish.paths import get_paths
from skirmish.services.content import CatalogService


def _load_catalog() -> CardCatalog:
    paths = get_paths()
    return CatalogService(paths.data_dir, paths.schema_dir).load_catalog()


@pytest.fixture(scope="session")
def catalog() -> CardCatalog:
    return _load_catalog()


@pytest.fixture
def blank_state(catalog: CardCatalog) -> Callable[..., GameState]:
    """Factory for a game with an empty board and deck in a chosen phase."""

    def make(phase: Phase = "maneuver") -> GameState:
        state = new_game(catalog, seed=0)
        state.board = Board.empty(state.config)
        state.deck = []
        state.discard = []
        state.phase = phase
        return state

    return make


@pytest.fixture
def player(catalog: CardCatalog) -> Callable[..., PlayerCard]:
    def make(name: str, **changes: object) -> PlayerCard:
        return replace(new_player_card(catalog.player(name)), **changes)

    return make


@pytest.fixture
def enemy(catalog: CardCatalog) -> Callable[..., EnemyCard]:
    counter = {"n": 0}

    def make(name: str, **changes: object) -> EnemyCard:
        template = catalog.enemy(name)
        card = new_enemy_cards(template, 99)[0]
        counter["n"] += 1
        return replace(card, id=f"test-{name}-{counter['n']}", **changes)

    return make
