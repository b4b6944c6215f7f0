from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from skirmish.engine.abilities import enemy_ability_for, player_ability_for
from skirmish.engine.types import CardCatalog, EnemyTemplate, PlayerTemplate

logger = logging.getLogger(__name__)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_bool(obj: Mapping[str, object], key: str) -> bool:
    v = obj.get(key)
    if not isinstance(v, bool):
        raise ContentError(f"Expected bool for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _parse_groups(raw: list[object], key: str) -> tuple[tuple[int, ...], ...]:
    groups: list[tuple[int, ...]] = []
    for group in raw:
        if not isinstance(group, list) or not all(isinstance(n, int) for n in group):
            raise ContentError(f"{key} must be a list of integer lists")
        groups.append(tuple(group))
    return tuple(groups)


def _parse_positions(raw: list[object]) -> tuple[int | None, ...]:
    out: list[int | None] = []
    for p in raw:
        if p is not None and not isinstance(p, int):
            raise ContentError("positions must hold integers or null")
        out.append(p)
    return tuple(out)


def parse_catalog(raw: object) -> CardCatalog:
    if not isinstance(raw, dict):
        raise ContentError("cards.json must be an object")

    players: list[PlayerTemplate] = []
    for item in _require_list(raw, "players"):
        if not isinstance(item, dict):
            continue
        name = _require_str(item, "name")
        players.append(
            PlayerTemplate(name=name, strength=_require_int(item, "strength"), ability=player_ability_for(name))
        )

    enemies: list[EnemyTemplate] = []
    for item in _require_list(raw, "enemies"):
        if not isinstance(item, dict):
            continue
        name = _require_str(item, "name")
        enemies.append(
            EnemyTemplate(
                name=name,
                strength=_require_int(item, "strength"),
                positions=_parse_positions(_require_list(item, "positions")),
                can_stack=_require_bool(item, "can_stack"),
                discard_end_of_round=_require_bool(item, "discard_end_of_round"),
                hits_face_down=_require_bool(item, "hits_face_down"),
                ability=enemy_ability_for(name),
            )
        )

    names = [p.name for p in players]
    if len(set(names)) != len(names):
        raise ContentError("Player card names must be unique")

    return CardCatalog(
        row_groups=_parse_groups(_require_list(raw, "rows"), "rows"),
        column_groups=_parse_groups(_require_list(raw, "columns"), "columns"),
        players=tuple(players),
        enemies=tuple(enemies),
    )


class CatalogService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_catalog(self, filename: str = "cards.json") -> CardCatalog:
        cards_path = self._data_dir / filename
        raw = _load_json(cards_path)
        schema = _load_json(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))
        catalog = parse_catalog(raw)
        logger.debug(
            "Loaded %d player and %d enemy templates from %s",
            len(catalog.players),
            len(catalog.enemies),
            cards_path,
        )
        return catalog

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_catalog()
