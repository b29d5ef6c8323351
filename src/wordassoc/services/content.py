from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from wordassoc.engine.generator import make_content, make_id
from wordassoc.engine.types import (
    Category,
    ContentPool,
    Difficulty,
    Item,
    Level,
    TagDefinition,
    WordDefinition,
)

# Move budgets for hand-authored levels that omit base_moves.
AUTHORED_MAX_MOVES: dict[Difficulty, int] = {"easy": 30, "medium": 20, "hard": 12}


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
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _parse_tag(raw: Mapping[str, object]) -> TagDefinition:
    return TagDefinition(
        journey=_require_str(raw, "journey"),  # type: ignore[arg-type]
        tag_key=_require_str(raw, "tag_key"),
        min_items=_require_int(raw, "min_items"),
        difficulty_hint=_optional_str(raw, "difficulty_hint"),  # type: ignore[arg-type]
        title_he=_require_str(raw, "title_he"),
        title_en=_require_str(raw, "title_en"),
    )


def _parse_word(raw: Mapping[str, object]) -> WordDefinition:
    tags = tuple(t for t in _require_list(raw, "tags") if isinstance(t, str))
    return WordDefinition(
        journey=_require_str(raw, "journey"),  # type: ignore[arg-type]
        content_type=_require_str(raw, "content_type"),  # type: ignore[arg-type]
        tags=tags,
        value_he=_require_str(raw, "value_he"),
        value_en=_require_str(raw, "value_en"),
    )


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, name: str) -> object:
        path = self._data_dir / f"{name}.json"
        schema = _load_json(self._schema_dir / f"{name}.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        return raw

    def load_tags(self) -> tuple[TagDefinition, ...]:
        raw = self._load_validated("tags")
        if not isinstance(raw, dict):
            raise ContentError("tags.json must be an object")
        tags: list[TagDefinition] = []
        for item in _require_list(raw, "tags"):
            if isinstance(item, dict):
                tags.append(_parse_tag(item))
        return tuple(tags)

    def load_words(self) -> tuple[WordDefinition, ...]:
        raw = self._load_validated("words")
        if not isinstance(raw, dict):
            raise ContentError("words.json must be an object")
        words: list[WordDefinition] = []
        for item in _require_list(raw, "words"):
            if isinstance(item, dict):
                words.append(_parse_word(item))
        return tuple(words)

    def load_pool(self) -> ContentPool:
        return ContentPool(tags=self.load_tags(), words=self.load_words())

    def load_levels(self, rng: random.Random | None = None) -> list[Level]:
        """Hand-authored levels from levels.json, each with fresh ids."""
        raw = self._load_validated("levels")
        if not isinstance(raw, dict):
            raise ContentError("levels.json must be an object")

        levels: list[Level] = []
        for d in _require_list(raw, "levels"):
            if not isinstance(d, dict):
                continue
            difficulty = _require_str(d, "difficulty")
            category_ids: dict[str, str] = {}
            categories: list[Category] = []
            for c in _require_list(d, "categories"):
                if not isinstance(c, dict):
                    continue
                cid = make_id(rng)
                category_ids[_require_str(c, "key")] = cid
                categories.append(Category(id=cid, title=_require_str(c, "title")))

            items: list[Item] = []
            for it in _require_list(d, "items"):
                if not isinstance(it, dict):
                    continue
                cid = category_ids.get(_require_str(it, "category_key"))
                if cid is None:
                    # unknown category key: skip the item, keep the level
                    continue
                content = it.get("content")
                if not isinstance(content, dict):
                    raise ContentError("item.content must be an object")
                items.append(
                    Item(
                        id=make_id(rng),
                        content=make_content(_require_str(content, "type"), _require_str(content, "value")),
                        correct_category_id=cid,
                    )
                )

            moves = d.get("base_moves")
            levels.append(
                Level(
                    id=make_id(rng),
                    journey=_require_str(d, "journey"),  # type: ignore[arg-type]
                    difficulty=difficulty,  # type: ignore[arg-type]
                    categories=tuple(categories),
                    items=tuple(items),
                    base_moves=moves if isinstance(moves, int) else AUTHORED_MAX_MOVES[difficulty],  # type: ignore[index]
                )
            )
        return levels

    def levels_for(self, journey: str, difficulty: str, rng: random.Random | None = None) -> list[Level]:
        return [lv for lv in self.load_levels(rng) if lv.journey == journey and lv.difficulty == difficulty]

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_pool()
        _ = self.load_levels()
