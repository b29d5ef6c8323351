from __future__ import annotations

from typing import Mapping

from .actions import Action, DealAction, MatchAction
from .board import BoardState
from .types import Category, ImageContent, Item, ItemContent, Level, WordContent


def content_to_dict(c: ItemContent) -> dict[str, object]:
    return {"type": c.type, "value": c.value}


def content_from_dict(d: Mapping[str, object]) -> ItemContent:
    t = d.get("type")
    v = d.get("value")
    if not isinstance(v, str):
        raise ValueError("content.value must be a string")
    if t == "word":
        return WordContent(value=v)
    if t == "image_name":
        return ImageContent(value=v)
    raise ValueError(f"Unknown content type: {t!r}")


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, DealAction):
        return {"type": "deal"}
    if isinstance(a, MatchAction):
        return {"type": "match", "item_id": a.item_id, "category_id": a.category_id}
    # should be unreachable
    return {"type": "unknown"}


def level_to_dict(level: Level) -> dict[str, object]:
    return {
        "id": level.id,
        "journey": level.journey,
        "difficulty": level.difficulty,
        "base_moves": level.base_moves,
        "categories": [{"id": c.id, "title": c.title} for c in level.categories],
        "items": [
            {
                "id": it.id,
                "content": content_to_dict(it.content),
                "correct_category_id": it.correct_category_id,
            }
            for it in level.items
        ],
    }


def level_from_dict(d: Mapping[str, object]) -> Level:
    categories: list[Category] = []
    raw_cats = d.get("categories", [])
    if isinstance(raw_cats, list):
        for c in raw_cats:
            if isinstance(c, dict):
                categories.append(Category(id=str(c["id"]), title=str(c["title"])))
    items: list[Item] = []
    raw_items = d.get("items", [])
    if isinstance(raw_items, list):
        for it in raw_items:
            if not isinstance(it, dict):
                continue
            items.append(
                Item(
                    id=str(it["id"]),
                    content=content_from_dict(it["content"]),
                    correct_category_id=str(it["correct_category_id"]),
                )
            )
    return Level(
        id=str(d["id"]),
        journey=d["journey"],  # type: ignore[arg-type]
        difficulty=d["difficulty"],  # type: ignore[arg-type]
        categories=tuple(categories),
        items=tuple(items),
        base_moves=int(d["base_moves"]),  # type: ignore[arg-type]
    )


def snapshot(state: BoardState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current board."""
    return {
        "seed": state.seed,
        "level_id": state.level.id,
        "status": state.status,
        "feedback": state.feedback,
        "moves_left": state.moves_left,
        "matched_ids": list(state.matched_ids),
        "tableau": [list(col) for col in state.tableau],
        "draw_pile": list(state.draw_pile),
        "waste_pile": list(state.waste_pile),
        "face_up_ids": list(state.face_up_ids),
        "action_log": [action_to_dict(a) for a in state.action_log],
    }
