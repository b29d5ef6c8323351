from __future__ import annotations

import random
import uuid
from dataclasses import dataclass

from .types import (
    Category,
    ContentPool,
    Difficulty,
    DifficultyHint,
    ImageContent,
    Item,
    ItemContent,
    Journey,
    Language,
    Level,
    TagDefinition,
    WordDefinition,
    WordContent,
)


@dataclass(frozen=True)
class GenerationParams:
    categories_count: int
    items_per_category: int
    base_moves: int


GENERATION_PARAMS: dict[Difficulty, GenerationParams] = {
    "easy": GenerationParams(categories_count=2, items_per_category=4, base_moves=30),
    "medium": GenerationParams(categories_count=3, items_per_category=4, base_moves=32),
    "hard": GenerationParams(categories_count=4, items_per_category=4, base_moves=34),
}


def make_id(rng: random.Random | None = None) -> str:
    """Fresh identifier. Seeded generators get reproducible ids."""
    if rng is None:
        return str(uuid.uuid4())
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def make_content(kind: str, value: str) -> ItemContent:
    if kind == "image_name":
        return ImageContent(value=value)
    return WordContent(value=value)


def hint_matches(hint: DifficultyHint | None, difficulty: Difficulty) -> bool:
    # Advisory only: every hint is currently treated as compatible.
    if hint is None or hint == difficulty:
        return True
    return True


class LevelGenerator:
    """Builds levels from the tag/word pool of a single journey."""

    def __init__(self, pool: ContentPool, rng: random.Random | None = None) -> None:
        self.pool = pool
        self.rng = rng or random.Random()

    def eligible_tags(self, journey: Journey, difficulty: Difficulty) -> list[TagDefinition]:
        params = GENERATION_PARAMS[difficulty]
        words = self.pool.words_for(journey)
        out: list[TagDefinition] = []
        for tag in self.pool.tags_for(journey):
            count = sum(1 for w in words if tag.tag_key in w.tags)
            if count >= params.items_per_category and count >= tag.min_items:
                out.append(tag)
        return out

    def generate_level(
        self,
        journey: Journey,
        difficulty: Difficulty,
        language: Language,
        base_moves: int | None = None,
    ) -> Level | None:
        """Return a freshly generated level, or None when the journey has no usable tags."""
        params = GENERATION_PARAMS[difficulty]
        words = self.pool.words_for(journey)

        eligible = self.eligible_tags(journey, difficulty)
        self.rng.shuffle(eligible)
        if eligible:
            preferred = [t for t in eligible if hint_matches(t.difficulty_hint, difficulty)]
            if preferred:
                eligible = preferred
        if not eligible:
            return None

        chosen = eligible[: params.categories_count]
        if not chosen:
            return None

        categories: list[Category] = []
        items: list[Item] = []
        for tag in chosen:
            category = Category(id=make_id(self.rng), title=tag.title(language))
            categories.append(category)

            candidates: list[WordDefinition] = [w for w in words if tag.tag_key in w.tags]
            self.rng.shuffle(candidates)
            for w in candidates[: params.items_per_category]:
                items.append(
                    Item(
                        id=make_id(self.rng),
                        content=make_content(w.content_type, w.value(language)),
                        correct_category_id=category.id,
                    )
                )

        # Hide grouping from the dealer
        self.rng.shuffle(items)

        return Level(
            id=make_id(self.rng),
            journey=journey,
            difficulty=difficulty,
            categories=tuple(categories),
            items=tuple(items),
            base_moves=params.base_moves if base_moves is None else base_moves,
        )
