from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Journey = Literal["history", "nature", "philosophy", "movies", "religion"]
Difficulty = Literal["easy", "medium", "hard"]
DifficultyHint = Difficulty
Language = Literal["he", "en"]
ContentKind = Literal["word", "image_name"]

JOURNEYS: tuple[Journey, ...] = ("history", "nature", "philosophy", "movies", "religion")
DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "medium", "hard")


def _pick(language: Language, he: str, en: str) -> str:
    if language == "he":
        return he or en
    return en or he


@dataclass(frozen=True)
class TagDefinition:
    journey: Journey
    tag_key: str
    min_items: int
    title_he: str
    title_en: str
    difficulty_hint: DifficultyHint | None = None

    def title(self, language: Language) -> str:
        return _pick(language, self.title_he, self.title_en)


@dataclass(frozen=True)
class WordDefinition:
    journey: Journey
    content_type: ContentKind
    tags: tuple[str, ...]
    value_he: str
    value_en: str

    def value(self, language: Language) -> str:
        return _pick(language, self.value_he, self.value_en)


@dataclass(frozen=True)
class ContentPool:
    """Immutable tag/word pool shared by every level generator."""

    tags: tuple[TagDefinition, ...]
    words: tuple[WordDefinition, ...]

    def tags_for(self, journey: Journey) -> list[TagDefinition]:
        return [t for t in self.tags if t.journey == journey]

    def words_for(self, journey: Journey) -> list[WordDefinition]:
        return [w for w in self.words if w.journey == journey]


@dataclass(frozen=True)
class Category:
    id: str
    title: str


@dataclass(frozen=True)
class WordContent:
    value: str
    type: Literal["word"] = "word"


@dataclass(frozen=True)
class ImageContent:
    value: str
    type: Literal["image_name"] = "image_name"


ItemContent = WordContent | ImageContent


@dataclass(frozen=True)
class Item:
    id: str
    content: ItemContent
    correct_category_id: str


@dataclass(frozen=True)
class Level:
    id: str
    journey: Journey
    difficulty: Difficulty
    categories: tuple[Category, ...]
    items: tuple[Item, ...]
    base_moves: int

    def item(self, item_id: str) -> Item | None:
        for it in self.items:
            if it.id == item_id:
                return it
        return None

    def category(self, category_id: str) -> Category | None:
        for c in self.categories:
            if c.id == category_id:
                return c
        return None
