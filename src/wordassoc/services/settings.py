from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Mapping, Sequence

from wordassoc.engine.types import DIFFICULTIES, Difficulty, ItemContent

CardContentType = Literal["words", "images", "both"]
CARD_CONTENT_TYPES: tuple[CardContentType, ...] = ("words", "images", "both")


def shows(preference: CardContentType, content: ItemContent) -> bool:
    """Whether a card with ``content`` is visible under the content-type preference."""
    if preference == "both":
        return True
    if preference == "words":
        return content.type == "word"
    return content.type == "image_name"


@dataclass(frozen=True)
class ColorData:
    red: float
    green: float
    blue: float
    opacity: float = 1.0


@dataclass(frozen=True)
class AppearanceTheme:
    id: str
    name: str
    background_color: ColorData
    card_back_color: ColorData


DEFAULT_THEMES: tuple[AppearanceTheme, ...] = (
    AppearanceTheme(
        id="classic",
        name="Classic",
        background_color=ColorData(0.8, 1.0, 0.8),
        card_back_color=ColorData(1.0, 1.0, 1.0),
    ),
    AppearanceTheme(
        id="night",
        name="Night",
        background_color=ColorData(0.0, 0.0, 0.0),
        card_back_color=ColorData(0.3, 0.3, 0.3),
    ),
    AppearanceTheme(
        id="nature",
        name="Nature",
        background_color=ColorData(0.7, 0.85, 1.0),
        card_back_color=ColorData(0.6, 0.8, 0.6),
    ),
)


@dataclass
class GameSettings:
    difficulty: Difficulty = "easy"
    card_content_type: CardContentType = "both"
    selected_theme_id: str | None = field(default=DEFAULT_THEMES[0].id)

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "GameSettings":
        difficulty = d.get("difficulty", "easy")
        content_type = d.get("card_content_type", "both")
        theme_id = d.get("selected_theme_id")
        return GameSettings(
            difficulty=difficulty if difficulty in DIFFICULTIES else "easy",  # type: ignore[arg-type]
            card_content_type=content_type if content_type in CARD_CONTENT_TYPES else "both",  # type: ignore[arg-type]
            selected_theme_id=theme_id if isinstance(theme_id, str) else None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "difficulty": self.difficulty,
            "card_content_type": self.card_content_type,
            "selected_theme_id": self.selected_theme_id,
        }


class SettingsStore:
    """User preferences persisted to a small JSON file. Holds no game progress."""

    def __init__(self, path: Path, themes: Sequence[AppearanceTheme] = DEFAULT_THEMES) -> None:
        if not themes:
            raise ValueError("At least one theme is required.")
        self._path = path
        self.themes = tuple(themes)
        self.settings = self._load_or_create()

    def _load_or_create(self) -> GameSettings:
        if not self._path.exists():
            settings = GameSettings(selected_theme_id=self.themes[0].id)
            self._write(settings)
            return settings
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return GameSettings(selected_theme_id=self.themes[0].id)
        if not isinstance(raw, dict):
            return GameSettings(selected_theme_id=self.themes[0].id)
        return GameSettings.from_dict(raw)

    def _write(self, settings: GameSettings) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")

    def save(self) -> None:
        self._write(self.settings)

    @property
    def difficulty(self) -> Difficulty:
        return self.settings.difficulty

    def set_difficulty(self, difficulty: Difficulty) -> None:
        if difficulty not in DIFFICULTIES:
            return
        self.settings.difficulty = difficulty
        self.save()

    def set_card_content_type(self, value: CardContentType) -> None:
        if value not in CARD_CONTENT_TYPES:
            return
        self.settings.card_content_type = value
        self.save()

    def select_theme(self, theme_id: str) -> None:
        if not any(t.id == theme_id for t in self.themes):
            return
        self.settings.selected_theme_id = theme_id
        self.save()

    def current_theme(self) -> AppearanceTheme:
        for t in self.themes:
            if t.id == self.settings.selected_theme_id:
                return t
        return self.themes[0]
