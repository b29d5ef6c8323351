from __future__ import annotations

import random
from typing import Callable

from wordassoc.engine.actions import DealAction, MatchAction
from wordassoc.engine.board import BoardConfig, BoardState, StepResult, new_board, step
from wordassoc.engine.generator import LevelGenerator
from wordassoc.engine.types import Difficulty, Journey, Language, Level
from wordassoc.services.settings import SettingsStore
from wordassoc.services.telemetry import TelemetryService

Listener = Callable[[StepResult], None]


class GameSession:
    """One player's live game: current journey, level and board.

    Single-actor: callers must not drive the same session from several threads.
    """

    def __init__(
        self,
        generator: LevelGenerator,
        settings: SettingsStore,
        telemetry: TelemetryService | None = None,
        language: Language = "he",
        seed: int | None = None,
        board_config: BoardConfig | None = None,
    ) -> None:
        self.generator = generator
        self.settings = settings
        self.telemetry = telemetry
        self.language: Language = language
        self.board_config = board_config or BoardConfig()
        self._seeds = random.Random(seed)
        self._listeners: list[Listener] = []

        self.journey: Journey | None = None
        self.board: BoardState | None = None

    @property
    def level(self) -> Level | None:
        return self.board.level if self.board is not None else None

    @property
    def difficulty(self) -> Difficulty:
        return self.settings.difficulty

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, result: StepResult) -> None:
        for listener in list(self._listeners):
            listener(result)

    def _log(self, event_type: str, payload: dict[str, object]) -> None:
        if self.telemetry is not None:
            self.telemetry.log(event_type, payload)

    # -------- Level loading --------
    def start(self, journey: Journey) -> bool:
        """Generate and deal a level for ``journey``.

        Returns False when no level is available; the previous game is kept as is.
        """
        return self._load(journey, self.difficulty)

    def _load(self, journey: Journey, difficulty: Difficulty) -> bool:
        level = self.generator.generate_level(journey, difficulty, self.language)
        if level is None:
            self._log("level_unavailable", {"journey": journey, "difficulty": difficulty})
            return False

        self.journey = journey
        self.board = new_board(level, seed=self._seeds.randrange(1, 2**31 - 1), config=self.board_config)
        self._log(
            "level_generated",
            {
                "journey": journey,
                "difficulty": level.difficulty,
                "level_id": level.id,
                "categories": len(level.categories),
                "items": len(level.items),
                "base_moves": level.base_moves,
            },
        )
        self._notify(StepResult(ok=True, events=list(self.board.event_log)))
        return True

    def restart(self) -> bool:
        if self.journey is None:
            return False
        return self.start(self.journey)

    def change_difficulty(self, difficulty: Difficulty) -> bool:
        """Switch difficulty and deal a new level.

        The preference is saved only when a level exists for it; otherwise both
        the stored difficulty and the current game stay as they were.
        """
        if self.journey is None:
            self.settings.set_difficulty(difficulty)
            return False
        if not self._load(self.journey, difficulty):
            return False
        self.settings.set_difficulty(difficulty)
        return True

    # -------- Gameplay --------
    def _apply(self, action: DealAction | MatchAction) -> StepResult:
        if self.board is None:
            return StepResult(ok=False, events=[], error="No level loaded.")
        was_playing = self.board.status == "playing"
        result = step(self.board, action)
        if was_playing and self.board.status != "playing":
            self._log(
                "game_ended",
                {
                    "level_id": self.board.level.id,
                    "status": self.board.status,
                    "moves_left": self.board.moves_left,
                    "matched": self.board.matched_count,
                },
            )
        self._notify(result)
        return result

    def deal(self) -> StepResult:
        return self._apply(DealAction())

    def match(self, item_id: str, category_id: str) -> StepResult:
        return self._apply(MatchAction(item_id=item_id, category_id=category_id))
