from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Literal

from .actions import Action, DealAction, MatchAction
from .types import Item, Level

Status = Literal["playing", "won", "lost"]
Feedback = Literal["none", "correct", "wrong"]

Event = dict[str, object]


@dataclass(frozen=True)
class BoardConfig:
    columns: int = 3
    cards_per_column: int = 3

    def __post_init__(self) -> None:
        if self.columns <= 0:
            raise ValueError("columns must be positive")
        if self.cards_per_column < 0:
            raise ValueError("cards_per_column must not be negative")


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class BoardState:
    level: Level
    config: BoardConfig
    seed: int | None
    rng: random.Random
    moves_left: int = 0
    status: Status = "playing"
    feedback: Feedback = "none"
    matched_ids: list[str] = field(default_factory=list)  # match order, last = most recent
    tableau: list[list[str]] = field(default_factory=list)  # bottom -> top
    draw_pile: list[str] = field(default_factory=list)
    waste_pile: list[str] = field(default_factory=list)  # last = most recently dealt
    face_up_ids: list[str] = field(default_factory=list)
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    # -------- Derived queries --------
    @property
    def total_items(self) -> int:
        return len(self.level.items)

    @property
    def matched_count(self) -> int:
        return len(self.matched_ids)

    def is_matched(self, item_id: str) -> bool:
        return item_id in self.matched_ids

    def is_face_up(self, item_id: str) -> bool:
        return item_id in self.face_up_ids

    def item(self, item_id: str) -> Item | None:
        return self.level.item(item_id)

    def draw_pile_count(self) -> int:
        return sum(1 for i in self.draw_pile if not self.is_matched(i))

    def waste_items(self) -> list[Item]:
        out: list[Item] = []
        for i in self.waste_pile:
            if self.is_matched(i):
                continue
            it = self.level.item(i)
            if it is not None:
                out.append(it)
        return out

    def matched_items(self, category_id: str) -> list[Item]:
        """Items matched into ``category_id``, oldest first; the last one is the latest match."""
        out: list[Item] = []
        for i in self.matched_ids:
            it = self.level.item(i)
            if it is not None and it.correct_category_id == category_id:
                out.append(it)
        return out

    def column_tops(self) -> list[str | None]:
        return [col[-1] if col else None for col in self.tableau]

    def waste_top(self) -> str | None:
        """Most recently dealt unmatched waste card, the only one a player can take."""
        for i in reversed(self.waste_pile):
            if not self.is_matched(i):
                return i
        return None

    def is_playable(self, item_id: str) -> bool:
        """True for face-up tableau tops and the top of the waste pile."""
        if self.status != "playing" or self.is_matched(item_id):
            return False
        if item_id == self.waste_top():
            return True
        return item_id in self.column_tops() and self.is_face_up(item_id)


def _check_loss(state: BoardState) -> None:
    if state.status != "playing":
        return
    if state.moves_left <= 0 and state.matched_count < state.total_items:
        state.status = "lost"
        state.event_log.append(
            {"type": "GAME_LOST", "moves_left": state.moves_left, "matched": state.matched_count}
        )


def _draw_count(state: BoardState) -> int:
    if state.level.difficulty == "easy":
        return 1
    return state.config.columns


def reset(state: BoardState, level: Level | None = None) -> None:
    """Discard all play state and deal ``level`` (or the current level) from scratch."""
    if level is not None:
        state.level = level
    cfg = state.config

    state.matched_ids = []
    state.status = "playing"
    state.feedback = "none"
    state.moves_left = state.level.base_moves
    state.waste_pile = []
    state.face_up_ids = []
    state.action_log = []
    state.event_log = []

    ids = [it.id for it in state.level.items]
    state.rng.shuffle(ids)

    state.tableau = []
    for _ in range(cfg.columns):
        column: list[str] = []
        for _ in range(cfg.cards_per_column):
            if not ids:
                break
            column.append(ids.pop(0))
        state.tableau.append(column)
    state.draw_pile = ids

    for column in state.tableau:
        if column:
            state.face_up_ids.append(column[-1])

    state.event_log.append(
        {
            "type": "BOARD_RESET",
            "level_id": state.level.id,
            "moves_left": state.moves_left,
            "draw_pile": len(state.draw_pile),
        }
    )


def deal_from_draw_pile(state: BoardState) -> StepResult:
    if state.status != "playing":
        return StepResult(ok=False, events=[], error="Game already ended.")
    start = len(state.event_log)

    available = [i for i in state.draw_pile if not state.is_matched(i)]
    if not available:
        _check_loss(state)
        return StepResult(ok=False, events=state.event_log[start:], error="Draw pile is empty.")

    state.moves_left -= 1

    dealt = available[: min(_draw_count(state), len(available))]
    state.draw_pile = [i for i in state.draw_pile if i not in dealt]
    state.waste_pile.extend(dealt)
    state.event_log.append(
        {"type": "CARDS_DEALT", "item_ids": list(dealt), "moves_left": state.moves_left}
    )

    _check_loss(state)
    return StepResult(ok=True, events=state.event_log[start:])


def _remove_matched(state: BoardState, item_id: str) -> None:
    for col_index, column in enumerate(state.tableau):
        if item_id not in column:
            continue
        column.remove(item_id)
        if item_id in state.face_up_ids:
            state.face_up_ids.remove(item_id)
        if column and column[-1] not in state.face_up_ids:
            state.face_up_ids.append(column[-1])
            state.event_log.append(
                {"type": "CARD_FLIPPED", "column": col_index, "item_id": column[-1]}
            )
        break

    if item_id in state.waste_pile:
        state.waste_pile.remove(item_id)
    # Matched ids never belong in the draw pile
    if item_id in state.draw_pile:
        state.draw_pile.remove(item_id)


def attempt_match(state: BoardState, item_id: str, category_id: str) -> StepResult:
    if state.status != "playing":
        return StepResult(ok=False, events=[], error="Game already ended.")
    item = state.level.item(item_id)
    if item is None:
        return StepResult(ok=False, events=[], error="Unknown item.")
    if state.level.category(category_id) is None:
        return StepResult(ok=False, events=[], error="Unknown category.")
    if state.is_matched(item_id):
        return StepResult(ok=False, events=[], error="Item already matched.")
    start = len(state.event_log)

    state.moves_left -= 1

    if item.correct_category_id == category_id:
        state.matched_ids.append(item.id)
        state.feedback = "correct"
        state.event_log.append(
            {
                "type": "MATCH_CORRECT",
                "item_id": item.id,
                "category_id": category_id,
                "moves_left": state.moves_left,
            }
        )
        _remove_matched(state, item.id)
    else:
        state.feedback = "wrong"
        state.event_log.append(
            {
                "type": "MATCH_WRONG",
                "item_id": item.id,
                "category_id": category_id,
                "moves_left": state.moves_left,
            }
        )

    if state.matched_count == state.total_items:
        state.status = "won"
        state.event_log.append({"type": "GAME_WON", "moves_left": state.moves_left})
        return StepResult(ok=True, events=state.event_log[start:])

    _check_loss(state)
    return StepResult(ok=True, events=state.event_log[start:])


def step(state: BoardState, action: Action) -> StepResult:
    """Apply a single action to the board.

    Mutates ``state`` in place; deterministic for a given (seed, level, action sequence).
    Invalid actions are logged but return ``ok=False`` and leave piles, moves and status untouched.
    """
    if state.status != "playing":
        return StepResult(ok=False, events=[], error="Game already ended.")

    state.action_log.append(action)

    if isinstance(action, DealAction):
        return deal_from_draw_pile(state)
    if isinstance(action, MatchAction):
        return attempt_match(state, action.item_id, action.category_id)
    return StepResult(ok=False, events=[], error="Unknown action.")


def new_board(level: Level, seed: int | None = None, config: BoardConfig | None = None) -> BoardState:
    cfg = config or BoardConfig()
    state = BoardState(level=level, config=cfg, seed=seed, rng=random.Random(seed))
    reset(state)
    return state


def replay(
    level: Level,
    seed: int,
    actions: Iterable[Action],
    config: BoardConfig | None = None,
) -> BoardState:
    state = new_board(level, seed=seed, config=config)
    for a in actions:
        step(state, a)
        if state.status != "playing":
            break
    return state
