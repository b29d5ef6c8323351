"""Deterministic, headless game engine for Word Association Solitaire.

IMPORTANT: This package must never import a UI toolkit.
"""

from .actions import DealAction, MatchAction
from .board import BoardConfig, BoardState, StepResult, attempt_match, deal_from_draw_pile, new_board, reset, step
from .generator import GENERATION_PARAMS, LevelGenerator
from .types import ContentPool, Difficulty, Journey, Language, Level

__all__ = [
    "BoardConfig",
    "BoardState",
    "ContentPool",
    "DealAction",
    "Difficulty",
    "GENERATION_PARAMS",
    "Journey",
    "Language",
    "Level",
    "LevelGenerator",
    "MatchAction",
    "StepResult",
    "attempt_match",
    "deal_from_draw_pile",
    "new_board",
    "reset",
    "step",
]
