from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DealAction:
    pass


@dataclass(frozen=True)
class MatchAction:
    item_id: str
    category_id: str


Action = DealAction | MatchAction
