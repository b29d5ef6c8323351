from __future__ import annotations

import random

import pytest

from wordassoc.engine.actions import DealAction, MatchAction
from wordassoc.engine.board import (
    BoardConfig,
    BoardState,
    attempt_match,
    deal_from_draw_pile,
    new_board,
    reset,
    step,
)
from wordassoc.engine.serialize import snapshot
from wordassoc.engine.types import Category, Item, Level, WordContent


def _level(n_items: int = 12, difficulty: str = "easy", base_moves: int = 30) -> Level:
    cats = (Category(id="cat_a", title="A"), Category(id="cat_b", title="B"))
    items = tuple(
        Item(id=f"item_{i}", content=WordContent(value=f"w{i}"), correct_category_id=cats[i % 2].id)
        for i in range(n_items)
    )
    return Level(
        id="lvl",
        journey="history",
        difficulty=difficulty,  # type: ignore[arg-type]
        categories=cats,
        items=items,
        base_moves=base_moves,
    )


def _wrong(state: BoardState, item_id: str) -> str:
    item = state.level.item(item_id)
    assert item is not None
    return "cat_b" if item.correct_category_id == "cat_a" else "cat_a"


def _right(state: BoardState, item_id: str) -> str:
    item = state.level.item(item_id)
    assert item is not None
    return item.correct_category_id


def _assert_partition(state: BoardState) -> None:
    held = [i for col in state.tableau for i in col] + state.draw_pile + state.waste_pile + state.matched_ids
    assert len(held) == len(set(held))
    assert set(held) == {it.id for it in state.level.items}


def test_reset_deals_three_columns_and_flips_tops() -> None:
    state = new_board(_level(12), seed=7)
    assert [len(c) for c in state.tableau] == [3, 3, 3]
    assert len(state.draw_pile) == 3
    assert state.waste_pile == []
    assert state.matched_ids == []
    assert state.face_up_ids == [c[-1] for c in state.tableau]
    assert state.moves_left == 30
    assert state.status == "playing"
    assert state.feedback == "none"
    _assert_partition(state)


def test_reset_with_few_items_leaves_empty_columns() -> None:
    state = new_board(_level(4), seed=1)
    assert [len(c) for c in state.tableau] == [3, 1, 0]
    assert state.draw_pile == []
    assert len(state.face_up_ids) == 2
    assert state.column_tops()[2] is None


def test_reset_discards_previous_play() -> None:
    state = new_board(_level(12), seed=3)
    top = state.tableau[0][-1]
    attempt_match(state, top, _right(state, top))
    deal_from_draw_pile(state)
    reset(state, _level(12, base_moves=10))
    assert state.matched_ids == []
    assert state.waste_pile == []
    assert state.moves_left == 10
    _assert_partition(state)


def test_board_config_rejects_zero_columns() -> None:
    with pytest.raises(ValueError):
        BoardConfig(columns=0)


def test_easy_deal_moves_one_card() -> None:
    state = new_board(_level(12, difficulty="easy"), seed=11)
    first = state.draw_pile[0]
    res = deal_from_draw_pile(state)
    assert res.ok
    assert state.waste_pile == [first]
    assert len(state.draw_pile) == 2
    assert state.moves_left == 29
    _assert_partition(state)


def test_medium_deal_moves_column_count_in_order() -> None:
    state = new_board(_level(14, difficulty="medium"), seed=11)
    draw = list(state.draw_pile)
    assert len(draw) == 5

    deal_from_draw_pile(state)
    assert state.waste_pile == draw[:3]
    assert state.moves_left == 29

    # only two left: draws what is available, still one move
    deal_from_draw_pile(state)
    assert state.waste_pile == draw
    assert state.draw_pile == []
    assert state.moves_left == 28
    _assert_partition(state)


def test_deal_from_empty_pile_is_free() -> None:
    state = new_board(_level(8), seed=2)
    assert state.draw_pile == []
    res = deal_from_draw_pile(state)
    assert not res.ok
    assert state.moves_left == 30
    assert state.status == "playing"


def test_correct_match_flips_next_card() -> None:
    state = new_board(_level(12), seed=5)
    column = list(state.tableau[0])
    top, below = column[-1], column[-2]
    assert not state.is_face_up(below)

    res = attempt_match(state, top, _right(state, top))
    assert res.ok
    assert state.feedback == "correct"
    assert state.matched_ids == [top]
    assert state.tableau[0] == column[:-1]
    assert not state.is_face_up(top)
    assert state.is_face_up(below)
    assert len(state.face_up_ids) == 3
    assert state.moves_left == 29
    assert any(e["type"] == "CARD_FLIPPED" for e in res.events)
    _assert_partition(state)


def test_flip_does_not_duplicate_face_up_id() -> None:
    state = new_board(_level(12), seed=5)
    top, below = state.tableau[1][-1], state.tableau[1][-2]
    state.face_up_ids.append(below)
    attempt_match(state, top, _right(state, top))
    assert state.face_up_ids.count(below) == 1


def test_wrong_match_costs_a_move_and_keeps_card() -> None:
    state = new_board(_level(12), seed=5)
    top = state.tableau[2][-1]
    before = [list(c) for c in state.tableau]
    res = attempt_match(state, top, _wrong(state, top))
    assert res.ok
    assert state.feedback == "wrong"
    assert state.tableau == before
    assert state.matched_ids == []
    assert state.moves_left == 29


def test_match_from_waste_pile() -> None:
    state = new_board(_level(12), seed=9)
    deal_from_draw_pile(state)
    dealt = state.waste_pile[-1]
    attempt_match(state, dealt, _right(state, dealt))
    assert state.waste_pile == []
    assert state.waste_items() == []
    assert state.is_matched(dealt)
    _assert_partition(state)


def test_invalid_arguments_are_noops() -> None:
    state = new_board(_level(12), seed=4)
    top = state.tableau[0][-1]
    snap = snapshot(state)

    assert not attempt_match(state, "missing", "cat_a").ok
    assert not attempt_match(state, top, "no_such_category").ok
    assert snapshot(state) == snap

    attempt_match(state, top, _right(state, top))
    moves = state.moves_left
    res = attempt_match(state, top, _right(state, top))
    assert not res.ok
    assert state.moves_left == moves
    assert state.matched_ids.count(top) == 1


def test_single_move_left_loses_after_any_attempt() -> None:
    for correct in (True, False):
        state = new_board(_level(12, base_moves=1), seed=8)
        top = state.tableau[0][-1]
        cat = _right(state, top) if correct else _wrong(state, top)
        res = attempt_match(state, top, cat)
        assert state.moves_left == 0
        assert state.status == "lost"
        assert res.events[-1]["type"] == "GAME_LOST"


def test_last_deal_can_lose() -> None:
    state = new_board(_level(12, base_moves=1), seed=8)
    deal_from_draw_pile(state)
    assert state.status == "lost"


def test_win_even_when_moves_run_out() -> None:
    state = new_board(_level(1, base_moves=0), seed=1)
    only = state.level.items[0].id
    res = attempt_match(state, only, _right(state, only))
    assert state.status == "won"
    assert state.moves_left == -1
    assert [e["type"] for e in res.events][-1] == "GAME_WON"


def test_win_on_last_move_is_not_downgraded() -> None:
    level = _level(2, base_moves=2)
    state = new_board(level, seed=1)
    for it in level.items:
        attempt_match(state, it.id, it.correct_category_id)
    assert state.moves_left == 0
    assert state.status == "won"


def test_terminal_state_rejects_everything() -> None:
    state = new_board(_level(12, base_moves=1), seed=8)
    top = state.tableau[0][-1]
    attempt_match(state, top, _wrong(state, top))
    assert state.status == "lost"
    snap = snapshot(state)

    assert not deal_from_draw_pile(state).ok
    assert not attempt_match(state, top, _right(state, top)).ok
    assert not step(state, DealAction()).ok
    assert snapshot(state) == snap

    reset(state)
    assert state.status == "playing"
    assert state.moves_left == 1


def test_matched_items_keep_match_order() -> None:
    level = _level(12)
    state = new_board(level, seed=6)
    a_items = [it for it in level.items if it.correct_category_id == "cat_a"]
    for it in reversed(a_items[:3]):
        attempt_match(state, it.id, "cat_a")
    assert [it.id for it in state.matched_items("cat_a")] == [it.id for it in reversed(a_items[:3])]
    assert state.matched_items("cat_b") == []
    assert state.matched_items("cat_a")[-1].id == a_items[0].id


def test_draw_pile_count_ignores_matched_ids() -> None:
    state = new_board(_level(12), seed=6)
    assert state.draw_pile_count() == 3
    # a correct match on an undealt card still leaves the board consistent
    undealt = state.draw_pile[0]
    attempt_match(state, undealt, _right(state, undealt))
    assert state.draw_pile_count() == 2
    _assert_partition(state)


def test_step_dispatches_and_logs() -> None:
    state = new_board(_level(12), seed=10)
    top = state.tableau[0][-1]
    step(state, DealAction())
    step(state, MatchAction(item_id=top, category_id=_right(state, top)))
    assert len(state.action_log) == 2
    assert state.moves_left == 28
    assert not step(state, object()).ok  # type: ignore[arg-type]


def test_random_play_keeps_partition_and_move_cost() -> None:
    rng = random.Random(99)
    for seed in range(20):
        level = _level(rng.randrange(1, 16), difficulty=rng.choice(["easy", "medium", "hard"]), base_moves=25)
        state = new_board(level, seed=seed)
        _assert_partition(state)
        while state.status == "playing":
            before = state.moves_left
            if state.draw_pile and rng.random() < 0.3:
                res = deal_from_draw_pile(state)
            else:
                candidates = [t for t in state.column_tops() if t is not None] + state.waste_pile
                if not candidates:
                    break
                target = rng.choice(candidates)
                res = attempt_match(state, target, rng.choice(["cat_a", "cat_b"]))
            assert res.ok
            assert state.moves_left == before - 1
            _assert_partition(state)

        if state.status == "won":
            assert state.matched_count == state.total_items
        if state.status == "lost":
            assert state.moves_left <= 0
            assert state.matched_count < state.total_items


def test_only_tops_and_waste_are_playable() -> None:
    state = new_board(_level(12), seed=12)
    top, below = state.tableau[0][-1], state.tableau[0][-2]
    assert state.is_playable(top)
    assert not state.is_playable(below)
    assert not state.is_playable(state.draw_pile[0])

    deal_from_draw_pile(state)
    assert state.is_playable(state.waste_pile[-1])

    attempt_match(state, top, _right(state, top))
    assert not state.is_playable(top)
    assert state.is_playable(below)


def test_only_waste_top_is_playable_after_multi_deal() -> None:
    state = new_board(_level(14, difficulty="medium"), seed=11)
    deal_from_draw_pile(state)
    assert len(state.waste_pile) == 3
    assert state.waste_top() == state.waste_pile[-1]
    assert state.is_playable(state.waste_pile[-1])
    assert not state.is_playable(state.waste_pile[0])
    assert not state.is_playable(state.waste_pile[1])

    # matching the top exposes the card below it
    top = state.waste_pile[-1]
    attempt_match(state, top, _right(state, top))
    assert state.waste_top() == state.waste_pile[-1]
    assert state.is_playable(state.waste_pile[-1])
    assert not state.is_playable(state.waste_pile[0])


def test_waste_top_is_none_before_any_deal() -> None:
    state = new_board(_level(12), seed=3)
    assert state.waste_top() is None
