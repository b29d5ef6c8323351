from __future__ import annotations

import argparse
import random
import sys
from typing import Iterable, TextIO

from wordassoc.engine.board import BoardState
from wordassoc.engine.generator import LevelGenerator
from wordassoc.engine.types import DIFFICULTIES, JOURNEYS, Item
from wordassoc.paths import get_paths
from wordassoc.services.content import ContentError, ContentService
from wordassoc.services.session import GameSession
from wordassoc.services.settings import SettingsStore
from wordassoc.services.telemetry import TelemetryService

HELP = "commands: d = deal, m <card> <category> = match, r = restart, q = quit"


def _label(item: Item) -> str:
    if item.content.type == "image_name":
        return f"[{item.content.value}]"
    return item.content.value


def playable_cards(board: BoardState) -> list[Item]:
    """Cards the player can act on, numbered in this order by the text UI."""
    out: list[Item] = []
    for top in board.column_tops():
        if top is not None and board.is_playable(top):
            it = board.item(top)
            if it is not None:
                out.append(it)
    waste_top = board.waste_top()
    if waste_top is not None:
        it = board.item(waste_top)
        if it is not None:
            out.append(it)
    return out


def render(board: BoardState, out: TextIO) -> None:
    level = board.level
    out.write(f"\n{level.journey} / {level.difficulty}  moves: {board.moves_left}  status: {board.status}\n")
    for i, cat in enumerate(level.categories, start=1):
        matched = board.matched_items(cat.id)
        last = _label(matched[-1]) if matched else "-"
        out.write(f"  C{i} {cat.title} ({len(matched)}) last: {last}\n")
    for col_index, column in enumerate(board.tableau, start=1):
        cells = []
        for cid in column:
            it = board.item(cid)
            cells.append(_label(it) if it is not None and board.is_face_up(cid) else "##")
        out.write(f"  col {col_index}: {' '.join(cells) or '(empty)'}\n")
    out.write(f"  draw pile: {board.draw_pile_count()}  waste: {len(board.waste_items())}\n")
    for n, it in enumerate(playable_cards(board), start=1):
        out.write(f"  #{n} {_label(it)}\n")


def run(session: GameSession, lines: Iterable[str], out: TextIO) -> int:
    board = session.board
    if board is None:
        out.write("No level available for this journey.\n")
        return 1
    render(board, out)
    out.write(HELP + "\n")
    for line in lines:
        parts = line.split()
        if not parts:
            continue
        cmd = parts[0].lower()
        if cmd == "q":
            break
        if cmd == "r":
            session.restart()
        elif cmd == "d":
            res = session.deal()
            if not res.ok and res.error:
                out.write(f"! {res.error}\n")
        elif cmd == "m" and len(parts) == 3 and parts[1].isdigit() and parts[2].isdigit():
            assert session.board is not None
            cards = playable_cards(session.board)
            card_n, cat_n = int(parts[1]), int(parts[2])
            cats = session.board.level.categories
            if not (1 <= card_n <= len(cards) and 1 <= cat_n <= len(cats)):
                out.write("! No such card or category.\n")
                continue
            session.match(cards[card_n - 1].id, cats[cat_n - 1].id)
            out.write("correct\n" if session.board.feedback == "correct" else "wrong\n")
        else:
            out.write(HELP + "\n")
            continue
        assert session.board is not None
        render(session.board, out)
        if session.board.status != "playing":
            out.write(f"Game over: {session.board.status}. Type r to restart or q to quit.\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="wordassoc")
    parser.add_argument("journey", choices=JOURNEYS)
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default=None)
    parser.add_argument("--language", choices=("he", "en"), default="he")
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    telemetry = TelemetryService(paths.userdata_dir / "telemetry.jsonl")
    try:
        pool = content.load_pool()
    except ContentError as e:
        telemetry.log("boot", {"ok": False, "error": str(e)})
        print(f"Failed to load content: {e}", file=sys.stderr)
        return 2
    telemetry.log("boot", {"ok": True, "tags": len(pool.tags), "words": len(pool.words)})

    settings = SettingsStore(paths.userdata_dir / "settings.json")
    if args.difficulty is not None:
        settings.set_difficulty(args.difficulty)

    session = GameSession(
        generator=LevelGenerator(pool, random.Random(args.seed)),
        settings=settings,
        telemetry=telemetry,
        language=args.language,
        seed=args.seed,
    )
    session.start(args.journey)
    return run(session, sys.stdin, sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())
