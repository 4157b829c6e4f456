from __future__ import annotations

import io
import re
from typing import Any

import chess
import chess.pgn

from kifu_model.errors import MalformedRecord
from kifu_model.types import MoveEntry, Record, TimeInfo


# [%clk ...], [%emt ...], [%cal ...] and friends; python-chess parses these itself.
_COMMAND = re.compile(r"\[%\w+\s[^\]]*\]")


def _split_comment(text: str | None) -> list[str]:
    if not text:
        return []
    s = _COMMAND.sub("", str(text)).strip()
    if not s:
        return []
    return [line.strip() for line in s.splitlines()]


def _time(node: chess.pgn.ChildNode) -> TimeInfo | None:
    t: dict[str, Any] = {}
    emt = node.emt()
    if emt is not None:
        t["now"] = emt
    clock = node.clock()
    if clock is not None:
        t["total"] = clock
    return t or None  # type: ignore[return-value]


def _entry(node: chess.pgn.ChildNode, forks: list[list[MoveEntry]]) -> MoveEntry:
    entry: dict[str, Any] = {}
    comments = _split_comment(node.starting_comment) + _split_comment(node.comment)
    if comments:
        entry["comments"] = comments

    move: dict[str, str] = {
        "from": chess.square_name(node.move.from_square),
        "to": chess.square_name(node.move.to_square),
    }
    if node.move.promotion:
        move["promote"] = chess.piece_symbol(node.move.promotion)
    entry["move"] = move

    time = _time(node)
    if time is not None:
        entry["time"] = time
    if forks:
        entry["forks"] = forks
    return entry  # type: ignore[return-value]


def _continuation(node: chess.pgn.GameNode) -> list[MoveEntry]:
    out: list[MoveEntry] = []
    while node.variations:
        main, *alts = node.variations
        out.append(_entry(main, [[_entry(alt, []), *_continuation(alt)] for alt in alts]))
        node = main
    return out


def record_from_pgn(pgn: str) -> Record:
    """Convert the first game of a PGN text into a record, variations as forks."""
    game = chess.pgn.read_game(io.StringIO(pgn))
    if game is None:
        raise MalformedRecord("PGN: no game found")
    if game.errors:
        raise MalformedRecord(f"PGN: {game.errors[0]}")

    headers = {str(k): str(v) for k, v in dict(game.headers).items()}
    first: MoveEntry = {}
    comments = _split_comment(game.comment)
    if comments:
        first["comments"] = comments

    record: dict[str, Any] = {"header": headers}
    if "FEN" in headers:
        record["initial"] = {"fen": headers["FEN"]}
    record["moves"] = [first, *_continuation(game)]
    return record  # type: ignore[return-value]
