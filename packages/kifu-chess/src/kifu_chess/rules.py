from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypedDict

import chess
from typing_extensions import NotRequired

from kifu_model.errors import MalformedRecord, MoveRejected
from kifu_model.types import Move, MoveEntry


ChessMove = TypedDict(
    "ChessMove",
    {
        "from": str,
        "to": str,
        "piece": NotRequired[str],
        "capture": NotRequired[str],
        "promote": NotRequired[str],
    },
)


SPECIAL_LABELS: dict[str, str] = {
    "RESIGN": "Resign",
    "TIMEOUT": "Time forfeit",
    "DRAW": "Draw agreed",
    "REPETITION": "Draw by repetition",
    "STALEMATE": "Stalemate",
    "CHECKMATE": "Checkmate",
    "ABORT": "Aborted",
}


def to_chess_move(move: Move) -> chess.Move:
    """Parse a record move (`{"from", "to", "promote"}` or a UCI string)."""
    if isinstance(move, str):
        try:
            return chess.Move.from_uci(move)
        except ValueError as e:
            raise MoveRejected(f"bad UCI move {move!r}") from e
    if not isinstance(move, Mapping):
        raise MoveRejected(f"expected a move mapping, got {type(move).__name__}")
    try:
        from_square = chess.parse_square(move["from"])
        to_square = chess.parse_square(move["to"])
        promote = move.get("promote")
        promotion = chess.PIECE_SYMBOLS.index(str(promote).lower()) if promote else None
    except (KeyError, ValueError) as e:
        raise MoveRejected(f"bad move {dict(move)!r}") from e
    return chess.Move(from_square, to_square, promotion=promotion)


def move_number_prefix(board: chess.Board) -> str:
    if board.turn == chess.WHITE:
        return f"{board.fullmove_number}."
    return f"{board.fullmove_number}..."


@dataclass(frozen=True, slots=True)
class ChessRules:
    """Chess rules for the game tree, backed by python-chess.

    The scratch state is a `chess.Board` that `apply_move`/`undo_move`
    mutate in place.
    """

    def initial_state(self, record: Mapping[str, Any]) -> chess.Board:
        initial = record.get("initial")
        fen = initial.get("fen") if isinstance(initial, Mapping) else None
        try:
            return chess.Board(fen) if fen else chess.Board()
        except ValueError as e:
            raise MalformedRecord(f"Record.initial: {e}") from e

    def _legal(self, board: chess.Board, move: Move) -> chess.Move:
        m = to_chess_move(move)
        if not board.is_legal(m):
            raise MoveRejected(f"illegal move {m.uci()} in {board.fen()}")
        # king-takes-rook castling comes back as the king's two-square move
        return board.parse_uci(m.uci())

    def apply_move(self, state: chess.Board, move: Move) -> chess.Board:
        state.push(self._legal(state, move))
        return state

    def undo_move(self, state: chess.Board, move: Move) -> chess.Board:
        state.pop()
        return state

    def fingerprint(self, state: chess.Board, ply: int) -> str:
        # EPD plus a ply counter, the way SFEN ends with a move count.
        return f"{state.epd()} {ply + 1}"

    def normalize_move(self, state: chess.Board, candidate: Move) -> ChessMove | None:
        try:
            m = self._legal(state, candidate)
        except MoveRejected:
            return None

        piece = state.piece_at(m.from_square)
        assert piece is not None
        out: dict[str, str] = {
            "from": chess.square_name(m.from_square),
            "to": chess.square_name(m.to_square),
            "piece": piece.symbol().upper(),
        }
        if state.is_en_passant(m):
            out["capture"] = "P"
        elif state.is_capture(m):
            captured = state.piece_at(m.to_square)
            if captured is not None:
                out["capture"] = captured.symbol().upper()
        if m.promotion:
            out["promote"] = chess.piece_symbol(m.promotion)
        return out  # type: ignore[return-value]

    def move_equivalent(self, a: Move, b: Move) -> bool:
        try:
            return to_chess_move(a) == to_chess_move(b)
        except MoveRejected:
            return False

    def display_text(self, state: chess.Board, entry: MoveEntry) -> str:
        if "move" in entry:
            m = self._legal(state, entry["move"])
            return f"{move_number_prefix(state)} {state.san(m)}"
        special = entry.get("special", "")
        return SPECIAL_LABELS.get(special, special)
