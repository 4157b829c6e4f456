from .pgn import record_from_pgn
from .rules import SPECIAL_LABELS, ChessMove, ChessRules, to_chess_move

__all__ = [
    "SPECIAL_LABELS",
    "ChessMove",
    "ChessRules",
    "record_from_pgn",
    "to_chess_move",
]
