from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

from .types import Move, MoveEntry


State = TypeVar("State")


class Rules(Protocol[State]):
    """What the tree needs from a game implementation.

    `apply_move` and `undo_move` may mutate `state` in place and return it;
    `undo_move` must exactly invert `apply_move`. Illegal moves raise
    `MoveRejected` from `apply_move` and `display_text`.
    """

    def initial_state(self, record: Mapping[str, Any]) -> State: ...

    def apply_move(self, state: State, move: Move) -> State: ...

    def undo_move(self, state: State, move: Move) -> State: ...

    def fingerprint(self, state: State, ply: int) -> str: ...

    def normalize_move(self, state: State, candidate: Move) -> Move | None: ...

    def move_equivalent(self, a: Move, b: Move) -> bool: ...

    def display_text(self, state: State, entry: MoveEntry) -> str: ...
