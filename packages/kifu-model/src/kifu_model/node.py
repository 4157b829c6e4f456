from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .types import Move, Path


START_LABEL = "Start position"
BAD_PREFIX = "bad:"


@dataclass(frozen=True, slots=True)
class Start:
    """The initial position; only the root carries it."""


@dataclass(frozen=True, slots=True)
class Played:
    move: Move


@dataclass(frozen=True, slots=True)
class Terminal:
    special: str


NodeAction = Start | Played | Terminal


@dataclass(frozen=True, slots=True, eq=False)
class Node:
    """One ply of the game tree.

    Nodes compare by identity: trees share unchanged subtrees between
    snapshots, and `is` is how callers detect what an edit touched.
    `children[0]` is the main line, the rest are variations in insertion
    order.
    """

    ply: int
    action: NodeAction
    display_text: str
    fingerprint: str
    comment: str = ""
    time: Any = None
    children: tuple[Node, ...] = field(default=())

    @property
    def move(self) -> Move | None:
        return self.action.move if isinstance(self.action, Played) else None

    @property
    def terminal(self) -> str | None:
        return self.action.special if isinstance(self.action, Terminal) else None

    @property
    def is_root(self) -> bool:
        return isinstance(self.action, Start)

    @property
    def is_bad(self) -> bool:
        return self.comment.startswith(BAD_PREFIX)

    def __repr__(self) -> str:
        return f"Node(ply={self.ply}, {self.display_text!r}, children={len(self.children)})"


@dataclass(frozen=True, slots=True)
class TranspositionTarget:
    node: Node
    path: Path

    @property
    def is_bad(self) -> bool:
        return self.node.is_bad
