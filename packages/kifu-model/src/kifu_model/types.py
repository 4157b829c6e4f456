from __future__ import annotations

from typing import Any, TypedDict

from typing_extensions import NotRequired


Path = tuple[int, ...]
StringPath = list[str]

# Moves are owned by the rules collaborator; the tree passes them through.
Move = dict[str, Any] | str


class TimeInfo(TypedDict, total=False):
    now: Any
    total: Any


class MoveEntry(TypedDict, total=False):
    comments: list[str]
    move: Move
    time: TimeInfo
    special: str
    forks: list[list[MoveEntry]]


class Record(TypedDict):
    header: dict[str, str]
    initial: NotRequired[Any]
    moves: list[MoveEntry]
