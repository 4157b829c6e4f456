from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import MalformedRecord


def _err(prefix: str, msg: str) -> MalformedRecord:
    return MalformedRecord(f"{prefix}: {msg}")


def _check_entry(prefix: str, entry: Any, *, first: bool) -> None:
    if not isinstance(entry, Mapping):
        raise _err(prefix, "expected a mapping")

    comments = entry.get("comments")
    if comments is not None:
        if not isinstance(comments, list) or not all(isinstance(c, str) for c in comments):
            raise _err(f"{prefix}.comments", "expected list[str]")

    if first:
        if "move" in entry:
            raise _err(f"{prefix}.move", "the first entry describes the initial position and has no move")
        if "forks" in entry:
            raise _err(f"{prefix}.forks", "the first entry cannot declare forks")
        return

    move = entry.get("move")
    special = entry.get("special")
    if move is None and special is None:
        raise _err(prefix, "expected either 'move' or 'special'")
    if move is not None and special is not None:
        raise _err(prefix, "terminal entries carry no move")
    if move is not None and not isinstance(move, (Mapping, str)):
        raise _err(f"{prefix}.move", "expected a mapping or str")
    if special is not None and (not isinstance(special, str) or not special):
        raise _err(f"{prefix}.special", "expected non-empty str")

    forks = entry.get("forks")
    if forks is None:
        return
    if not isinstance(forks, list):
        raise _err(f"{prefix}.forks", "expected list of move lists")
    for i, fork in enumerate(forks):
        _check_line(f"{prefix}.forks[{i}]", fork)


def _check_line(prefix: str, line: Any) -> None:
    if not isinstance(line, list) or not line:
        raise _err(prefix, "expected non-empty list of entries")
    if isinstance(line[0], Mapping) and "forks" in line[0]:
        # alternatives to a fork's first move belong to the enclosing entry
        raise _err(f"{prefix}[0].forks", "the first entry of a fork cannot declare forks")
    for i, entry in enumerate(line):
        _check_entry(f"{prefix}[{i}]", entry, first=False)


def validate_record(record: Mapping[str, Any]) -> None:
    """Soft validation for a serialized game record.

    Raises MalformedRecord with a human-readable message on schema violations.
    Legality of the moves is left to the rules collaborator.
    """
    if not isinstance(record, Mapping):
        raise _err("Record", "expected a mapping/dict")

    header = record.get("header", {})
    if not isinstance(header, Mapping):
        raise _err("Record.header", "expected mapping")

    moves = record.get("moves")
    if not isinstance(moves, list) or not moves:
        raise _err("Record.moves", "expected non-empty list of entries")

    _check_entry("Record.moves[0]", moves[0], first=True)
    for i, entry in enumerate(moves[1:], start=1):
        _check_entry(f"Record.moves[{i}]", entry, first=False)
