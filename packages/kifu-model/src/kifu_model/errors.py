from __future__ import annotations


class KifuError(Exception):
    """Base class for every error raised by the kifu packages."""


class MalformedRecord(KifuError, ValueError):
    """A record could not be turned into a tree.

    Raised at construction time only; no partial tree is ever returned.
    """


class InvalidPath(KifuError, LookupError):
    """A path does not address a node of the given tree.

    Paths are only valid against the snapshot they were computed on, so
    callers treat this as a stale path and re-anchor.
    """

    def __init__(self, path: tuple[int, ...], depth: int) -> None:
        self.path = tuple(path)
        self.depth = depth
        super().__init__(f"path {list(self.path)!r}: index out of range at depth {depth}")


class MoveRejected(KifuError, ValueError):
    """The rules collaborator refused a move."""
