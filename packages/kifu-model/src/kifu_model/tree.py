from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Generic

from .errors import InvalidPath, MalformedRecord, MoveRejected
from .node import START_LABEL, Node, NodeAction, Played, Start, Terminal, TranspositionTarget
from .rules import Rules, State
from .types import MoveEntry, Path, Record, StringPath
from .validate import validate_record


logger = logging.getLogger(__name__)

TranspositionIndex = dict[str, list[TranspositionTarget]]


def _join_comments(entry: Mapping[str, Any]) -> str:
    comments = entry.get("comments")
    return "\n".join(comments) if comments else ""


def _split_comment(comment: str) -> list[str] | None:
    return comment.split("\n") if comment else None


def _action(entry: Mapping[str, Any]) -> NodeAction:
    if "move" in entry:
        return Played(entry["move"])
    return Terminal(entry["special"])


@dataclass
class _Pending:
    entry: MoveEntry
    ply: int
    display_text: str
    fingerprint: str
    forks: list[Node]


@dataclass
class _TreeBuilder(Generic[State]):
    """Owns the scratch board for one construction.

    Every `apply_move` is paired with an `undo_move` before the next sibling
    is built, so the board is back at its starting position when `build`
    returns.
    """

    rules: Rules[State]
    state: State

    def _apply(self, entry: MoveEntry, ply: int) -> tuple[str, str]:
        try:
            text = self.rules.display_text(self.state, entry)
            if "move" in entry:
                self.state = self.rules.apply_move(self.state, entry["move"])
        except MoveRejected as e:
            raise MalformedRecord(f"ply {ply}: {e}") from e
        return text, self.rules.fingerprint(self.state, ply)

    def _undo(self, entry: MoveEntry) -> None:
        if "move" in entry:
            self.state = self.rules.undo_move(self.state, entry["move"])

    def build_line(self, line: Sequence[MoveEntry], ply: int, *, root: bool = False) -> Node:
        """Build the subtree whose node is `line[0]` and whose main line is `line[1:]`.

        Walks the main line iteratively; recursion only happens per fork.
        """
        head = line[0]
        if root:
            pending = [_Pending(head, ply, START_LABEL, self.rules.fingerprint(self.state, ply), [])]
        else:
            text, fp = self._apply(head, ply)
            pending = [_Pending(head, ply, text, fp, [])]

        applied = [] if root else [head]
        for entry in line[1:]:
            ply += 1
            # Forks are alternatives to `entry`, played from the position before it.
            forks = [self.build_line(fork, ply) for fork in entry.get("forks") or ()]
            text, fp = self._apply(entry, ply)
            applied.append(entry)
            pending.append(_Pending(entry, ply, text, fp, forks))

        for entry in reversed(applied):
            self._undo(entry)

        child: Node | None = None
        child_forks: list[Node] = []
        for p in reversed(pending):
            children = ((child, *child_forks) if child is not None else ())
            texts = [c.display_text for c in children]
            if len(set(texts)) != len(texts):
                raise MalformedRecord(f"ply {p.ply + 1}: duplicate sibling moves {texts!r}")
            child = Node(
                ply=p.ply,
                action=Start() if root and p is pending[0] else _action(p.entry),
                display_text=p.display_text,
                fingerprint=p.fingerprint,
                comment=_join_comments(p.entry),
                time=p.entry.get("time"),
                children=children,
            )
            child_forks = p.forks
        assert child is not None
        return child


def build_tree(record: Mapping[str, Any], rules: Rules[Any]) -> Node:
    """Build the node tree for a serialized record.

    Raises MalformedRecord when the record's shape is wrong or a move is
    refused by `rules`.
    """
    validate_record(record)
    builder = _TreeBuilder(rules, rules.initial_state(record))
    root = builder.build_line(record["moves"], 0, root=True)
    logger.debug("built tree with %d nodes", count_nodes(root))
    return root


def _entry(node: Node, forks: list[list[MoveEntry]]) -> MoveEntry:
    # key order is significant for readability of the saved file
    entry: dict[str, Any] = {}
    comments = _split_comment(node.comment)
    if comments is not None:
        entry["comments"] = comments
    if node.move is not None:
        entry["move"] = node.move
    if node.time is not None:
        entry["time"] = node.time
    if node.terminal is not None:
        entry["special"] = node.terminal
    if forks:
        entry["forks"] = forks
    return entry  # type: ignore[return-value]


def _line_entries(nodes: Sequence[Node]) -> list[MoveEntry]:
    out: list[MoveEntry] = []
    while nodes:
        primary = nodes[0]
        out.append(_entry(primary, [_line_entries((n,)) for n in nodes[1:]]))
        nodes = primary.children
    return out


def tree_to_record(root: Node, base: Mapping[str, Any]) -> Record:
    """Serialize a tree back into a record, reusing `base`'s header and initial position."""
    first = dict(base["moves"][0])
    comments = _split_comment(root.comment)
    if comments is None:
        first.pop("comments", None)
    else:
        first["comments"] = comments

    record: dict[str, Any] = {}
    if "header" in base:
        record["header"] = base["header"]
    if "initial" in base:
        record["initial"] = base["initial"]
    record["moves"] = [first, *_line_entries(root.children)]
    return record  # type: ignore[return-value]


def traverse(root: Node, callback: Callable[[Node, Path], None]) -> None:
    """Visit every node pre-order, main line (index 0) first."""
    stack: list[tuple[Node, Path]] = [(root, ())]
    while stack:
        node, path = stack.pop()
        callback(node, path)
        for i in range(len(node.children) - 1, -1, -1):
            stack.append((node.children[i], (*path, i)))


def count_nodes(root: Node) -> int:
    count = 0

    def visit(_node: Node, _path: Path) -> None:
        nonlocal count
        count += 1

    traverse(root, visit)
    return count


def build_index(root: Node) -> TranspositionIndex:
    """Map each fingerprint reached by two or more nodes to those nodes, first seen first."""
    index: TranspositionIndex = {}
    seen: dict[str, TranspositionTarget] = {}

    def visit(node: Node, path: Path) -> None:
        target = TranspositionTarget(node, path)
        first = seen.get(node.fingerprint)
        if first is None:
            seen[node.fingerprint] = target
            return
        index.setdefault(node.fingerprint, [first]).append(target)

    traverse(root, visit)
    logger.debug("transposition index: %d of %d positions repeat", len(index), len(seen))
    return index


def nodes_on_path(root: Node, path: Sequence[int]) -> list[Node]:
    """Nodes along `path`, excluding the root and including the last one."""
    nodes: list[Node] = []
    current = root
    for depth, i in enumerate(path):
        if not 0 <= i < len(current.children):
            raise InvalidPath(tuple(path), depth)
        current = current.children[i]
        nodes.append(current)
    return nodes


def find_node(root: Node, path: Sequence[int]) -> Node:
    if not path:
        return root
    return nodes_on_path(root, path)[-1]


def string_path(root: Node, path: Sequence[int]) -> StringPath:
    return [node.display_text for node in nodes_on_path(root, path)]


def path_from_string_path(root: Node, strings: Sequence[str]) -> Path:
    """Resolve display texts back to indices.

    Stops at the first ply with no matching child, so a removed node yields
    the longest prefix that still exists.
    """
    path: list[int] = []
    current = root
    for text in strings:
        for i, child in enumerate(current.children):
            if child.display_text == text:
                path.append(i)
                current = child
                break
        else:
            break
    return tuple(path)


def longest_valid_prefix(root: Node, path: Sequence[int]) -> Path:
    current = root
    for depth, i in enumerate(path):
        if not 0 <= i < len(current.children):
            return tuple(path[:depth])
        current = current.children[i]
    return tuple(path)


def update_node_at(root: Node, path: Sequence[int], fn: Callable[[Node], Node]) -> Node:
    """Return a new root where the node at `path` is replaced by `fn(node)`.

    Only the spine from the root to `path` is copied; every other subtree is
    reused. If `fn` returns its argument, `root` itself is returned.
    """
    spine = [root, *nodes_on_path(root, path)]
    new = fn(spine[-1])
    if new is spine[-1]:
        return root
    for parent, i in zip(reversed(spine[:-1]), reversed(path)):
        children = parent.children
        new = replace(parent, children=(*children[:i], new, *children[i + 1 :]))
    return new
