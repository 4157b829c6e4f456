from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from kifu_model import tree
from kifu_model.errors import InvalidPath, MoveRejected
from kifu_model.node import Node, Played, TranspositionTarget
from kifu_model.rules import Rules
from kifu_model.types import Move, Path, Record


logger = logging.getLogger(__name__)

ForkUpdater = Callable[[tuple[Node, ...], int], Sequence[Node]]


@dataclass(frozen=True, slots=True)
class TreeSession:
    """A tree snapshot, the user's cursor in it, and its transposition index.

    Sessions are values: every operation returns a new session and leaves
    this one untouched, including when it raises.
    """

    root: Node
    base_record: Mapping[str, Any]
    rules: Rules[Any]
    current_path: Path = ()
    index: Mapping[str, list[TranspositionTarget]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_record(cls, record: Mapping[str, Any], rules: Rules[Any]) -> TreeSession:
        root = tree.build_tree(record, rules)
        base = dict(record)
        base["moves"] = [record["moves"][0]]
        return cls(root=root, base_record=base, rules=rules, index=MappingProxyType(tree.build_index(root)))

    def to_record(self) -> Record:
        return tree.tree_to_record(self.root, self.base_record)

    def _with_root(self, root: Node, current_path: Sequence[int]) -> TreeSession:
        if root is self.root:
            return self.set_current_path(current_path)
        return replace(
            self,
            root=root,
            current_path=tuple(current_path),
            index=MappingProxyType(tree.build_index(root)),
        )

    # -- lookup ---------------------------------------------------------------

    @property
    def current_node(self) -> Node:
        return tree.find_node(self.root, self.current_path)

    def node_at(self, path: Sequence[int]) -> Node:
        return tree.find_node(self.root, path)

    def nodes_on_current_path(self) -> list[Node]:
        return tree.nodes_on_path(self.root, self.current_path)

    def current_string_path(self) -> list[str]:
        return tree.string_path(self.root, self.current_path)

    def jump_targets(self, node: Node) -> list[TranspositionTarget]:
        """Other places in the tree where `node`'s position also occurs."""
        return [t for t in self.index.get(node.fingerprint, ()) if t.node is not node]

    # -- navigation -----------------------------------------------------------

    @property
    def previous_path(self) -> Path:
        return self.current_path[:-1]

    @property
    def next_path(self) -> Path:
        if self.current_node.children:
            return (*self.current_path, 0)
        return self.current_path

    @property
    def previous_fork_path(self) -> Path:
        path = self.current_path
        nodes = self.nodes_on_current_path()
        for i in range(len(nodes) - 2, -1, -1):
            if len(nodes[i].children) >= 2:
                return path[: i + 1]
        return ()

    @property
    def next_fork_path(self) -> Path:
        node = self.current_node
        path = self.current_path
        if not node.children:
            return path
        while True:
            node = node.children[0]
            path = (*path, 0)
            if len(node.children) != 1:
                return path

    def set_current_path(self, path: Sequence[int]) -> TreeSession:
        path = tuple(path)
        if path == self.current_path:
            return self
        return replace(self, current_path=path)

    def previous_ply(self) -> TreeSession:
        return self.set_current_path(self.previous_path)

    def next_ply(self) -> TreeSession:
        return self.set_current_path(self.next_path)

    def previous_fork(self) -> TreeSession:
        return self.set_current_path(self.previous_fork_path)

    def next_fork(self) -> TreeSession:
        return self.set_current_path(self.next_fork_path)

    # -- mutation -------------------------------------------------------------

    def update_node_at(self, path: Sequence[int], fn: Callable[[Node], Node]) -> TreeSession:
        root = tree.update_node_at(self.root, path, fn)
        return self._with_root(root, tree.longest_valid_prefix(root, self.current_path))

    def update_fork_at(self, path: Sequence[int], fn: ForkUpdater) -> TreeSession:
        """Rewrite the sibling list holding the node at `path`.

        `fn` receives the siblings and the index of that node. The cursor
        follows its line of play by display text, or stops at the deepest
        ply that still exists.
        """
        if not path:
            raise InvalidPath((), 0)
        tree.nodes_on_path(self.root, path)
        anchor = self.current_string_path()
        last = path[-1]

        def update(parent: Node) -> Node:
            children = tuple(fn(parent.children, last))
            if len(children) == len(parent.children) and all(
                a is b for a, b in zip(children, parent.children)
            ):
                return parent
            if any(child.ply != parent.ply + 1 for child in children):
                raise ValueError(f"fork children must be at ply {parent.ply + 1}")
            texts = [child.display_text for child in children]
            if len(set(texts)) != len(texts):
                raise ValueError(f"fork children must be distinct moves, got {texts!r}")
            return replace(parent, children=children)

        root = tree.update_node_at(self.root, path[:-1], update)
        if root is self.root:
            return self
        return self._with_root(root, tree.path_from_string_path(root, anchor))

    def change_comment(self, comment: str, path: Sequence[int] | None = None) -> TreeSession:
        target = self.current_path if path is None else path

        def update(node: Node) -> Node:
            return node if node.comment == comment else replace(node, comment=comment)

        return self.update_node_at(target, update)

    def remove_fork(self, path: Sequence[int]) -> TreeSession:
        return self.update_fork_at(path, lambda children, i: (*children[:i], *children[i + 1 :]))

    def move_up_fork(self, path: Sequence[int]) -> TreeSession:
        def update(children: tuple[Node, ...], i: int) -> tuple[Node, ...]:
            if i == 0:
                return children
            return (*children[: i - 1], children[i], children[i - 1], *children[i + 1 :])

        return self.update_fork_at(path, update)

    def move_down_fork(self, path: Sequence[int]) -> TreeSession:
        def update(children: tuple[Node, ...], i: int) -> tuple[Node, ...]:
            if i == len(children) - 1:
                return children
            return (*children[:i], children[i + 1], children[i], *children[i + 2 :])

        return self.update_fork_at(path, update)

    def _child_index(self, node: Node, move: Move, display_text: str | None = None) -> int | None:
        for i, child in enumerate(node.children):
            if child.move is None:
                continue
            if self.rules.move_equivalent(child.move, move) or child.display_text == display_text:
                return i
        return None

    def apply_move(self, move: Move) -> TreeSession:
        """Play `move` from the cursor.

        An existing equivalent child is reused. Otherwise the move is checked
        against the position at the cursor, appended as the last variation,
        and the cursor moves onto it. Raises MoveRejected for illegal moves.
        """
        current = self.current_node
        i = self._child_index(current, move)
        if i is not None:
            return self.set_current_path((*self.current_path, i))

        rules = self.rules
        state = rules.initial_state(self.base_record)
        for node in self.nodes_on_current_path():
            if node.move is not None:
                state = rules.apply_move(state, node.move)

        normalized = rules.normalize_move(state, move)
        if normalized is None:
            raise MoveRejected(f"move {move!r} rejected at {self.current_string_path()!r}")

        text = rules.display_text(state, {"move": normalized})
        # the candidate may only match an existing child once normalized
        i = self._child_index(current, normalized, text)
        if i is not None:
            return self.set_current_path((*self.current_path, i))

        state = rules.apply_move(state, normalized)
        new_node = Node(
            ply=current.ply + 1,
            action=Played(normalized),
            display_text=text,
            fingerprint=rules.fingerprint(state, current.ply + 1),
        )
        logger.debug("new node %r at %r", new_node, self.current_path)

        root = tree.update_node_at(
            self.root,
            self.current_path,
            lambda node: replace(node, children=(*node.children, new_node)),
        )
        return self._with_root(root, (*self.current_path, len(current.children)))
