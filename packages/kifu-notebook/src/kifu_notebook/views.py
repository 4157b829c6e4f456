from __future__ import annotations

from pydantic import BaseModel

from kifu_model import tree
from kifu_model.node import Node

from .session import TreeSession


class JumpTarget(BaseModel):
    path: list[int]
    string_path: list[str]
    display_text: str
    comment: str = ""
    is_bad: bool = False


class ForkEntry(BaseModel):
    path: list[int]
    display_text: str
    comment: str = ""
    is_bad: bool = False
    jump_targets: list[JumpTarget] = []


class CurrentNodeView(BaseModel):
    ply: int
    display_text: str
    comment: str
    path: list[int]
    previous_path: list[int]
    next_path: list[int]
    previous_fork_path: list[int]
    next_fork_path: list[int]
    forks: list[ForkEntry]


def jump_targets_for(session: TreeSession, node: Node) -> list[JumpTarget]:
    return [
        JumpTarget(
            path=list(t.path),
            string_path=tree.string_path(session.root, t.path),
            display_text=t.node.display_text,
            comment=t.node.comment,
            is_bad=t.is_bad,
        )
        for t in session.jump_targets(node)
    ]


def current_node_view(session: TreeSession) -> CurrentNodeView:
    """JSON-ready description of the cursor: the node, its navigation targets and its forks.

    Each fork lists the other lines reaching the same position, so the UI can
    offer a jump to them.
    """
    node = session.current_node
    path = list(session.current_path)
    forks = [
        ForkEntry(
            path=[*path, i],
            display_text=child.display_text,
            comment=child.comment,
            is_bad=child.is_bad,
            jump_targets=jump_targets_for(session, child),
        )
        for i, child in enumerate(node.children)
    ]
    return CurrentNodeView(
        ply=node.ply,
        display_text=node.display_text,
        comment=node.comment,
        path=path,
        previous_path=list(session.previous_path),
        next_path=list(session.next_path),
        previous_fork_path=list(session.previous_fork_path),
        next_fork_path=list(session.next_fork_path),
        forks=forks,
    )
