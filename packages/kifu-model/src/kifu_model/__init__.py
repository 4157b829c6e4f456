from .errors import InvalidPath, KifuError, MalformedRecord, MoveRejected
from .node import Node, Played, Start, Terminal, TranspositionTarget
from .rules import Rules
from .tree import (
    TranspositionIndex,
    build_index,
    build_tree,
    count_nodes,
    find_node,
    longest_valid_prefix,
    nodes_on_path,
    path_from_string_path,
    string_path,
    traverse,
    tree_to_record,
    update_node_at,
)
from .types import MoveEntry, Path, Record
from .validate import validate_record

__all__ = [
    "InvalidPath",
    "KifuError",
    "MalformedRecord",
    "MoveEntry",
    "MoveRejected",
    "Node",
    "Path",
    "Played",
    "Record",
    "Rules",
    "Start",
    "Terminal",
    "TranspositionIndex",
    "TranspositionTarget",
    "build_index",
    "build_tree",
    "count_nodes",
    "find_node",
    "longest_valid_prefix",
    "nodes_on_path",
    "path_from_string_path",
    "string_path",
    "traverse",
    "tree_to_record",
    "update_node_at",
    "validate_record",
]
