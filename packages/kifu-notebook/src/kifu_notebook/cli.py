from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from kifu_chess import ChessRules, record_from_pgn
from kifu_model import count_nodes, string_path
from kifu_model.errors import KifuError
from kifu_model.node import START_LABEL

from .config import NotebookConfig, load_config
from .session import TreeSession
from .store import NotebookStore


def _open(config: NotebookConfig, notebook: str | None) -> TreeSession:
    store = NotebookStore.from_config(config) if notebook is None else NotebookStore(Path(notebook), config.indent)
    return TreeSession.from_record(store.load(), ChessRules())


def cmd_import_pgn(args: argparse.Namespace, config: NotebookConfig) -> int:
    record = record_from_pgn(Path(args.pgn).read_text(encoding="utf-8"))
    # Building the tree checks every move before anything is written.
    session = TreeSession.from_record(record, ChessRules())
    store = NotebookStore(Path(args.output or config.path), config.indent)
    store.save(session.to_record())
    print(f"Imported {count_nodes(session.root) - 1} moves to {store.path}")
    return 0


def cmd_show(args: argparse.Namespace, config: NotebookConfig) -> int:
    session = _open(config, args.notebook)
    node = session.root
    print(node.display_text)
    while node.children:
        extra = len(node.children) - 1
        node = node.children[0]
        suffix = f"  [+{extra} variation{'s' if extra > 1 else ''}]" if extra else ""
        print(f"{node.display_text}{suffix}")
        for line in node.comment.splitlines():
            print(f"    ; {line}")
    return 0


def cmd_transpositions(args: argparse.Namespace, config: NotebookConfig) -> int:
    session = _open(config, args.notebook)
    if not session.index:
        print("No transpositions.")
        return 0
    for fingerprint, targets in session.index.items():
        print(fingerprint)
        for t in targets:
            print("    " + (" ".join(string_path(session.root, t.path)) or START_LABEL))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kifu-notebook", description="Browse and edit game-record notebooks")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $KIFU_NOTEBOOK_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import-pgn", help="Convert a PGN game (with variations) into a notebook file")
    p.add_argument("pgn", help="PGN file to read")
    p.add_argument("--output", "-o", default=None, help="Notebook file to write (default: $KIFU_NOTEBOOK_PATH)")
    p.set_defaults(func=cmd_import_pgn)

    p = sub.add_parser("show", help="Print the main line of a notebook")
    p.add_argument("notebook", nargs="?", default=None, help="Notebook file (default: $KIFU_NOTEBOOK_PATH)")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("transpositions", help="List positions reached by more than one line")
    p.add_argument("notebook", nargs="?", default=None, help="Notebook file (default: $KIFU_NOTEBOOK_PATH)")
    p.set_defaults(func=cmd_transpositions)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config({"log_level": args.log_level})
        logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
        return args.func(args, config)
    except (KifuError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
