"""Command-line front door for lazyfind.

Parses CLI options, resolves the target path, and either prints a one-shot
listing / ranked query or launches the interactive runtime.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from .errors import WalkError
from .file_tree_model import collect_files, walk_tree
from .highlight import normalize_style
from .runtime import run_app
from .runtime.config import load_show_hidden, load_style
from .runtime_logging import LOG_LEVELS, configure_runtime_logging
from .search import FuzzyRanker, Searching, mode_for_query


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyfind",
        description="Browse, fuzzy-find, and edit files under a directory.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Root directory (or a file to open). Defaults to cwd.")
    hidden = parser.add_mutually_exclusive_group()
    hidden.add_argument("--hidden", dest="show_hidden", action="store_const", const=True, help="Show dotfiles.")
    hidden.add_argument("--no-hidden", dest="show_hidden", action="store_const", const=False, help="Hide dotfiles.")
    parser.add_argument("--style", default=None, help="Pygments style name for the editor view.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--list", action="store_true", help="Print every indexed entry and exit.")
    parser.add_argument("--query", metavar="Q", default=None, help="Print ranked matches for Q and exit.")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None, help="Runtime log level.")
    parser.add_argument("--log-file", default=None, help="Runtime JSONL log path.")
    return parser


def print_listing(root: Path, show_hidden: bool) -> None:
    for entry in walk_tree(root, show_hidden):
        sys.stdout.write(f"{entry.path}/\n" if entry.is_dir else f"{entry.path}\n")


def print_query(root: Path, show_hidden: bool, query: str) -> None:
    files = tuple(collect_files(root, show_hidden))
    mode = mode_for_query(query, FuzzyRanker(), files)
    if not isinstance(mode, Searching):
        for path in files:
            sys.stdout.write(f"0\t{path}\n")
        return
    for file_idx, score in mode.matches:
        sys.stdout.write(f"{score}\t{files[file_idx]}\n")


def main(argv: Sequence[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and dispatch.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used. A file argument opens its parent directory with that
    file already in the editor.
    """
    args = build_parser().parse_args(argv)
    configure_runtime_logging(level=args.log_level, log_file=args.log_file)

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path) if args.path is not None else default_path
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    open_path: Path | None = None
    root = path
    if not path.is_dir():
        open_path = path
        root = path.resolve().parent
    root = root.resolve()

    show_hidden = args.show_hidden if args.show_hidden is not None else load_show_hidden()
    style = normalize_style(args.style if args.style is not None else load_style())

    try:
        if args.list:
            print_listing(root, show_hidden)
            return
        if args.query is not None:
            print_query(root, show_hidden, args.query)
            return
        run_app(root, show_hidden, style, no_color=args.no_color, open_path=open_path)
    except WalkError as exc:
        raise SystemExit(f"lazyfind: {exc}") from exc
