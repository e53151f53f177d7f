# -*- coding: utf-8 -*-
"""Command line interface for joman.

Thin argparse layer over :mod:`joman.logic`. Every subcommand maps to one
logic call; errors surface as ``error: <message>`` with exit status 1.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys

from . import __version__, logic
from .errors import JomanError

logger = logging.getLogger(__name__)


def _cmd_init(args: argparse.Namespace) -> int:
    paths = logic.init_journal(args.root)
    print(f"Journal directory initialized! key saved as {paths.private_key}")
    return 0

def _cmd_add(args: argparse.Namespace) -> int:
    dest = logic.add_file(args.root, Path(args.file), overwrite=args.force)
    print(f"Added {dest.name}")
    return 0

def _cmd_load(args: argparse.Namespace) -> int:
    written = logic.add_directory(args.root, Path(args.directory), overwrite=args.force)
    print(f"Loaded {len(written)} entries into the journal")
    return 0

def _cmd_read(args: argparse.Namespace) -> int:
    print(logic.read_entry(args.root, args.file, Path(args.pem)))
    return 0

def _cmd_new(args: argparse.Namespace) -> int:
    dest = logic.new_entry(args.root, title=args.title, editor=args.editor, overwrite=args.force)
    print(f"Saved {dest.name}")
    return 0

def _cmd_list(args: argparse.Namespace) -> int:
    for info in logic.list_entries(args.root):
        print(f"{info.modified:%Y-%m-%d %H:%M}  {info.size:>8}  {info.name}")
    return 0

def _cmd_zip(args: argparse.Namespace) -> int:
    archive = logic.zip_journal(args.root)
    print(f"Journal directory zipped to {archive.name}")
    return 0

def _cmd_browse(args: argparse.Namespace) -> int:
    # Textual is only imported when the browser is actually requested
    from .ui import JomanApp

    key_path = Path(args.key) if args.key else logic.journal_paths(args.root).private_key
    logic.require_journal(logic.journal_paths(args.root))
    JomanApp(args.root, key_path).run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="joman",
        description="A journal management system CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  joman init                        # create ./Journal and ./private.pem
  joman new                         # write an entry in $EDITOR
  joman read Journal/entry_1.enc private.pem

Compatibility:
  Entries written by joman 0.3.x (PKCS#1 v1.5 key wrap) can be read.
  Entries written by this version use RSA-OAEP and cannot be read by 0.3.x.
        """,
    )
    parser.add_argument("--version", action="version", version=f"joman {__version__}")
    parser.add_argument(
        "-C", "--root",
        type=Path,
        default=Path.cwd(),
        help="Directory containing the journal (default: current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("init", help="initializes an encrypted journal inside the root directory")
    p.set_defaults(func=_cmd_init)

    p = sub.add_parser("add", help="adds a new entry to directory")
    p.add_argument("file", metavar="FILE", help="Path of the entry file to add")
    p.add_argument("--force", action="store_true", help="Replace an existing entry")
    p.set_defaults(func=_cmd_add)

    p = sub.add_parser("load", help="loads a directory of entries into the journal")
    p.add_argument("directory", metavar="DIRECTORY", help="Path of the directory to load")
    p.add_argument("--force", action="store_true", help="Replace existing entries")
    p.set_defaults(func=_cmd_load)

    p = sub.add_parser("read", help="read an entry in the directory")
    p.add_argument("file", metavar="FILE", help="name of the entry file")
    p.add_argument("pem", metavar="PEM", help="the private key of the file")
    p.set_defaults(func=_cmd_read)

    p = sub.add_parser("new", help="creates a new journal entry")
    p.add_argument("title", metavar="TITLE", nargs="?", help="Title of the journal entry")
    p.add_argument("--editor", default=None, help="Editor command (default: config, $VISUAL, $EDITOR, vim)")
    p.add_argument("--force", action="store_true", help="Replace an existing entry")
    p.set_defaults(func=_cmd_new)

    p = sub.add_parser("list", help="lists the entries of the journal")
    p.set_defaults(func=_cmd_list)

    p = sub.add_parser("zip", help="creates a zip archive of the journal directory")
    p.set_defaults(func=_cmd_zip)

    p = sub.add_parser("browse", help="opens the terminal journal browser")
    p.add_argument("--key", default=None, help="Private key used to read entries")
    p.set_defaults(func=_cmd_browse)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except JomanError as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
