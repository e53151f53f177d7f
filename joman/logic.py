# -*- coding: utf-8 -*-
"""Journal file management that composes the filesystem and crypto layers.

This module provides the public API used by the CLI and the UI. It contains
no argument parsing and no Textual code. Every function takes the journal
root explicitly; nothing here depends on the working directory.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional
import json
import logging
import os
import re
import shlex
import subprocess
import tempfile
import zipfile

from . import crypto
from .errors import JournalError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Config management (JSON on disk)
# ---------------------------------------------------------------------

APP_NAME = "joman"

DEFAULT_CONFIG: Dict[str, object] = {
    # Empty means $VISUAL, then $EDITOR, then vim
    "editor": "",
    "journal_dirname": "Journal",
    "private_key_name": "private.pem",
    "active_theme": "vt220_green",
}

PUBLIC_KEY_NAME = "public.pem"
ENTRY_SUFFIX = ".enc"
ARCHIVE_SUFFIX = ".zip"
FALLBACK_EDITOR = "vim"

ENTRY_NAME_RE = re.compile(r"^entry_(\d+)\.enc$")

def _config_dir() -> Path:
    """Return the config directory path for this platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base) / APP_NAME

def _config_path() -> Path:
    return _config_dir() / "config.json"

def load_config() -> Dict[str, object]:
    """Load the merged configuration (defaults + file)."""
    path = _config_path()
    if not path.exists():
        save_config(DEFAULT_CONFIG)
        return json.loads(json.dumps(DEFAULT_CONFIG))
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        raise JournalError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise JournalError(f"Invalid config file {path}: expected a JSON object")
    merged = json.loads(json.dumps(DEFAULT_CONFIG))
    merged.update(data)
    return merged

def save_config(cfg: Dict[str, object]) -> None:
    """Persist *cfg* to the JSON config file."""
    _config_dir().mkdir(parents=True, exist_ok=True)
    with _config_path().open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)


# ---------------------------------------------------------------------
# Journal layout
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class JournalPaths:
    """Locations of everything a journal rooted at *root* owns."""

    root: Path
    journal_dir: Path
    public_key: Path
    private_key: Path
    archive: Path


@dataclass(frozen=True)
class EntryInfo:
    """One encrypted entry file as listed in the journal directory."""

    name: str
    path: Path
    size: int
    modified: datetime


def journal_paths(root: Path, cfg: Optional[Dict[str, object]] = None) -> JournalPaths:
    """Resolve the journal layout below *root*."""
    cfg = cfg if cfg is not None else load_config()
    root = Path(root)
    dirname = str(cfg.get("journal_dirname") or DEFAULT_CONFIG["journal_dirname"])
    keyname = str(cfg.get("private_key_name") or DEFAULT_CONFIG["private_key_name"])
    journal_dir = root / dirname
    return JournalPaths(
        root=root,
        journal_dir=journal_dir,
        public_key=journal_dir / PUBLIC_KEY_NAME,
        private_key=root / keyname,
        archive=root / f"{dirname}{ARCHIVE_SUFFIX}",
    )

def require_journal(paths: JournalPaths) -> None:
    if not paths.journal_dir.is_dir():
        raise JournalError("Journal not initialized. Please run 'joman init' first.")

def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise JournalError(f"{what} not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise JournalError(f"{what} is not UTF-8 text: {path}") from exc
    except OSError as exc:
        raise JournalError(f"Failed to read {what.lower()}: {exc}") from exc

def load_public_key(paths: JournalPaths) -> str:
    """Return the journal's public key PEM text."""
    require_journal(paths)
    return _read_text(paths.public_key, "Public key")

def load_private_key(key_path: Path) -> str:
    """Return the PEM text of the private key at *key_path*."""
    return _read_text(Path(key_path), "Private key")


# ---------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------

def init_journal(root: Path, cfg: Optional[Dict[str, object]] = None) -> JournalPaths:
    """Create the journal directory and its keypair.

    Refuses to run when either the directory or the private key already
    exists: a journal's keys are never regenerated implicitly.
    """
    paths = journal_paths(root, cfg)
    if paths.journal_dir.exists():
        raise JournalError("Journal already initialized in this directory.")
    if paths.private_key.exists():
        raise JournalError(f"Refusing to overwrite existing private key: {paths.private_key}")

    private_pem, public_pem = crypto.generate_keypair()

    try:
        paths.journal_dir.mkdir(parents=True)
        paths.public_key.write_text(public_pem, encoding="utf-8")
        fd = os.open(paths.private_key, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(private_pem)
    except OSError as exc:
        raise JournalError(f"Failed to initialize journal: {exc}") from exc

    logger.info("Initialized journal at %s", paths.journal_dir)
    return paths


# ---------------------------------------------------------------------
# Entry naming
# ---------------------------------------------------------------------

def next_entry_name(existing: Iterable[str]) -> str:
    """Return ``entry_<N+1>.enc`` where N is the highest index in *existing*."""
    max_index = 0
    for name in existing:
        m = ENTRY_NAME_RE.match(name)
        if m:
            max_index = max(max_index, int(m.group(1)))
    return f"entry_{max_index + 1}{ENTRY_SUFFIX}"

def entry_filename(title: str) -> str:
    """Map a user supplied title or source filename to an entry filename."""
    title = title.strip()
    if not title or title in {".", ".."} or "/" in title or "\\" in title:
        raise JournalError(f"Invalid entry title: {title!r}")
    return f"{title}{ENTRY_SUFFIX}"

def _write_entry(paths: JournalPaths, filename: str, blob: str, overwrite: bool) -> Path:
    dest = paths.journal_dir / filename
    if dest.exists() and not overwrite:
        raise JournalError(f"Entry already exists: {dest.name}")
    try:
        dest.write_text(blob, encoding="ascii")
    except OSError as exc:
        raise JournalError(f"Failed to write journal entry: {exc}") from exc
    logger.debug("Wrote %s (%d bytes)", dest, len(blob))
    return dest


# ---------------------------------------------------------------------
# Adding entries
# ---------------------------------------------------------------------

def add_text(root: Path, text: str, title: Optional[str] = None,
             overwrite: bool = False) -> Path:
    """Encrypt *text* as a new entry; auto-name it when *title* is None."""
    paths = journal_paths(root)
    public_pem = load_public_key(paths)
    if title:
        filename = entry_filename(title)
    else:
        filename = next_entry_name(p.name for p in paths.journal_dir.iterdir() if p.is_file())
    blob = crypto.encrypt(text, public_pem)
    return _write_entry(paths, filename, blob, overwrite)

def add_file(root: Path, file_path: Path, overwrite: bool = False) -> Path:
    """Encrypt the text file at *file_path* into ``<name>.enc``."""
    file_path = Path(file_path)
    if not file_path.is_file():
        raise JournalError(f"File not found: {file_path}")
    plaintext = _read_text(file_path, "File")
    return add_text(root, plaintext, title=file_path.name, overwrite=overwrite)

def add_directory(root: Path, dir_path: Path, overwrite: bool = False) -> List[Path]:
    """Encrypt every regular file directly inside *dir_path*."""
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        raise JournalError(f"Directory not found: {dir_path}")

    paths = journal_paths(root)
    public_pem = load_public_key(paths)

    # Read everything first so a bad file leaves the journal untouched
    sources = sorted(p for p in dir_path.iterdir() if p.is_file())
    pending = [(entry_filename(p.name), _read_text(p, "File")) for p in sources]
    seen = set()
    for filename, _ in pending:
        if filename in seen:
            raise JournalError(f"Two files in {dir_path} map to the same entry: {filename}")
        seen.add(filename)
    if not overwrite:
        for filename, _ in pending:
            if (paths.journal_dir / filename).exists():
                raise JournalError(f"Entry already exists: {filename}")

    written = [
        _write_entry(paths, filename, crypto.encrypt(text, public_pem), overwrite=True)
        for filename, text in pending
    ]
    logger.info("Loaded %d entries from %s", len(written), dir_path)
    return written


# ---------------------------------------------------------------------
# Editor-driven entries
# ---------------------------------------------------------------------

def resolve_editor(editor: Optional[str] = None) -> List[str]:
    """Return the editor command line as an argv list."""
    cmd = editor or str(load_config().get("editor") or "")
    cmd = cmd or os.environ.get("VISUAL") or os.environ.get("EDITOR") or FALLBACK_EDITOR
    return shlex.split(cmd)

def edit_text(editor: Optional[str] = None, initial: str = "") -> str:
    """Open *editor* on a scratch file and return what the user saved.

    The scratch file is removed whatever happens.
    """
    fd, tmp = tempfile.mkstemp(prefix="joman_", suffix=".md")
    tmp_path = Path(tmp)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(initial)
        argv = resolve_editor(editor) + [str(tmp_path)]
        logger.debug("Launching editor: %s", argv[0])
        try:
            result = subprocess.run(argv)
        except OSError as exc:
            raise JournalError(f"Failed to open editor: {exc}") from exc
        if result.returncode != 0:
            raise JournalError("Editor exited with an error.")
        return _read_text(tmp_path, "Scratch file")
    finally:
        tmp_path.unlink(missing_ok=True)

def new_entry(root: Path, title: Optional[str] = None, editor: Optional[str] = None,
              overwrite: bool = False) -> Path:
    """Compose a new entry in an external editor and store it encrypted."""
    paths = journal_paths(root)
    require_journal(paths)
    if title:
        # Fail before the user spends time writing
        name = entry_filename(title)
        if (paths.journal_dir / name).exists() and not overwrite:
            raise JournalError(f"Entry already exists: {name}")

    text = edit_text(editor)
    if not text.strip():
        raise JournalError("Journal entry is empty. Aborting.")
    return add_text(root, text, title=title, overwrite=overwrite)


# ---------------------------------------------------------------------
# Reading and listing
# ---------------------------------------------------------------------

def resolve_entry(root: Path, entry: str) -> Path:
    """Find *entry* by name inside the journal directory, or as a path.

    A bare name is looked up in the journal first; anything with a
    directory part is taken as a path.
    """
    path = Path(entry)
    if path.name == entry:
        paths = journal_paths(root)
        for candidate in (paths.journal_dir / entry, paths.journal_dir / f"{entry}{ENTRY_SUFFIX}"):
            if candidate.is_file():
                return candidate
    if path.is_file():
        return path
    raise JournalError(f"File not found: {entry}")

def read_entry(root: Path, entry: str, key_path: Path) -> str:
    """Decrypt one entry with the private key stored at *key_path*."""
    path = resolve_entry(root, entry)
    blob = _read_text(path, "Entry file")
    private_pem = load_private_key(key_path)
    return crypto.decrypt(blob, private_pem)

def list_entries(root: Path) -> List[EntryInfo]:
    """Return the encrypted entries of the journal, sorted by name."""
    paths = journal_paths(root)
    require_journal(paths)
    out: List[EntryInfo] = []
    for p in sorted(paths.journal_dir.iterdir()):
        if p.is_file() and p.name.endswith(ENTRY_SUFFIX):
            st = p.stat()
            out.append(EntryInfo(p.name, p, st.st_size, datetime.fromtimestamp(st.st_mtime)))
    return out


# ---------------------------------------------------------------------
# Packaging
# ---------------------------------------------------------------------

def zip_journal(root: Path) -> Path:
    """Write the journal directory to ``<dirname>.zip`` beside it."""
    paths = journal_paths(root)
    require_journal(paths)
    base = paths.journal_dir.parent
    try:
        with zipfile.ZipFile(paths.archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for p in sorted(paths.journal_dir.rglob("*")):
                if p.is_file() and p.resolve() != paths.private_key.resolve():
                    zf.write(p, p.relative_to(base).as_posix())
    except OSError as exc:
        raise JournalError(f"Failed to create archive: {exc}") from exc
    logger.info("Archived %s to %s", paths.journal_dir, paths.archive)
    return paths.archive
