"""
Persistence Adapter
===================

The store is a single CSV file under the user's data directory:

    ~/.local/share/budget-tracker/expenses.csv

Writes only ever append one line.  Reads parse the whole file and fail on
the first bad line; there is no best-effort load.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from budget_tracker.config import DATA_SUBDIR, HEADER, STORE_FILENAME, editor_command
from budget_tracker.errors import (
    EditorFailed,
    HomeDirectoryUnavailable,
    MalformedRecord,
    StorageUnavailable,
)
from budget_tracker.records import Expense, deserialize, serialize

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────
# PATHS
# ──────────────────────────────────────────────────────────────────────

def data_dir() -> Path:
    """Return ~/.local/share/budget-tracker (not created here)."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise HomeDirectoryUnavailable(
            "Unable to determine the user's home directory"
        ) from exc
    return home.joinpath(*DATA_SUBDIR)


def resolve_path(filename: str = STORE_FILENAME) -> Path:
    return data_dir() / filename


def _store_path(path: str | Path | None) -> Path:
    return Path(path) if path is not None else resolve_path()


# ──────────────────────────────────────────────────────────────────────
# BOOTSTRAP
# ──────────────────────────────────────────────────────────────────────

def ensure_data_dir(directory: Path | None = None) -> Path:
    directory = directory if directory is not None else data_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageUnavailable(
            f"Cannot create data directory {directory}: {exc.strerror or exc}"
        ) from exc
    return directory


def initialize_store(path: str | Path | None = None) -> Path:
    """
    Create the data directory and a header-only store if they are missing.
    An existing store is left untouched.
    """
    store = _store_path(path)
    ensure_data_dir(store.parent)
    if store.exists():
        return store

    logger.info("Creating the store at %s", store)
    try:
        # "x" so a store created in the meantime is never truncated
        with store.open("x", encoding="utf-8", newline="") as fh:
            fh.write(HEADER + "\n")
    except FileExistsError:
        pass
    except OSError as exc:
        logger.error("Error creating store %s: %s", store, exc)
        raise StorageUnavailable(
            f"Cannot create store {store}: {exc.strerror or exc}"
        ) from exc
    return store


# ──────────────────────────────────────────────────────────────────────
# READ / WRITE
# ──────────────────────────────────────────────────────────────────────

def append(expense: Expense, path: str | Path | None = None) -> None:
    """Append one record.  The store must already exist."""
    store = _store_path(path)
    logger.debug("Appending to %s", store)
    line = serialize(expense)
    try:
        # "r+" fails on a missing file instead of creating a header-less one
        with store.open("rb+") as fh:
            end = fh.seek(0, 2)
            if end:
                fh.seek(end - 1)
                if fh.read(1) != b"\n":
                    # hand-edited file without a final newline
                    fh.write(b"\n")
            fh.write((line + "\n").encode("utf-8"))
    except OSError as exc:
        raise StorageUnavailable(
            f"Cannot open store {store} for writing: {exc.strerror or exc}"
        ) from exc
    logger.info("Added expense: %s", line)


def read_all(path: str | Path | None = None) -> list[Expense]:
    """
    Return every record in file order.

    The first line is the header and is skipped without validation.  Blank
    lines are ignored.  The first malformed line aborts the read with
    MalformedRecord.
    """
    store = _store_path(path)
    logger.debug("Reading %s", store)
    expenses: list[Expense] = []
    try:
        with store.open("r", encoding="utf-8", newline="") as fh:
            for line_number, line in enumerate(fh, start=1):
                if line_number == 1 or not line.strip():
                    continue
                try:
                    expenses.append(deserialize(line))
                except MalformedRecord as exc:
                    raise MalformedRecord(
                        f"{store}: {exc}", exc.line, line_number
                    ) from None
    except OSError as exc:
        raise StorageUnavailable(
            f"Cannot read store {store}: {exc.strerror or exc}"
        ) from exc
    except UnicodeDecodeError as exc:
        raise MalformedRecord(f"{store} is not valid UTF-8: {exc.reason}") from exc

    logger.debug("Read %d record(s)", len(expenses))
    return expenses


def load_or_initialize(path: str | Path | None = None) -> list[Expense]:
    """read_all(), creating an empty store first when it is missing."""
    try:
        return read_all(path)
    except StorageUnavailable as exc:
        logger.error("Error reading store, trying to create it: %s", exc)
    initialize_store(path)
    return read_all(path)


# ──────────────────────────────────────────────────────────────────────
# EXTERNAL EDITOR
# ──────────────────────────────────────────────────────────────────────

def open_in_external_editor(
    path: str | Path | None = None,
    editor: str | None = None,
) -> None:
    """Open the store in $EDITOR (default nano) and block until it exits."""
    store = _store_path(path)
    editor = editor or editor_command()
    argv = shlex.split(editor) + [str(store)]
    logger.info("Choosing %r as the editor", editor)

    try:
        result = subprocess.run(argv, check=False)
    except OSError as exc:
        raise EditorFailed(f"Could not start editor {editor!r}: {exc}") from exc

    if result.returncode != 0:
        raise EditorFailed(
            f"Editor {editor!r} exited with status {result.returncode}",
            returncode=result.returncode,
        )
    logger.info("Edited %s", store)
