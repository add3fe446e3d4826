"""Transactional read-modify-write of a single text file.

Every update runs acquire -> read -> transform -> atomic write -> release.
The file is always re-read after the lock is held, and new content reaches
the target only through atomic_write(), so concurrent readers see either the
old file or the new one, never a mix.
"""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from memsafe.errors import NoMatch
from memsafe.lock import LockManager
from memsafe.paths import tmp_path

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    CREATE = "create"
    REPLACE = "replace"
    APPEND = "append"


class MatchKind(str, Enum):
    EXACT = "exact"
    NORMALIZED = "normalized"


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    content: str | None = None
    search: str | None = None
    replacement: str | None = None

    @classmethod
    def create(cls, content: str | None = None) -> Operation:
        return cls(OperationKind.CREATE, content=content)

    @classmethod
    def replace(cls, search: str, replacement: str) -> Operation:
        return cls(OperationKind.REPLACE, search=search, replacement=replacement)

    @classmethod
    def append(cls, content: str) -> Operation:
        return cls(OperationKind.APPEND, content=content)


@dataclass(frozen=True)
class UpdateResult:
    path: Path
    modified: bool
    created: bool = False
    match: MatchKind | None = None


def normalize(text: str) -> str:
    """Canonicalize line endings to LF and strip trailing whitespace per line."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(line.rstrip() for line in text.split("\n"))


def _ensure_newline(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


def read_text(path: Path) -> str:
    # newline="" keeps CRLF intact so exact matching sees the raw bytes
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def atomic_write(path: Path, content: str) -> None:
    """Write *content* to *path* atomically via the sibling ``.tmp`` file.

    os.replace() is atomic when src and dst are on the same filesystem, which
    a sibling always is. The target's permission bits carry over to the
    new file.
    """
    tmp = tmp_path(path)
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            os.chmod(tmp, stat.S_IMODE(path.stat().st_mode))
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def apply_replace(content: str, search: str, replacement: str) -> tuple[str, MatchKind] | None:
    """Replace the first occurrence of *search*, exact first, then normalized.

    A normalized match returns the normalized *whole* file with the
    replacement applied, so every line of the file loses its trailing
    whitespace and CRLF/CR endings become LF. Line-oriented callers rely on
    that canonical form; do not narrow it to the matched region.

    Returns None when neither form matches.
    """
    if search in content:
        return content.replace(search, replacement, 1), MatchKind.EXACT

    norm_content = normalize(content)
    norm_search = normalize(search)
    # whitespace-only search text normalizes to bare line breaks or "" and would match anywhere
    if norm_search.strip() and norm_search in norm_content:
        return norm_content.replace(norm_search, replacement, 1), MatchKind.NORMALIZED

    return None


def apply_append(content: str, text: str) -> str:
    if not text:
        return content
    if content and not content.endswith("\n"):
        content += "\n"
    return content + _ensure_newline(text)


def _transform(path: Path, content: str, operation: Operation) -> tuple[str, MatchKind | None]:
    """Compute the new file body for *operation*. Raises on malformed input."""
    kind = OperationKind(operation.kind)  # ValueError for unknown kinds

    if kind == OperationKind.REPLACE:
        if operation.search is None or operation.replacement is None:
            raise ValueError("Replace requires both search and replacement text")
        if not operation.search:
            raise ValueError("Replace search text must not be empty")
        result = apply_replace(content, operation.search, operation.replacement)
        if result is None:
            raise NoMatch(path, operation.search)
        return result

    if kind == OperationKind.APPEND:
        if operation.content is None:
            raise ValueError("Append requires content")
        return apply_append(content, operation.content), None

    # create: given content becomes the whole body
    if operation.content:
        return _ensure_newline(operation.content), None
    return content, None


def update_file(path: Path, operation: Operation, locks: LockManager) -> UpdateResult:
    """Apply *operation* to the file at *path* under its cross-process lock.

    Raises FileNotFoundError (replace/append on a missing file), NoMatch,
    LockTimeout, ValueError (malformed operation) or OSError. The lock is
    released on every path out of this function, and on any failure the file
    keeps its last committed content. The one exception is create: a missing
    file is created empty before the lock is taken, and it stays behind if
    acquisition then fails (for instance with LockTimeout).
    """
    path = Path(path).resolve()
    created = False

    if operation.kind == OperationKind.CREATE:
        # the file must exist before it can be locked; content is written under the lock
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8"):
                pass
            created = True
            logger.info("Created empty file %s", path)
    elif not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with locks.hold(path):
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        current = read_text(path)
        new_content, match = _transform(path, current, operation)

        if match is not None:
            logger.info("%s match for replace in %s", match.value.capitalize(), path)

        if new_content == current:
            logger.info("No changes needed for %s", path)
            modified = False
        else:
            atomic_write(path, new_content)
            logger.info("Updated %s (%s)", path, OperationKind(operation.kind).value)
            modified = True

    return UpdateResult(path=path, modified=modified, created=created, match=match)
