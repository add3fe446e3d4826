"""Path utilities shared by the tool layer."""
from pathlib import Path

from memsafe.errors import OutsideRoot
from memsafe.lock import LOCK_SUFFIX

TMP_SUFFIX = ".tmp"
_RESERVED_SUFFIXES = (LOCK_SUFFIX, TMP_SUFFIX)


def tmp_path(target: Path) -> Path:
    """Sibling file used for the write-then-rename commit."""
    return Path(f"{target}{TMP_SUFFIX}")


def resolve_target_path(relative: str, root: Path) -> Path:
    """Resolve a relative file path inside the root directory.

    Raises OutsideRoot if the path escapes the root (traversal attempt), and
    ValueError if it names one of the lock/temp siblings, which only the
    engine may touch.
    """
    resolved = (root / relative).resolve()
    try:
        resolved.relative_to(root.resolve())
    except ValueError:
        raise OutsideRoot(f"Path '{relative}' escapes root directory")
    if resolved.name.endswith(_RESERVED_SUFFIXES):
        raise ValueError(f"Path '{relative}' names a reserved lock or temp file")
    return resolved
