"""File tools: create_file, replace_text, append_text, read_file, lock_status."""
from pathlib import Path

from fastmcp import FastMCP
from memsafe.errors import (
    error,
    LockTimeout,
    NoMatch,
    OutsideRoot,
    NOT_FOUND,
    NO_MATCH,
    LOCK_TIMEOUT,
    OUTSIDE_ROOT,
    INVALID_ARGUMENT,
    IO_ERROR,
)
from memsafe.lock import LockManager
from memsafe.paths import resolve_target_path
from memsafe.update import Operation, UpdateResult, update_file, read_text


def _describe(relative: str, result: UpdateResult) -> str:
    if result.modified and result.match is not None:
        return f"Updated `{relative}` ({result.match.value} match)."
    if result.modified:
        return f"Updated `{relative}`."
    if result.created:
        return f"Created empty `{relative}`."
    return f"No changes needed for `{relative}`."


def read_file(relative: str, root: Path) -> str:
    """Return the last committed content of a file. No lock is needed to read."""
    path = resolve_target_path(relative, root)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {relative}")
    return read_text(path)


def lock_status(relative: str, root: Path, locks: LockManager) -> str:
    """Describe the lock currently held on a file, if any."""
    info = locks.inspect(resolve_target_path(relative, root))
    if info is None:
        return f"`{relative}` is not locked."
    state = "stale" if info.stale else "held"
    return f"`{relative}` is locked ({state}, age {info.age_ms / 1000:.1f}s)."


def _run(relative: str, operation: Operation, root: Path, locks: LockManager) -> str:
    """Resolve, update and map every failure to a structured error string."""
    try:
        path = resolve_target_path(relative, root)
        return _describe(relative, update_file(path, operation, locks))
    except OutsideRoot as e:
        return error(OUTSIDE_ROOT, str(e))
    except FileNotFoundError as e:
        return error(NOT_FOUND, str(e))
    except NoMatch as e:
        return error(NO_MATCH, str(e))
    except LockTimeout as e:
        return error(LOCK_TIMEOUT, str(e))
    except UnicodeDecodeError as e:
        return error(IO_ERROR, str(e))
    except ValueError as e:
        return error(INVALID_ARGUMENT, str(e))
    except OSError as e:
        return error(IO_ERROR, str(e))


def _read(relative: str, root: Path) -> str:
    try:
        return read_file(relative, root)
    except FileNotFoundError as e:
        return error(NOT_FOUND, str(e))
    except OutsideRoot as e:
        return error(OUTSIDE_ROOT, str(e))
    except (UnicodeDecodeError, OSError) as e:
        return error(IO_ERROR, str(e))
    except ValueError as e:
        return error(INVALID_ARGUMENT, str(e))


# --- FastMCP tool registration ---

def _register(mcp: FastMCP, root: Path, locks: LockManager) -> None:
    @mcp.tool()
    def create_file_tool(path: str, content: str = "") -> str:
        """Create a file, or overwrite its whole body when content is given."""
        return _run(path, Operation.create(content or None), root, locks)

    @mcp.tool()
    def replace_text_tool(path: str, search: str, replacement: str) -> str:
        """Replace the first occurrence of search with replacement.

        Falls back to a whitespace-insensitive match; that fallback rewrites the
        whole file with LF endings and no trailing whitespace.
        """
        return _run(path, Operation.replace(search, replacement), root, locks)

    @mcp.tool()
    def append_text_tool(path: str, content: str) -> str:
        """Append content to the end of an existing file on its own line."""
        return _run(path, Operation.append(content), root, locks)

    @mcp.tool()
    def read_file_tool(path: str) -> str:
        """Return the last committed content of a file."""
        return _read(path, root)

    @mcp.tool()
    def lock_status_tool(path: str) -> str:
        """Report whether a file is currently locked and how old the lock is."""
        try:
            return lock_status(path, root, locks)
        except OutsideRoot as e:
            return error(OUTSIDE_ROOT, str(e))
        except ValueError as e:
            return error(INVALID_ARGUMENT, str(e))
