import logging
from pathlib import Path

from fastmcp import FastMCP

from memsafe.config import get_root, get_lock_config, ConfigError
from memsafe.lock import LockManager

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="memsafe",
    instructions=(
        "You are connected to a directory of shared text files (such as MEMORY.md) "
        "that other agents and processes may be editing at the same time. "
        "Always change files through these tools, never by rewriting them wholesale: "
        "each tool takes the file's lock, re-reads it, and commits atomically. "
        "A NO_MATCH error means the file changed or the search text is wrong; read it again."
    ),
)

# Explicit registration: server -> tools (one direction only).
from memsafe.tools import files  # noqa: E402


def _register_all(root: Path, locks: LockManager) -> None:
    files._register(mcp, root, locks)


def main() -> None:
    try:
        root = get_root()
        lock_config = get_lock_config()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        raise SystemExit(1)

    logger.info(
        "memsafe starting, root: %s (stale after %dms, %d attempts)",
        root, lock_config.stale_ms, lock_config.max_attempts,
    )

    _register_all(root, LockManager(lock_config))
    mcp.run()


if __name__ == "__main__":
    main()
