"""Cross-process path locks backed by an atomically created marker directory.

A lock on ``notes.md`` is the existence of the directory ``notes.md.lock``.
os.mkdir() either creates it or fails with FileExistsError in a single
syscall, so two processes can never both succeed. Nothing is held in memory:
threads in one process and unrelated processes contend the same way.

A holder that crashes leaves its marker behind. Waiters treat a marker whose
mtime is older than LockConfig.stale_ms as abandoned and prune it. Pruning is
best effort; losing that race just means waiting like everyone else.
"""
from __future__ import annotations

import logging
import os
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from memsafe.config import LockConfig
from memsafe.errors import LockTimeout

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"


@dataclass(frozen=True)
class LockHandle:
    target: Path
    marker: Path


@dataclass(frozen=True)
class LockInfo:
    marker: Path
    age_ms: float
    stale: bool


def marker_path(target: Path) -> Path:
    return Path(f"{target}{LOCK_SUFFIX}")


class LockManager:
    def __init__(self, config: LockConfig | None = None) -> None:
        self.config = config or LockConfig()

    def _age_ms(self, marker: Path) -> float:
        # raises FileNotFoundError if the marker vanished since the last look
        return (time.time() - marker.stat().st_mtime) * 1000

    def _wait_delay(self) -> float:
        jitter = random.uniform(0, self.config.jitter_ms)
        return (self.config.retry_delay_ms + jitter) / 1000

    def acquire(self, target: Path) -> LockHandle:
        """Block until the marker for *target* is ours.

        Raises LockTimeout after max_attempts wait cycles. Stale prunes and
        markers that vanish mid-check retry immediately and do not count as
        a wait cycle.
        """
        target = Path(target)
        marker = marker_path(target)
        attempts = 0

        while attempts < self.config.max_attempts:
            try:
                os.mkdir(marker)
                logger.debug("Lock acquired: %s", marker)
                return LockHandle(target=target, marker=marker)
            except FileExistsError:
                pass

            try:
                age = self._age_ms(marker)
            except FileNotFoundError:
                continue

            if age > self.config.stale_ms:
                logger.warning("Found stale lock %s (age: %dms), pruning", marker, age)
                try:
                    os.rmdir(marker)
                    logger.info("Stale lock removed: %s", marker)
                    continue
                except OSError as e:
                    logger.debug("Could not prune %s, another waiter likely did: %s", marker, e)

            attempts += 1
            delay = self._wait_delay()
            logger.debug("Waiting %.3fs for %s (%d/%d)", delay, marker, attempts, self.config.max_attempts)
            time.sleep(delay)

        raise LockTimeout(target, attempts)

    def release(self, handle: LockHandle) -> None:
        """Remove the marker for *handle*. Never raises."""
        try:
            os.rmdir(handle.marker)
            logger.debug("Lock released: %s", handle.marker)
        except FileNotFoundError:
            logger.debug("Lock already gone on release: %s", handle.marker)
        except OSError as e:
            logger.warning("Failed to release lock %s: %s", handle.marker, e)

    @contextmanager
    def hold(self, target: Path) -> Iterator[LockHandle]:
        """Hold the lock on *target* for the duration of the with-block."""
        handle = self.acquire(target)
        try:
            yield handle
        finally:
            self.release(handle)

    def inspect(self, target: Path) -> LockInfo | None:
        """Describe the current marker for *target*, or None if unlocked."""
        marker = marker_path(Path(target))
        try:
            age = self._age_ms(marker)
        except FileNotFoundError:
            return None
        return LockInfo(marker=marker, age_ms=age, stale=age > self.config.stale_ms)
