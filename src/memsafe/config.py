import os
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class LockConfig:
    """Timing policy for LockManager.

    stale_ms is a generous upper bound on any single protected section; a
    marker older than that is assumed to belong to a crashed holder.
    """

    stale_ms: int = 15_000
    retry_delay_ms: int = 200
    jitter_ms: int = 100
    max_attempts: int = 15

    def __post_init__(self) -> None:
        if self.stale_ms <= 0:
            raise ValueError(f"stale_ms must be positive, got {self.stale_ms}")
        if self.retry_delay_ms < 0 or self.jitter_ms < 0:
            raise ValueError("retry_delay_ms and jitter_ms must not be negative")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")


def get_root() -> Path:
    raw = os.environ.get("MEMSAFE_ROOT")
    if not raw:
        raise ConfigError("MEMSAFE_ROOT environment variable is not set")

    path = Path(raw).expanduser().resolve()

    if not path.is_dir():
        raise ConfigError(f"Root directory does not exist: {path}")

    return path


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def get_lock_config() -> LockConfig:
    defaults = LockConfig()
    try:
        return LockConfig(
            stale_ms=_env_int("MEMSAFE_LOCK_STALE_MS", defaults.stale_ms),
            retry_delay_ms=_env_int("MEMSAFE_LOCK_RETRY_DELAY_MS", defaults.retry_delay_ms),
            jitter_ms=_env_int("MEMSAFE_LOCK_JITTER_MS", defaults.jitter_ms),
            max_attempts=_env_int("MEMSAFE_LOCK_MAX_ATTEMPTS", defaults.max_attempts),
        )
    except ValueError as e:
        raise ConfigError(str(e))
