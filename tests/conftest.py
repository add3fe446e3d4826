from pathlib import Path

import pytest

from memsafe.config import LockConfig
from memsafe.lock import LockManager


MEMORY_SEED = "# Memory\n\n## Preferences\n- prefers tabs\n\n## Projects\n- memsafe\n"


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Create a temp root directory holding a seeded MEMORY.md."""
    root_path = tmp_path / "notes"
    root_path.mkdir()
    (root_path / "MEMORY.md").write_text(MEMORY_SEED)
    return root_path


@pytest.fixture(autouse=True)
def set_root_env(root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Set MEMSAFE_ROOT to the temp root for every test."""
    monkeypatch.setenv("MEMSAFE_ROOT", str(root))


@pytest.fixture
def locks() -> LockManager:
    """A lock manager with short waits so contention tests stay fast."""
    return LockManager(LockConfig(stale_ms=2_000, retry_delay_ms=5, jitter_ms=5, max_attempts=400))
