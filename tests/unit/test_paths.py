"""Unit tests for root-relative path resolution."""
from pathlib import Path

import pytest

from memsafe.paths import resolve_target_path, tmp_path


def test_resolves_inside_root(root: Path) -> None:
    assert resolve_target_path("MEMORY.md", root) == (root / "MEMORY.md").resolve()


def test_nested_path_allowed(root: Path) -> None:
    assert resolve_target_path("daily/2026-10-19.md", root).parent == (root / "daily").resolve()


def test_traversal_rejected(root: Path) -> None:
    with pytest.raises(ValueError, match="escapes root"):
        resolve_target_path("../../etc/passwd", root)


@pytest.mark.parametrize("name", ["MEMORY.md.lock", "MEMORY.md.tmp"])
def test_reserved_siblings_rejected(root: Path, name: str) -> None:
    with pytest.raises(ValueError, match="reserved"):
        resolve_target_path(name, root)


def test_tmp_path_is_sibling_with_suffix(root: Path) -> None:
    target = root / "MEMORY.md"
    assert tmp_path(target) == root / "MEMORY.md.tmp"
