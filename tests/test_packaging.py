from __future__ import annotations

from pathlib import Path


def test_pyproject_declares_runtime_and_test_dependencies() -> None:
    pyproject = (Path(__file__).resolve().parents[1] / "pyproject.toml").read_text(encoding="utf-8")
    assert "PyYAML" in pyproject
    assert "[project.optional-dependencies]" in pyproject
    assert "pytest" in pyproject
    assert 'labconf = "labconf.cli:main"' in pyproject
