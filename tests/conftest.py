"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

import devsweep.core.safety as safety
from devsweep.settings import Settings

MB = 1024 * 1024


def make_file(path: Path, size: int) -> Path:
    """Create a file of *size* bytes. Large sizes are sparse, so they cost no disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Point settings and the safety table at a temp config directory."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr(safety, "SAFETY_TABLE_FILE", config_home / "devsweep" / "safety.json")
    monkeypatch.setattr(Settings, "_instance", None)
    return config_home / "devsweep" / "settings.json"


@pytest.fixture
def projects(tmp_path):
    """A search root with Rust, Node and Python projects.

    Layout::

        root/
          alpha/        Cargo.toml, target/ (10 MB)
          beta/         Cargo.toml, target/ (20 MB)
          gamma/        Cargo.toml, target/ (30 MB)
          web/          package.json, node_modules/ (5 MB)
          notes/target/ no Cargo.toml beside it
          tool/         .venv/ with pyvenv.cfg
    """
    root = tmp_path / "root"
    for name, size in (("alpha", 10), ("beta", 20), ("gamma", 30)):
        (root / name).mkdir(parents=True)
        (root / name / "Cargo.toml").write_text('[package]\nname = "x"\n')
        make_file(root / name / "target" / "debug" / "app", size * MB)

    (root / "web").mkdir()
    (root / "web" / "package.json").write_text("{}")
    make_file(root / "web" / "node_modules" / "left-pad" / "index.js", 5 * MB)

    make_file(root / "notes" / "target" / "readme.txt", 100)

    venv = root / "tool" / ".venv"
    make_file(venv / "pyvenv.cfg", 64)
    make_file(venv / "lib" / "site.py", 2048)
    return root
