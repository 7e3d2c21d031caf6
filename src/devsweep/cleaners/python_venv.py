"""Cleaner for Python virtual environments."""

from __future__ import annotations

from pathlib import Path

from devsweep.models.cleaner import GIB, ProjectDirCleaner


class PythonVenvCleaner(ProjectDirCleaner):
    """Removes project-local virtual environments.

    A directory only counts when it looks like a venv, so an unrelated
    ``env/`` folder is left alone and searched like any other directory.
    """

    id = "python"
    name = "Python"
    description = "venv, .venv, env and .env virtual environments"
    icon = "🐍"
    large_bytes = 3 * GIB
    _dir_names = ("venv", ".venv", "env", ".env")

    def _accept(self, path: Path) -> bool:
        return (path / "pyvenv.cfg").is_file() or (path / "bin" / "activate").is_file()

    def _describe(self, path: Path) -> str:
        return f"Virtual environment {path.name} in {path.parent}"
