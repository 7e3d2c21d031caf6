"""Example external cleaner for devsweep.

This demonstrates how to add a cleaner without touching devsweep itself.
Place cleaner directories in ~/.local/share/devsweep/plugins/ or list
their parent directory under "plugin_paths" in settings.json.
"""

from __future__ import annotations

from devsweep.models.cleaner import ProjectDirCleaner


class PyCacheCleaner(ProjectDirCleaner):
    """Removes ``__pycache__`` directories. Python recreates them on import."""

    id = "pycache"
    name = "Python bytecode"
    description = "__pycache__ directories"
    icon = "🐍"
    _dir_names = ("__pycache__",)
