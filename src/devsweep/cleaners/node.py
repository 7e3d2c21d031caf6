"""Cleaner for Node.js dependency directories."""

from __future__ import annotations

from devsweep.models.cleaner import GIB, ProjectDirCleaner


class NodeCleaner(ProjectDirCleaner):
    """Removes ``node_modules`` directories. A package manager install restores them."""

    id = "node"
    name = "Node.js"
    description = "node_modules directories next to a package.json"
    icon = "📦"
    large_bytes = 10 * GIB
    _dir_names = ("node_modules",)
    _markers = ("package.json",)
