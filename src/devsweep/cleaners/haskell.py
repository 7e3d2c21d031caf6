"""Cleaner for Haskell build output."""

from __future__ import annotations

from devsweep.models.cleaner import GIB, ProjectDirCleaner


class HaskellCleaner(ProjectDirCleaner):
    """Removes Stack and Cabal build directories."""

    id = "haskell"
    name = "Haskell"
    description = ".stack-work, dist and dist-newstyle directories of Cabal or Stack projects"
    icon = "λ"
    large_bytes = 2 * GIB
    _dir_names = (".stack-work", "dist", "dist-newstyle")
    _markers = ("*.cabal", "stack.yaml")
