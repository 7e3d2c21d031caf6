"""Cleaner for Rust build output."""

from __future__ import annotations

from devsweep.models.cleaner import ProjectDirCleaner


class RustCleaner(ProjectDirCleaner):
    """Removes Cargo ``target`` directories. Cargo rebuilds them on demand."""

    id = "rust"
    name = "Rust"
    description = "Cargo target directories next to a Cargo.toml"
    icon = "🦀"
    _dir_names = ("target",)
    _markers = ("Cargo.toml",)
