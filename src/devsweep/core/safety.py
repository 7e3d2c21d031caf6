"""Safety classification of application cache entries."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from devsweep.errors import ConfigError
from devsweep.models.item import NEEDS_REVIEW, SAFE, UNKNOWN, ScanResult
from devsweep.utils import xdg_config_home

log = logging.getLogger(__name__)

SAFETY_TABLE_FILE = xdg_config_home() / "devsweep" / "safety.json"

# Known cache directory names and their tier. Matching is exact: the
# identifier is the cache entry's directory name (a bundle identifier on
# macOS, a tool name under XDG_CACHE_HOME). Extend it through the JSON
# table instead of editing this module.
DEFAULT_SAFETY_TABLE: dict[str, list[str]] = {
    SAFE: [
        "Homebrew",
        "pip",
        "pipenv",
        "pypoetry",
        "uv",
        "yarn",
        "npm",
        "pnpm",
        "CocoaPods",
        "go-build",
        "node-gyp",
        "typescript",
        "ms-playwright",
        "Cypress",
        "electron",
        "electron-builder",
        "mesa_shader_cache",
        "thumbnails",
        "com.apple.bird",
        "com.apple.metal",
        "com.spotify.client",
        "spotify",
        "com.microsoft.VSCode",
        "com.microsoft.VSCode.ShipIt",
        "JetBrains",
        "com.tinyspeck.slackmacgap",
        "com.hnc.Discord",
        "com.docker.docker",
    ],
    NEEDS_REVIEW: [
        "com.apple.Safari",
        "com.apple.Music",
        "com.apple.Photos",
        "com.apple.mail",
        "CloudKit",
        "Google",
        "google-chrome",
        "Firefox",
        "mozilla",
        "fontconfig",
        "huggingface",
        "torch",
    ],
}


class SafetyClassifier:
    """Maps cache entry identifiers to a safety tier.

    Lookup is an exact match; anything unknown is ``UNKNOWN``.
    """

    def __init__(self, safe: Iterable[str] = (), needs_review: Iterable[str] = ()) -> None:
        self._tiers: dict[str, str] = {}
        for identifier in needs_review:
            self._tiers[identifier] = NEEDS_REVIEW
        for identifier in safe:
            self._tiers[identifier] = SAFE

    @classmethod
    def default(cls) -> SafetyClassifier:
        """Classifier built from the shipped default table."""
        return cls(DEFAULT_SAFETY_TABLE[SAFE], DEFAULT_SAFETY_TABLE[NEEDS_REVIEW])

    @classmethod
    def load(cls, path: Path | None = None) -> SafetyClassifier:
        """Default table extended by the JSON table at *path*.

        The file has the shape ``{"safe": [...], "needs_review": [...]}``.
        An entry in the file overrides the default tier of the same
        identifier. A missing file at the default location is not an error.

        Raises:
            ConfigError: If the file is unreadable or malformed, or an
                explicitly given *path* does not exist.
        """
        classifier = cls.default()
        table_path = path or SAFETY_TABLE_FILE
        if not table_path.exists():
            if path is not None:
                raise ConfigError(f"Safety table not found: {table_path}")
            return classifier

        try:
            data = json.loads(table_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigError(f"Could not load safety table {table_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Safety table {table_path} must be a JSON object")

        for tier in (NEEDS_REVIEW, SAFE):
            identifiers = data.get(tier, [])
            if not isinstance(identifiers, list) or not all(isinstance(i, str) for i in identifiers):
                raise ConfigError(f"Safety table {table_path}: '{tier}' must be a list of strings")
            for identifier in identifiers:
                classifier._tiers[identifier] = tier

        log.debug("Loaded safety table from %s", table_path)
        return classifier

    def classify(self, identifier: str) -> str:
        """Return the tier of *identifier*."""
        return self._tiers.get(identifier, UNKNOWN)

    def __len__(self) -> int:
        return len(self._tiers)


def filter_safe(result: ScanResult) -> ScanResult:
    """Return a copy of *result* keeping only items classified ``SAFE``.

    Applied before execution, so it composes with any run mode.
    """
    kept = [item for item in result.items if item.safety == SAFE]
    dropped = len(result.items) - len(kept)
    if dropped:
        log.info("Safe-only filter dropped %d of %d items", dropped, len(result.items))
    return replace(result, items=kept, warnings=list(result.warnings))
