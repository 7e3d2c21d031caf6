"""Central cleaner registry."""

from __future__ import annotations

import logging
from typing import Iterator

from devsweep.models.cleaner import Cleaner, CleanerOptions

log = logging.getLogger(__name__)


class CleanerRegistry:
    """Maps cleaner tokens to cleaner classes.

    Cleaners take per-invocation options (search root, engine flags), so
    the registry stores classes and builds an instance on demand.
    """

    def __init__(self) -> None:
        self._cleaners: dict[str, type[Cleaner]] = {}

    def register(self, cls: type[Cleaner]) -> None:
        """Register a cleaner class under its ``id``."""
        token = cls.id
        if not isinstance(token, str):
            log.warning("Cleaner class %s has no string id, skipping", cls.__name__)
            return
        if token in self._cleaners:
            log.warning("Cleaner '%s' already registered, skipping duplicate", token)
            return
        self._cleaners[token] = cls
        log.debug("Registered cleaner: %s (%s)", token, cls.__name__)

    def get(self, token: str) -> type[Cleaner] | None:
        """Get a cleaner class by its token."""
        return self._cleaners.get(token)

    def create(self, token: str, options: CleanerOptions | None = None) -> Cleaner:
        """Build the cleaner registered under *token*.

        Raises:
            KeyError: If no cleaner is registered under *token*.
        """
        cls = self._cleaners.get(token)
        if cls is None:
            raise KeyError(token)
        return cls.from_options(options or CleanerOptions())

    def tokens(self) -> list[str]:
        """All registered tokens, sorted."""
        return sorted(self._cleaners)

    def __len__(self) -> int:
        return len(self._cleaners)

    def __iter__(self) -> Iterator[type[Cleaner]]:
        return iter(self._cleaners[t] for t in self.tokens())

    def __contains__(self, token: str) -> bool:
        return token in self._cleaners
