"""Cleaner discovery: built-in modules plus external cleaner directories."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import pkgutil
from pathlib import Path
from types import ModuleType
from typing import Iterator

from devsweep.core.registry import CleanerRegistry
from devsweep.models.cleaner import Cleaner
from devsweep.settings import Settings
from devsweep.utils import xdg_data_home

log = logging.getLogger(__name__)

_USER_PLUGIN_DIR = xdg_data_home() / "devsweep" / "plugins"


def _find_cleaners_in_module(module: ModuleType) -> list[type[Cleaner]]:
    """Concrete Cleaner subclasses defined (not imported) in *module*."""
    return [
        obj
        for _, obj in inspect.getmembers(module, inspect.isclass)
        if issubclass(obj, Cleaner) and not inspect.isabstract(obj) and obj.__module__ == module.__name__
    ]


def _builtin_modules() -> Iterator[ModuleType]:
    import devsweep.cleaners as cleaners_pkg

    for _importer, modname, _ispkg in pkgutil.iter_modules(cleaners_pkg.__path__):
        try:
            yield importlib.import_module(f"devsweep.cleaners.{modname}")
        except Exception:
            log.exception("Failed to import built-in cleaner module: %s", modname)


def _module_file(entry: Path) -> Path | None:
    """The file to import for one directory entry, or None to ignore it.

    A package directory contributes ``cleaner.py`` (or its ``__init__.py``);
    a loose ``.py`` file contributes itself.
    """
    if entry.is_dir():
        if not (entry / "__init__.py").exists():
            return None
        cleaner_file = entry / "cleaner.py"
        return cleaner_file if cleaner_file.exists() else entry / "__init__.py"
    if entry.suffix == ".py" and entry.name != "__init__.py":
        return entry
    return None


def _import_file(module_file: Path, module_name: str) -> ModuleType | None:
    spec = importlib.util.spec_from_file_location(module_name, module_file)
    if spec is None or spec.loader is None:
        return None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _load_cleaners_from_directory(directory: Path) -> list[type[Cleaner]]:
    """Cleaner classes from every module in an external *directory*.

    A module that fails to import is logged and skipped.
    """
    if not directory.is_dir():
        return []

    found: list[type[Cleaner]] = []
    for entry in sorted(directory.iterdir()):
        module_file = _module_file(entry)
        if module_file is None:
            continue
        try:
            module = _import_file(module_file, f"devsweep_ext_cleaner_{entry.stem}")
        except Exception:
            log.exception("Failed to load cleaner from: %s", module_file)
            continue
        if module is not None:
            found.extend(_find_cleaners_in_module(module))
    return found


def external_dirs(settings: Settings) -> list[Path]:
    """External cleaner directories: the user directory, then ``plugin_paths``."""
    paths = settings.get("plugin_paths", [])
    if not isinstance(paths, list):
        log.warning("Setting 'plugin_paths' must be a list, ignoring")
        paths = []
    return [_USER_PLUGIN_DIR, *(Path(p).expanduser() for p in paths)]


def load_cleaners(registry: CleanerRegistry, settings: Settings | None = None) -> None:
    """Register built-in cleaners, then cleaners from external directories.

    A built-in token cannot be replaced by an external cleaner; the first
    registration of a token wins.
    """
    settings = settings or Settings.instance()

    for module in _builtin_modules():
        for cls in _find_cleaners_in_module(module):
            registry.register(cls)

    for directory in external_dirs(settings):
        for cls in _load_cleaners_from_directory(directory):
            registry.register(cls)

    log.info("Loaded %d cleaners", len(registry))
