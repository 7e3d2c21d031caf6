"""Cleaner for Flutter and Dart build output."""

from __future__ import annotations

from devsweep.models.cleaner import ProjectDirCleaner


class FlutterCleaner(ProjectDirCleaner):
    """Removes ``build`` and ``.dart_tool`` directories of Flutter projects."""

    id = "flutter"
    name = "Flutter"
    description = "build and .dart_tool directories next to a pubspec.yaml"
    icon = "💙"
    _dir_names = ("build", ".dart_tool")
    _markers = ("pubspec.yaml",)
