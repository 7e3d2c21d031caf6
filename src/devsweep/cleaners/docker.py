"""Cleaner for unused Docker containers, images and volumes."""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any

from devsweep.errors import DeletionFailure, ScanError
from devsweep.models.cleaner import Cleaner, CleanerOptions
from devsweep.models.item import CleanableItem, ScanResult
from devsweep.utils import has_command, parse_docker_size

log = logging.getLogger(__name__)

_LIST_TIMEOUT = 60
_REMOVE_TIMEOUT = 120

_REMOVE_COMMANDS = {
    "container": ("rm",),
    "image": ("rmi",),
    "volume": ("volume", "rm"),
}


def _docker(*args: str, timeout: int = _LIST_TIMEOUT) -> subprocess.CompletedProcess:
    return subprocess.run(["docker", *args], capture_output=True, text=True, timeout=timeout)


class DockerCleaner(Cleaner):
    """Removes stopped containers, unused images and (optionally) dangling volumes.

    Scanning only runs list commands. Each item is removed with its own
    ``docker rm``/``rmi``/``volume rm`` call, so one failure does not
    affect the others.
    """

    id = "docker"
    name = "Docker"
    description = "Stopped containers, dangling images and unused volumes"
    icon = "🐳"

    def __init__(self, all_images: bool = False, include_volumes: bool = False) -> None:
        self.all_images = all_images
        self.include_volumes = include_volumes

    @classmethod
    def from_options(cls, options: CleanerOptions) -> Cleaner:
        return cls(all_images=options.all_images, include_volumes=options.include_volumes)

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("docker"):
            return "Docker not installed"
        return None

    def scan(self) -> ScanResult:
        self._check_engine()

        containers = self._list_json("ps", "--all", "--size", "--filter", "status=exited", "--filter", "status=created")
        items = [self._container_item(row) for row in containers]
        items.extend(self._image_items())
        if self.include_volumes:
            volumes = self._list_json("volume", "ls", "--filter", "dangling=true")
            items.extend(self._volume_item(row) for row in volumes)

        log.info("Docker: found %d unused resources", len(items))
        return ScanResult(cleaner_id=self.id, cleaner_name=self.name, items=items)

    def delete(self, item: CleanableItem) -> None:
        command = _REMOVE_COMMANDS.get(item.resource_type)
        if command is None:
            raise DeletionFailure(f"{item.path}: not a Docker resource ({item.resource_type})")
        try:
            proc = _docker(*command, str(item.path), timeout=_REMOVE_TIMEOUT)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise DeletionFailure(f"{item.path}: {e}") from e
        if proc.returncode != 0:
            raise DeletionFailure(f"{item.path}: {proc.stderr.strip() or 'docker exited with ' + str(proc.returncode)}")

    def _check_engine(self) -> None:
        if not has_command("docker"):
            raise ScanError("Docker CLI not found on PATH")
        try:
            proc = _docker("info", "--format", "{{.ServerVersion}}", timeout=15)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ScanError(f"Docker engine is unreachable: {e}") from e
        if proc.returncode != 0:
            raise ScanError(f"Docker engine is unreachable: {proc.stderr.strip()}")
        log.debug("Docker server version %s", proc.stdout.strip())

    def _list_json(self, *args: str) -> list[dict[str, Any]]:
        """Run a docker list command with one JSON object per output line."""
        command = " ".join(args)
        try:
            proc = _docker(*args, "--format", "{{json .}}")
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ScanError(f"docker {command} failed: {e}") from e
        if proc.returncode != 0:
            raise ScanError(f"docker {command} failed: {proc.stderr.strip()}")

        rows: list[dict[str, Any]] = []
        for line in proc.stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError:
                log.debug("Unparseable docker output: %s", line)
        return rows

    def _image_items(self) -> list[CleanableItem]:
        if self.all_images:
            rows = self._list_json("images")
            used = {row.get("Image", "") for row in self._list_json("ps", "--all")}
            rows = [row for row in rows if not _image_in_use(row, used)]
        else:
            rows = self._list_json("images", "--filter", "dangling=true")

        # One item per image ID; several tags may point at the same image.
        by_id: dict[str, list[dict[str, Any]]] = {}
        for row in rows:
            by_id.setdefault(row.get("ID", ""), []).append(row)

        items: list[CleanableItem] = []
        for image_id, tagged in by_id.items():
            if not image_id:
                continue
            refs = [_image_ref(r) for r in tagged if _image_ref(r)]
            items.append(
                CleanableItem(
                    path=image_id,
                    size_bytes=parse_docker_size(tagged[0].get("Size", "")),
                    kind=self.name,
                    name=", ".join(refs) or "<none>",
                    resource_type="image",
                    description="Dangling image" if not refs else "Unused image",
                )
            )
        return items

    def _container_item(self, row: dict[str, Any]) -> CleanableItem:
        return CleanableItem(
            path=row.get("ID", ""),
            size_bytes=parse_docker_size(row.get("Size", "")),
            kind=self.name,
            name=row.get("Names", ""),
            resource_type="container",
            description=f"Stopped container ({row.get('Image', '?')}, {row.get('Status', '')})",
        )

    def _volume_item(self, row: dict[str, Any]) -> CleanableItem:
        # docker volume ls does not report sizes.
        return CleanableItem(
            path=row.get("Name", ""),
            size_bytes=None,
            kind=self.name,
            name=row.get("Name", ""),
            resource_type="volume",
            description=f"Unused volume ({row.get('Driver', 'local')})",
        )


def _image_ref(row: dict[str, Any]) -> str:
    repo = row.get("Repository", "<none>")
    tag = row.get("Tag", "<none>")
    if repo == "<none>":
        return ""
    return repo if tag == "<none>" else f"{repo}:{tag}"


def _image_in_use(row: dict[str, Any], used: set[str]) -> bool:
    """Whether any container references the image by reference or ID."""
    image_id = row.get("ID", "")
    ref = _image_ref(row)
    candidates = {ref, image_id}
    if ref.endswith(":latest"):
        candidates.add(ref[: -len(":latest")])
    candidates.discard("")
    if candidates & used:
        return True
    return any(image_id and u and (image_id.startswith(u) or u.startswith(image_id)) for u in used)
