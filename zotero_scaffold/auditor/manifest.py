"""Audit manifest building and persistence.

``ManifestBuilder.build`` walks a project tree, hashes every regular file
except the root-level ``audit-index.json`` and returns the records sorted by
path, so two builds over identical trees differ only in ``generated``.
Hashing runs concurrently in worker threads; the final sort restores a
deterministic order.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from zotero_scaffold.auditor.hashing import HashEngine
from zotero_scaffold.auditor.models import AuditManifest, FileRecord
from zotero_scaffold.config import MANIFEST_FILENAME
from zotero_scaffold.errors import ManifestInvalidError, ManifestMissingError
from zotero_scaffold.utils import dump_json, load_json, to_posix_relative

logger = logging.getLogger(__name__)


def manifest_path(root: str | Path) -> Path:
    """Return the location of the manifest for the project at *root*."""
    return Path(root) / MANIFEST_FILENAME


def iter_project_files(root: Path) -> list[Path]:
    """Return every regular file under *root* except the manifest, sorted.

    Symlinks are neither followed nor recorded.
    """
    manifest = manifest_path(root)
    files: list[Path] = []
    for candidate in root.rglob("*"):
        if candidate.is_symlink() or not candidate.is_file():
            continue
        if candidate == manifest:
            continue
        files.append(candidate)
    return sorted(files)


class ManifestBuilder:
    """Builds, writes and loads ``audit-index.json`` files."""

    def __init__(self, engine: HashEngine, max_parallel: int = 8) -> None:
        self.engine = engine
        self.max_parallel = max(1, max_parallel)

    async def build(self, root: str | Path) -> AuditManifest:
        """Hash every file under *root* and return the sorted manifest."""
        root = Path(root)
        paths = await asyncio.to_thread(iter_project_files, root)
        semaphore = asyncio.Semaphore(self.max_parallel)

        async def _record(path: Path) -> FileRecord:
            async with semaphore:
                digest = await asyncio.to_thread(self.engine.digest, path)
            return FileRecord(path=to_posix_relative(path, root), hash=digest)

        records = await asyncio.gather(*(_record(p) for p in paths))
        records.sort(key=lambda r: r.path)
        logger.debug("Hashed %d file(s) under %s with %s", len(records), root, self.engine.algorithm)
        return AuditManifest(algorithm=self.engine.algorithm, files=records)

    async def write(self, manifest: AuditManifest, root: str | Path) -> Path:
        """Persist *manifest* at ``root/audit-index.json``, replacing any previous file."""
        target = manifest_path(root)
        await asyncio.to_thread(dump_json, manifest.to_json_dict(), target)
        return target

    async def build_and_write(self, root: str | Path) -> tuple[AuditManifest, Path]:
        manifest = await self.build(root)
        target = await self.write(manifest, root)
        return manifest, target

    @staticmethod
    def load(root: str | Path) -> AuditManifest:
        """Parse the manifest stored at *root*.

        Raises:
            ManifestMissingError: If ``audit-index.json`` does not exist.
            ManifestInvalidError: If it is not valid JSON or fails validation.
        """
        target = manifest_path(root)
        if not target.is_file():
            raise ManifestMissingError(target)
        try:
            data = load_json(target)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ManifestInvalidError(target, f"not valid JSON ({exc})") from exc
        if not isinstance(data, dict):
            raise ManifestInvalidError(target, "top-level value must be an object")
        try:
            return AuditManifest.model_validate(data)
        except ValidationError as exc:
            raise ManifestInvalidError(target, str(exc)) from exc
