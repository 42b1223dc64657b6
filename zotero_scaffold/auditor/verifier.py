"""Manifest verification.

Checks every record of ``audit-index.json`` against the current tree and
collects all discrepancies into one ``VerificationReport``.  Files on disk that
the manifest does not list are not reported: the manifest is a floor, not an
exhaustive inventory.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from zotero_scaffold.auditor.hashing import HashEngine
from zotero_scaffold.auditor.manifest import ManifestBuilder, manifest_path
from zotero_scaffold.auditor.models import AuditManifest, FileRecord, Finding, VerificationReport
from zotero_scaffold.errors import AlgorithmMismatchError

logger = logging.getLogger(__name__)


class Verifier:
    """Compares recorded digests with freshly computed ones."""

    def __init__(self, engine: HashEngine) -> None:
        self.engine = engine

    async def verify(self, root: str | Path) -> VerificationReport:
        """Verify the project at *root* against its manifest.

        Raises:
            ManifestMissingError: If the manifest file is absent.
            ManifestInvalidError: If the manifest cannot be parsed.
            AlgorithmMismatchError: If the manifest was written with a
                different hash algorithm than the configured one.
        """
        root = Path(root)
        manifest = await asyncio.to_thread(ManifestBuilder.load, root)
        self._check_algorithm(manifest, manifest_path(root))

        findings: list[Finding] = []
        for record in sorted(manifest.files, key=lambda r: r.path):
            finding = await asyncio.to_thread(self._check_record, root, record)
            if finding is not None:
                logger.debug(finding.describe())
                findings.append(finding)

        return VerificationReport(
            root=str(root),
            algorithm=self.engine.algorithm,
            checked=len(manifest.files),
            findings=findings,
        )

    # -- Internal ----------------------------------------------------------

    def _check_algorithm(self, manifest: AuditManifest, path: Path) -> None:
        if manifest.algorithm is not None:
            if manifest.algorithm.lower() != self.engine.algorithm:
                raise AlgorithmMismatchError(path, self.engine.algorithm, manifest.algorithm)
            return
        # Older manifests carry no algorithm name; the digest width gives it away.
        for record in manifest.files:
            if not self.engine.matches_width(record.hash):
                raise AlgorithmMismatchError(
                    path,
                    self.engine.algorithm,
                    f"unknown ({len(record.hash) * 4}-bit digests)",
                )

    def _check_record(self, root: Path, record: FileRecord) -> Finding | None:
        target = root.joinpath(*record.path.split("/"))
        if not target.is_file():
            return Finding(kind="missing", path=record.path, expected=record.hash)
        actual = self.engine.digest(target)
        if actual != record.hash:
            return Finding(kind="mismatch", path=record.path, expected=record.hash, actual=actual)
        return None
