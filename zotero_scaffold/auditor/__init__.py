"""Content-integrity audit.

Builds ``audit-index.json`` (a sorted list of per-file digests) for a project
tree and verifies a tree against it.

Key classes:
    HashEngine       - Fixed-algorithm content digests
    ManifestBuilder  - Walk, hash, sort and persist the manifest
    Verifier         - Recompute digests and collect findings
"""

from .hashing import HashEngine
from .manifest import ManifestBuilder, iter_project_files, manifest_path
from .models import AuditManifest, FileRecord, Finding, VerificationReport, utc_timestamp
from .verifier import Verifier

__all__ = [
    "HashEngine",
    "ManifestBuilder",
    "Verifier",
    "AuditManifest",
    "FileRecord",
    "Finding",
    "VerificationReport",
    "iter_project_files",
    "manifest_path",
    "utc_timestamp",
]
