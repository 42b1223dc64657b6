"""Content digests for the integrity audit.

A ``HashEngine`` is bound to one hashlib algorithm for its whole lifetime.
Digests depend only on a file's bytes; timestamps, permissions and the file
name never enter the hash.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from zotero_scaffold.config import AuditConfig


class HashEngine:
    """Computes fixed-width hex digests with a single configured algorithm."""

    def __init__(self, algorithm: str = "sha256", chunk_size: int = 64 * 1024) -> None:
        # Validate through AuditConfig so engines and config reject the same names.
        settings = AuditConfig(algorithm=algorithm, chunk_size=chunk_size)
        self.algorithm = settings.algorithm
        self.chunk_size = settings.chunk_size
        self.hex_width = hashlib.new(self.algorithm).digest_size * 2

    @classmethod
    def from_config(cls, config: AuditConfig) -> "HashEngine":
        return cls(algorithm=config.algorithm, chunk_size=config.chunk_size)

    def digest(self, path: str | Path) -> str:
        """Return the hex digest of the full byte content of *path*.

        Raises:
            OSError: If the file cannot be read.
        """
        hasher = hashlib.new(self.algorithm)
        with Path(path).open("rb") as handle:
            for chunk in iter(lambda: handle.read(self.chunk_size), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def digest_bytes(self, data: bytes) -> str:
        """Return the hex digest of *data*."""
        return hashlib.new(self.algorithm, data).hexdigest()

    def matches_width(self, digest: str) -> bool:
        """True if *digest* has the width this engine's algorithm produces."""
        return len(digest) == self.hex_width
