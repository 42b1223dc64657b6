"""Integrity audit models.

Pydantic v2 models for the persisted manifest (``audit-index.json``) and for
verification outcomes: individual findings and the aggregated report.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from zotero_scaffold.config import MANIFEST_FILENAME
from zotero_scaffold.utils import check_relative_path

_HEX_RE = re.compile(r"^[0-9a-f]+$")


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + (
        f"{moment.microsecond // 1000:03d}Z"
    )


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class FileRecord(BaseModel):
    """Digest of one file, keyed by its path relative to the project root."""

    path: str = Field(..., description="Relative forward-slash path")
    hash: str = Field(..., description="Lower-case hex digest")

    @field_validator("path")
    @classmethod
    def _safe_path(cls, value: str) -> str:
        return check_relative_path(value)

    @field_validator("hash")
    @classmethod
    def _hex_digest(cls, value: str) -> str:
        value = value.strip().lower()
        if not _HEX_RE.match(value):
            raise ValueError(f"digest is not a hex string: {value!r}")
        return value


class AuditManifest(BaseModel):
    """Sorted list of file digests describing a materialized tree."""

    generated: str = Field(default_factory=utc_timestamp, description="ISO-8601 generation time")
    algorithm: Optional[str] = Field(
        default=None, description="Hash algorithm; absent in manifests from older scaffolders"
    )
    files: list[FileRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_files(self) -> "AuditManifest":
        seen: set[str] = set()
        for record in self.files:
            if record.path == MANIFEST_FILENAME:
                raise ValueError(f"manifest may not contain a record for {MANIFEST_FILENAME}")
            if record.path in seen:
                raise ValueError(f"duplicate manifest record: {record.path}")
            seen.add(record.path)
        return self

    def to_json_dict(self) -> dict[str, object]:
        """Return the on-disk JSON shape, with ``files`` sorted by path."""
        data: dict[str, object] = {"generated": self.generated}
        if self.algorithm is not None:
            data["algorithm"] = self.algorithm
        data["files"] = [
            {"path": record.path, "hash": record.hash}
            for record in sorted(self.files, key=lambda r: r.path)
        ]
        return data


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class Finding(BaseModel):
    """A single verification discrepancy for one path."""

    kind: Literal["missing", "mismatch"]
    path: str
    expected: str
    actual: Optional[str] = Field(default=None, description="Recomputed digest; None when missing")

    def describe(self) -> str:
        if self.kind == "missing":
            return f"Missing: {self.path}"
        return f"Hash mismatch: {self.path} (expected {self.expected}, actual {self.actual})"


class VerificationReport(BaseModel):
    """Every finding from one verification run."""

    root: str = Field(..., description="Verified project root")
    algorithm: str
    checked: int = Field(default=0, ge=0, description="Number of manifest records checked")
    findings: list[Finding] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def passed(self) -> bool:
        """True when no findings were recorded."""
        return not self.findings

    def missing(self) -> list[Finding]:
        return [f for f in self.findings if f.kind == "missing"]

    def mismatched(self) -> list[Finding]:
        return [f for f in self.findings if f.kind == "mismatch"]
