"""Scaffolder configuration.

Centralised, typed configuration for scaffolding and auditing.  All settings
use Pydantic v2 models so they are validated once at construction time (the
hash algorithm in particular is resolved here, never mid-run) and can be
serialised to/from JSON or environment variables.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


MANIFEST_FILENAME = "audit-index.json"
DEFAULT_TEMPLATE = "student"
DEFAULT_TEMPLATE_VERSION = "0.1.0"
DEFAULT_COMMIT_MESSAGE = "chore: initial commit from scaffolder"


class AuditConfig(BaseModel):
    """Settings for the integrity audit (hashing and manifest building)."""

    algorithm: str = Field(default="sha256", description="hashlib algorithm used for every digest")
    max_parallel_hashes: int = Field(
        default=8, ge=1, description="Maximum files hashed concurrently while building a manifest"
    )
    chunk_size: int = Field(default=64 * 1024, ge=1024, description="Read size in bytes when hashing")

    @field_validator("algorithm")
    @classmethod
    def _known_fixed_width_algorithm(cls, value: str) -> str:
        name = value.strip().lower()
        if name not in hashlib.algorithms_guaranteed:
            raise ValueError(
                f"unsupported hash algorithm {value!r}; "
                f"choose one of {', '.join(sorted(hashlib.algorithms_guaranteed))}"
            )
        if name.startswith("shake_"):
            raise ValueError(f"{name} has a variable-length digest and cannot be used")
        return name


class Config(BaseModel):
    """Global scaffolder configuration.

    Instances are created once by the CLI entry point (``Config.from_env()``
    with flag overrides) and passed to the ``Orchestrator``.
    """

    output_dir: Path = Field(default=Path("."))
    default_template: str = Field(default=DEFAULT_TEMPLATE)
    template_version: str = Field(default=DEFAULT_TEMPLATE_VERSION)
    git_commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE)
    git_timeout: int = Field(default=60, ge=1, description="Per-command git timeout in seconds")
    audit: AuditConfig = Field(default_factory=AuditConfig)

    def project_root(self, name: str) -> Path:
        """Return the directory a project called *name* lives in."""
        return self.output_dir / name

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            ZSCAFFOLD_OUTPUT_DIR, ZSCAFFOLD_TEMPLATE, ZSCAFFOLD_HASH_ALGORITHM,
            ZSCAFFOLD_MAX_PARALLEL_HASHES, ZSCAFFOLD_GIT_TIMEOUT.
        """
        audit_kwargs: dict[str, Any] = {}
        if os.environ.get("ZSCAFFOLD_HASH_ALGORITHM"):
            audit_kwargs["algorithm"] = os.environ["ZSCAFFOLD_HASH_ALGORITHM"]
        if os.environ.get("ZSCAFFOLD_MAX_PARALLEL_HASHES"):
            audit_kwargs["max_parallel_hashes"] = int(os.environ["ZSCAFFOLD_MAX_PARALLEL_HASHES"])

        kwargs: dict[str, Any] = {"audit": AuditConfig(**audit_kwargs)}
        if os.environ.get("ZSCAFFOLD_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["ZSCAFFOLD_OUTPUT_DIR"])
        if os.environ.get("ZSCAFFOLD_TEMPLATE"):
            kwargs["default_template"] = os.environ["ZSCAFFOLD_TEMPLATE"]
        if os.environ.get("ZSCAFFOLD_GIT_TIMEOUT"):
            kwargs["git_timeout"] = int(os.environ["ZSCAFFOLD_GIT_TIMEOUT"])

        return cls(**kwargs)
