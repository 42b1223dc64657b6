"""Error taxonomy for the scaffolder and integrity auditor.

Every failure the core components can raise derives from ``ScaffoldError``
and carries the process exit code the CLI should return for it.  Verification
*findings* (missing or mismatched files) are not exceptions; they are collected
into a ``VerificationReport`` instead.
"""

from __future__ import annotations

from pathlib import Path


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_INPUT_VALIDATION = 2
EXIT_UNKNOWN_TEMPLATE = 3
EXIT_DIRECTORY_EXISTS = 4
EXIT_WRITE_FAILURE = 5
EXIT_MANIFEST_MISSING = 6
EXIT_MANIFEST_INVALID = 7
EXIT_IO_ERROR = 8


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Base class for every scaffolding or audit failure."""

    exit_code: int = EXIT_INPUT_VALIDATION


# ---------------------------------------------------------------------------
# Scaffold-side errors
# ---------------------------------------------------------------------------


class InputValidationError(ScaffoldError):
    """A required field is missing, empty or malformed."""

    exit_code = EXIT_INPUT_VALIDATION

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class UnknownTemplateError(ScaffoldError):
    """The requested template id is not one of the built-in templates."""

    exit_code = EXIT_UNKNOWN_TEMPLATE

    def __init__(self, template_id: str, available: list[str] | None = None) -> None:
        self.template_id = template_id
        self.available = list(available or [])
        hint = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(f"Unknown template type: {template_id!r}{hint}")


class DirectoryExistsError(ScaffoldError):
    """The project root already exists; nothing was written."""

    exit_code = EXIT_DIRECTORY_EXISTS

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Directory '{self.path}' already exists")


class WriteFailureError(ScaffoldError):
    """Writing one template entry failed; the partial tree is left in place."""

    exit_code = EXIT_WRITE_FAILURE

    def __init__(self, path: Path, reason: str, written: list[Path] | None = None) -> None:
        self.path = Path(path)
        self.reason = reason
        self.written = list(written or [])
        super().__init__(
            f"Failed to write '{self.path}': {reason} "
            f"({len(self.written)} file(s) already written; delete the partial "
            "tree before scaffolding again)"
        )


# ---------------------------------------------------------------------------
# Audit-side errors
# ---------------------------------------------------------------------------


class ManifestMissingError(ScaffoldError):
    """No ``audit-index.json`` exists at the project root."""

    exit_code = EXIT_MANIFEST_MISSING

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"audit-index.json not found: {self.path}")


class ManifestInvalidError(ScaffoldError):
    """The manifest exists but cannot be parsed or does not match the schema."""

    exit_code = EXIT_MANIFEST_INVALID

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid manifest {self.path}: {reason}")


class AlgorithmMismatchError(ManifestInvalidError):
    """The manifest was generated with a different hash algorithm."""

    def __init__(self, path: Path, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            path,
            f"hash algorithm mismatch (configured {expected}, manifest uses {found})",
        )


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class GitError(ScaffoldError):
    """Raised when a git command run against the new project fails."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)
