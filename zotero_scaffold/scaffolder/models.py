"""Pydantic models for templates and scaffold requests."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zotero_scaffold.config import MANIFEST_FILENAME
from zotero_scaffold.utils import check_relative_path


class Template(BaseModel):
    """A named, read-only mapping of relative file paths to content patterns."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Template identifier, e.g. 'student'")
    version: str = Field(..., description="Template version substituted for {{version}}")
    description: str = Field(default="", description="One-line summary for listings")
    files: dict[str, str] = Field(
        default_factory=dict,
        description="Relative forward-slash path -> content pattern",
    )

    @field_validator("files")
    @classmethod
    def _validate_paths(cls, files: dict[str, str]) -> dict[str, str]:
        for path in files:
            check_relative_path(path)
            if path == MANIFEST_FILENAME:
                raise ValueError(f"template may not contain the reserved file {MANIFEST_FILENAME}")
        return files

    def paths(self) -> list[str]:
        """Return the template's relative paths in sorted order."""
        return sorted(self.files)


class VariableContext(BaseModel):
    """The three values a template's placeholders can be replaced with."""

    project_name: str
    author_name: str
    version: str

    def placeholders(self) -> dict[str, str]:
        """Return the ``{placeholder name: value}`` mapping used for substitution."""
        return {
            "ProjectName": self.project_name,
            "AuthorName": self.author_name,
            "version": self.version,
        }


class ProjectSpec(BaseModel):
    """A single scaffold request, built from caller input and consumed once.

    Field contents are checked by ``Orchestrator.validate_spec`` so that the
    failure surfaces as an ``InputValidationError`` naming the flag.
    """

    name: str = Field(default="", description="Project name; also the directory name")
    author: str = Field(default="", description="Author name substituted for {{AuthorName}}")
    template: str = Field(default="student", description="Template identifier")
    git_init: bool = Field(default=False, description="Initialise a git repository afterwards")
