"""Built-in template store.

Template content ships as package data under ``scaffolder/templates/<id>/``:
one ``*.tmpl`` file per template entry, whose path (minus the ``.tmpl``
suffix) is the relative path written into the new project.  Files are found
and read through a Jinja2 ``FileSystemLoader``, but their content is never
rendered by Jinja; placeholder replacement is done by
:mod:`zotero_scaffold.scaffolder.substitution`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from zotero_scaffold.config import DEFAULT_TEMPLATE_VERSION
from zotero_scaffold.errors import UnknownTemplateError
from zotero_scaffold.scaffolder.models import Template
from zotero_scaffold.scaffolder.substitution import find_placeholders

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".tmpl"

# The fixed set of templates: id -> description.
BUILTIN_TEMPLATES: dict[str, str] = {
    "practitioner": "Production-ready plugin with TypeScript sources and MIT license",
    "researcher": "Plugin for research workflows with citation metadata and data export",
    "student": "Learning-focused plugin with a guided tutorial",
}


class TemplateStore:
    """Holds the fixed set of named templates.

    Templates are loaded lazily on first lookup and cached; the returned
    ``Template`` objects are frozen.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        version: str = DEFAULT_TEMPLATE_VERSION,
        templates: dict[str, str] | None = None,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.version = version
        self._descriptions = dict(BUILTIN_TEMPLATES if templates is None else templates)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
        )
        self._cache: dict[str, Template] = {}

    # -- Public API --------------------------------------------------------

    def list_templates(self) -> list[str]:
        """Return the ids of every available template, sorted."""
        return sorted(self._descriptions)

    def lookup(self, template_id: str) -> Template:
        """Return the template called *template_id*.

        Raises:
            UnknownTemplateError: If *template_id* is not a built-in template.
        """
        if template_id not in self._descriptions:
            raise UnknownTemplateError(template_id, self.list_templates())
        if template_id not in self._cache:
            self._cache[template_id] = self._load(template_id)
        return self._cache[template_id]

    def describe(self) -> list[dict[str, str]]:
        """Return one summary row per template for listings."""
        rows: list[dict[str, str]] = []
        for template_id in self.list_templates():
            template = self.lookup(template_id)
            placeholders: set[str] = set()
            for content in template.files.values():
                placeholders |= find_placeholders(content)
            rows.append(
                {
                    "id": template.id,
                    "version": template.version,
                    "files": str(len(template.files)),
                    "placeholders": ", ".join(sorted(placeholders)),
                    "description": template.description,
                }
            )
        return rows

    # -- Loading -----------------------------------------------------------

    def _load(self, template_id: str) -> Template:
        prefix = f"{template_id}/"
        files: dict[str, str] = {}
        for name in self.env.list_templates():
            if not name.startswith(prefix) or not name.endswith(TEMPLATE_SUFFIX):
                continue
            source, _filename, _uptodate = self.env.loader.get_source(self.env, name)
            rel = name[len(prefix): -len(TEMPLATE_SUFFIX)]
            files[rel] = source

        if not files:
            raise UnknownTemplateError(template_id, self.list_templates())

        logger.debug("Loaded template %s (%d files)", template_id, len(files))
        return Template(
            id=template_id,
            version=self.version,
            description=self._descriptions[template_id],
            files=files,
        )
