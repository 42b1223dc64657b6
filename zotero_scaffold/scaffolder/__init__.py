"""Template materialization.

Looks up a built-in Zotero plugin template, substitutes the project name,
author and template version into every file, and writes the result to a new
project directory.

Quick usage::

    from zotero_scaffold.scaffolder import TemplateStore, TreeBuilder, VariableContext

    store = TemplateStore()
    template = store.lookup("student")
    context = VariableContext(project_name="Demo", author_name="Ann", version=template.version)
    written = await TreeBuilder().materialize(template, context, "./Demo")
"""

from zotero_scaffold.scaffolder.generator import TreeBuilder
from zotero_scaffold.scaffolder.models import ProjectSpec, Template, VariableContext
from zotero_scaffold.scaffolder.store import BUILTIN_TEMPLATES, TemplateStore
from zotero_scaffold.scaffolder.substitution import find_placeholders, substitute

__all__ = [
    "BUILTIN_TEMPLATES",
    "ProjectSpec",
    "Template",
    "TemplateStore",
    "TreeBuilder",
    "VariableContext",
    "find_placeholders",
    "substitute",
]
