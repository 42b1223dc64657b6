"""Literal placeholder substitution.

Placeholders look like ``{{Name}}``.  Substitution is a single regular
expression pass: each recognised token is replaced with its value verbatim,
values are never rescanned (so a value containing ``{{AuthorName}}`` stays
literal), and the result does not depend on the order of the mapping.

Tokens whose name is not in the mapping are left exactly as written.  There is
no escape syntax, so placeholder-shaped text that is meant as data cannot be
protected from substitution.  This is a known limitation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def substitute(content: str, context: Mapping[str, str]) -> str:
    """Return *content* with every known ``{{name}}`` replaced by ``context[name]``."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in context:
            return context[name]
        return match.group(0)

    return PLACEHOLDER_RE.sub(_replace, content)


def find_placeholders(content: str) -> set[str]:
    """Return the names of all placeholder tokens in *content*."""
    return set(PLACEHOLDER_RE.findall(content))
