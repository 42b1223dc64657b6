"""Project tree materialization.

``TreeBuilder`` turns a ``Template`` plus a ``VariableContext`` into files on
disk.  The only pre-write check is that the project root does not exist yet;
after that, entries are written one at a time in sorted path order.  There is
no rollback: if a write fails the files written so far stay on disk, and the
partial tree has to be deleted before scaffolding again.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from zotero_scaffold.errors import DirectoryExistsError, WriteFailureError
from zotero_scaffold.scaffolder.models import Template, VariableContext
from zotero_scaffold.scaffolder.substitution import substitute

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Creates a project directory from a template."""

    async def materialize(
        self,
        template: Template,
        context: VariableContext,
        root: str | Path,
    ) -> list[Path]:
        """Write every template entry under *root*.

        Args:
            template: The template to materialize.
            context: Values for ``{{ProjectName}}``, ``{{AuthorName}}`` and
                ``{{version}}``.
            root: Project root.  Must not exist; missing parents are created.

        Returns:
            The written file paths, in sorted relative-path order.

        Raises:
            DirectoryExistsError: If *root* already exists.  Nothing is written.
            WriteFailureError: If creating a directory or writing a file fails.
                Files written before the failure are left in place.
        """
        root = Path(root)
        if root.exists():
            raise DirectoryExistsError(root)

        try:
            await asyncio.to_thread(root.parent.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteFailureError(root.parent, exc.strerror or str(exc)) from exc
        try:
            await asyncio.to_thread(root.mkdir)
        except FileExistsError as exc:
            raise DirectoryExistsError(root) from exc
        except OSError as exc:
            raise WriteFailureError(root, exc.strerror or str(exc)) from exc

        values = context.placeholders()
        written: list[Path] = []
        for rel_path in template.paths():
            target = root.joinpath(*rel_path.split("/"))
            content = substitute(template.files[rel_path], values)
            try:
                await asyncio.to_thread(_write_file, target, content)
            except OSError as exc:
                logger.debug("Write failed for %s after %d file(s)", target, len(written))
                raise WriteFailureError(target, exc.strerror or str(exc), written) from exc
            written.append(target)

        logger.debug("Materialized %s into %s (%d files)", template.id, root, len(written))
        return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write UTF-8 bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
