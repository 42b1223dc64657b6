"""Git repository initialisation for freshly scaffolded projects.

Runs ``git init``, ``git add .`` and ``git commit`` with the project root as
the working directory.  Any failure raises ``GitError``; callers report it
without undoing the scaffold.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from zotero_scaffold.config import DEFAULT_COMMIT_MESSAGE
from zotero_scaffold.errors import GitError

logger = logging.getLogger(__name__)


async def _run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 60.0,
) -> tuple[str, str]:
    """Run a git command asynchronously and return (stdout, stderr).

    Raises GitError if git is missing, times out, or exits non-zero.
    """
    cmd = ["git"] + list(args)
    cmd_str = " ".join(cmd)

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found on PATH", command=cmd_str) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise GitError(
            f"Git command timed out after {timeout}s: {cmd_str}",
            command=cmd_str,
        )

    stdout = stdout_bytes.decode("utf-8", errors="replace").strip()
    stderr = stderr_bytes.decode("utf-8", errors="replace").strip()

    if process.returncode != 0:
        raise GitError(
            f"Git command failed (exit {process.returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
        )

    return stdout, stderr


async def init_repository(
    root: str | Path,
    message: str = DEFAULT_COMMIT_MESSAGE,
    timeout: float = 60.0,
) -> None:
    """Initialise a repository at *root* and commit everything in it."""
    root = Path(root)
    await _run_git("init", cwd=root, timeout=timeout)
    await _run_git("add", ".", cwd=root, timeout=timeout)
    await _run_git("commit", "-m", message, cwd=root, timeout=timeout)
    logger.debug("Initialised git repository in %s", root)
