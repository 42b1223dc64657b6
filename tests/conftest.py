"""Shared pytest fixtures for the scaffolder test suite.

Provides reusable fixtures for:
- An isolated environment (no ZSCAFFOLD_* variables leak into tests)
- Configs and orchestrators rooted in a temporary output directory
- The built-in template store and a sample variable context
- Ready-made scaffolded projects
- Small hand-built trees for manifest/verifier tests
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from zotero_scaffold.auditor import HashEngine, ManifestBuilder, Verifier
from zotero_scaffold.config import Config
from zotero_scaffold.pipeline import Orchestrator
from zotero_scaffold.scaffolder import ProjectSpec, TemplateStore, VariableContext


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip ZSCAFFOLD_* variables so Config.from_env() sees defaults."""
    for key in list(os.environ):
        if key.startswith("ZSCAFFOLD_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Config & components
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty parent directory that projects are scaffolded into."""
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def config(output_dir: Path) -> Config:
    return Config(output_dir=output_dir)


@pytest.fixture
def orchestrator(config: Config) -> Orchestrator:
    return Orchestrator(config)


@pytest.fixture
def store() -> TemplateStore:
    return TemplateStore()


@pytest.fixture
def engine() -> HashEngine:
    return HashEngine("sha256")


@pytest.fixture
def builder(engine: HashEngine) -> ManifestBuilder:
    return ManifestBuilder(engine, max_parallel=4)


@pytest.fixture
def verifier(engine: HashEngine) -> Verifier:
    return Verifier(engine)


@pytest.fixture
def demo_context() -> VariableContext:
    return VariableContext(project_name="Demo", author_name="Ann", version="0.1.0")


@pytest.fixture
def demo_spec() -> ProjectSpec:
    return ProjectSpec(name="Demo", author="Ann", template="student")


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """A small hand-built project tree with nested directories."""
    root = tmp_path / "sample"
    (root / "chrome" / "content").mkdir(parents=True)
    (root / "README.md").write_bytes(b"# Sample\n")
    (root / "chrome" / "content" / "main.js").write_bytes(b"console.log('hi');\n")
    (root / "chrome.manifest").write_bytes(b"content sample chrome/content/\n")
    (root / ".gitignore").write_bytes(b"node_modules/\n")
    return root


@pytest.fixture
async def scaffolded_project(orchestrator: Orchestrator, demo_spec: ProjectSpec):
    """A freshly scaffolded ``student`` project named Demo by Ann."""
    return await orchestrator.scaffold(demo_spec)


# ---------------------------------------------------------------------------
# Mock git
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_run_git():
    """Patch the git runner so no real git process is spawned."""
    with patch(
        "zotero_scaffold.git_client._run_git",
        new=AsyncMock(return_value=("", "")),
    ) as mocked:
        yield mocked
