"""Tests for the manifest builder and the manifest models.

Covers:
- Enumeration (nested files, dotfiles, manifest excluded, symlinks skipped)
- Sorting and forward-slash paths
- Determinism across builds and across identical trees
- JSON serialisation shape
- Loading: missing, malformed and schema-violating manifests
- Timestamp format
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from zotero_scaffold.auditor.hashing import HashEngine
from zotero_scaffold.auditor.manifest import ManifestBuilder, iter_project_files, manifest_path
from zotero_scaffold.auditor.models import AuditManifest, FileRecord, utc_timestamp
from zotero_scaffold.config import MANIFEST_FILENAME
from zotero_scaffold.errors import ManifestInvalidError, ManifestMissingError

pytestmark = pytest.mark.unit

EXPECTED_PATHS = [".gitignore", "README.md", "chrome.manifest", "chrome/content/main.js"]


class TestIterProjectFiles:
    def test_excludes_root_manifest(self, sample_tree: Path):
        (sample_tree / MANIFEST_FILENAME).write_text("{}", encoding="utf-8")
        names = [p.relative_to(sample_tree).as_posix() for p in iter_project_files(sample_tree)]
        assert MANIFEST_FILENAME not in names
        assert sorted(names) == EXPECTED_PATHS

    def test_nested_manifest_name_included(self, sample_tree: Path):
        (sample_tree / "docs").mkdir()
        (sample_tree / "docs" / MANIFEST_FILENAME).write_text("{}", encoding="utf-8")
        names = [p.relative_to(sample_tree).as_posix() for p in iter_project_files(sample_tree)]
        assert f"docs/{MANIFEST_FILENAME}" in names

    def test_symlinks_skipped(self, sample_tree: Path):
        try:
            (sample_tree / "link.md").symlink_to(sample_tree / "README.md")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported on this platform")
        names = [p.name for p in iter_project_files(sample_tree)]
        assert "link.md" not in names

    def test_empty_directories_ignored(self, sample_tree: Path):
        (sample_tree / "empty" / "dir").mkdir(parents=True)
        assert len(iter_project_files(sample_tree)) == len(EXPECTED_PATHS)


class TestBuild:
    @pytest.mark.asyncio
    async def test_records_sorted_with_posix_paths(self, sample_tree: Path, builder: ManifestBuilder):
        manifest = await builder.build(sample_tree)
        assert [r.path for r in manifest.files] == EXPECTED_PATHS
        assert manifest.algorithm == "sha256"

    @pytest.mark.asyncio
    async def test_digests_match_engine(self, sample_tree: Path, builder: ManifestBuilder, engine: HashEngine):
        manifest = await builder.build(sample_tree)
        for record in manifest.files:
            assert record.hash == engine.digest(sample_tree / record.path)

    @pytest.mark.asyncio
    async def test_existing_manifest_not_recorded(self, sample_tree: Path, builder: ManifestBuilder):
        await builder.build_and_write(sample_tree)
        manifest = await builder.build(sample_tree)
        assert MANIFEST_FILENAME not in [r.path for r in manifest.files]

    @pytest.mark.asyncio
    async def test_parallelism_does_not_change_output(self, sample_tree: Path, engine: HashEngine):
        serial = await ManifestBuilder(engine, max_parallel=1).build(sample_tree)
        parallel = await ManifestBuilder(engine, max_parallel=16).build(sample_tree)
        assert serial.files == parallel.files

    @pytest.mark.asyncio
    async def test_identical_trees_identical_records(self, tmp_path: Path, builder: ManifestBuilder):
        for name in ("a", "b"):
            root = tmp_path / name
            (root / "x" / "y").mkdir(parents=True)
            (root / "x" / "y" / "z.txt").write_bytes(b"zzz")
            (root / "top.txt").write_bytes(b"top")
        first = await builder.build(tmp_path / "a")
        second = await builder.build(tmp_path / "b")
        assert first.files == second.files

    @pytest.mark.asyncio
    async def test_empty_tree(self, tmp_path: Path, builder: ManifestBuilder):
        manifest = await builder.build(tmp_path)
        assert manifest.files == []


class TestWrite:
    @pytest.mark.asyncio
    async def test_json_shape(self, sample_tree: Path, builder: ManifestBuilder):
        manifest, target = await builder.build_and_write(sample_tree)
        assert target == sample_tree / MANIFEST_FILENAME

        raw = target.read_text(encoding="utf-8")
        assert raw.endswith("}\n")
        data = json.loads(raw)
        assert list(data) == ["generated", "algorithm", "files"]
        assert data["generated"] == manifest.generated
        assert [entry["path"] for entry in data["files"]] == EXPECTED_PATHS
        assert all(set(entry) == {"path", "hash"} for entry in data["files"])

    @pytest.mark.asyncio
    async def test_rewrite_overwrites_wholesale(self, sample_tree: Path, builder: ManifestBuilder):
        await builder.build_and_write(sample_tree)
        (sample_tree / "README.md").unlink()
        await builder.build_and_write(sample_tree)
        data = json.loads(manifest_path(sample_tree).read_text(encoding="utf-8"))
        assert "README.md" not in [entry["path"] for entry in data["files"]]

    @pytest.mark.asyncio
    async def test_two_builds_differ_only_in_timestamp(self, sample_tree: Path, builder: ManifestBuilder):
        first, _ = await builder.build_and_write(sample_tree)
        first_json = first.to_json_dict()
        second, _ = await builder.build_and_write(sample_tree)
        second_json = second.to_json_dict()
        first_json.pop("generated")
        second_json.pop("generated")
        assert first_json == second_json


class TestLoad:
    @pytest.mark.asyncio
    async def test_round_trip(self, sample_tree: Path, builder: ManifestBuilder):
        written, _ = await builder.build_and_write(sample_tree)
        loaded = ManifestBuilder.load(sample_tree)
        assert loaded.files == written.files
        assert loaded.algorithm == "sha256"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(ManifestMissingError) as exc_info:
            ManifestBuilder.load(tmp_path)
        assert exc_info.value.path == tmp_path / MANIFEST_FILENAME

    def test_not_json(self, tmp_path: Path):
        (tmp_path / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")
        with pytest.raises(ManifestInvalidError, match="not valid JSON"):
            ManifestBuilder.load(tmp_path)

    def test_top_level_array(self, tmp_path: Path):
        (tmp_path / MANIFEST_FILENAME).write_text("[]", encoding="utf-8")
        with pytest.raises(ManifestInvalidError):
            ManifestBuilder.load(tmp_path)

    @pytest.mark.parametrize(
        "files",
        [
            [{"path": "../outside.txt", "hash": "ab"}],
            [{"path": "/etc/passwd", "hash": "ab"}],
            [{"path": "a.txt", "hash": "not-hex"}],
            [{"path": MANIFEST_FILENAME, "hash": "ab"}],
            [{"path": "a.txt", "hash": "ab"}, {"path": "a.txt", "hash": "cd"}],
            [{"path": "a.txt"}],
        ],
    )
    def test_schema_violations(self, tmp_path: Path, files):
        payload = {"generated": "2026-01-01T00:00:00.000Z", "files": files}
        (tmp_path / MANIFEST_FILENAME).write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(ManifestInvalidError):
            ManifestBuilder.load(tmp_path)

    def test_legacy_manifest_without_algorithm(self, tmp_path: Path):
        payload = {
            "generated": "2026-01-01T00:00:00.000Z",
            "files": [{"path": "README.md", "hash": "ABCDEF0123456789"}],
        }
        (tmp_path / MANIFEST_FILENAME).write_text(json.dumps(payload), encoding="utf-8")
        manifest = ManifestBuilder.load(tmp_path)
        assert manifest.algorithm is None
        assert manifest.files[0].hash == "abcdef0123456789"


class TestModels:
    def test_to_json_dict_sorts_files(self):
        manifest = AuditManifest(
            generated="2026-01-01T00:00:00.000Z",
            algorithm="sha256",
            files=[FileRecord(path="b.txt", hash="01"), FileRecord(path="a.txt", hash="02")],
        )
        assert [f["path"] for f in manifest.to_json_dict()["files"]] == ["a.txt", "b.txt"]

    def test_to_json_dict_omits_missing_algorithm(self):
        manifest = AuditManifest(generated="2026-01-01T00:00:00.000Z")
        assert manifest.to_json_dict() == {"generated": "2026-01-01T00:00:00.000Z", "files": []}

    def test_utc_timestamp_format(self):
        moment = datetime(2026, 3, 4, 5, 6, 7, 891_234, tzinfo=timezone.utc)
        assert utc_timestamp(moment) == "2026-03-04T05:06:07.891Z"

    def test_default_timestamp_is_iso8601(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", AuditManifest().generated)
