"""Scaffold / verify orchestrator and CLI entry point.

Exactly one of two modes runs per invocation:

scaffold -- validate input, look up the template, materialize the tree,
            write ``audit-index.json`` and optionally ``git init``.
verify   -- re-hash every file listed in ``audit-index.json`` and report
            missing or modified files.

Usage::

    zotero-scaffold -n MyPlugin -a "Jane Smith" -t practitioner -g
    zotero-scaffold -n MyPlugin -v
    python -m zotero_scaffold.pipeline --list-templates
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.markup import escape

from zotero_scaffold import git_client
from zotero_scaffold.auditor import HashEngine, ManifestBuilder, VerificationReport, Verifier
from zotero_scaffold.auditor.models import AuditManifest
from zotero_scaffold.config import Config
from zotero_scaffold.errors import (
    EXIT_FINDINGS,
    EXIT_IO_ERROR,
    EXIT_OK,
    GitError,
    InputValidationError,
    ScaffoldError,
)
from zotero_scaffold.scaffolder import ProjectSpec, TemplateStore, TreeBuilder, VariableContext
from zotero_scaffold.utils import (
    console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    setup_logging,
)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ScaffoldResult:
    """Outcome of a successful scaffold."""

    root: Path
    template_id: str
    written: list[Path]
    manifest: AuditManifest
    manifest_path: Path
    git_initialized: bool = False
    git_error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Orchestrator:
    """Sequences the template store, tree builder and integrity auditor.

    Failures propagate as ``ScaffoldError`` subclasses; nothing is cleaned up
    on failure, so a partially written tree stays on disk for inspection.
    """

    def __init__(self, config: Config | None = None, store: TemplateStore | None = None) -> None:
        self.config = config or Config()
        self.store = store or TemplateStore(version=self.config.template_version)
        self.tree_builder = TreeBuilder()
        self.engine = HashEngine.from_config(self.config.audit)
        self.manifests = ManifestBuilder(self.engine, max_parallel=self.config.audit.max_parallel_hashes)
        self.verifier = Verifier(self.engine)

    # -- Validation --------------------------------------------------------

    @staticmethod
    def validate_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise InputValidationError("--name", "project name is required")
        if name in (".", "..") or "/" in name or "\\" in name:
            raise InputValidationError("--name", f"{name!r} must be a plain directory name")
        return name

    @classmethod
    def validate_spec(cls, spec: ProjectSpec) -> ProjectSpec:
        name = cls.validate_name(spec.name)
        author = (spec.author or "").strip()
        if not author:
            raise InputValidationError("--author", "author name is required")
        template = (spec.template or "").strip()
        if not template:
            raise InputValidationError("--template", "template type is required")
        return spec.model_copy(update={"name": name, "author": author, "template": template})

    # -- Modes -------------------------------------------------------------

    async def scaffold(self, spec: ProjectSpec) -> ScaffoldResult:
        """Create a new project and its manifest.

        Input validation, template lookup and the existence check all happen
        before the first write.
        """
        spec = self.validate_spec(spec)
        template = self.store.lookup(spec.template)
        root = self.config.project_root(spec.name)

        print_info(f"Creating project: {spec.name}")
        print_info(f"Template type: {template.id}")

        context = VariableContext(
            project_name=spec.name,
            author_name=spec.author,
            version=template.version,
        )
        written = await self.tree_builder.materialize(template, context, root)

        print_info("Generating audit-index.json...")
        manifest, target = await self.manifests.build_and_write(root)

        result = ScaffoldResult(
            root=root,
            template_id=template.id,
            written=written,
            manifest=manifest,
            manifest_path=target,
        )

        if spec.git_init:
            print_info("Initializing git repository...")
            try:
                await git_client.init_repository(
                    root,
                    message=self.config.git_commit_message,
                    timeout=self.config.git_timeout,
                )
                result.git_initialized = True
            except GitError as exc:
                result.git_error = str(exc)
                result.warnings.append(f"git initialization failed: {exc}")

        return result

    async def verify(self, name: str) -> VerificationReport:
        """Verify the project called *name* against its manifest."""
        name = self.validate_name(name)
        root = self.config.project_root(name)
        return await self.verifier.verify(root)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def _report_verification(report: VerificationReport, as_json: bool) -> None:
    if as_json:
        sys.stdout.write(json.dumps(report.model_dump(), indent=2) + "\n")
        return
    if report.passed:
        print_success(f"All files intact ({report.checked} checked, {report.algorithm})")
        return
    rows = [
        [finding.kind, finding.path, finding.expected, finding.actual or "-"]
        for finding in report.findings
    ]
    print_table(rows, ["Finding", "Path", "Expected", "Actual"], title="Integrity findings", stderr=True)
    print_error(f"{len(report.findings)} integrity issue(s) detected.")


def _report_templates(store: TemplateStore) -> None:
    rows = [
        [row["id"], row["version"], row["files"], row["description"]]
        for row in store.describe()
    ]
    print_table(rows, ["Template", "Version", "Files", "Description"], title="Available templates")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser(default_template: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zotero-scaffold",
        description="Zotero plugin scaffolder with integrity audit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            '  zotero-scaffold -n MyPlugin -a "John Doe"\n'
            '  zotero-scaffold -n AdvancedPlugin -a "Jane Smith" -t practitioner -g\n'
            "  zotero-scaffold -n MyPlugin -v\n"
        ),
    )
    parser.add_argument("--name", "-n", default="", help="Project name (required)")
    parser.add_argument("--author", "-a", default="", help="Author name (required to scaffold)")
    parser.add_argument(
        "--template", "-t",
        default=default_template,
        help=f"Template type: practitioner|researcher|student (default: {default_template})",
    )
    parser.add_argument("--git-init", "-g", action="store_true", help="Initialize git repository")
    parser.add_argument("--verify", "-v", action="store_true", help="Verify integrity of existing project")
    parser.add_argument("--output", "-o", default=None, help="Parent directory for the project")
    parser.add_argument("--json", action="store_true", help="Print the verification report as JSON")
    parser.add_argument("--list-templates", action="store_true", help="List available templates and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    try:
        config = Config.from_env()
    except ValueError as exc:
        print_error(f"Invalid environment configuration: {exc}")
        return InputValidationError.exit_code

    args = build_parser(config.default_template).parse_args(argv)
    setup_logging(args.verbose)
    if args.output is not None:
        config = config.model_copy(update={"output_dir": Path(args.output)})

    orchestrator = Orchestrator(config)

    try:
        if args.list_templates:
            _report_templates(orchestrator.store)
            return EXIT_OK

        if args.verify:
            if not args.json:
                print_info("Verifying integrity via audit-index.json...")
            report = asyncio.run(orchestrator.verify(args.name))
            _report_verification(report, args.json)
            return EXIT_OK if report.passed else EXIT_FINDINGS

        spec = ProjectSpec(
            name=args.name,
            author=args.author,
            template=args.template,
            git_init=args.git_init,
        )
        result = asyncio.run(orchestrator.scaffold(spec))
    except ScaffoldError as exc:
        print_error(str(exc))
        return exc.exit_code
    except OSError as exc:
        print_error(str(exc))
        return EXIT_IO_ERROR

    for warning in result.warnings:
        print_warning(warning)
    console.print(f"[dim]{len(result.written)} file(s) written, manifest at {escape(str(result.manifest_path))}[/dim]")
    print_success(f"Project '{result.root.name}' created successfully!")
    return EXIT_OK


def run() -> None:
    """Console-script wrapper around :func:`main`."""
    sys.exit(main())


if __name__ == "__main__":
    run()
