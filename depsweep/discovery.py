"""Filesystem discovery of project files, candidate files and runtime manifests."""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from pathlib import Path

import structlog

# Ensure parsers are registered before discovery runs.
import depsweep.parsers  # noqa: F401
from depsweep.engine.manifest import RuntimeManifest, read_runtime_manifest
from depsweep.engine.models import CandidateFile, Project, ScanIssue
from depsweep.exceptions import ManifestParseError, ProjectParseError
from depsweep.parsers.registry import parser_for

log = structlog.get_logger("depsweep.discovery")

CANDIDATE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".cs",
        ".fs",
        ".fsx",
        ".vb",
        ".cshtml",
        ".razor",
        ".xaml",
        ".axaml",
        ".config",
        ".json",
        ".xml",
        ".props",
        ".targets",
        ".resx",
        ".settings",
    }
)

# Build output and tool directories, never walked for sources or projects.
EXCLUDED_DIRS: frozenset[str] = frozenset(
    {"bin", "obj", ".git", ".vs", ".idea", "node_modules", "packages", "TestResults"}
)

# Manifests are build output, so only VCS and tool folders are skipped.
MANIFEST_EXCLUDED_DIRS: frozenset[str] = frozenset({".git", ".vs", ".idea", "node_modules"})

MANIFEST_SUFFIX = ".deps.json"

# Restore outputs and central version files list every package by name.
_GENERATED_NAMES: frozenset[str] = frozenset(
    {"project.assets.json", "packages.lock.json", "Directory.Packages.props"}
)

# Imported MSBuild files that pin or declare packages name them by definition.
_BUILD_IMPORT_SUFFIXES: frozenset[str] = frozenset({".props", ".targets"})
_PACKAGE_ITEM_RE = re.compile(
    r"<[ \t]*(?:\w+:)?(?:PackageReference|PackageVersion|GlobalPackageReference)\b"
)


def _walk(root: Path, skip_dirs: frozenset[str]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip_dirs)
        for name in sorted(filenames):
            yield Path(dirpath) / name


def _relative(root: Path, path: Path) -> str:
    return path.relative_to(root).as_posix()


def discover_projects(root: Path) -> tuple[list[Project], list[ScanIssue]]:
    """Parse every recognised project file under *root*.

    Unreadable or malformed files are skipped with a warning and reported
    as issues.
    """
    projects: list[Project] = []
    issues: list[ScanIssue] = []
    for path in _walk(root, EXCLUDED_DIRS):
        parser = parser_for(path)
        if parser is None:
            continue
        rel = _relative(root, path)
        try:
            content = path.read_text(encoding="utf-8-sig", errors="replace")
            projects.append(parser.parse(rel, content))
        except ProjectParseError as e:
            log.warning("discovery.project_parse_failed", path=rel, reason=e.reason)
            issues.append(ScanIssue(path=rel, kind="project_parse", message=e.reason))
        except OSError as e:
            log.warning("discovery.project_read_failed", path=rel, error=str(e))
            issues.append(ScanIssue(path=rel, kind="read_error", message=str(e)))
    log.info("discovery.projects", count=len(projects), issues=len(issues))
    return projects, issues


def is_candidate(path: Path, extensions: frozenset[str] = CANDIDATE_EXTENSIONS) -> bool:
    """Source, markup or config file that may carry usage evidence.

    Project files and restore outputs declare packages rather than use them.
    """
    name = path.name
    if name in _GENERATED_NAMES or name.endswith(MANIFEST_SUFFIX):
        return False
    if parser_for(path) is not None:
        return False
    return path.suffix.lower() in extensions


def declares_packages(path: Path, text: str) -> bool:
    """True for a .props / .targets import carrying package items."""
    return (
        path.suffix.lower() in _BUILD_IMPORT_SUFFIXES
        and _PACKAGE_ITEM_RE.search(text) is not None
    )


def discover_candidate_files(
    root: Path,
    extensions: frozenset[str] = CANDIDATE_EXTENSIONS,
    max_file_bytes: int | None = None,
) -> tuple[list[CandidateFile], list[ScanIssue]]:
    files: list[CandidateFile] = []
    issues: list[ScanIssue] = []
    skipped_large = 0
    for path in _walk(root, EXCLUDED_DIRS):
        if not is_candidate(path, extensions):
            continue
        rel = _relative(root, path)
        try:
            if max_file_bytes is not None and path.stat().st_size > max_file_bytes:
                skipped_large += 1
                log.debug("discovery.file_too_large", path=rel)
                continue
            text = path.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            log.warning("discovery.file_read_failed", path=rel, error=str(e))
            issues.append(ScanIssue(path=rel, kind="read_error", message=str(e)))
            continue
        if declares_packages(path, text):
            log.debug("discovery.package_import_skipped", path=rel)
            continue
        files.append(CandidateFile(path=rel, text=text))
    log.info("discovery.candidates", count=len(files), skipped_large=skipped_large)
    return files, issues


def discover_runtime_manifests(root: Path) -> list[Path]:
    return [p for p in _walk(root, MANIFEST_EXCLUDED_DIRS) if p.name.endswith(MANIFEST_SUFFIX)]


def load_runtime_manifests(
    root: Path,
    paths: list[Path],
) -> tuple[list[RuntimeManifest], list[ScanIssue]]:
    manifests: list[RuntimeManifest] = []
    issues: list[ScanIssue] = []
    for path in paths:
        rel = _relative(root, path)
        try:
            manifests.append(read_runtime_manifest(path, display_path=rel))
        except ManifestParseError as e:
            log.warning("discovery.manifest_parse_failed", path=rel, reason=e.reason)
            issues.append(ScanIssue(path=rel, kind="manifest_parse", message=e.reason))
    return manifests, issues
