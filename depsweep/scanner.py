"""Directory scan: discovery wired into the usage-inference engine."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from depsweep.core.config import Settings
from depsweep.discovery import (
    discover_candidate_files,
    discover_projects,
    discover_runtime_manifests,
    load_runtime_manifests,
)
from depsweep.engine.aggregator import analyze_async
from depsweep.engine.models import UsagePartition
from depsweep.engine.registry import DependencyRegistry

log = structlog.get_logger("depsweep.scanner")


async def scan(
    root: Path,
    settings: Settings | None = None,
    *,
    use_manifests: bool = True,
    extra_excludes: Iterable[str] = (),
) -> UsagePartition:
    """Scan a local project tree and partition its declared packages."""
    settings = settings or Settings()
    root = root.resolve()

    projects, issues = discover_projects(root)
    registry = DependencyRegistry(projects)
    if not projects:
        log.info("scanner.no_projects", root=str(root))

    files, file_issues = discover_candidate_files(root, max_file_bytes=settings.max_file_bytes)
    issues.extend(file_issues)

    manifests = []
    if use_manifests:
        manifests, manifest_issues = load_runtime_manifests(root, discover_runtime_manifests(root))
        issues.extend(manifest_issues)

    return await analyze_async(
        registry,
        files,
        manifests,
        user_excludes=[*settings.exclude, *extra_excludes],
        tool_prefixes=settings.tool_prefixes,
        issues=issues,
        concurrency=settings.concurrency,
    )
