"""Usage aggregator — folds exemptions, file evidence and manifests into a partition."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence

import structlog

from depsweep.engine.exemptions import BUILTIN_TOOL_PREFIXES, classify
from depsweep.engine.manifest import RuntimeManifest, cross_reference
from depsweep.engine.models import (
    RULE_EXEMPTION,
    CandidateFile,
    EvidenceRecord,
    ExemptionKind,
    ScanIssue,
    UsagePartition,
)
from depsweep.engine.registry import DependencyRegistry
from depsweep.engine.rules import DEFAULT_RULES, Rule, match_file

log = structlog.get_logger("depsweep.engine")

DEFAULT_CONCURRENCY = 4


class UsageAggregator:
    """Owns the accumulation state of one analysis run.

    Every registered, non-excluded dependency starts Unused.  Evidence only
    ever moves a dependency to Used, so the final membership is a monotonic
    OR over all evidence and does not depend on traversal order.
    """

    def __init__(
        self,
        registry: DependencyRegistry,
        user_excludes: Iterable[str] = (),
        tool_prefixes: Iterable[str] = BUILTIN_TOOL_PREFIXES,
        rules: Sequence[Rule] = DEFAULT_RULES,
    ) -> None:
        self._registry = registry
        self._user_excludes = frozenset(user_excludes)
        self._tool_prefixes = tuple(tool_prefixes)
        self._rules = tuple(rules)
        self._excluded: set[str] = set()
        self._evidence: dict[str, list[EvidenceRecord]] = {}
        self._unresolved: set[str] = set(registry.declared_ids())
        self._issues: list[ScanIssue] = []
        self._candidate_files = 0
        self._files_scanned = 0
        self._manifests_scanned = 0
        self._exemptions_applied = False

    # ── state ────────────────────────────────────────────────────────────

    def unresolved(self) -> list[str]:
        return sorted(self._unresolved)

    def add_evidence(self, records: Iterable[EvidenceRecord]) -> int:
        """Merge *records* into the run state. Returns how many ids became Used.

        This is the single merge point; concurrent scans call it from the
        event loop only.
        """
        newly_resolved = 0
        for record in records:
            dep_id = record.dependency_id
            if dep_id not in self._registry or dep_id in self._excluded:
                log.debug("aggregator.evidence_ignored", dependency=dep_id, file=record.file_path)
                continue
            if dep_id in self._unresolved:
                self._unresolved.discard(dep_id)
                newly_resolved += 1
                log.debug(
                    "aggregator.resolved",
                    dependency=dep_id,
                    file=record.file_path,
                    rule=record.rule,
                )
            self._evidence.setdefault(dep_id, []).append(record)
        return newly_resolved

    def record_issue(self, issue: ScanIssue) -> None:
        self._issues.append(issue)

    # ── phases ───────────────────────────────────────────────────────────

    def apply_exemptions(self) -> dict[str, ExemptionKind]:
        """Classify every registered id; drop user exclusions, resolve tool frameworks."""
        results: dict[str, ExemptionKind] = {}
        for dep_id in self._registry.declared_ids():
            kind = classify(
                dep_id,
                self._user_excludes,
                self._tool_prefixes,
                development_only=self._registry.dependency(dep_id).development_only,
            )
            results[dep_id] = kind
            if kind is ExemptionKind.USER_EXCLUDED:
                self._excluded.add(dep_id)
                self._unresolved.discard(dep_id)
                self._evidence.pop(dep_id, None)
            elif kind is ExemptionKind.TOOL_FRAMEWORK:
                is_tool = any(dep_id.startswith(p) for p in self._tool_prefixes)
                detail = (
                    "build/test/analysis tool package"
                    if is_tool
                    else "declared as a development-only asset"
                )
                self.add_evidence(
                    [
                        EvidenceRecord(
                            dependency_id=dep_id,
                            file_path="",
                            rule=RULE_EXEMPTION,
                            detail=detail,
                        )
                    ]
                )
        self._exemptions_applied = True
        log.info(
            "aggregator.exemptions_applied",
            excluded=len(self._excluded),
            exempt=sum(1 for k in results.values() if k is ExemptionKind.TOOL_FRAMEWORK),
            remaining=len(self._unresolved),
        )
        return results

    def scan_file(self, file: CandidateFile) -> list[EvidenceRecord]:
        """Match one file against every still-unresolved dependency."""
        pending = self.unresolved()
        if not pending:
            return []
        records = match_file(file, pending, self._rules)
        self._files_scanned += 1
        self.add_evidence(records)
        return records

    def scan_files(self, files: Iterable[CandidateFile]) -> None:
        """Scan files in path order, stopping once nothing is left to resolve."""
        ordered = sorted(files, key=lambda f: f.path)
        self._candidate_files += len(ordered)
        for file in ordered:
            if not self._unresolved:
                break
            self.scan_file(file)

    async def scan_files_concurrently(
        self,
        files: Iterable[CandidateFile],
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """Shard files across worker threads with bounded concurrency.

        Each worker matches against a snapshot of the unresolved set taken
        when it starts; a dependency resolved meanwhile by another worker
        may be matched twice, and the extra record is kept as evidence.
        """
        sem = asyncio.Semaphore(max(1, concurrency))

        async def _run(file: CandidateFile) -> None:
            async with sem:
                pending = self.unresolved()
                if not pending:
                    return
                records = await asyncio.to_thread(match_file, file, pending, self._rules)
                self._files_scanned += 1
                self.add_evidence(records)

        ordered = sorted(files, key=lambda f: f.path)
        self._candidate_files += len(ordered)
        await asyncio.gather(*[_run(file) for file in ordered])

    def apply_manifests(self, manifests: Iterable[RuntimeManifest]) -> None:
        for manifest in manifests:
            self._manifests_scanned += 1
            if not self._unresolved:
                continue
            resolved = cross_reference(manifest, self._unresolved)
            self.add_evidence(resolved.values())
            if resolved:
                log.debug(
                    "aggregator.manifest_resolved",
                    manifest=manifest.path,
                    dependencies=sorted(resolved),
                )

    def partition(self) -> UsagePartition:
        if not self._exemptions_applied:
            self.apply_exemptions()
        considered = [
            dep_id for dep_id in self._registry.declared_ids() if dep_id not in self._excluded
        ]
        dependencies = {dep_id: self._registry.dependency(dep_id) for dep_id in considered}
        used = {
            dep_id: sorted(self._evidence[dep_id], key=lambda r: (r.file_path, r.rule))
            for dep_id in considered
            if dep_id in self._evidence
        }
        unused = {
            dep_id: dependencies[dep_id] for dep_id in considered if dep_id not in self._evidence
        }
        return UsagePartition(
            used=used,
            unused=unused,
            dependencies=dependencies,
            excluded=sorted(self._excluded),
            issues=list(self._issues),
            candidate_files=self._candidate_files,
            files_scanned=self._files_scanned,
            manifests_scanned=self._manifests_scanned,
        )


def _prepare(
    registry: DependencyRegistry,
    user_excludes: Iterable[str],
    tool_prefixes: Iterable[str],
    rules: Sequence[Rule],
    issues: Iterable[ScanIssue],
) -> UsageAggregator:
    aggregator = UsageAggregator(registry, user_excludes, tool_prefixes, rules)
    for issue in issues:
        aggregator.record_issue(issue)
    aggregator.apply_exemptions()
    return aggregator


def analyze(
    registry: DependencyRegistry,
    files: Iterable[CandidateFile],
    manifests: Iterable[RuntimeManifest] = (),
    *,
    user_excludes: Iterable[str] = (),
    tool_prefixes: Iterable[str] = BUILTIN_TOOL_PREFIXES,
    rules: Sequence[Rule] = DEFAULT_RULES,
    issues: Iterable[ScanIssue] = (),
) -> UsagePartition:
    """Run the whole pipeline sequentially (no DB, no threads)."""
    aggregator = _prepare(registry, user_excludes, tool_prefixes, rules, issues)
    aggregator.scan_files(files)
    aggregator.apply_manifests(manifests)
    partition = aggregator.partition()
    _log_summary(partition)
    return partition


async def analyze_async(
    registry: DependencyRegistry,
    files: Iterable[CandidateFile],
    manifests: Iterable[RuntimeManifest] = (),
    *,
    user_excludes: Iterable[str] = (),
    tool_prefixes: Iterable[str] = BUILTIN_TOOL_PREFIXES,
    rules: Sequence[Rule] = DEFAULT_RULES,
    issues: Iterable[ScanIssue] = (),
    concurrency: int = DEFAULT_CONCURRENCY,
) -> UsagePartition:
    """Same as :func:`analyze`, with the file pass sharded across worker threads."""
    aggregator = _prepare(registry, user_excludes, tool_prefixes, rules, issues)
    await aggregator.scan_files_concurrently(files, concurrency)
    aggregator.apply_manifests(manifests)
    partition = aggregator.partition()
    _log_summary(partition)
    return partition


def _log_summary(partition: UsagePartition) -> None:
    log.info(
        "aggregator.done",
        used=len(partition.used),
        unused=len(partition.unused),
        excluded=len(partition.excluded),
        files_scanned=partition.files_scanned,
        manifests_scanned=partition.manifests_scanned,
        issues=len(partition.issues),
    )
