"""Report builder — render a usage partition for people or machines."""

from __future__ import annotations

from pydantic import BaseModel

from depsweep.engine.models import RULE_EXEMPTION, UsagePartition

HEURISTIC_NOTICE = (
    "Results are heuristic: an 'unused' package only lacks textual evidence of use. "
    "Verify each one manually before removing it."
)
NO_PROJECTS_NOTE = "No project files with package references were found."
NO_FILES_NOTE = "No candidate source files were found; every non-exempt package is reported unused."


class EvidenceItem(BaseModel):
    file: str
    rule: str
    detail: str | None = None


class UsedDependency(BaseModel):
    id: str
    version: str | None
    projects: list[str]
    evidence: list[EvidenceItem] = []


class UnusedDependency(BaseModel):
    id: str
    version: str | None
    versions: dict[str, str | None]
    projects: list[str]


class IssueItem(BaseModel):
    path: str
    kind: str
    message: str


class ReportSummary(BaseModel):
    declared: int
    used: int
    unused: int
    excluded: int
    candidate_files: int
    files_scanned: int
    manifests_scanned: int


class UsageReport(BaseModel):
    summary: ReportSummary
    unused: list[UnusedDependency]
    used: list[UsedDependency]
    excluded: list[str]
    issues: list[IssueItem]
    notes: list[str]


def build_report(partition: UsagePartition, verbose: bool = False) -> UsageReport:
    """Build the report structure. Evidence trails are included only when *verbose*."""
    unused = [
        UnusedDependency(
            id=dep.dependency_id,
            version=dep.version,
            versions=dict(dep.versions),
            projects=list(dep.projects),
        )
        for dep in partition.unused.values()
    ]
    used = []
    for dep_id, records in partition.used.items():
        dep = partition.dependencies.get(dep_id)
        used.append(
            UsedDependency(
                id=dep_id,
                version=dep.version if dep else None,
                projects=list(dep.projects) if dep else [],
                evidence=[
                    EvidenceItem(file=r.file_path, rule=r.rule, detail=r.detail)
                    for r in records
                ]
                if verbose
                else [],
            )
        )

    notes = [HEURISTIC_NOTICE]
    if not partition.dependencies and not partition.excluded:
        notes.append(NO_PROJECTS_NOTE)
    elif partition.candidate_files == 0:
        notes.append(NO_FILES_NOTE)

    return UsageReport(
        summary=ReportSummary(
            declared=len(partition.dependencies),
            used=len(partition.used),
            unused=len(partition.unused),
            excluded=len(partition.excluded),
            candidate_files=partition.candidate_files,
            files_scanned=partition.files_scanned,
            manifests_scanned=partition.manifests_scanned,
        ),
        unused=unused,
        used=used,
        excluded=list(partition.excluded),
        issues=[IssueItem(path=i.path, kind=i.kind, message=i.message) for i in partition.issues],
        notes=notes,
    )


def render_json(report: UsageReport) -> str:
    return report.model_dump_json(indent=2)


def _format_versions(dep: UnusedDependency) -> str:
    distinct = sorted({v for v in dep.versions.values() if v})
    if len(distinct) > 1:
        return ", ".join(distinct)
    return dep.version or "?"


def render_text(report: UsageReport) -> str:
    s = report.summary
    lines = [
        f"Declared packages: {s.declared}  used: {s.used}  unused: {s.unused}"
        f"  excluded: {s.excluded}",
        f"Files scanned: {s.files_scanned}/{s.candidate_files}"
        f"  runtime manifests: {s.manifests_scanned}",
        "",
    ]

    if report.unused:
        lines.append(f"Possibly unused packages ({len(report.unused)}):")
        for dep in report.unused:
            lines.append(f"  {dep.id} {_format_versions(dep)}")
            for project in dep.projects:
                lines.append(f"    declared in {project}")
    else:
        lines.append("No unused packages found.")
    lines.append("")

    if any(dep.evidence for dep in report.used):
        lines.append(f"Used packages ({len(report.used)}):")
        for dep in report.used:
            lines.append(f"  {dep.id} {dep.version or ''}".rstrip())
            for ev in dep.evidence:
                where = "(exemption)" if ev.rule == RULE_EXEMPTION else ev.file
                detail = f": {ev.detail}" if ev.detail else ""
                lines.append(f"    [{ev.rule}] {where}{detail}")
        lines.append("")

    if report.issues:
        lines.append(f"Skipped files ({len(report.issues)}):")
        for issue in report.issues:
            lines.append(f"  {issue.path} ({issue.kind}): {issue.message}")
        lines.append("")

    for note in report.notes:
        lines.append(f"Note: {note}")
    return "\n".join(lines) + "\n"
