"""Data models for the usage-inference engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ExemptionKind(str, Enum):
    """Why a dependency is (or is not) exempt from usage-evidence requirements."""

    NONE = "none"
    USER_EXCLUDED = "user_excluded"
    TOOL_FRAMEWORK = "tool_framework"


class UsageStatus(str, Enum):
    USED = "used"
    UNUSED = "unused"


# Rule names attached to evidence records.
RULE_ATTRIBUTE = "attribute-usage"
RULE_IMPORT = "import-statement"
RULE_SUBSTRING = "substring"
RULE_EXEMPTION = "categorical-exemption"
RULE_MANIFEST = "runtime-manifest"


@dataclass(frozen=True)
class PackageDeclaration:
    """One ``PackageReference`` (or equivalent) inside a project file."""

    dependency_id: str
    version: str | None
    development_only: bool = False


@dataclass(frozen=True)
class Project:
    """A project-description document and the packages it declares."""

    path: str
    declarations: tuple[PackageDeclaration, ...] = ()
    format_name: str = "msbuild"

    @property
    def dependencies(self) -> dict[str, str | None]:
        """Declared dependency ids mapped to their declared version."""
        return {d.dependency_id: d.version for d in self.declarations}


@dataclass(frozen=True)
class Dependency:
    """A declared dependency, aggregated over every project declaring it."""

    dependency_id: str
    version: str | None
    projects: tuple[str, ...]
    versions: dict[str, str | None] = field(default_factory=dict, compare=False)
    development_only: bool = False


@dataclass(frozen=True)
class CandidateFile:
    """A unit of scan input. Text is read once and never mutated."""

    path: str
    text: str


@dataclass(frozen=True)
class EvidenceRecord:
    """A single piece of proof that a dependency is referenced somewhere."""

    dependency_id: str
    file_path: str
    rule: str
    detail: str | None = None


@dataclass(frozen=True)
class ScanIssue:
    """A recoverable per-file problem surfaced in the report."""

    path: str
    kind: str  # "project_parse" | "manifest_parse" | "read_error"
    message: str


@dataclass
class UsagePartition:
    """Final classification of every registered dependency."""

    used: dict[str, list[EvidenceRecord]] = field(default_factory=dict)
    unused: dict[str, Dependency] = field(default_factory=dict)
    dependencies: dict[str, Dependency] = field(default_factory=dict)
    excluded: list[str] = field(default_factory=list)
    issues: list[ScanIssue] = field(default_factory=list)
    candidate_files: int = 0
    files_scanned: int = 0
    manifests_scanned: int = 0

    def status_of(self, dependency_id: str) -> UsageStatus | None:
        if dependency_id in self.used:
            return UsageStatus.USED
        if dependency_id in self.unused:
            return UsageStatus.UNUSED
        return None

    def membership(self) -> dict[str, UsageStatus]:
        """Used/Unused classification without the evidence trail."""
        result = {dep_id: UsageStatus.USED for dep_id in self.used}
        result.update({dep_id: UsageStatus.UNUSED for dep_id in self.unused})
        return dict(sorted(result.items()))
