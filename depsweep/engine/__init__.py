"""Usage-inference engine — decide which declared packages show evidence of use."""

from depsweep.engine.aggregator import UsageAggregator, analyze, analyze_async
from depsweep.engine.exemptions import BUILTIN_TOOL_PREFIXES, classify
from depsweep.engine.manifest import RuntimeManifest, cross_reference
from depsweep.engine.models import (
    CandidateFile,
    Dependency,
    EvidenceRecord,
    ExemptionKind,
    PackageDeclaration,
    Project,
    ScanIssue,
    UsagePartition,
    UsageStatus,
)
from depsweep.engine.registry import DependencyRegistry
from depsweep.engine.rules import DEFAULT_RULES, Rule, match
from depsweep.engine.tokens import TokenSet, derive_tokens

__all__ = [
    "BUILTIN_TOOL_PREFIXES",
    "CandidateFile",
    "DEFAULT_RULES",
    "Dependency",
    "DependencyRegistry",
    "EvidenceRecord",
    "ExemptionKind",
    "PackageDeclaration",
    "Project",
    "Rule",
    "RuntimeManifest",
    "ScanIssue",
    "TokenSet",
    "UsageAggregator",
    "UsagePartition",
    "UsageStatus",
    "analyze",
    "analyze_async",
    "classify",
    "cross_reference",
    "derive_tokens",
    "match",
]
