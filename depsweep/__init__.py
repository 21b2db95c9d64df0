"""depsweep: find declared package dependencies with no evidence of use."""

__version__ = "0.1.0"

from depsweep.engine import (
    CandidateFile,
    DependencyRegistry,
    EvidenceRecord,
    ExemptionKind,
    Project,
    UsagePartition,
    analyze,
    analyze_async,
)

__all__ = [
    "CandidateFile",
    "DependencyRegistry",
    "EvidenceRecord",
    "ExemptionKind",
    "Project",
    "UsagePartition",
    "analyze",
    "analyze_async",
]
