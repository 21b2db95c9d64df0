"""Exemption classifier — decide statically whether a dependency needs evidence."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from depsweep.engine.models import ExemptionKind

# Package-name prefixes of build, test and analysis tooling. These packages
# are wired in through the build pipeline, so source text never names them.
BUILTIN_TOOL_PREFIXES: tuple[str, ...] = (
    # test SDKs and runners
    "Microsoft.NET.Test.Sdk",
    "Microsoft.TestPlatform",
    "xunit",
    "NUnit",
    "nunit",
    "MSTest",
    "Microsoft.Testing",
    # mocking
    "Moq",
    "NSubstitute",
    "FakeItEasy",
    # coverage
    "coverlet",
    "Microsoft.CodeCoverage",
    "JunitXml.TestLogger",
    # code analysis
    "Microsoft.CodeAnalysis",
    "Microsoft.VisualStudio.Threading.Analyzers",
    "StyleCop.Analyzers",
    "SonarAnalyzer",
    "Roslynator",
    "Meziantou.Analyzer",
    "AsyncFixer",
    # source link / packaging
    "Microsoft.SourceLink",
    "Nerdbank.GitVersioning",
    "MinVer",
    "GitVersion.MsBuild",
)


def classify(
    dependency_id: str,
    user_excludes: Collection[str] = (),
    tool_prefixes: Iterable[str] = BUILTIN_TOOL_PREFIXES,
    *,
    development_only: bool = False,
) -> ExemptionKind:
    """Classify *dependency_id* without scanning any file.

    ``USER_EXCLUDED`` wins over ``TOOL_FRAMEWORK``: an excluded package is
    dropped from the run entirely.  Prefix matching is case-sensitive.
    Packages declared only as build-time assets (``development_only``) are
    treated like tool frameworks.
    """
    if dependency_id in user_excludes:
        return ExemptionKind.USER_EXCLUDED
    if any(dependency_id.startswith(prefix) for prefix in tool_prefixes):
        return ExemptionKind.TOOL_FRAMEWORK
    if development_only:
        return ExemptionKind.TOOL_FRAMEWORK
    return ExemptionKind.NONE
