"""Tests for the dependency registry."""

from __future__ import annotations

import pytest
from conftest import project

from depsweep.engine.registry import DependencyRegistry


class TestDependencyRegistry:
    def test_declared_ids_sorted(self):
        registry = DependencyRegistry(
            [project("A.csproj", ("Zeta.Lib", "1.0"), ("Alpha.Lib", "2.0"))]
        )
        assert registry.declared_ids() == ["Alpha.Lib", "Zeta.Lib"]
        assert len(registry) == 2
        assert "Alpha.Lib" in registry
        assert "Missing" not in registry

    def test_versions_kept_per_project(self):
        registry = DependencyRegistry(
            [
                project("A.csproj", ("Shared.Utils", "1.0")),
                project("B.csproj", ("Shared.Utils", "2.0")),
            ]
        )
        dep = registry.dependency("Shared.Utils")
        assert dep.version == "2.0"
        assert dep.projects == ("A.csproj", "B.csproj")
        assert registry.versions_of("Shared.Utils") == {"A.csproj": "1.0", "B.csproj": "2.0"}
        assert registry.projects_declaring("Shared.Utils") == ["A.csproj", "B.csproj"]

    def test_unknown_id(self):
        registry = DependencyRegistry()
        with pytest.raises(KeyError):
            registry.dependency("Nope")
        assert registry.versions_of("Nope") == {}
        assert registry.projects_declaring("Nope") == []

    def test_development_only_requires_all_declarations(self):
        registry = DependencyRegistry(
            [
                project("A.csproj", ("Acme.Generators", "1.0"), dev=True),
                project("B.csproj", ("Acme.Generators", "1.0")),
                project("C.csproj", ("Acme.Analyzers", "1.0"), dev=True),
            ]
        )
        assert registry.dependency("Acme.Generators").development_only is False
        assert registry.dependency("Acme.Analyzers").development_only is True

    def test_add_project(self):
        registry = DependencyRegistry()
        registry.add_project(project("A.csproj", ("Serilog", "3.0")))
        assert [p.path for p in registry.projects] == ["A.csproj"]
        assert registry.declared_ids() == ["Serilog"]
