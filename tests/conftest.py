"""Shared pytest fixtures for depsweep tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from depsweep.engine.models import PackageDeclaration, Project

APP_CSPROJ = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
  <ItemGroup>
    <PackageReference Include="Newtonsoft.Json" Version="13.0.1" />
    <PackageReference Include="Vendor.Logging.Client" Version="2.0.0" />
    <PackageReference Include="Acme.Widgets" Version="2.1.0" />
    <PackageReference Include="Microsoft.NET.Test.Sdk" Version="17.8.0" />
  </ItemGroup>
</Project>
"""

PROGRAM_CS = """\
using Vendor.Logging;

namespace App;

public static class Program
{
    public static void Main() { }
}
"""

DEPS_JSON = {
    "runtimeTarget": {"name": ".NETCoreApp,Version=v8.0"},
    "targets": {
        ".NETCoreApp,Version=v8.0": {
            "App/1.0.0": {"dependencies": {"Acme.Widgets": "2.1.0"}},
            "Acme.Widgets/2.1.0": {"runtime": {"lib/net8.0/Acme.Widgets.dll": {}}},
        }
    },
    "libraries": {
        "App/1.0.0": {"type": "project"},
        "Acme.Widgets/2.1.0": {"type": "package"},
    },
}


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def project(path: str, *packages: tuple[str, str | None], dev: bool = False) -> Project:
    """Build a Project declaring ``(id, version)`` pairs."""
    return Project(
        path=path,
        declarations=tuple(
            PackageDeclaration(dependency_id=dep_id, version=version, development_only=dev)
            for dep_id, version in packages
        ),
    )


@pytest.fixture
def sample_solution(tmp_path: Path) -> Path:
    """A small solution tree: one project, one source file, one runtime manifest."""
    write(tmp_path / "App" / "App.csproj", APP_CSPROJ)
    write(tmp_path / "App" / "Program.cs", PROGRAM_CS)
    write(
        tmp_path / "App" / "bin" / "Debug" / "net8.0" / "App.deps.json",
        json.dumps(DEPS_JSON, indent=2),
    )
    # build output is never scanned for usage
    write(tmp_path / "App" / "obj" / "Generated.cs", "// Newtonsoft.Json\n")
    return tmp_path
