"""Tests for CLI commands."""

from __future__ import annotations

import json

from click.testing import CliRunner
from conftest import write

from depsweep.cli import main

_ENV = {"DEPSWEEP_LOG_LEVEL": "ERROR", "DEPSWEEP_CONCURRENCY": "2"}


def _invoke(args: list[str], env: dict[str, str] | None = None):
    return CliRunner().invoke(main, args, env={**_ENV, **(env or {})})


# ── scan ──


class TestScan:
    def test_text_report(self, sample_solution):
        result = _invoke(["scan", str(sample_solution)])
        assert result.exit_code == 0, result.output
        assert "Possibly unused packages (1):" in result.output
        assert "Newtonsoft.Json 13.0.1" in result.output
        assert "declared in App/App.csproj" in result.output

    def test_verbose_shows_evidence(self, sample_solution):
        result = _invoke(["scan", str(sample_solution), "--verbose"])
        assert result.exit_code == 0, result.output
        assert "[runtime-manifest] App/bin/Debug/net8.0/App.deps.json" in result.output
        assert "[import-statement] App/Program.cs" in result.output

    def test_json(self, sample_solution):
        result = _invoke(["scan", str(sample_solution), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [d["id"] for d in data["unused"]] == ["Newtonsoft.Json"]

    def test_exclude(self, sample_solution):
        result = _invoke(["scan", str(sample_solution), "--json", "--exclude", "Newtonsoft.Json"])
        data = json.loads(result.output)
        assert data["unused"] == []
        assert data["excluded"] == ["Newtonsoft.Json"]

    def test_exclude_from_env(self, sample_solution):
        result = _invoke(
            ["scan", str(sample_solution), "--json"], env={"DEPSWEEP_EXCLUDE": "Newtonsoft.Json"}
        )
        assert json.loads(result.output)["excluded"] == ["Newtonsoft.Json"]

    def test_no_manifests(self, sample_solution):
        result = _invoke(["scan", str(sample_solution), "--json", "--no-manifests"])
        data = json.loads(result.output)
        assert sorted(d["id"] for d in data["unused"]) == ["Acme.Widgets", "Newtonsoft.Json"]

    def test_fail_on_unused(self, sample_solution):
        result = _invoke(["scan", str(sample_solution), "--fail-on-unused"])
        assert result.exit_code == 1

    def test_fail_on_unused_clean_tree(self, tmp_path):
        write(tmp_path / "App.csproj", '<Project><ItemGroup><PackageReference Include="Polly" Version="8.0.0" /></ItemGroup></Project>')
        write(tmp_path / "Retry.cs", "using Polly;\n")
        result = _invoke(["scan", str(tmp_path), "--fail-on-unused"])
        assert result.exit_code == 0, result.output
        assert "No unused packages found." in result.output

    def test_empty_tree(self, tmp_path):
        result = _invoke(["scan", str(tmp_path)])
        assert result.exit_code == 0
        assert "No project files with package references were found." in result.output

    def test_missing_path(self, tmp_path):
        result = _invoke(["scan", str(tmp_path / "nope")])
        assert result.exit_code == 2

    def test_invalid_env(self, sample_solution):
        result = _invoke(["scan", str(sample_solution)], env={"DEPSWEEP_CONCURRENCY": "lots"})
        assert result.exit_code == 2
        assert "DEPSWEEP_CONCURRENCY" in result.output

    def test_concurrency_option_validated(self, sample_solution):
        result = _invoke(["scan", str(sample_solution), "--concurrency", "0"])
        assert result.exit_code == 2


# ── tokens ──


class TestTokens:
    def test_lists_tokens(self):
        result = _invoke(["tokens", "Vendor.Logging.Client"])
        assert result.exit_code == 0
        assert "exemption: none" in result.output
        assert "main-namespace" in result.output
        assert "Vendor.Logging" in result.output

    def test_tool_package(self):
        result = _invoke(["tokens", "Microsoft.NET.Test.Sdk"])
        assert "exemption: tool_framework" in result.output

    def test_excluded(self):
        result = _invoke(["tokens", "Foo.Bar", "--exclude", "Foo.Bar"])
        assert "exemption: user_excluded" in result.output

    def test_environment_tool_prefixes(self):
        result = _invoke(
            ["tokens", "Acme.Build.Tasks"], env={"DEPSWEEP_EXTRA_TOOL_PREFIXES": "Acme.Build"}
        )
        assert result.exit_code == 0, result.output
        assert "exemption: tool_framework" in result.output

    def test_environment_excludes(self):
        result = _invoke(["tokens", "Foo.Bar"], env={"DEPSWEEP_EXCLUDE": "Baz,Foo.Bar"})
        assert "exemption: user_excluded" in result.output

    def test_invalid_environment(self):
        result = _invoke(["tokens", "Foo.Bar"], env={"DEPSWEEP_CONCURRENCY": "zero"})
        assert result.exit_code == 2
        assert "DEPSWEEP_CONCURRENCY" in result.output


def test_help_exits_zero():
    result = _invoke(["--help"])
    assert result.exit_code == 0
    assert "scan" in result.output
