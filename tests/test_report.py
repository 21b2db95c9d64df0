"""Tests for the report builder."""

from __future__ import annotations

import json

from conftest import project

from depsweep.engine.aggregator import analyze
from depsweep.engine.models import CandidateFile
from depsweep.engine.registry import DependencyRegistry
from depsweep.report import (
    HEURISTIC_NOTICE,
    NO_FILES_NOTE,
    NO_PROJECTS_NOTE,
    build_report,
    render_json,
    render_text,
)

FILES = [CandidateFile(path="Log.cs", text="using Vendor.Logging;\n")]


def _partition():
    registry = DependencyRegistry(
        [
            project(
                "Project1.csproj",
                ("Newtonsoft.Json", "13.0.1"),
                ("Vendor.Logging.Client", "2.0.0"),
                ("xunit", "2.6.0"),
            ),
            project("Project2.csproj", ("Newtonsoft.Json", "12.0.3")),
        ]
    )
    return analyze(registry, FILES, user_excludes=["Foo.Bar"])


class TestBuildReport:
    def test_summary(self):
        report = build_report(_partition())
        assert report.summary.declared == 3
        assert report.summary.used == 2
        assert report.summary.unused == 1
        assert report.summary.candidate_files == 1

    def test_unused_attribution(self):
        report = build_report(_partition())
        [dep] = report.unused
        assert dep.id == "Newtonsoft.Json"
        assert dep.projects == ["Project1.csproj", "Project2.csproj"]
        assert dep.versions == {"Project1.csproj": "13.0.1", "Project2.csproj": "12.0.3"}

    def test_evidence_only_when_verbose(self):
        quiet = build_report(_partition())
        assert all(dep.evidence == [] for dep in quiet.used)
        verbose = build_report(_partition(), verbose=True)
        by_id = {dep.id: dep for dep in verbose.used}
        assert by_id["Vendor.Logging.Client"].evidence[0].file == "Log.cs"
        assert by_id["xunit"].evidence[0].rule == "categorical-exemption"

    def test_heuristic_notice_always_present(self):
        assert build_report(_partition()).notes == [HEURISTIC_NOTICE]

    def test_no_projects_note(self):
        report = build_report(analyze(DependencyRegistry(), []))
        assert NO_PROJECTS_NOTE in report.notes

    def test_no_files_note(self):
        registry = DependencyRegistry([project("A.csproj", ("Polly", "8.0.0"))])
        report = build_report(analyze(registry, []))
        assert NO_FILES_NOTE in report.notes


class TestRender:
    def test_text(self):
        text = render_text(build_report(_partition()))
        assert "Possibly unused packages (1):" in text
        assert "Newtonsoft.Json 12.0.3, 13.0.1" in text
        assert "declared in Project2.csproj" in text
        assert "Used packages" not in text
        assert HEURISTIC_NOTICE in text

    def test_text_verbose(self):
        text = render_text(build_report(_partition(), verbose=True))
        assert "Used packages (2):" in text
        assert "[import-statement] Log.cs" in text
        assert "[categorical-exemption] (exemption)" in text

    def test_text_nothing_unused(self):
        registry = DependencyRegistry([project("A.csproj", ("Vendor.Logging.Client", "2.0.0"))])
        text = render_text(build_report(analyze(registry, FILES)))
        assert "No unused packages found." in text

    def test_json(self):
        data = json.loads(render_json(build_report(_partition(), verbose=True)))
        assert data["summary"]["unused"] == 1
        assert data["unused"][0]["id"] == "Newtonsoft.Json"
        assert data["excluded"] == []
        assert data["notes"][0] == HEURISTIC_NOTICE
