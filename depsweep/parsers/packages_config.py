"""Parser for legacy NuGet packages.config files."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from depsweep.engine.models import PackageDeclaration, Project
from depsweep.exceptions import ProjectParseError
from depsweep.parsers.registry import register_parser


class PackagesConfigParser:
    format_name = "packages-config"
    file_patterns = ["packages.config"]

    def parse(self, file_path: str, content: str) -> Project:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ProjectParseError(file_path, str(e)) from e
        if root.tag != "packages":
            raise ProjectParseError(file_path, f"unexpected root element <{root.tag}>")

        declarations: list[PackageDeclaration] = []
        for package in root.iter("package"):
            package_id = (package.get("id") or "").strip()
            if not package_id:
                continue
            declarations.append(
                PackageDeclaration(
                    dependency_id=package_id,
                    version=package.get("version"),
                    development_only=(package.get("developmentDependency") or "").lower()
                    == "true",
                )
            )

        return Project(
            path=file_path,
            declarations=tuple(declarations),
            format_name=self.format_name,
        )


register_parser(PackagesConfigParser())
