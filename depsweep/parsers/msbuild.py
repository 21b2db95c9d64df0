"""Parser for MSBuild project files (.csproj / .fsproj / .vbproj / Directory.Build.*)."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from depsweep.engine.models import PackageDeclaration, Project
from depsweep.exceptions import ProjectParseError
from depsweep.parsers.registry import register_parser

# Legacy (pre-SDK) project files put everything in this namespace.
_NS = "{http://schemas.microsoft.com/developer/msbuild/2003}"


def package_field(item: ET.Element, name: str) -> str | None:
    """Look up *name* on a package item.

    Element form first (``<Version>1.0</Version>``, namespace-qualified tag
    before the plain one), attribute form second (``Version="1.0"``).
    """
    for tag in (f"{_NS}{name}", name):
        child = item.find(tag)
        if child is not None and child.text and child.text.strip():
            return child.text.strip()
    value = item.get(name)
    if value is not None and value.strip():
        return value.strip()
    return None


def _is_development_only(item: ET.Element) -> bool:
    private_assets = package_field(item, "PrivateAssets") or ""
    if any(part.strip().lower() == "all" for part in private_assets.split(";")):
        return True
    return (package_field(item, "DevelopmentDependency") or "").lower() == "true"


def _split_ids(value: str) -> list[str]:
    return [p.strip() for p in value.split(";") if p.strip()]


class MsBuildParser:
    format_name = "msbuild"
    file_patterns = [
        "*.csproj",
        "*.fsproj",
        "*.vbproj",
        "Directory.Build.props",
        "Directory.Build.targets",
    ]

    def parse(self, file_path: str, content: str) -> Project:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ProjectParseError(file_path, str(e)) from e

        central_versions = self._central_versions(root)
        updates = self._updates(root)
        declarations: list[PackageDeclaration] = []

        for ns in (_NS, ""):
            for item in root.iter(f"{ns}PackageReference"):
                include = package_field(item, "Include")
                if not include:
                    continue
                version = (
                    package_field(item, "Version")
                    or package_field(item, "VersionOverride")
                )
                dev_only = _is_development_only(item)
                for package_id in _split_ids(include):
                    update_version, update_dev_only = updates.get(package_id, (None, False))
                    declarations.append(
                        PackageDeclaration(
                            dependency_id=package_id,
                            version=update_version or version or central_versions.get(package_id),
                            development_only=dev_only or update_dev_only,
                        )
                    )

        return Project(
            path=file_path,
            declarations=tuple(declarations),
            format_name=self.format_name,
        )

    @staticmethod
    def _updates(root: ET.Element) -> dict[str, tuple[str | None, bool]]:
        """``<PackageReference Update=...>`` metadata, keyed by package id.

        An Update item only amends an item some Include already created; it
        never declares a package by itself.
        """
        updates: dict[str, tuple[str | None, bool]] = {}
        for ns in (_NS, ""):
            for item in root.iter(f"{ns}PackageReference"):
                update = package_field(item, "Update")
                if not update or package_field(item, "Include"):
                    continue
                version = package_field(item, "Version")
                dev_only = _is_development_only(item)
                for package_id in _split_ids(update):
                    updates[package_id] = (version, dev_only)
        return updates

    @staticmethod
    def _central_versions(root: ET.Element) -> dict[str, str]:
        """``<PackageVersion Include=... Version=...>`` entries in the same document."""
        versions: dict[str, str] = {}
        for ns in (_NS, ""):
            for item in root.iter(f"{ns}PackageVersion"):
                include = package_field(item, "Include")
                version = package_field(item, "Version")
                if include and version:
                    versions[include] = version
        return versions


register_parser(MsBuildParser())
