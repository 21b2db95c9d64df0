"""Declared packages per project, keyed globally by package id."""

from __future__ import annotations

from collections.abc import Iterable

from depsweep.engine.models import Dependency, PackageDeclaration, Project


class DependencyRegistry:
    """Storage and lookup for declared dependencies.

    Versions are kept per declaring project, so two projects pinning the same
    package to different versions are both reported.  ``Dependency.version``
    is the version from the last project added, for single-column display.
    """

    def __init__(self, projects: Iterable[Project] = ()) -> None:
        self._projects: list[Project] = []
        self._declarations: dict[str, dict[str, PackageDeclaration]] = {}
        for project in projects:
            self.add_project(project)

    def add_project(self, project: Project) -> None:
        self._projects.append(project)
        for decl in project.declarations:
            self._declarations.setdefault(decl.dependency_id, {})[project.path] = decl

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    def declared_ids(self) -> list[str]:
        return sorted(self._declarations)

    def __contains__(self, dependency_id: object) -> bool:
        return dependency_id in self._declarations

    def __len__(self) -> int:
        return len(self._declarations)

    def dependency(self, dependency_id: str) -> Dependency:
        """The merged view of a declared id. Raises ``KeyError`` when undeclared."""
        per_project = self._declarations[dependency_id]
        last = list(per_project.values())[-1]
        return Dependency(
            dependency_id=dependency_id,
            version=last.version,
            projects=tuple(per_project),
            versions={path: decl.version for path, decl in per_project.items()},
            development_only=all(d.development_only for d in per_project.values()),
        )

    def versions_of(self, dependency_id: str) -> dict[str, str | None]:
        return {
            path: decl.version
            for path, decl in self._declarations.get(dependency_id, {}).items()
        }

    def projects_declaring(self, dependency_id: str) -> list[str]:
        return list(self._declarations.get(dependency_id, {}))
