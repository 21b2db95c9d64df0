"""Parser registry — match project-description files to parsers."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from depsweep.engine.models import Project


@runtime_checkable
class ProjectParser(Protocol):
    """Interface that every project-file parser must satisfy."""

    format_name: str
    file_patterns: list[str]

    def parse(self, file_path: str, content: str) -> Project: ...


PARSER_REGISTRY: dict[str, ProjectParser] = {}


def register_parser(parser: ProjectParser) -> None:
    """Register a parser instance by its format_name."""
    PARSER_REGISTRY[parser.format_name] = parser


def parser_for(path: Path) -> ProjectParser | None:
    """Return the first registered parser whose patterns match *path*'s name."""
    for parser in PARSER_REGISTRY.values():
        if any(path.match(pattern) for pattern in parser.file_patterns):
            return parser
    return None
