"""Project-file parsers — auto-registered on import."""

from depsweep.parsers import (
    msbuild,  # noqa: F401
    packages_config,  # noqa: F401
)
from depsweep.parsers.registry import PARSER_REGISTRY, ProjectParser, parser_for, register_parser

__all__ = ["PARSER_REGISTRY", "ProjectParser", "parser_for", "register_parser"]
