"""Token derivation — the name variations a dependency may appear under in source.

Derivation deliberately favours recall over precision: a package sharing a
common word with unrelated code is reported as used, which only costs a
manual check, while a missed idiomatic usage would suggest deleting a live
dependency.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Segments too generic to count as evidence on their own.
NOISY_SEGMENTS: frozenset[str] = frozenset(
    {
        "Core",
        "Common",
        "Client",
        "Extensions",
        "Extension",
        "Utils",
        "Utilities",
        "Abstractions",
        "Helpers",
        "Shared",
        "Internal",
        "Runtime",
        "Net",
        "Sdk",
    }
)

ROLE_SUFFIXES: tuple[str, ...] = ("Client", "Sdk")
EXTENSIONS_MARKER = "Extensions"
GENERIC_EXTENSION_TOKENS: tuple[str, ...] = ("IServiceCollection",)
MIN_SEGMENT_LENGTH = 3

# Origins, most specific first.
ORIGIN_IDENTIFIER = "identifier"
ORIGIN_MAIN_NAMESPACE = "main-namespace"
ORIGIN_SUFFIX_STRIPPED = "suffix-stripped"
ORIGIN_SEGMENT = "segment"
ORIGIN_EXTENSION = "extension"


@dataclass(frozen=True)
class TokenSet:
    dependency_id: str
    escaped_identifier: str
    tokens: tuple[str, ...]
    origins: dict[str, str] = field(default_factory=dict, compare=False)

    def __iter__(self):
        return iter(self.tokens)

    def __contains__(self, token: object) -> bool:
        return token in self.origins

    def origin(self, token: str) -> str:
        return self.origins.get(token, ORIGIN_SEGMENT)

    def describe(self, token: str) -> str:
        return f"{self.origin(token)} token {token!r}"


def _strip_role_suffix(dependency_id: str) -> str | None:
    for suffix in ROLE_SUFFIXES:
        if dependency_id.endswith(suffix) and len(dependency_id) > len(suffix):
            stripped = dependency_id[: -len(suffix)].rstrip(".")
            if stripped:
                return stripped
    return None


def derive_tokens(dependency_id: str) -> TokenSet:
    """Derive every token variation for *dependency_id* in precedence order."""
    origins: dict[str, str] = {}

    def add(token: str, origin: str) -> None:
        if token and token not in origins:
            origins[token] = origin

    segments = [segment for segment in dependency_id.split(".") if segment]

    add(dependency_id, ORIGIN_IDENTIFIER)
    if len(segments) >= 2:
        add(".".join(segments[:2]), ORIGIN_MAIN_NAMESPACE)

    stripped = _strip_role_suffix(dependency_id)
    if stripped is not None:
        add(stripped, ORIGIN_SUFFIX_STRIPPED)

    for segment in segments:
        if len(segment) >= MIN_SEGMENT_LENGTH and segment not in NOISY_SEGMENTS:
            add(segment, ORIGIN_SEGMENT)

    if EXTENSIONS_MARKER in segments:
        marker = segments.index(EXTENSIONS_MARKER)
        for segment in segments[marker + 1 :]:
            if segment in NOISY_SEGMENTS:
                continue
            add(f"Add{segment}", ORIGIN_EXTENSION)
            add(f"Use{segment}", ORIGIN_EXTENSION)
        for token in GENERIC_EXTENSION_TOKENS:
            add(token, ORIGIN_EXTENSION)

    return TokenSet(
        dependency_id=dependency_id,
        escaped_identifier=re.escape(dependency_id),
        tokens=tuple(origins),
        origins=origins,
    )
