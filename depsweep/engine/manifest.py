"""Runtime manifest cross-referencer.

A runtime manifest (``<app>.deps.json``) lists every library resolved for
execution as composite keys such as ``Acme.Widgets/2.1.0``.  The segment
before the separator is the package id.
"""

from __future__ import annotations

import json
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path

from depsweep.engine.models import RULE_MANIFEST, EvidenceRecord
from depsweep.exceptions import ManifestParseError

ENTRY_SEPARATOR = "/"


@dataclass(frozen=True)
class RuntimeManifest:
    path: str
    entries: tuple[str, ...]


def entry_package_id(entry: str) -> str:
    """Leading segment of a composite manifest entry."""
    return entry.split(ENTRY_SEPARATOR, 1)[0].strip()


def parse_runtime_manifest(path: str, content: str) -> RuntimeManifest:
    """Parse a ``.deps.json`` document.

    Entries are the keys of ``libraries`` and of every ``targets`` section,
    de-duplicated in document order.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ManifestParseError(path, "top-level value is not an object")

    entries: dict[str, None] = {}

    libraries = data.get("libraries", {})
    if not isinstance(libraries, dict):
        raise ManifestParseError(path, "'libraries' is not an object")
    entries.update(dict.fromkeys(libraries))

    targets = data.get("targets", {})
    if not isinstance(targets, dict):
        raise ManifestParseError(path, "'targets' is not an object")
    for target_name, target in targets.items():
        if not isinstance(target, dict):
            raise ManifestParseError(path, f"target {target_name!r} is not an object")
        entries.update(dict.fromkeys(target))

    return RuntimeManifest(path=path, entries=tuple(entries))


def read_runtime_manifest(path: Path, display_path: str | None = None) -> RuntimeManifest:
    shown = display_path or str(path)
    try:
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(shown, str(e)) from e
    return parse_runtime_manifest(shown, content)


def cross_reference(
    manifest: RuntimeManifest,
    unresolved: Collection[str],
) -> dict[str, EvidenceRecord]:
    """Resolve ids from *unresolved* whose id leads a manifest entry.

    Returns the newly resolved ids mapped to their evidence record.
    """
    resolved: dict[str, EvidenceRecord] = {}
    for entry in manifest.entries:
        package_id = entry_package_id(entry)
        if package_id in unresolved and package_id not in resolved:
            resolved[package_id] = EvidenceRecord(
                dependency_id=package_id,
                file_path=manifest.path,
                rule=RULE_MANIFEST,
                detail=f"runtime entry {entry!r}",
            )
    return resolved
