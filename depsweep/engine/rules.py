"""Evidence matcher — ordered rule strategies applied to one file at a time."""

from __future__ import annotations

import functools
import re
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from depsweep.engine.models import (
    RULE_ATTRIBUTE,
    RULE_IMPORT,
    RULE_SUBSTRING,
    CandidateFile,
    EvidenceRecord,
)
from depsweep.engine.tokens import TokenSet, derive_tokens

# using X; global using X; using static X; using A = X; open X; Imports X; @using X
_IMPORT_RE = re.compile(
    r"^[ \t]*(?:global[ \t]+)?(?:@using|using|open|Imports)[ \t]+"
    r"(?:static[ \t]+)?"
    r"(?:[A-Za-z_]\w*[ \t]*=[ \t]*)?"
    r"(?:global::)?"
    r"(?P<path>[A-Za-z_][\w.]*)",
    re.MULTILINE,
)

# [Token], [Token(...)], [assembly: Ns.TokenAttribute], <Token ...>, <ns:Token>
_ATTRIBUTE_TEMPLATE = (
    r"(?:\[[ \t]*(?:(?:assembly|module|return|type|method|field|property|param):[ \t]*)?|<[ \t]*)"
    r"(?:[\w.]+[.:])?"
    r"{token}(?:Attribute)?"
    r"(?=[\s\]\)(>/,])"
)


@runtime_checkable
class Rule(Protocol):
    """A matching strategy producing at most one evidence record per file."""

    name: str

    def try_match(
        self,
        tokens: TokenSet,
        file: CandidateFile,
        imports: Sequence[str] | None = None,
    ) -> EvidenceRecord | None: ...


@functools.lru_cache(maxsize=8192)
def _attribute_pattern(token: str) -> re.Pattern[str]:
    return re.compile(_ATTRIBUTE_TEMPLATE.format(token=re.escape(token)))


def import_paths(text: str) -> tuple[str, ...]:
    """Namespace paths named by the import directives in *text*."""
    return tuple(m.group("path").rstrip(".") for m in _IMPORT_RE.finditer(text))


@functools.lru_cache(maxsize=8192)
def tokens_for(dependency_id: str) -> TokenSet:
    return derive_tokens(dependency_id)


class AttributeUsageRule:
    """Token used as a declarative annotation or markup element."""

    name = RULE_ATTRIBUTE

    def try_match(
        self,
        tokens: TokenSet,
        file: CandidateFile,
        imports: Sequence[str] | None = None,
    ) -> EvidenceRecord | None:
        for token in tokens:
            # cheap containment check before running the regex
            if token not in file.text:
                continue
            m = _attribute_pattern(token).search(file.text)
            if m:
                return EvidenceRecord(
                    dependency_id=tokens.dependency_id,
                    file_path=file.path,
                    rule=self.name,
                    detail=f"{tokens.describe(token)} in {m.group(0).strip()!r}",
                )
        return None


class ImportStatementRule:
    """Import directive whose namespace path matches a token."""

    name = RULE_IMPORT

    def try_match(
        self,
        tokens: TokenSet,
        file: CandidateFile,
        imports: Sequence[str] | None = None,
    ) -> EvidenceRecord | None:
        paths = import_paths(file.text) if imports is None else imports
        if not paths:
            return None
        for token in tokens:
            for path in paths:
                if path == token or path.startswith(token + ".") or path.rsplit(".", 1)[-1] == token:
                    return EvidenceRecord(
                        dependency_id=tokens.dependency_id,
                        file_path=file.path,
                        rule=self.name,
                        detail=f"{tokens.describe(token)} in import of {path!r}",
                    )
        return None


class SubstringRule:
    """Any token anywhere in the text. Catches reflection and string-keyed usage."""

    name = RULE_SUBSTRING

    def try_match(
        self,
        tokens: TokenSet,
        file: CandidateFile,
        imports: Sequence[str] | None = None,
    ) -> EvidenceRecord | None:
        for token in tokens:
            if token in file.text:
                return EvidenceRecord(
                    dependency_id=tokens.dependency_id,
                    file_path=file.path,
                    rule=self.name,
                    detail=tokens.describe(token),
                )
        return None


DEFAULT_RULES: tuple[Rule, ...] = (
    AttributeUsageRule(),
    ImportStatementRule(),
    SubstringRule(),
)


def match(
    dependency_id: str,
    file: CandidateFile,
    rules: Sequence[Rule] = DEFAULT_RULES,
    imports: Sequence[str] | None = None,
) -> EvidenceRecord | None:
    """Return the first evidence record produced by *rules*, in order.

    *imports* are the file's import paths when the caller already has them.
    """
    tokens = tokens_for(dependency_id)
    for rule in rules:
        record = rule.try_match(tokens, file, imports)
        if record is not None:
            return record
    return None


def match_file(
    file: CandidateFile,
    dependency_ids: Sequence[str],
    rules: Sequence[Rule] = DEFAULT_RULES,
) -> list[EvidenceRecord]:
    """Match one file against every id in *dependency_ids*."""
    imports = import_paths(file.text)
    records: list[EvidenceRecord] = []
    for dependency_id in dependency_ids:
        record = match(dependency_id, file, rules, imports)
        if record is not None:
            records.append(record)
    return records
