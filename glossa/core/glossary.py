"""
Glossary identities, glossary source files and term entries.

A glossary source is a file named ``<name>.<source>.<target>.<ext>`` inside a
project's glossary directory. Supported formats:

- ``yml``/``yaml``: a list of mappings with ``source_term``, ``target_term``
  and an optional ``note``
- ``csv``/``tsv``: rows of ``source_term, target_term[, note]`` without header
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import yaml

from glossa.errors import GlossarySourceError

logger = logging.getLogger(__name__)

# Markers that flag a translation as not yet confirmed.
SUPPORTED_ANNOTATIONS = ("wip", "fuzzy", "unconfirmed")

SUPPORTED_FORMATS = ("yml", "yaml", "csv", "tsv")

_SOURCE_FILE_PATTERN = re.compile(
    r"^(?P<name>.+)\.(?P<src>[^.]+)\.(?P<tgt>[^.]+)\.(?P<ext>yml|yaml|csv|tsv)$"
)

_DELIMITERS = {"csv": ",", "tsv": "\t"}


@dataclass(frozen=True, order=True)
class Glossary:
    """Logical glossary identity."""

    name: str
    source_language: str
    target_language: str

    def file_name(self, fmt: str = "yml") -> str:
        """File name of a source realizing this glossary in ``fmt``."""
        return f"{self.name}.{self.source_language}.{self.target_language}.{fmt}"

    def matches(self, source_language: str, target_language: str) -> bool:
        return (
            self.source_language == source_language
            and self.target_language == target_language
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.source_language} -> {self.target_language})"


@dataclass(frozen=True)
class TermEntry:
    """Single bilingual term.

    ``glossary`` is filled in for lookup results and takes no part in equality.
    """

    source_term: str
    target_term: str
    note: str = ""
    glossary: Optional[Glossary] = field(default=None, compare=False)

    def is_annotated(self, annotations: Sequence[str] = SUPPORTED_ANNOTATIONS) -> bool:
        return any(annotation in self.note for annotation in annotations)


@dataclass(frozen=True, order=True)
class GlossarySource:
    """
    File-backed realization of a glossary.

    Identity is ``(path, glossary)`` where ``path`` is relative to the
    repository root. ``location`` is the absolute file path when the source
    was discovered on disk; sources rebuilt from the index have none.
    """

    path: str
    glossary: Glossary
    location: Optional[Path] = field(default=None, compare=False, repr=False)

    @property
    def format(self) -> str:
        return self.path.rsplit(".", 1)[-1]

    def entries(self) -> List[TermEntry]:
        """Read all term entries from the backing file."""
        if self.location is None:
            raise GlossarySourceError(f"Glossary source {self.path} has no backing file")
        return read_entries(self.location)


def parse_source_file_name(file_name: str) -> Optional[Glossary]:
    """
    Extract the glossary identity from a source file name.

    Returns:
        Glossary, or None if the name does not follow the naming scheme
    """
    match = _SOURCE_FILE_PATTERN.match(file_name)
    if not match:
        return None
    return Glossary(match.group("name"), match.group("src"), match.group("tgt"))


def read_entries(path: Path) -> List[TermEntry]:
    """
    Read term entries from a glossary source file.

    Raises:
        GlossarySourceError: If the file is unreadable or malformed
    """
    fmt = path.suffix.lstrip(".").lower()
    try:
        if fmt in ("yml", "yaml"):
            return _read_yaml(path)
        if fmt in _DELIMITERS:
            return _read_delimited(path, _DELIMITERS[fmt])
    except (OSError, UnicodeDecodeError, yaml.YAMLError, csv.Error) as exc:
        raise GlossarySourceError(f"Cannot read glossary source {path}: {exc}") from exc
    raise GlossarySourceError(f"Unsupported glossary format: {path}")


def _read_yaml(path: Path) -> List[TermEntry]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return []
    if not isinstance(data, list):
        raise GlossarySourceError(f"Expected a list of terms in {path}")

    entries = []
    for item in data:
        if not isinstance(item, dict):
            raise GlossarySourceError(f"Malformed term in {path}: {item!r}")
        source_term = str(item.get("source_term") or "")
        target_term = str(item.get("target_term") or "")
        if not source_term:
            continue
        entries.append(TermEntry(source_term, target_term, str(item.get("note") or "")))
    return entries


def _read_delimited(path: Path, delimiter: str) -> List[TermEntry]:
    entries = []
    with open(path, encoding="utf-8", newline="") as f:
        for row in csv.reader(f, delimiter=delimiter):
            if len(row) < 2 or not row[0]:
                continue
            note = row[2] if len(row) > 2 else ""
            entries.append(TermEntry(row[0], row[1], note))
    return entries


def write_entries(path: Path, rows: Iterable[Sequence[str]]) -> int:
    """
    Write ``(source_term, target_term[, note])`` rows in the format implied
    by the file suffix.

    Returns:
        Number of rows written
    """
    fmt = path.suffix.lstrip(".").lower()
    rows = [tuple(row) for row in rows]
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt in ("yml", "yaml"):
        items = [
            {
                "source_term": row[0],
                "target_term": row[1],
                "note": row[2] if len(row) > 2 else "",
            }
            for row in rows
        ]
        path.write_text(
            yaml.safe_dump(items, allow_unicode=True, sort_keys=False),
            encoding="utf-8",
        )
    elif fmt in _DELIMITERS:
        with open(path, "w", encoding="utf-8", newline="") as f:
            csv.writer(f, delimiter=_DELIMITERS[fmt]).writerows(rows)
    else:
        raise GlossarySourceError(f"Unsupported glossary format: {path}")

    logger.debug(f"Wrote {len(rows)} terms to {path}")
    return len(rows)


def except_annotation(
    terms: Iterable[TermEntry],
    annotations: Sequence[str] = SUPPORTED_ANNOTATIONS,
) -> List[TermEntry]:
    """
    Keep only confirmed terms.

    Drops every entry whose note contains any of ``annotations``. The input
    is not modified.

    Example:
        >>> terms = [TermEntry("run", "実行", "fuzzy"), TermEntry("build", "構築")]
        >>> except_annotation(terms)
        [TermEntry(source_term='build', target_term='構築', note='', glossary=None)]
    """
    return [term for term in terms if not term.is_annotated(annotations)]


__all__ = [
    "SUPPORTED_ANNOTATIONS",
    "SUPPORTED_FORMATS",
    "Glossary",
    "GlossarySource",
    "TermEntry",
    "parse_source_file_name",
    "read_entries",
    "write_entries",
    "except_annotation",
]
