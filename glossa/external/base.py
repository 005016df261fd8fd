"""
External glossary adapters.

An adapter turns a third-party glossary into normalized term rows and writes
them as a glossary source. Subclasses declare their metadata as class
attributes and implement :meth:`ExternalGlossary.convert_rows`; they are
registered under ``name`` (the lowercased class name by default).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Dict, Iterable, List, Sequence, Tuple, Type

from glossa.core.glossary import Glossary, write_entries
from glossa.errors import GlossaryNotFound
from glossa.text.normalize import format_text

logger = logging.getLogger(__name__)

TermRow = Tuple[str, str, str]

_REGISTRY: Dict[str, Type["ExternalGlossary"]] = {}


class ExternalGlossary(ABC):
    """Base class for external glossary adapters."""

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    source_url: ClassVar[str] = ""
    source_language: ClassVar[str] = ""
    target_language: ClassVar[str] = ""
    output_format: ClassVar[str] = "csv"

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("name"):
            cls.name = cls.__name__.lower()
        _REGISTRY[cls.name] = cls

    @property
    def glossary(self) -> Glossary:
        return Glossary(self.name, self.source_language, self.target_language)

    @abstractmethod
    def convert_rows(self) -> Iterable[Sequence[str]]:
        """Yield raw ``(source, target[, note])`` cells."""

    def import_terms(self) -> List[TermRow]:
        """
        Normalized term rows.

        Every cell has line breaks removed and whitespace runs collapsed;
        rows without a source term are dropped.
        """
        rows = []
        for raw in self.convert_rows():
            cells = [format_text(cell or "") for cell in raw][:3]
            cells += [""] * (3 - len(cells))
            if not cells[0]:
                continue
            rows.append(tuple(cells))
        return rows

    def materialize(self, dest_dir: Path) -> Path:
        """
        Write the glossary as ``<name>/<name>.<src>.<tgt>.<format>`` under
        ``dest_dir``.

        Returns:
            Path of the written glossary file
        """
        rows = self.import_terms()
        path = Path(dest_dir) / self.name / self.glossary.file_name(self.output_format)
        write_entries(path, rows)
        logger.info(f"Converted {len(rows)} terms from {self.description or self.name}")
        return path


def list_external_glossaries() -> List[Type[ExternalGlossary]]:
    """Registered adapters sorted by name."""
    return [_REGISTRY[name] for name in sorted(_REGISTRY)]


def get_external_glossary(name: str) -> ExternalGlossary:
    """
    Instantiate the adapter registered as ``name``.

    Raises:
        GlossaryNotFound: If no adapter has that name
    """
    try:
        return _REGISTRY[name]()
    except KeyError:
        raise GlossaryNotFound(f"Unknown external glossary: {name}") from None


__all__ = [
    "ExternalGlossary",
    "TermRow",
    "list_external_glossaries",
    "get_external_glossary",
]
