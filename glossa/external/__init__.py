"""External glossaries that can be imported into a repository."""

from .base import ExternalGlossary, get_external_glossary, list_external_glossaries
from .itil import Itil

__all__ = [
    "ExternalGlossary",
    "Itil",
    "get_external_glossary",
    "list_external_glossaries",
]
