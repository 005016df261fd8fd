"""
glossa - local bilingual glossary repository.

Keeps a term index synchronized with registered, personal and imported
glossary projects on disk.
"""

__version__ = "0.1.0"

from glossa.core.glossary import Glossary, GlossarySource, TermEntry
from glossa.errors import (
    AlreadyRegistered,
    GlossaError,
    GlossaryNotFound,
    GlossarySourceError,
    IndexStoreNotFound,
    OperationFailed,
    ProjectNotFound,
)
from glossa.repository import IndexReport, Repository

__all__ = [
    "__version__",
    "Repository",
    "IndexReport",
    "Glossary",
    "GlossarySource",
    "TermEntry",
    "GlossaError",
    "AlreadyRegistered",
    "ProjectNotFound",
    "GlossaryNotFound",
    "GlossarySourceError",
    "IndexStoreNotFound",
    "OperationFailed",
]
