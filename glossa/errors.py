"""Exception hierarchy for glossa repositories."""

from __future__ import annotations


class GlossaError(Exception):
    """Base class for every error raised by glossa."""


class AlreadyRegistered(GlossaError):
    """A project or glossary with the same identity already exists."""


class ProjectNotFound(GlossaError):
    """The requested project does not exist."""


class GlossaryNotFound(GlossaError):
    """The requested glossary does not exist."""


class IndexStoreNotFound(GlossaError):
    """The term index has never been built for this repository."""


class GlossarySourceError(GlossaError):
    """A glossary source file could not be read."""


class OperationFailed(GlossaError):
    """
    A repository operation failed for a reason other than a domain error.

    The low-level cause is logged and chained as ``__cause__`` but is not
    part of the message.
    """

    def __init__(self, operation: str, target: str):
        self.operation = operation
        self.target = target
        super().__init__(f"Failed {operation} {target}.")


__all__ = [
    "GlossaError",
    "AlreadyRegistered",
    "ProjectNotFound",
    "GlossaryNotFound",
    "IndexStoreNotFound",
    "GlossarySourceError",
    "OperationFailed",
]
