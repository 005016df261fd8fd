"""Core data model: glossaries, glossary sources and projects."""

from .glossary import (
    SUPPORTED_ANNOTATIONS,
    Glossary,
    GlossarySource,
    TermEntry,
    except_annotation,
    parse_source_file_name,
    read_entries,
    write_entries,
)
from .project import (
    CACHE_DIR,
    PERSONAL_DIR,
    PROJECTS_DIR,
    Project,
    ProjectKind,
    discover_projects,
)

__all__ = [
    "SUPPORTED_ANNOTATIONS",
    "Glossary",
    "GlossarySource",
    "TermEntry",
    "except_annotation",
    "parse_source_file_name",
    "read_entries",
    "write_entries",
    "Project",
    "ProjectKind",
    "PROJECTS_DIR",
    "PERSONAL_DIR",
    "CACHE_DIR",
    "discover_projects",
]
