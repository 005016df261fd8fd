"""
Projects: filesystem locations owning glossary sources.

Three variants share one shape and differ only in where they live and where
their glossary files are kept:

- REGISTERED: ``projects/<name>`` symlink to an external project directory,
  glossary files in its ``glossary/`` subdirectory
- PERSONAL: ``personal/<name>`` directory holding glossary files
- IMPORTED: ``cache/<name>`` directory holding imported glossary files
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from glossa.errors import AlreadyRegistered, GlossaryNotFound

from .glossary import Glossary, GlossarySource, parse_source_file_name, write_entries

logger = logging.getLogger(__name__)


class ProjectKind(Enum):
    """Closed set of project variants."""

    REGISTERED = "registered"
    PERSONAL = "personal"
    IMPORTED = "imported"


PROJECTS_DIR = "projects"
PERSONAL_DIR = "personal"
CACHE_DIR = "cache"

_ROOT_DIRS: Dict[ProjectKind, str] = {
    ProjectKind.REGISTERED: PROJECTS_DIR,
    ProjectKind.PERSONAL: PERSONAL_DIR,
    ProjectKind.IMPORTED: CACHE_DIR,
}

_GLOSSARY_DIRS: Dict[ProjectKind, Callable[[Path], Path]] = {
    ProjectKind.REGISTERED: lambda location: location / "glossary",
    ProjectKind.PERSONAL: lambda location: location,
    ProjectKind.IMPORTED: lambda location: location,
}


@dataclass(frozen=True)
class Project:
    """A project of any kind, addressed by its path relative to ``root``."""

    kind: ProjectKind
    path: str
    root: Path = field(compare=False, repr=False)

    @property
    def name(self) -> str:
        return Path(self.path).name

    @property
    def location(self) -> Path:
        return self.root / self.path

    @property
    def glossary_dir(self) -> Path:
        return _GLOSSARY_DIRS[self.kind](self.location)

    def glossary_sources(self) -> List[GlossarySource]:
        """
        Enumerate glossary source files currently on disk.

        Files that do not follow ``<name>.<src>.<tgt>.<ext>`` are ignored.
        A dangling registered link has no sources.
        """
        directory = self.glossary_dir
        if not directory.is_dir():
            return []

        sources = []
        for file_path in sorted(directory.iterdir()):
            if file_path.name.startswith(".") or not file_path.is_file():
                continue
            glossary = parse_source_file_name(file_path.name)
            if glossary is None:
                continue
            relative = Path(self.path) / file_path.relative_to(self.location)
            sources.append(GlossarySource(relative.as_posix(), glossary, file_path))
        return sources

    def glossaries(self) -> List[Glossary]:
        return [source.glossary for source in self.glossary_sources()]

    def glossary(self, source_language: str, target_language: str) -> Optional[GlossarySource]:
        """First source of this project for the language pair, or None."""
        for source in self.glossary_sources():
            if source.glossary.matches(source_language, target_language):
                return source
        return None

    def has_glossary(self, source_language: str, target_language: str) -> bool:
        return self.glossary(source_language, target_language) is not None


def discover_projects(root: Path) -> List[Project]:
    """
    Scan ``root`` for projects of every kind.

    Nothing is cached; every call reflects the filesystem as it is now.

    Returns:
        Projects sorted by their path relative to ``root``
    """
    projects = []
    for kind in ProjectKind:
        base = root / _ROOT_DIRS[kind]
        if not base.is_dir():
            continue
        for entry in base.iterdir():
            if entry.name.startswith("."):
                continue
            if kind is ProjectKind.REGISTERED:
                # Keep dangling links so they can still be unregistered.
                if not (entry.is_symlink() or entry.is_dir()):
                    continue
            elif not entry.is_dir():
                continue
            projects.append(Project(kind, entry.relative_to(root).as_posix(), root))
    return sorted(projects, key=lambda project: project.path)


def personal_project(root: Path, name: str) -> Project:
    return Project(ProjectKind.PERSONAL, f"{PERSONAL_DIR}/{name}", root)


def create_personal_project(root: Path, glossary: Glossary, fmt: str = "yml") -> Project:
    """
    Create an empty personal glossary file for ``glossary``.

    Raises:
        AlreadyRegistered: If the personal project already holds the pair
    """
    project = personal_project(root, glossary.name)
    if project.has_glossary(glossary.source_language, glossary.target_language):
        raise AlreadyRegistered(f"The glossary '{glossary.name}' already exists.")

    path = project.glossary_dir / glossary.file_name(fmt)
    write_entries(path, [])
    logger.info(f"Created personal glossary {glossary} at {path}")
    return project


def remove_personal_project(root: Path, glossary: Glossary) -> None:
    """
    Delete the personal glossary file for ``glossary``.

    The project directory is removed together with its last glossary.

    Raises:
        GlossaryNotFound: If no personal glossary matches
    """
    project = personal_project(root, glossary.name)
    source = project.glossary(glossary.source_language, glossary.target_language)
    if source is None:
        raise GlossaryNotFound(f"The glossary '{glossary.name}' not found.")

    source.location.unlink()
    logger.info(f"Removed personal glossary {glossary}")

    if not any(project.location.iterdir()):
        project.location.rmdir()


__all__ = [
    "ProjectKind",
    "Project",
    "PROJECTS_DIR",
    "PERSONAL_DIR",
    "CACHE_DIR",
    "discover_projects",
    "personal_project",
    "create_personal_project",
    "remove_personal_project",
]
