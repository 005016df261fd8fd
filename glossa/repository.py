"""
Glossary repository: project discovery, index reconciliation and lookup.

Layout under the repository root:

    projects/<name>   symlinks to registered project directories
    personal/<name>   personal glossaries
    cache/<name>      imported glossaries
    db/               term index
    config            optional YAML configuration

Every mutating operation except :meth:`Repository.create_personal_project`
finishes with :meth:`Repository.index`, so the term index always matches the
projects on disk.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Type, Union

from glossa.config import CONFIG_FILE, RepositoryConfig
from glossa.core import project as project_ops
from glossa.core.glossary import (
    SUPPORTED_ANNOTATIONS,
    Glossary,
    GlossarySource,
    TermEntry,
    except_annotation,
    parse_source_file_name,
    read_entries,
)
from glossa.core.project import (
    CACHE_DIR,
    PERSONAL_DIR,
    PROJECTS_DIR,
    Project,
    ProjectKind,
    discover_projects,
)
from glossa.errors import (
    AlreadyRegistered,
    GlossaryNotFound,
    GlossarySourceError,
    IndexStoreNotFound,
    OperationFailed,
    ProjectNotFound,
)
from glossa.index.store import IndexStore

logger = logging.getLogger(__name__)

INDEX_DIR = "db"
INDEX_ENCODING = "utf8"

# Raised precisely and never wrapped into OperationFailed.
DOMAIN_ERRORS = (AlreadyRegistered, ProjectNotFound, GlossaryNotFound)


@dataclass
class IndexReport:
    """Work done by one reconciliation pass."""

    added: List[GlossarySource] = field(default_factory=list)
    removed: List[GlossarySource] = field(default_factory=list)
    failed: List[GlossarySource] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


@contextmanager
def _operation(
    operation: str,
    target: str,
    passthrough: Tuple[Type[Exception], ...] = DOMAIN_ERRORS,
) -> Iterator[None]:
    """
    Re-raise failures as OperationFailed, logging the cause.

    Exceptions listed in ``passthrough`` propagate unchanged.
    """
    try:
        yield
    except passthrough:
        raise
    except Exception as exc:
        logger.error(f"Failed {operation} {target}: {exc}", exc_info=True)
        raise OperationFailed(operation, target) from exc


class Repository:
    """
    Collection of glossary projects with a synchronized term index.

    The project list is rediscovered from disk on every call and never
    cached.

    Example:
        >>> repo = Repository("~/.glossa")
        >>> repo.create_personal_project("manual", "en", "ja")
        >>> repo.index()
        >>> repo.lookup("build", repo.find_glossary("manual", "en", "ja"))
    """

    def __init__(
        self,
        path: Union[str, Path],
        annotations: Sequence[str] = SUPPORTED_ANNOTATIONS,
    ):
        self.path = Path(path).expanduser().resolve()
        self.annotations = tuple(annotations)

    def __repr__(self) -> str:
        return f"Repository({str(self.path)!r})"

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def projects_path(self) -> Path:
        return self.path / PROJECTS_DIR

    @property
    def personal_path(self) -> Path:
        return self.path / PERSONAL_DIR

    @property
    def cache_path(self) -> Path:
        return self.path / CACHE_DIR

    @property
    def index_path(self) -> Path:
        return self.path / INDEX_DIR

    def config_path(self) -> Optional[Path]:
        path = self.path / CONFIG_FILE
        return path if path.exists() else None

    def load_config(self) -> RepositoryConfig:
        return RepositoryConfig.load(self.config_path())

    def expand_path(self, relative_path: Union[str, Path]) -> Path:
        return Path(os.path.normpath(self.path / relative_path))

    def relative_path(self, full_path: Union[str, Path]) -> str:
        return Path(os.path.relpath(full_path, self.path)).as_posix()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, source_path: Union[str, Path], name: str) -> None:
        """
        Register an external project directory under ``name``.

        Raises:
            AlreadyRegistered: If ``name`` is taken
            OperationFailed: On any other failure
        """
        with _operation("register", name):
            if not name or name in (".", "..") or Path(name).name != name:
                raise ValueError(f"Invalid register name: {name!r}")

            self.projects_path.mkdir(parents=True, exist_ok=True)
            link = self.projects_path / name
            if link.exists() or link.is_symlink():
                raise AlreadyRegistered(name)

            link.symlink_to(Path(source_path).expanduser().resolve(), target_is_directory=True)
            logger.info(f"Registered {source_path} as {name}")
            self.index()

    def unregister(self, project: Optional[Project]) -> None:
        """
        Remove a project's backing location and reconcile.

        Raises:
            ProjectNotFound: If ``project`` is None
            OperationFailed: On any other failure
        """
        if project is None:
            raise ProjectNotFound()

        with _operation("unregister", project.name):
            self._remove_secure(self.expand_path(project.path))
            logger.info(f"Unregistered {project.name}")
            self.index()

    def _remove_secure(self, location: Path) -> None:
        """Remove ``location`` recursively, refusing anything outside the root."""
        if location.is_symlink():
            # Only the link goes; its target belongs to the user.
            if not self._within_root(location.parent.resolve()):
                raise PermissionError(f"Refusing to remove {location} outside {self.path}")
            location.unlink()
            return

        if not location.exists():
            return

        resolved = location.resolve()
        if not self._within_root(resolved) or resolved == self.path:
            raise PermissionError(f"Refusing to remove {location} outside {self.path}")
        if resolved.is_dir():
            shutil.rmtree(resolved)
        else:
            resolved.unlink()

    def _within_root(self, path: Path) -> bool:
        return path == self.path or self.path in path.parents

    # ------------------------------------------------------------------
    # Personal projects
    # ------------------------------------------------------------------

    def create_personal_project(
        self, project_name: str, source_language: str, target_language: str
    ) -> Project:
        """
        Create an empty personal glossary.

        The index is not rebuilt; the empty glossary is picked up by the
        next reconciliation.

        Raises:
            AlreadyRegistered: If any project already has this glossary
        """
        if self._glossary_exists(project_name, source_language, target_language):
            raise AlreadyRegistered(f"The glossary '{project_name}' already exists.")

        glossary = Glossary(project_name, source_language, target_language)
        return project_ops.create_personal_project(self.path, glossary)

    def remove_personal_project(
        self, project_name: str, source_language: str, target_language: str
    ) -> None:
        """
        Remove a personal glossary and reconcile.

        Raises:
            GlossaryNotFound: If the glossary does not exist
            OperationFailed: On any other failure
        """
        if not self._glossary_exists(project_name, source_language, target_language):
            raise GlossaryNotFound(f"The glossary '{project_name}' not found.")

        with _operation("remove_personal_project", project_name):
            glossary = Glossary(project_name, source_language, target_language)
            project_ops.remove_personal_project(self.path, glossary)
            self.index()

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_glossary(self, glossary_source) -> None:
        """
        Import an external glossary into the cache and reconcile.

        The adapter writes into a private staging directory; ``cache/`` is
        only touched once it succeeded, and is restored if reconciliation
        fails afterwards.

        Raises:
            OperationFailed: On any failure
        """
        with _operation("import", type(glossary_source).__name__, passthrough=()):
            self._import(glossary_source.materialize)

    def import_tmx(self, glossary_source, glossary: Glossary, url: str) -> None:
        """
        Import a TMX file as ``glossary`` and reconcile.

        Raises:
            GlossaryNotFound: If the TMX holds nothing for the glossary
            OperationFailed: On any other failure
        """
        with _operation(
            "import_tmx", type(glossary_source).__name__, passthrough=(GlossaryNotFound,)
        ):
            self._import(lambda staged: glossary_source.materialize(staged, glossary, url))

    def _import(self, materialize: Callable[[Path], object]) -> None:
        with self._staging() as staging:
            staged = staging / "staged"
            replaced = staging / "replaced"
            staged.mkdir()
            replaced.mkdir()

            materialize(staged)
            self._validate(staged)

            published: List[Path] = []
            try:
                self._publish(staged, replaced, published)
                self.index()
            except Exception:
                self._unpublish(published, replaced)
                raise

    @contextmanager
    def _staging(self) -> Iterator[Path]:
        self.cache_path.mkdir(parents=True, exist_ok=True)
        # Dot-prefixed and outside cache/, so discovery never sees it.
        with tempfile.TemporaryDirectory(prefix=".import-", dir=str(self.path)) as tmp:
            yield Path(tmp)

    @staticmethod
    def _validate(staged: Path) -> None:
        """Read every staged glossary file; malformed ones raise."""
        for file_path in sorted(staged.rglob("*")):
            if file_path.is_file() and parse_source_file_name(file_path.name):
                read_entries(file_path)

    def _publish(self, staged: Path, replaced: Path, published: List[Path]) -> None:
        """
        Move staged entries into ``cache/``.

        Entries of the same name are moved aside into ``replaced`` first.
        Every destination is appended to ``published`` as soon as it exists.
        """
        for entry in sorted(staged.iterdir()):
            destination = self.cache_path / entry.name
            if destination.exists() or destination.is_symlink():
                shutil.move(str(destination), str(replaced / entry.name))
            published.append(destination)
            shutil.move(str(entry), str(destination))
            logger.info(f"Imported {entry.name} into {self.cache_path}")

    def _unpublish(self, published: List[Path], replaced: Path) -> None:
        """Undo :meth:`_publish`: drop new entries, restore replaced ones."""
        for destination in reversed(published):
            self._remove_secure(destination)
            backup = replaced / destination.name
            if backup.exists() or backup.is_symlink():
                shutil.move(str(backup), str(destination))
            logger.warning(f"Rolled back import of {destination.name}")

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def current_glossary_sources(self) -> List[GlossarySource]:
        sources = set()
        for project in self.projects():
            sources.update(project.glossary_sources())
        return sorted(sources)

    def index(self) -> IndexReport:
        """
        Synchronize the term index with the glossary sources on disk.

        Indexed sources no longer on disk are removed first, then sources
        present on disk but not indexed are added; everything else is left
        alone. A source whose content changed in place keeps its stale
        entries. A source that cannot be read is logged, reported in
        ``failed`` and retried on the next pass.

        Returns:
            IndexReport with the sources added, removed and failed
        """
        current = set(self.current_glossary_sources())

        with IndexStore.open(self.index_path, INDEX_ENCODING) as store:
            store.recreate_schema()
            indexed = store.indexed_sources()

            report = IndexReport(removed=sorted(indexed - current))
            for source in report.removed:
                logger.info(f"now deindex {source.glossary.name}...")
                store.deindex_glossary(source.glossary, source)

            for source in sorted(current - indexed):
                logger.info(f"now index {source.glossary.name}...")
                try:
                    store.index_glossary(source.glossary, source)
                except GlossarySourceError as exc:
                    logger.error(f"Skipped {source.path}: {exc}", exc_info=True)
                    report.failed.append(source)
                    continue
                report.added.append(source)

        if not report.changed:
            logger.debug("Index is up to date")
        return report

    def indexed_sources(self) -> List[GlossarySource]:
        if not IndexStore.exists(self.index_path):
            return []
        with IndexStore.open(self.index_path, INDEX_ENCODING) as store:
            return sorted(store.indexed_sources())

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(
        self,
        source_term: str,
        glossary: Union[Glossary, GlossarySource, None],
        dictionary: bool = False,
        fixed: bool = False,
    ) -> List[TermEntry]:
        """
        Look up ``source_term`` in the term index.

        Args:
            source_term: Term to search (partial match)
            glossary: Glossary to search in; ignored in dictionary mode
            dictionary: Search every glossary, on source and target terms
            fixed: Drop entries annotated as unconfirmed

        Raises:
            IndexStoreNotFound: If the index was never built
            GlossaryNotFound: If no glossary is given outside dictionary mode
        """
        if not IndexStore.exists(self.index_path):
            raise IndexStoreNotFound(f"No index at {self.index_path}; run index first.")

        if isinstance(glossary, GlossarySource):
            glossary = glossary.glossary

        with IndexStore.open(self.index_path, INDEX_ENCODING) as store:
            if dictionary:
                terms = store.lookup_dictionary(source_term)
            elif glossary is None:
                raise GlossaryNotFound("A glossary is required outside dictionary mode.")
            else:
                terms = store.lookup(source_term, glossary)

        return self.except_annotation(terms) if fixed else terms

    def except_annotation(self, terms: Sequence[TermEntry]) -> List[TermEntry]:
        return except_annotation(terms, self.annotations)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def projects(self) -> List[Project]:
        return discover_projects(self.path)

    def registered_projects(self) -> List[Project]:
        return [p for p in self.projects() if p.kind is ProjectKind.REGISTERED]

    def imported_projects(self) -> List[Project]:
        return [p for p in self.projects() if p.kind is ProjectKind.IMPORTED]

    def glossary_counts(self) -> int:
        return len(self.registered_projects()) + len(self.imported_projects())

    def find_project(self, project_name: str) -> Optional[Project]:
        """First project named ``project_name`` in :meth:`projects` order."""
        for project in self.projects():
            if project.name == project_name:
                return project
        return None

    def find_glossary(
        self, project_name: str, source_language: str, target_language: str
    ) -> Optional[GlossarySource]:
        """Glossary source of the first matching project, or None."""
        for project in self.projects():
            if project.name != project_name:
                continue
            source = project.glossary(source_language, target_language)
            if source is not None:
                return source
        return None

    def _glossary_exists(
        self, project_name: str, source_language: str, target_language: str
    ) -> bool:
        return self.find_glossary(project_name, source_language, target_language) is not None


__all__ = ["Repository", "IndexReport", "DOMAIN_ERRORS", "INDEX_DIR"]
