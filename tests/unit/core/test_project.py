"""
Tests for project variants and discovery.
"""

import pytest

from glossa.core.glossary import Glossary
from glossa.core.project import (
    Project,
    ProjectKind,
    create_personal_project,
    discover_projects,
    remove_personal_project,
)
from glossa.errors import AlreadyRegistered, GlossaryNotFound


class TestDiscovery:
    """Tests for discover_projects."""

    def test_empty_root(self, tmp_path):
        assert discover_projects(tmp_path / "missing") == []

    def test_all_kinds_sorted_by_path(self, tmp_path, external_project):
        root = tmp_path / "home"
        (root / "projects").mkdir(parents=True)
        (root / "projects" / "myapp").symlink_to(external_project)
        (root / "personal" / "manual").mkdir(parents=True)
        (root / "cache" / "itil").mkdir(parents=True)

        projects = discover_projects(root)

        assert [(p.kind, p.path) for p in projects] == [
            (ProjectKind.IMPORTED, "cache/itil"),
            (ProjectKind.PERSONAL, "personal/manual"),
            (ProjectKind.REGISTERED, "projects/myapp"),
        ]

    def test_plain_files_and_hidden_entries_are_skipped(self, tmp_path):
        root = tmp_path / "home"
        (root / "personal").mkdir(parents=True)
        (root / "personal" / "stray.txt").write_text("x")
        (root / "cache" / ".partial").mkdir(parents=True)

        assert discover_projects(root) == []

    def test_dangling_link_is_a_project_without_sources(self, tmp_path):
        root = tmp_path / "home"
        (root / "projects").mkdir(parents=True)
        (root / "projects" / "gone").symlink_to(tmp_path / "nowhere")

        projects = discover_projects(root)

        assert [p.name for p in projects] == ["gone"]
        assert projects[0].glossary_sources() == []


class TestGlossarySources:
    """Tests for Project.glossary_sources."""

    def test_registered_sources_live_in_glossary_dir(self, tmp_path, external_project):
        root = tmp_path / "home"
        (root / "projects").mkdir(parents=True)
        (root / "projects" / "myapp").symlink_to(external_project)
        project = Project(ProjectKind.REGISTERED, "projects/myapp", root)

        sources = project.glossary_sources()

        assert [s.path for s in sources] == ["projects/myapp/glossary/myapp.en.ja.yml"]
        assert sources[0].glossary == Glossary("myapp", "en", "ja")
        assert sources[0].entries()[0].source_term == "commit"

    def test_unrelated_files_are_ignored(self, tmp_path, write_glossary):
        root = tmp_path / "home"
        project_dir = root / "personal" / "manual"
        write_glossary(project_dir, Glossary("manual", "en", "ja"), [])
        (project_dir / "notes.txt").write_text("x")
        project = Project(ProjectKind.PERSONAL, "personal/manual", root)

        assert [s.path for s in project.glossary_sources()] == ["personal/manual/manual.en.ja.yml"]

    def test_glossary_by_language_pair(self, tmp_path, write_glossary):
        root = tmp_path / "home"
        write_glossary(root / "cache" / "ui", Glossary("ui", "en", "ja"), [], fmt="csv")
        write_glossary(root / "cache" / "ui", Glossary("ui", "en", "fr"), [], fmt="csv")
        project = Project(ProjectKind.IMPORTED, "cache/ui", root)

        assert project.glossary("en", "fr").path == "cache/ui/ui.en.fr.csv"
        assert project.has_glossary("en", "ja")
        assert not project.has_glossary("ja", "en")
        assert project.name == "ui"


class TestPersonalProjects:
    """Tests for personal project creation and removal."""

    def test_create_writes_empty_glossary(self, tmp_path):
        root = tmp_path / "home"
        project = create_personal_project(root, Glossary("manual", "en", "ja"))

        assert project.kind is ProjectKind.PERSONAL
        assert (root / "personal" / "manual" / "manual.en.ja.yml").exists()
        assert project.glossary("en", "ja").entries() == []

    def test_create_twice_fails(self, tmp_path):
        root = tmp_path / "home"
        create_personal_project(root, Glossary("manual", "en", "ja"))
        with pytest.raises(AlreadyRegistered):
            create_personal_project(root, Glossary("manual", "en", "ja"))

    def test_remove_last_glossary_removes_directory(self, tmp_path):
        root = tmp_path / "home"
        create_personal_project(root, Glossary("manual", "en", "ja"))
        create_personal_project(root, Glossary("manual", "en", "fr"))

        remove_personal_project(root, Glossary("manual", "en", "ja"))
        assert (root / "personal" / "manual").is_dir()

        remove_personal_project(root, Glossary("manual", "en", "fr"))
        assert not (root / "personal" / "manual").exists()

    def test_remove_missing_fails(self, tmp_path):
        with pytest.raises(GlossaryNotFound):
            remove_personal_project(tmp_path / "home", Glossary("manual", "en", "ja"))
