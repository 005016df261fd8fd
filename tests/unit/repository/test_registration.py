"""
Tests for register/unregister, personal projects and project lookup.
"""

import pytest

from glossa.core.glossary import Glossary, TermEntry
from glossa.core.project import Project, ProjectKind
from glossa.errors import (
    AlreadyRegistered,
    GlossaryNotFound,
    OperationFailed,
    ProjectNotFound,
)


class TestRegister:
    """Tests for Repository.register."""

    def test_register_links_and_indexes(self, repo, external_project):
        repo.register(external_project, "myapp")

        link = repo.projects_path / "myapp"
        assert link.is_symlink()
        assert link.resolve() == external_project.resolve()
        assert repo.lookup("commit", Glossary("myapp", "en", "ja")) == [
            TermEntry("commit", "コミット", "")
        ]

    def test_register_twice_keeps_first(self, repo, external_project, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        repo.register(external_project, "myapp")

        with pytest.raises(AlreadyRegistered):
            repo.register(other, "myapp")

        assert (repo.projects_path / "myapp").resolve() == external_project.resolve()

    def test_dangling_link_still_blocks_name(self, repo, tmp_path):
        repo.projects_path.mkdir(parents=True)
        (repo.projects_path / "gone").symlink_to(tmp_path / "nowhere")

        with pytest.raises(AlreadyRegistered):
            repo.register(tmp_path, "gone")

    @pytest.mark.parametrize("name", ["", "..", "a/b"])
    def test_invalid_name_is_operation_failure(self, repo, external_project, name):
        with pytest.raises(OperationFailed) as exc_info:
            repo.register(external_project, name)

        assert exc_info.value.operation == "register"
        assert exc_info.value.target == name

    def test_filesystem_failure_is_wrapped(self, repo, external_project):
        repo.path.mkdir(parents=True)
        repo.projects_path.write_text("not a directory")

        with pytest.raises(OperationFailed) as exc_info:
            repo.register(external_project, "myapp")

        assert isinstance(exc_info.value.__cause__, OSError)


class TestUnregister:
    """Tests for Repository.unregister."""

    def test_none_is_project_not_found(self, repo):
        with pytest.raises(ProjectNotFound):
            repo.unregister(None)

    def test_removal_propagates_to_index(self, repo, external_project):
        repo.register(external_project, "myapp")
        assert repo.indexed_sources()

        repo.unregister(repo.find_project("myapp"))

        assert repo.indexed_sources() == []
        assert not (repo.projects_path / "myapp").exists()
        # Only the link is removed, never the registered directory.
        assert (external_project / "glossary" / "myapp.en.ja.yml").exists()

    def test_unregister_personal_project(self, repo, personal_p1):
        repo.index()

        repo.unregister(repo.find_project("P1"))

        assert not (repo.personal_path / "P1").exists()
        assert repo.indexed_sources() == []

    def test_refuses_to_remove_outside_root(self, repo, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        repo.path.mkdir(parents=True)

        with pytest.raises(OperationFailed):
            repo.unregister(Project(ProjectKind.PERSONAL, "../outside", repo.path))

        assert outside.exists()


class TestPersonalProjects:
    """Tests for create/remove of personal glossaries."""

    def test_create_does_not_index(self, repo):
        repo.create_personal_project("manual", "en", "ja")

        assert repo.find_glossary("manual", "en", "ja") is not None
        assert repo.indexed_sources() == []

    def test_create_existing_glossary_fails(self, repo, personal_p1):
        with pytest.raises(AlreadyRegistered):
            repo.create_personal_project("P1", "en", "ja")

    def test_create_clashes_with_other_kinds(self, repo, external_project):
        repo.register(external_project, "myapp")

        with pytest.raises(AlreadyRegistered):
            repo.create_personal_project("myapp", "en", "ja")

    def test_remove_reindexes(self, repo, personal_p1):
        repo.index()

        repo.remove_personal_project("P1", "en", "ja")

        assert repo.find_glossary("P1", "en", "ja") is None
        assert repo.indexed_sources() == []

    def test_remove_missing_glossary(self, repo):
        with pytest.raises(GlossaryNotFound):
            repo.remove_personal_project("P1", "en", "ja")

    def test_remove_non_personal_glossary(self, repo, external_project):
        repo.register(external_project, "myapp")

        with pytest.raises(GlossaryNotFound):
            repo.remove_personal_project("myapp", "en", "ja")


class TestDiscovery:
    """Tests for projects/find_project/find_glossary."""

    def test_projects_are_rediscovered_each_call(self, repo):
        assert repo.projects() == []
        repo.create_personal_project("manual", "en", "ja")
        assert [p.path for p in repo.projects()] == ["personal/manual"]

    def test_find_project_first_match_wins(self, repo, write_glossary):
        """Accepted ambiguity: the first project in projects() order wins."""
        repo.create_personal_project("shared", "en", "ja")
        write_glossary(repo.cache_path / "shared", Glossary("shared", "en", "fr"), [], fmt="csv")

        project = repo.find_project("shared")

        assert project.kind is ProjectKind.IMPORTED
        assert project.path == "cache/shared"

    def test_find_glossary_skips_projects_without_pair(self, repo, write_glossary):
        repo.create_personal_project("shared", "en", "ja")
        write_glossary(repo.cache_path / "shared", Glossary("shared", "en", "fr"), [], fmt="csv")

        source = repo.find_glossary("shared", "en", "ja")

        assert source.path == "personal/shared/shared.en.ja.yml"
        assert repo.find_glossary("shared", "de", "ja") is None
        assert repo.find_project("missing") is None

    def test_glossary_counts(self, repo, external_project, write_glossary):
        repo.register(external_project, "myapp")
        repo.create_personal_project("manual", "en", "ja")
        write_glossary(repo.cache_path / "ui", Glossary("ui", "en", "ja"), [], fmt="csv")

        assert repo.glossary_counts() == 2

    def test_paths(self, repo):
        assert repo.relative_path(repo.path / "cache" / "ui") == "cache/ui"
        assert repo.expand_path("personal/manual") == repo.path / "personal" / "manual"
        assert repo.config_path() is None
