"""Pytest fixtures for glossa tests (repositories, glossary files, TMX)."""

from pathlib import Path

import pytest

from glossa.core.glossary import Glossary, write_entries
from glossa.repository import Repository


# ============================================================================
# REPOSITORY FIXTURES
# ============================================================================


@pytest.fixture
def repo(tmp_path) -> Repository:
    """Empty repository rooted in a temporary home directory."""
    return Repository(tmp_path / "home")


@pytest.fixture
def write_glossary():
    """
    Factory writing a glossary source file.

    Usage:
        path = write_glossary(directory, Glossary("manual", "en", "ja"), rows)
    """

    def _write(directory: Path, glossary: Glossary, rows, fmt: str = "yml") -> Path:
        path = directory / glossary.file_name(fmt)
        write_entries(path, rows)
        return path

    return _write


@pytest.fixture
def external_project(tmp_path, write_glossary) -> Path:
    """
    External project directory ready to be registered.

    Contains:
    - glossary/myapp.en.ja.yml with a confirmed and a wip term
    """
    project_dir = tmp_path / "myapp" / ".glossa"
    write_glossary(
        project_dir / "glossary",
        Glossary("myapp", "en", "ja"),
        [("commit", "コミット", ""), ("merge", "マージ", "wip")],
    )
    return project_dir


@pytest.fixture
def personal_p1(repo):
    """
    Personal glossary P1 (en -> ja) with one confirmed and one fuzzy term.

    Returns:
        GlossarySource of P1
    """
    repo.create_personal_project("P1", "en", "ja")
    source = repo.find_glossary("P1", "en", "ja")
    write_entries(source.location, [("build", "構築", ""), ("run", "実行", "fuzzy")])
    return source


# ============================================================================
# TMX FIXTURES
# ============================================================================

SAMPLE_TMX = """<?xml version="1.0" encoding="UTF-8"?>
<tmx version="1.4">
  <header
    creationtool="glossa"
    creationtoolversion="0.1"
    datatype="plaintext"
    segtype="phrase"
    adminlang="en"
    srclang="en"
    o-tmf="UTF-8"
  />
  <body>
    <tu creationdate="20250111T120000Z">
      <tuv xml:lang="en-US">
        <seg>Save file</seg>
      </tuv>
      <tuv xml:lang="ja">
        <seg>ファイルを保存</seg>
      </tuv>
    </tu>
    <tu creationdate="20250111T120001Z">
      <tuv xml:lang="en">
        <seg>Open
          file</seg>
      </tuv>
      <tuv xml:lang="ja-JP">
        <seg>ファイルを開く</seg>
      </tuv>
    </tu>
    <tu>
      <tuv xml:lang="en">
        <seg>Untranslated</seg>
      </tuv>
    </tu>
  </body>
</tmx>
"""


@pytest.fixture
def tmx_file(tmp_path) -> Path:
    """TMX file with two complete en/ja units and one incomplete unit."""
    path = tmp_path / "ui.tmx"
    path.write_text(SAMPLE_TMX, encoding="utf-8")
    return path
