"""
glossa Command Line Interface.

Provides commands for managing glossary projects and looking up terms.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from glossa import __version__
from glossa.config import resolve_home
from glossa.core.glossary import Glossary, TermEntry
from glossa.errors import GlossaError, GlossaryNotFound, ProjectNotFound
from glossa.repository import Repository

app = typer.Typer(
    name="glossa",
    help="Bilingual glossary repository - register, import and look up terms",
    add_completion=False,
)


def _repository(ctx: typer.Context) -> Repository:
    return ctx.obj["repository"]


def _fail(exc: Exception) -> None:
    typer.secho(f"✗ {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main_options(
    ctx: typer.Context,
    home: Optional[str] = typer.Option(
        None,
        "--home",
        "-H",
        help="Repository directory (default: $GLOSSA_HOME or ~/.glossa)",
        show_default=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Options shared by every command."""
    # Setup logging
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    repository = Repository(resolve_home(home))
    try:
        config = repository.load_config()
    except GlossaError as e:
        _fail(e)
    repository.annotations = tuple(config.annotations)
    ctx.obj = {"repository": repository, "config": config}


@app.command()
def register(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Project directory holding glossary/"),
    name: Optional[str] = typer.Argument(None, help="Register name (default: directory name)"),
):
    """
    Register an external project directory.

    Example:
        glossa register ./myproject/.glossa myproject
    """
    repo = _repository(ctx)
    name = name or Path(path).expanduser().resolve().name
    try:
        repo.register(path, name)
    except GlossaError as e:
        _fail(e)
    typer.secho(f"✓ Registered {name}", fg=typer.colors.GREEN)


@app.command()
def unregister(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Register name"),
):
    """Unregister a project and drop its terms from the index."""
    repo = _repository(ctx)
    project = next((p for p in repo.registered_projects() if p.name == name), None)
    try:
        if project is None:
            raise ProjectNotFound(f"Project '{name}' is not registered.")
        repo.unregister(project)
    except GlossaError as e:
        _fail(e)
    typer.secho(f"✓ Unregistered {name}", fg=typer.colors.GREEN)


def _languages(ctx: typer.Context, src: Optional[str], tgt: Optional[str]):
    config = ctx.obj["config"]
    src = src or config.source_language
    tgt = tgt or config.target_language
    if not src or not tgt:
        _fail(GlossaError("Source and target languages are required (--src/--tgt or config)."))
    return src, tgt


@app.command()
def new(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Glossary name"),
    src: Optional[str] = typer.Argument(None, help="Source language code"),
    tgt: Optional[str] = typer.Argument(None, help="Target language code"),
):
    """
    Create a personal glossary.

    Example:
        glossa new manual en ja
    """
    repo = _repository(ctx)
    src, tgt = _languages(ctx, src, tgt)
    try:
        repo.create_personal_project(name, src, tgt)
    except GlossaError as e:
        _fail(e)
    typer.secho(f"✓ Created glossary {Glossary(name, src, tgt)}", fg=typer.colors.GREEN)


@app.command()
def remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Glossary name"),
    src: Optional[str] = typer.Argument(None, help="Source language code"),
    tgt: Optional[str] = typer.Argument(None, help="Target language code"),
):
    """Remove a personal glossary."""
    repo = _repository(ctx)
    src, tgt = _languages(ctx, src, tgt)
    try:
        repo.remove_personal_project(name, src, tgt)
    except GlossaError as e:
        _fail(e)
    typer.secho(f"✓ Removed glossary {Glossary(name, src, tgt)}", fg=typer.colors.GREEN)


@app.command("import")
def import_glossary(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="External glossary name"),
    list_available: bool = typer.Option(False, "--list", "-l", help="List importable glossaries"),
):
    """
    Import an external glossary.

    Examples:
        glossa import --list
        glossa import itil
    """
    from glossa.external import get_external_glossary, list_external_glossaries

    if list_available or not name:
        for adapter in list_external_glossaries():
            typer.echo(
                f"  {adapter.name:<12} {adapter.source_language} -> {adapter.target_language}"
                f"  {adapter.description}"
            )
        return

    repo = _repository(ctx)
    try:
        source = get_external_glossary(name)
        typer.echo(f"Importing {source.description} ...")
        repo.import_glossary(source)
    except GlossaError as e:
        _fail(e)
    typer.secho(f"✓ Imported {name}", fg=typer.colors.GREEN)


@app.command("import-tmx")
def import_tmx(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="TMX file path or http(s) URL"),
    glossary: Optional[str] = typer.Option(None, "--glossary", "-g", help="Glossary name"),
    src: Optional[str] = typer.Option(None, "--src", "-S", help="Source language code"),
    tgt: Optional[str] = typer.Option(None, "--tgt", "-T", help="Target language code"),
):
    """
    Import a TMX file as a glossary.

    Example:
        glossa import-tmx memory.tmx --glossary ui --src en --tgt ja
    """
    from glossa.interop import TmxGlossarySource

    repo = _repository(ctx)
    name = glossary or ctx.obj["config"].glossary
    if not name:
        _fail(GlossaError("A glossary name is required (--glossary or config)."))
    src, tgt = _languages(ctx, src, tgt)

    typer.echo(f"Importing TMX from: {url}")
    try:
        repo.import_tmx(TmxGlossarySource(), Glossary(name, src, tgt), url)
    except GlossaError as e:
        _fail(e)
    typer.secho(f"✓ Imported {Glossary(name, src, tgt)}", fg=typer.colors.GREEN)


@app.command()
def index(ctx: typer.Context):
    """Synchronize the term index with the projects on disk."""
    repo = _repository(ctx)
    try:
        report = repo.index()
    except GlossaError as e:
        _fail(e)
    typer.echo(f"Indexed: {len(report.added)}  Deindexed: {len(report.removed)}")
    for source in report.failed:
        typer.secho(f"⚠ Skipped unreadable glossary {source.path}", fg=typer.colors.YELLOW, err=True)


def _print_terms(terms: List[TermEntry], show_glossary: bool) -> None:
    if not terms:
        typer.echo("No results found")
        return

    width = max(len(term.source_term) for term in terms)
    for term in terms:
        line = f"  {term.source_term:<{width}}  {term.target_term}"
        if term.note:
            line += f"  # {term.note}"
        if show_glossary and term.glossary is not None:
            line += f"  ({term.glossary.name})"
        typer.echo(line)


@app.command()
def lookup(
    ctx: typer.Context,
    term: str = typer.Argument(..., help="Source term to look up"),
    glossary: Optional[str] = typer.Option(None, "--glossary", "-g", help="Glossary name"),
    src: Optional[str] = typer.Option(None, "--src", "-S", help="Source language code"),
    tgt: Optional[str] = typer.Option(None, "--tgt", "-T", help="Target language code"),
    dictionary: bool = typer.Option(False, "--dictionary", "-D", help="Search every glossary"),
    fixed: bool = typer.Option(False, "--fixed", "-F", help="Only confirmed translations"),
):
    """
    Look up a term.

    Examples:
        glossa lookup build --glossary manual --src en --tgt ja
        glossa lookup build --dictionary
    """
    repo = _repository(ctx)
    config = ctx.obj["config"]

    target = None
    if not dictionary:
        name = glossary or config.glossary
        src = src or config.source_language
        tgt = tgt or config.target_language
        if not (name and src and tgt):
            _fail(GlossaryNotFound("Specify --glossary, --src and --tgt, or use --dictionary."))
        target = Glossary(name, src, tgt)

    try:
        terms = repo.lookup(term, target, dictionary=dictionary, fixed=fixed)
    except GlossaError as e:
        _fail(e)
    _print_terms(terms, show_glossary=dictionary)


@app.command("list")
def list_projects(ctx: typer.Context):
    """List projects and their glossaries."""
    repo = _repository(ctx)
    projects = repo.projects()
    if not projects:
        typer.echo("No projects")
        return

    for project in projects:
        typer.echo(f"{project.path}  [{project.kind.value}]")
        for source in project.glossary_sources():
            typer.echo(f"  {source.glossary}")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"glossa v{__version__}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
