"""CLI command implementations"""

import json
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from docsnav.config import Settings, load_config
from docsnav.core.content import ContentManager
from docsnav.core.repair import check_navigation
from docsnav.core.resolver import SlugResolver
from docsnav.core.search import SearchAdapter
from docsnav.crud.database import init_db, make_engine, reset_db
from docsnav.crud.models import Project
from docsnav.crud.projects import create_project, get_by_slug, list_projects


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _manager() -> ContentManager:
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    return ContentManager(engine, settings)


def _project(manager: ContentManager, slug: str) -> Project:
    project = manager.resolve_project(slug=slug)
    if project is None:
        _fail(f"Project '{slug}' not found")
    return project


def _selected_projects(manager: ContentManager, slug: Optional[str]) -> list[Project]:
    if slug:
        return [_project(manager, slug)]
    with Session(manager.engine) as session:
        return list_projects(session)


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def create_project_cmd(
    name: Annotated[str, typer.Argument(help="Display name")],
    slug: Annotated[str, typer.Argument(help="Unique project slug")],
    ):
    """Create a project (tenant)."""
    manager = _manager()
    try:
        with Session(manager.engine) as session:
            project = create_project(session, name, slug)
            session.commit()
            typer.echo(f"Created project {project.slug} ({project.id})")
    except ValueError as e:
        _fail(str(e))


def nav_cmd(
    project: Annotated[str, typer.Argument(help="Project slug")],
    ):
    """Print a project's navigation tree as JSON."""
    manager = _manager()
    nav = manager.get_navigation(_project(manager, project).id)
    typer.echo(json.dumps(nav.structure(), indent=2))


def resolve_cmd(
    project: Annotated[str, typer.Argument(help="Project slug")],
    path: Annotated[str, typer.Argument(help="Docs path, e.g. guides/intro")],
    ):
    """Show what a docs path resolves to."""
    manager = _manager()
    result = SlugResolver(manager).resolve(_project(manager, project).id, path)
    typer.echo(result.kind.value)
    if result.document:
        typer.echo(f"  document: {result.document.title}")
    if result.section:
        typer.echo(f"  section: {result.section.title}")
    for child in result.children:
        typer.echo(f"    - {child.slug}: {child.title}")


def search_cmd(
    project: Annotated[str, typer.Argument(help="Project slug")],
    query: Annotated[str, typer.Argument(help="Substring to look for")],
    ):
    """Search section titles and documents of a project."""
    manager = _manager()
    results = SearchAdapter(manager).search(_project(manager, project).id, query)
    if not results:
        typer.echo("No results.")
        return
    for r in results:
        extra = f" ({r.child_count} docs)" if r.kind == "section" else ""
        typer.echo(f"  [{r.kind}] {r.slug}: {r.title}{extra}")


def check_cmd(
    project: Annotated[Optional[str], typer.Argument(help="Project slug; all projects when omitted")] = None,
    ):
    """Report navigation problems; exits 1 when any are found."""
    manager = _manager()
    problems = 0
    for p in _selected_projects(manager, project):
        with Session(manager.engine) as session:
            issues = check_navigation(session, p.id, manager.settings)
        typer.echo(f"=== {p.name} ({p.slug}) ===")
        if not issues:
            typer.echo("  [OK] navigation is consistent")
        for issue in issues:
            typer.echo(f"  [ERROR] {issue}")
        problems += len(issues)
    if problems:
        raise typer.Exit(1)


def repair_cmd(
    project: Annotated[Optional[str], typer.Argument(help="Project slug; all projects when omitted")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Report without writing")] = False,
    ):
    """Fix encoding problems and prune references to missing documents."""
    manager = _manager()
    for p in _selected_projects(manager, project):
        try:
            report = manager.reconcile(p.id, dry_run=dry_run)
        except Exception as e:
            _fail(f"Repair of {p.slug} failed", e)
        status = "would change" if dry_run and report.changed else "fixed" if report.changed else "OK"
        typer.echo(f"  {p.slug}: {status}")
        for issue in report.issues:
            typer.echo(f"    issue: {issue}")
        for path in report.pruned:
            typer.echo(f"    pruned: {path}")
        for slug in report.unlisted:
            typer.echo(f"    not in navigation: {slug}")
