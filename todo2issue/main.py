"""todo2issue CLI — all commands."""

import logging
from pathlib import Path
from typing import Annotated

import tomlkit
import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from todo2issue.diagnostics import check_token
from todo2issue.github import GitHubClient, GitHubError
from todo2issue.models import RunSummary
from todo2issue.pipeline import run_sync
from todo2issue.scanner import scan_annotations
from todo2issue.settings import CONFIG_PATH, get_settings, parse_repository

app = typer.Typer(help="todo2issue: turn TODO comments into GitHub issues", no_args_is_help=True)

VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, rich_tracebacks=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def render_summary(summary: RunSummary) -> Table:
    title = "TODO sync (dry run)" if summary.dry_run else "TODO sync"
    table = Table(title=title)
    table.add_column("Found", justify="right")
    table.add_column("Created", justify="right", style="green")
    table.add_column("Skipped (already tracked)", justify="right")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Added to project", justify="right")
    linked = f"{summary.linked}" if summary.project_id else "—"
    if summary.link_failed:
        linked += f" ({summary.link_failed} failed)"
    table.add_row(str(summary.found), str(summary.created), str(summary.skipped), str(summary.failed), linked)
    return table


def _mask(val: str | None) -> str:
    if val is None:
        return "[dim](not set)[/dim]"
    if len(val) <= 5:
        return "***"
    return f"...{val[-5:]}"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("sync")
def sync(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Report what would be created without creating anything")
    ] = False,
    verbose: VerboseOpt = False,
) -> None:
    """Create GitHub issues for TODO comments that have no open issue yet."""
    configure_logging(verbose)
    settings = get_settings()
    client = GitHubClient.from_settings(settings)
    root = Path.cwd()
    rprint(f"Scanning repository: {root}")

    try:
        summary = run_sync(
            client,
            settings.repository,
            root,
            project_number=settings.project_number,
            delay=settings.request_delay,
            dry_run=dry_run,
        )
    except GitHubError as exc:
        rprint(f"[red]Could not read existing TODO issues, aborting before creating anything:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from None

    rprint(render_summary(summary))
    if summary.dry_run:
        rprint("[dim]Dry run: nothing was created.[/dim]")
    else:
        rprint(f"[green]✓[/green] Complete! Created {summary.created} new issue(s)")


@app.command("scan")
def scan(verbose: VerboseOpt = False) -> None:
    """List the TODO comments in the current directory and their fingerprints."""
    configure_logging(verbose)
    annotations = scan_annotations(Path.cwd())

    table = Table(title=f"TODOs ({len(annotations)})")
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right")
    table.add_column("Text")
    table.add_column("Fingerprint", style="dim")
    for annotation in annotations:
        table.add_row(
            escape(annotation.source_path),
            str(annotation.line_number),
            escape(annotation.text),
            escape(annotation.fingerprint),
        )

    rprint(table)


@app.command("check-token")
def check_token_cmd(verbose: VerboseOpt = False) -> None:
    """Check that GITHUB_TOKEN can read and create issues and reach the project."""
    configure_logging(verbose)
    settings = get_settings()
    client = GitHubClient.from_settings(settings)
    results = check_token(client, settings)

    table = Table(title=f"GitHub token check for {settings.repository}")
    table.add_column("Check", style="bold")
    table.add_column("Result")
    table.add_column("Detail")
    for result in results:
        table.add_row(result.name, "[green]ok[/green]" if result.ok else "[red]failed[/red]", escape(result.detail))
    rprint(table)

    if not all(r.ok for r in results):
        rprint("Create or update a token at https://github.com/settings/tokens with the 'repo' and 'project' scopes.")
        raise typer.Exit(1)


@app.command("config-show")
def config_show() -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(require_credentials=False)

    table = Table(title="todo2issue configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("github_token", _mask(settings.github_token.get_secret_value() if settings.github_token else None))
    table.add_row("github_repository", settings.github_repository or "[dim](not set)[/dim]")
    table.add_row("project_number", str(settings.project_number) if settings.project_number > 0 else "0 (disabled)")
    table.add_row("request_delay", f"{settings.request_delay}s")
    table.add_row("config file", str(CONFIG_PATH) if CONFIG_PATH.exists() else "[dim](none)[/dim]")

    rprint(table)


@app.command("init")
def init_cmd() -> None:
    """Write repository and project defaults to .todo2issue.toml."""
    repository = typer.prompt("Repository (owner/repo)").strip()
    try:
        parse_repository(repository)
    except ValueError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    project_number = typer.prompt("GitHub Project (v2) number, 0 to skip", default=0, type=int)
    if project_number < 0:
        rprint("[red]Project number cannot be negative.[/red]")
        raise typer.Exit(1)

    # Round-trip preserves any existing comments
    doc = tomlkit.load(CONFIG_PATH.open()) if CONFIG_PATH.exists() else tomlkit.document()
    doc["github_repository"] = repository
    doc["project_number"] = project_number
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f"[green]✓[/green] Wrote {CONFIG_PATH}")
    rprint("[dim]The token is not stored here; set GITHUB_TOKEN in the environment or .env.[/dim]")
