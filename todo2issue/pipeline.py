"""The sync run: read remote state, scan, reconcile, create, link."""

import logging
import time
from collections.abc import Callable
from pathlib import Path

from rich import print as rprint
from rich.markup import escape

from todo2issue.github import GitHubClient
from todo2issue.models import RunSummary
from todo2issue.projects import ProjectLinker
from todo2issue.reconcile import reconcile
from todo2issue.records import create_record
from todo2issue.scanner import scan_annotations
from todo2issue.settings import Repository
from todo2issue.tracker import fetch_existing_fingerprints

logger = logging.getLogger(__name__)


def run_sync(
    client: GitHubClient,
    repository: Repository,
    root: Path,
    *,
    project_number: int = 0,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    dry_run: bool = False,
) -> RunSummary:
    """Create one issue per TODO that has no open issue yet.

    Remote calls are strictly sequential with `delay` seconds after each
    annotation. A failure to read existing issues propagates before anything
    is created; failures for a single annotation are logged and counted.
    """
    existing = fetch_existing_fingerprints(client, repository)

    annotations = scan_annotations(root)
    logger.info("Found %d TODO(s) under %s", len(annotations), root)

    selected = reconcile(annotations, existing)
    skipped = len(annotations) - len(selected)
    logger.info("%d new TODO(s) to create, %d already tracked", len(selected), skipped)

    if not selected:
        return RunSummary(found=len(annotations), skipped=skipped, dry_run=dry_run)

    if dry_run:
        for annotation in selected:
            location = f"{annotation.source_path}:{annotation.line_number}"
            rprint(f"[dim]would create[/dim] {escape(location)} {escape(annotation.text)}")
        return RunSummary(found=len(annotations), skipped=skipped, dry_run=True)

    linker = ProjectLinker(client, repository.owner, project_number)
    project = linker.resolve()

    created = failed = linked = link_failed = 0
    for annotation in selected:
        try:
            record = create_record(client, repository, annotation)
        except Exception as exc:
            failed += 1
            logger.error("Failed to create issue for TODO %r (%s): %s", annotation.text, annotation.source_path, exc)
            sleep(delay)
            continue

        created += 1
        rprint(f"[green]✓[/green] Created issue [bold]#{record.number}[/bold]: {escape(record.title)}")
        if project is not None:
            # The issue exists either way; a link failure only counts against linking
            try:
                ok = linker.link(record)
            except Exception as exc:
                logger.error("Could not add issue #%d (TODO %r) to project: %s", record.number, annotation.text, exc)
                ok = False
            if ok:
                linked += 1
                rprint(f"  [green]✓[/green] Added to project #{project.number}")
            else:
                link_failed += 1
        sleep(delay)

    return RunSummary(
        found=len(annotations),
        created=created,
        skipped=skipped,
        failed=failed,
        linked=linked,
        link_failed=link_failed,
        project_id=project.id if project else None,
    )
