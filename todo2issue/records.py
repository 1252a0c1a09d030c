"""Turn an annotation into a GitHub issue."""

import logging

from todo2issue.fingerprint import render_marker
from todo2issue.github import GitHubClient, GitHubError
from todo2issue.models import Annotation, CreatedRecord
from todo2issue.settings import Repository
from todo2issue.tracker import TODO_LABEL

logger = logging.getLogger(__name__)

ISSUE_LABELS = ["engineering", TODO_LABEL]
MAX_TITLE_LENGTH = 256  # GitHub rejects longer issue titles
TITLE_PREFIX = "TODO: "
_ELLIPSIS = "..."


def build_title(text: str) -> str:
    title = f"{TITLE_PREFIX}{text}"
    if len(title) <= MAX_TITLE_LENGTH:
        return title
    return title[: MAX_TITLE_LENGTH - len(_ELLIPSIS)].rstrip() + _ELLIPSIS


def build_body(annotation: Annotation) -> str:
    return (
        f"**File:** `{annotation.source_path}` (line {annotation.line_number})\n"
        "\n"
        "**TODO:**\n"
        f"{annotation.text}\n"
        "\n"
        "---\n"
        f"{render_marker(annotation.fingerprint)}"
    )


def create_record(client: GitHubClient, repository: Repository, annotation: Annotation) -> CreatedRecord:
    node = client.create_issue(
        repository,
        title=build_title(annotation.text),
        body=build_body(annotation),
        labels=ISSUE_LABELS,
    )
    try:
        record = CreatedRecord(
            number=node["number"],
            node_id=node["node_id"],
            title=node["title"],
            url=node["html_url"],
        )
    except KeyError as exc:
        raise GitHubError(f"Issue create response missing {exc}") from exc
    logger.debug("Created issue #%d for %s", record.number, annotation.fingerprint)
    return record
