"""Read back which annotations already have an open issue."""

import logging

from todo2issue.fingerprint import extract_fingerprint
from todo2issue.github import GitHubClient
from todo2issue.settings import Repository

logger = logging.getLogger(__name__)

TODO_LABEL = "todo"


def fetch_existing_fingerprints(
    client: GitHubClient,
    repository: Repository,
    label: str = TODO_LABEL,
) -> set[str]:
    """Return the fingerprints embedded in open issues carrying `label`.

    Issues without a marker are ignored. Errors propagate: without this
    baseline a sync could create duplicates.
    """
    existing: set[str] = set()
    seen = 0
    for issue in client.list_open_issues(repository, label):
        # The issues endpoint also returns pull requests
        if "pull_request" in issue:
            continue
        seen += 1
        value = extract_fingerprint(issue.get("body"))
        if value is None:
            logger.debug("Issue #%s has the %s label but no fingerprint", issue.get("number"), label)
            continue
        existing.add(value)
    logger.info("Found %d open '%s' issue(s), %d fingerprint(s)", seen, label, len(existing))
    return existing
