"""Token permission checks behind `todo2issue check-token`."""

from todo2issue.github import GitHubClient, GitHubError
from todo2issue.models import CheckResult
from todo2issue.projects import resolve_project
from todo2issue.settings import TodoSettings


def _scope_check(scopes: list[str], name: str, accepted: tuple[str, ...], needed_for: str) -> CheckResult:
    if not scopes:
        # Fine-grained tokens send no X-OAuth-Scopes header
        return CheckResult(name=name, ok=True, detail="no scopes header (fine-grained token?)")
    if any(s in scopes for s in accepted):
        return CheckResult(name=name, ok=True, detail=", ".join(s for s in scopes if s in accepted))
    return CheckResult(name=name, ok=False, detail=f"missing '{accepted[0]}' scope (needed {needed_for})")


def check_token(client: GitHubClient, settings: TodoSettings) -> list[CheckResult]:
    """Run every check and return the results; never raises for a failed check."""
    repository = settings.repository
    results: list[CheckResult] = []

    try:
        user, scopes = client.get_authenticated_user()
    except GitHubError as exc:
        results.append(CheckResult(name="token", ok=False, detail=str(exc)))
        return results
    results.append(CheckResult(name="token", ok=True, detail=f"authenticated as {user.get('login')}"))
    results.append(_scope_check(scopes, "repo scope", ("repo", "public_repo"), "to create issues"))
    if settings.project_number > 0:
        results.append(_scope_check(scopes, "project scope", ("project", "read:project"), "to add issues to projects"))

    try:
        repo = client.get_repository(repository)
    except GitHubError as exc:
        results.append(CheckResult(name="repository", ok=False, detail=str(exc)))
    else:
        perms = repo.get("permissions", {})
        results.append(
            CheckResult(
                name="repository",
                ok=True,
                detail=f"{repository}: push={perms.get('push', False)}, admin={perms.get('admin', False)}",
            )
        )

    try:
        next(iter(client.list_open_issues(repository, "todo")), None)
    except GitHubError as exc:
        results.append(CheckResult(name="issues", ok=False, detail=str(exc)))
    else:
        results.append(CheckResult(name="issues", ok=True, detail="can list issues"))

    if settings.project_number > 0:
        project = resolve_project(client, repository.owner, settings.project_number)
        if project is None:
            results.append(
                CheckResult(
                    name="project",
                    ok=False,
                    detail=(
                        f"project #{settings.project_number} not found for {repository.owner} as user or "
                        "organization (classic projects are not supported)"
                    ),
                )
            )
        else:
            results.append(
                CheckResult(
                    name="project",
                    ok=True,
                    detail=f"{project.title or '(untitled)'} ({project.owner_kind} project #{project.number})",
                )
            )

    return results
