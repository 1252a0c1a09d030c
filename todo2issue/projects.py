"""GitHub Projects (v2) lookup and linking.

A project number is only meaningful under its owner, and GraphQL exposes user
and organization projects under different root fields. We try each owner kind
in order and keep the first hit.
"""

import logging

from todo2issue.github import GitHubClient, GitHubError
from todo2issue.models import CreatedRecord, ProjectRef

logger = logging.getLogger(__name__)

OWNER_KINDS = ("user", "organization")

_FIND_PROJECT = """
query FindProject($login: String!, $number: Int!) {{
  {kind}(login: $login) {{
    projectV2(number: $number) {{
      id
      title
      number
    }}
  }}
}}
"""

_ADD_ITEM = """
mutation AddItem($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: { projectId: $projectId, contentId: $contentId }) {
    item { id }
  }
}
"""


def find_project(client: GitHubClient, kind: str, login: str, number: int) -> ProjectRef | None:
    """Look up project `number` owned by `login` as a `kind`; None when absent."""
    data = client.graphql(_FIND_PROJECT.format(kind=kind), {"login": login, "number": number})
    owner = data.get(kind)
    project = owner.get("projectV2") if isinstance(owner, dict) else None
    if not isinstance(project, dict) or not project.get("id"):
        return None
    return ProjectRef(id=project["id"], number=number, owner_kind=kind, title=project.get("title"))


def resolve_project(client: GitHubClient, login: str, number: int) -> ProjectRef | None:
    for kind in OWNER_KINDS:
        try:
            project = find_project(client, kind, login, number)
        except GitHubError as exc:
            # "Could not resolve to a User" and friends land here
            logger.debug("Project #%d not found as %s %s: %s", number, kind, login, exc)
            continue
        if project is not None:
            logger.info("Resolved project #%d under %s %s", number, kind, login)
            return project
    return None


class ProjectLinker:
    """Resolves the project once per run and adds created issues to it."""

    def __init__(self, client: GitHubClient, login: str, number: int) -> None:
        self._client = client
        self._login = login
        self._number = number
        self._resolved = False
        self.project: ProjectRef | None = None

    @property
    def enabled(self) -> bool:
        return self._number > 0

    def resolve(self) -> ProjectRef | None:
        if self._resolved:
            return self.project
        self._resolved = True
        if not self.enabled:
            logger.info("No project number configured; issues will not be added to a project")
            return None
        self.project = resolve_project(self._client, self._login, self._number)
        if self.project is None:
            logger.warning(
                "Could not find project #%d for %s as user or organization. "
                "Issues will be created but not added to a project.",
                self._number,
                self._login,
            )
        return self.project

    def link(self, record: CreatedRecord) -> bool:
        project = self.resolve()
        if project is None:
            return False
        try:
            self._client.graphql(_ADD_ITEM, {"projectId": project.id, "contentId": record.node_id})
        except GitHubError as exc:
            logger.error("Could not add issue #%d to project #%d: %s", record.number, project.number, exc)
            return False
        return True
