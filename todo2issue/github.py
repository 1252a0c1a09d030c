"""GitHub REST v3 + GraphQL client."""

from collections.abc import Iterator

import httpx

from todo2issue.settings import Repository, TodoSettings

BASE_URL = "https://api.github.com"
GRAPHQL_URL = f"{BASE_URL}/graphql"


class GitHubError(RuntimeError):
    """Raised when a GitHub call fails or returns something unusable."""


class GitHubClient:
    def __init__(self, token: str, timeout: float = 30) -> None:
        self._token = token
        self._timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @classmethod
    def from_settings(cls, settings: TodoSettings) -> "GitHubClient":
        if not settings.github_token:
            raise GitHubError("No GitHub credentials. Set GITHUB_TOKEN.")
        return cls(settings.github_token.get_secret_value())

    def _check(self, response: httpx.Response) -> httpx.Response:
        if response.status_code == 401:
            raise GitHubError("GitHub API returned 401. Check that GITHUB_TOKEN is valid and not expired.")
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            message = payload.get("message", response.text) if isinstance(payload, dict) else response.text
            raise GitHubError(f"GitHub API returned {response.status_code} for {response.request.url}: {message}")
        return response

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if not url.startswith("http"):
            url = f"{BASE_URL}{url}"
        try:
            response = httpx.request(method, url, headers=self._headers, timeout=self._timeout, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubError(f"Could not reach GitHub ({method} {url}): {exc}") from exc
        return self._check(response)

    def _get(self, path: str, params: dict | None = None) -> httpx.Response:
        return self._request("GET", path, params=params or {})

    @staticmethod
    def _json(response: httpx.Response):
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError(f"GitHub returned invalid JSON for {response.request.url}") from exc

    def _post(self, path: str, body: dict) -> dict:
        return self._json(self._request("POST", path, json=body))

    def _paginate(self, path: str, params: dict | None = None) -> Iterator[dict]:
        """Yield items from every page, following the Link rel="next" header."""
        response = self._get(path, params)
        while True:
            page = self._json(response)
            if not isinstance(page, list):
                raise GitHubError(f"Expected a list from {path}, got {type(page).__name__}")
            yield from page
            next_url = response.links.get("next", {}).get("url")
            if not next_url:
                return
            # next_url already carries the query string
            response = self._request("GET", next_url)

    # ------------------------------------------------------------------
    # REST
    # ------------------------------------------------------------------

    def list_open_issues(self, repository: Repository, label: str) -> Iterator[dict]:
        params = {"state": "open", "labels": label, "per_page": "100"}
        yield from self._paginate(f"/repos/{repository.owner}/{repository.name}/issues", params)

    def create_issue(self, repository: Repository, title: str, body: str, labels: list[str]) -> dict:
        return self._post(
            f"/repos/{repository.owner}/{repository.name}/issues",
            {"title": title, "body": body, "labels": labels},
        )

    def get_authenticated_user(self) -> tuple[dict, list[str]]:
        """Return the /user payload and the token's OAuth scopes (empty for fine-grained tokens)."""
        response = self._get("/user")
        raw_scopes = response.headers.get("X-OAuth-Scopes", "")
        scopes = [s.strip() for s in raw_scopes.split(",") if s.strip()]
        return self._json(response), scopes

    def get_repository(self, repository: Repository) -> dict:
        return self._json(self._get(f"/repos/{repository.owner}/{repository.name}"))

    # ------------------------------------------------------------------
    # GraphQL
    # ------------------------------------------------------------------

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        data = self._post(GRAPHQL_URL, {"query": query, "variables": variables or {}})
        if not isinstance(data, dict):
            raise GitHubError(f"Expected an object from GraphQL, got {type(data).__name__}")
        if data.get("errors"):
            errors = data["errors"] if isinstance(data["errors"], list) else [data["errors"]]
            messages = "; ".join(str(e.get("message", e) if isinstance(e, dict) else e) for e in errors)
            raise GitHubError(f"GitHub GraphQL error: {messages}")
        if not isinstance(data.get("data"), dict):
            raise GitHubError("GitHub GraphQL response missing data")
        return data["data"]
