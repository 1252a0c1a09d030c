"""Tests for GitHubClient using pytest-httpx."""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from conftest import REPO, make_settings
from todo2issue.github import BASE_URL, GRAPHQL_URL, GitHubClient, GitHubError

ISSUES_URL = f"{BASE_URL}/repos/octo/widgets/issues"
LIST_URL = f"{ISSUES_URL}?state=open&labels=todo&per_page=100"


def _client() -> GitHubClient:
    return GitHubClient("ghp_test")


class TestFromSettings:
    def test_uses_token(self) -> None:
        client = GitHubClient.from_settings(make_settings(github_token="ghp_mytoken"))
        assert client._token == "ghp_mytoken"

    def test_no_token_raises(self) -> None:
        with pytest.raises(GitHubError, match="No GitHub credentials"):
            GitHubClient.from_settings(make_settings(github_token=None))


class TestListOpenIssues:
    def test_single_page(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=LIST_URL, method="GET", json=[{"number": 1}, {"number": 2}])
        issues = list(_client().list_open_issues(REPO, "todo"))
        assert [i["number"] for i in issues] == [1, 2]

    def test_sends_auth_headers(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=LIST_URL, method="GET", json=[])
        list(_client().list_open_issues(REPO, "todo"))
        request = httpx_mock.get_requests()[0]
        assert request.headers["Authorization"] == "Bearer ghp_test"
        assert request.headers["Accept"] == "application/vnd.github+json"

    def test_follows_link_header(self, httpx_mock: HTTPXMock) -> None:
        page2 = f"{BASE_URL}/repositories/42/issues?state=open&labels=todo&per_page=100&page=2"
        page3 = f"{BASE_URL}/repositories/42/issues?state=open&labels=todo&per_page=100&page=3"
        httpx_mock.add_response(
            url=LIST_URL,
            json=[{"number": 1}],
            headers={"Link": f'<{page2}>; rel="next", <{page3}>; rel="last"'},
        )
        httpx_mock.add_response(
            url=page2,
            json=[{"number": 2}],
            headers={"Link": f'<{page3}>; rel="next", <{LIST_URL}>; rel="first"'},
        )
        httpx_mock.add_response(url=page3, json=[{"number": 3}], headers={"Link": f'<{LIST_URL}>; rel="first"'})

        issues = list(_client().list_open_issues(REPO, "todo"))
        assert [i["number"] for i in issues] == [1, 2, 3]
        assert len(httpx_mock.get_requests()) == 3

    def test_401_raises_with_message(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=LIST_URL, status_code=401, json={"message": "Bad credentials"})
        with pytest.raises(GitHubError, match="401"):
            list(_client().list_open_issues(REPO, "todo"))

    def test_server_error_includes_message(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=LIST_URL, status_code=404, json={"message": "Not Found"})
        with pytest.raises(GitHubError, match="404.*Not Found"):
            list(_client().list_open_issues(REPO, "todo"))

    def test_network_failure_raises_github_error(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=LIST_URL)
        with pytest.raises(GitHubError, match="Could not reach GitHub"):
            list(_client().list_open_issues(REPO, "todo"))

    def test_non_list_payload_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=LIST_URL, json={"message": "surprise"})
        with pytest.raises(GitHubError, match="Expected a list"):
            list(_client().list_open_issues(REPO, "todo"))


class TestCreateIssue:
    def test_posts_title_body_labels(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ISSUES_URL, method="POST", json={"number": 7, "node_id": "I_7"})
        node = _client().create_issue(REPO, title="TODO: x", body="body", labels=["engineering", "todo"])
        assert node["number"] == 7
        sent = json.loads(httpx_mock.get_requests()[0].content)
        assert sent == {"title": "TODO: x", "body": "body", "labels": ["engineering", "todo"]}

    def test_validation_error_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=ISSUES_URL, method="POST", status_code=422, json={"message": "Validation Failed"})
        with pytest.raises(GitHubError, match="422"):
            _client().create_issue(REPO, title="x", body="y", labels=[])


class TestGraphQL:
    def test_returns_data(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=GRAPHQL_URL, method="POST", json={"data": {"viewer": {"login": "octo"}}})
        assert _client().graphql("query { viewer { login } }") == {"viewer": {"login": "octo"}}

    def test_errors_raise(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=GRAPHQL_URL,
            method="POST",
            json={"data": {"user": None}, "errors": [{"message": "Could not resolve to a User with the login of 'x'."}]},
        )
        with pytest.raises(GitHubError, match="Could not resolve to a User"):
            _client().graphql("query { user(login: \"x\") { id } }")

    def test_missing_data_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=GRAPHQL_URL, method="POST", json={})
        with pytest.raises(GitHubError, match="missing data"):
            _client().graphql("query { viewer { login } }")

    def test_non_object_response_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=GRAPHQL_URL, method="POST", json=[{"message": "weird"}])
        with pytest.raises(GitHubError, match="Expected an object from GraphQL, got list"):
            _client().graphql("query { viewer { login } }")


class TestAuthenticatedUser:
    def test_parses_scopes_header(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            url=f"{BASE_URL}/user", json={"login": "octo"}, headers={"X-OAuth-Scopes": "repo, project, read:org"}
        )
        user, scopes = _client().get_authenticated_user()
        assert user["login"] == "octo"
        assert scopes == ["repo", "project", "read:org"]

    def test_missing_scopes_header(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}/user", json={"login": "octo"})
        _, scopes = _client().get_authenticated_user()
        assert scopes == []
