"""Shared test fixtures."""

from pathlib import Path

import pytest

import todo2issue.settings as settings_module
from todo2issue.models import Annotation
from todo2issue.settings import Repository, TodoSettings

REPO = Repository("octo", "widgets")

_ENV_VARS = ("GITHUB_TOKEN", "GITHUB_REPOSITORY", "PROJECT_NUMBER", "REQUEST_DELAY")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """CI runners export GITHUB_REPOSITORY and friends; keep tests hermetic."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


def make_settings(**kwargs) -> TodoSettings:
    defaults = {"github_token": "ghp_test", "github_repository": "octo/widgets", "request_delay": 0}
    defaults.update(kwargs)
    return TodoSettings(**defaults)  # type: ignore[arg-type]


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


@pytest.fixture
def auth_annotation() -> Annotation:
    return Annotation(source_path="a.txt", text="fix auth", line_number=3)


@pytest.fixture
def example_tree(tmp_path: Path) -> Path:
    """a.txt and b.txt carry the same TODO text in different comment styles."""
    return write_tree(
        tmp_path,
        {
            "a.txt": "first\nsecond\n// TODO: fix auth\n",
            "b.txt": "# TODO: fix auth\n",
        },
    )
