"""Settings resolution: environment / .env first, then the project file."""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import NamedTuple

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path(".todo2issue.toml")

# Keys the project file may set. The token never lives in the repo.
FILE_KEYS = ("github_repository", "project_number", "request_delay")


class Repository(NamedTuple):
    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


class TodoSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: SecretStr | None = None
    github_repository: str | None = None  # owner/repo
    project_number: int = 0  # 0 disables project linking
    request_delay: float = 1.0  # seconds between processed annotations

    @property
    def repository(self) -> Repository:
        return parse_repository(self.github_repository or "")


def parse_repository(value: str) -> Repository:
    owner, sep, name = value.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Expected owner/repo, got '{value}'")
    return Repository(owner, name)


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load .todo2issue.toml from the working directory, empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _file_defaults(config: Mapping) -> dict:
    # unwrap() turns tomlkit items into plain str/int/float for pydantic
    plain = config.unwrap() if isinstance(config, tomlkit.TOMLDocument) else dict(config)
    return {k: plain[k] for k in FILE_KEYS if k in plain}


def get_settings(require_credentials: bool = True) -> TodoSettings:
    """Resolve settings and validate what the sync needs.

    Precedence (highest to lowest):
    1. GITHUB_TOKEN / GITHUB_REPOSITORY / PROJECT_NUMBER / REQUEST_DELAY env vars
    2. The same keys in .env in cwd
    3. .todo2issue.toml in cwd (non-secret keys only)
    4. Field defaults
    """
    from_env = TodoSettings()
    file_defaults = {
        k: v for k, v in _file_defaults(_load_toml()).items() if k not in from_env.model_fields_set
    }
    settings = TodoSettings(**file_defaults) if file_defaults else from_env

    if not require_credentials:
        return settings

    if not settings.github_token:
        typer.echo("Missing GitHub credentials. Set GITHUB_TOKEN in the environment or .env.")
        raise typer.Exit(1)
    if not settings.github_repository:
        typer.echo(f"Missing repository. Set GITHUB_REPOSITORY (owner/repo) or github_repository in {CONFIG_PATH}.")
        raise typer.Exit(1)
    try:
        settings.repository
    except ValueError as exc:
        typer.echo(f"Invalid GITHUB_REPOSITORY: {exc}")
        raise typer.Exit(1) from None

    return settings
