"""Shared pydantic models — the contract between the pipeline stages and main.py."""

from pydantic import BaseModel, ConfigDict

from todo2issue.fingerprint import fingerprint


class Annotation(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_path: str  # repo-relative, forward slashes
    text: str  # trimmed comment payload
    line_number: int  # informational only, not part of the identity

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.source_path, self.text)


class CreatedRecord(BaseModel):
    """Returned by create_record — minimal, just what linking and reporting need."""

    model_config = ConfigDict(frozen=True)

    number: int
    node_id: str  # GraphQL content id, used for project linking
    title: str
    url: str


class ProjectRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    number: int
    owner_kind: str  # "user" | "organization"
    title: str | None = None


class RunSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    found: int
    created: int = 0
    skipped: int = 0
    failed: int = 0
    linked: int = 0
    link_failed: int = 0
    project_id: str | None = None
    dry_run: bool = False


class CheckResult(BaseModel):
    """One line of the check-token report."""

    model_config = ConfigDict(frozen=True)

    name: str
    ok: bool
    detail: str = ""
