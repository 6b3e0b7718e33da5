"""Core data models for branchflow."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

COMMIT_TYPES = {
    "feat": "A new feature for the user",
    "fix": "A bug fix",
    "chore": "Maintenance, dependencies, tooling",
    "docs": "Documentation only changes",
    "improve": "Improvement of existing functionality",
    "change": "Change of existing behaviour",
    "hotfix": "Urgent production fix",
}

CommitType = Literal["feat", "fix", "chore", "docs", "improve", "change", "hotfix"]

ISSUE_LABELS = ("Bug", "Feature", "Improvement", "Chore", "L10", "Research")


class Settings(BaseModel):
    """
    User configuration.

    Field names match the persisted JSON keys. A field left unset means
    the source did not specify it; ``linearEnabled`` defaults to True.
    """

    model_config = ConfigDict(extra="ignore")

    googleAiKey: Optional[str] = None
    githubToken: Optional[str] = None
    linearApiKey: Optional[str] = None
    linearEnabled: bool = True

    def to_dict(self):
        """Explicitly set fields only, ready for JSON."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class GitStatus(BaseModel):
    """Snapshot of the working tree. Stale after any mutating command."""

    staged: List[str] = Field(default_factory=list)
    unstaged: List[str] = Field(default_factory=list)
    untracked: List[str] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked)

    @property
    def has_staged(self) -> bool:
        return bool(self.staged)


class DiffStats(BaseModel):
    """Totals from the summary line of ``git diff --stat``."""

    file_count: int = 0
    insertions: int = 0
    deletions: int = 0

    @property
    def total_changes(self) -> int:
        return self.insertions + self.deletions


class CommitMessage(BaseModel):
    """A conventional commit message."""

    type: CommitType = Field(..., description="Type of change")
    scope: Optional[str] = Field(None, description="Optional area of the codebase")
    description: str = Field(..., min_length=1, description="Short imperative summary")

    def format(self) -> str:
        if self.scope:
            return f"{self.type}({self.scope}): {self.description}"
        return f"{self.type}: {self.description}"


class PRContent(BaseModel):
    """Pull request title and body."""

    title: str = Field(..., min_length=1, max_length=72, description="PR title")
    description: str = Field(..., min_length=1, description="Markdown body")
    linear_comment: Optional[str] = Field(
        None, description="Short comment for the linked Linear issue"
    )


class IssueContent(BaseModel):
    """Draft of a Linear issue."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    priority: int = Field(3, ge=0, le=4, description="0 none, 1 urgent ... 4 low")
    estimate: Optional[int] = Field(None, ge=0, le=6, description="0 none ... 6 XL")
    suggested_label: Optional[str] = None

    @field_validator("suggested_label", mode="before")
    @classmethod
    def drop_unknown_label(cls, value):
        if value not in ISSUE_LABELS:
            return None
        return value


class IssueUpdateComment(BaseModel):
    """Progress comment for an existing Linear issue."""

    comment: str = Field(..., min_length=1, max_length=500)


class IssueMetadata(BaseModel):
    """Metadata confirmed by the user before creating an issue."""

    priority: int = Field(3, ge=0, le=4)
    estimate: Optional[int] = Field(None, ge=0, le=6)
    label_ids: List[str] = Field(default_factory=list)


class IssueLabel(BaseModel):
    id: str
    name: str
    color: Optional[str] = None


class CreatedIssue(BaseModel):
    id: str
    identifier: str
    title: str
    description: Optional[str] = None
    url: str
