"""Issue identifier helpers for branch names and titles."""

import re
from typing import Optional

PRIORITY_NAMES = ("No priority", "Urgent", "High", "Medium", "Low")
ESTIMATE_NAMES = ("No estimate", "-", "XS", "S", "M", "L", "XL")

ISSUE_ID_PATTERN = re.compile(r"^[A-Z]+-\d+$")

_BRANCH_ISSUE = re.compile(r"/([a-zA-Z]+-\d+)-")
_CONVENTIONAL_PREFIX = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|perf|ci|build|revert)(\([^)]+\))?: ",
    re.IGNORECASE
)


def detect_issue(branch: str) -> Optional[str]:
    """Return the upper-cased issue identifier embedded in ``branch``.

    ``aaron/dev-123-login`` gives ``DEV-123``; trunk names give None.
    """
    match = _BRANCH_ISSUE.search(branch)
    return match.group(1).upper() if match else None


def has_issue_pattern(branch: str) -> bool:
    return detect_issue(branch) is not None


def clean_title(title: str) -> str:
    """Strip conventional-commit prefixes such as ``feat(auth): ``."""
    cleaned = _CONVENTIONAL_PREFIX.sub("", title, count=1)
    while cleaned != title:
        title = cleaned
        cleaned = _CONVENTIONAL_PREFIX.sub("", title, count=1)
    return cleaned


def generate_branch_name(identifier: str, current_branch: str) -> str:
    """Build ``{author}/{identifier}-{description}`` from the current branch."""
    author = current_branch.split("/", 1)[0] if "/" in current_branch else "feature"
    description = current_branch.rsplit("/", 1)[-1]
    description = re.sub(r"[^a-zA-Z0-9-]", "-", description)
    description = re.sub(r"-+", "-", description).strip("-") or "work"
    return f"{author}/{identifier.lower()}-{description}"


def issue_number(identifier: str) -> Optional[int]:
    """Numeric part of ``DEV-123``."""
    _, _, number = identifier.rpartition("-")
    try:
        return int(number)
    except ValueError:
        return None


def issue_team_key(identifier: str) -> str:
    return identifier.rpartition("-")[0].upper()
