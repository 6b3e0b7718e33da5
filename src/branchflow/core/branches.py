"""Branch classification and naming rules."""

import re
from enum import Enum
from typing import Optional

from ..utils.errors import ProtectedBranchError

MAIN = "main"
DEVELOP = "develop"
STAGING = "staging"

PROTECTED_BRANCHES = (MAIN, DEVELOP, STAGING)

FEATURE_PREFIX = "feature/"
RELEASE_PREFIX = "release/"
HOTFIX_PREFIX = "hotfix/"


class BranchType(str, Enum):
    """Closed set of branch kinds the workflows understand."""
    MAIN = "main"
    DEVELOP = "develop"
    STAGING = "staging"
    FEATURE = "feature"
    RELEASE = "release"
    HOTFIX = "hotfix"
    UNKNOWN = "unknown"

    @property
    def is_trunk(self) -> bool:
        return self in (BranchType.MAIN, BranchType.DEVELOP, BranchType.STAGING)


_TRUNKS = {
    MAIN: BranchType.MAIN,
    DEVELOP: BranchType.DEVELOP,
    STAGING: BranchType.STAGING,
}

_PREFIXES = (
    (FEATURE_PREFIX, BranchType.FEATURE),
    (RELEASE_PREFIX, BranchType.RELEASE),
    (HOTFIX_PREFIX, BranchType.HOTFIX),
)

_BASES = {
    BranchType.FEATURE: DEVELOP,
    BranchType.RELEASE: MAIN,
    BranchType.HOTFIX: MAIN,
    BranchType.MAIN: MAIN,
    BranchType.DEVELOP: MAIN,
    BranchType.STAGING: MAIN,
    BranchType.UNKNOWN: MAIN,
}

_REPO_SLUG = re.compile(r"github\.com[:/]([^/\s]+/[^/\s]+?)(?:\.git)?/?$")


def classify(branch: str) -> BranchType:
    """Classify a branch name. Exact trunk names win over prefixes."""
    if branch in _TRUNKS:
        return _TRUNKS[branch]
    for prefix, branch_type in _PREFIXES:
        if branch.startswith(prefix):
            return branch_type
    return BranchType.UNKNOWN


def base_branch_for(branch_type: BranchType) -> str:
    """Return the branch a pull request from ``branch_type`` targets."""
    return _BASES[branch_type]


def is_protected(branch: str) -> bool:
    return branch in PROTECTED_BRANCHES


def assert_not_protected(branch: str, operation: str) -> None:
    if is_protected(branch):
        raise ProtectedBranchError(branch, operation)


def parse_repo_slug(remote_url: str) -> Optional[str]:
    """Extract ``owner/repo`` from a GitHub remote URL."""
    match = _REPO_SLUG.search(remote_url.strip())
    return match.group(1) if match else None


def kebab_case(text: str, max_length: Optional[int] = None) -> str:
    """Lower-case ``text`` and collapse non-alphanumeric runs into hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    if max_length:
        slug = slug[:max_length].rstrip("-")
    return slug
