"""Feature branch workflows."""

from typing import Optional

from .base import Workflow
from .pr import (
    PullRequestDraft, cleanup_branch, create_pull_request, draft_with_review,
    handle_uncommitted_changes, push_branch_if_needed, restore_stash_if_needed, show_changes
)
from ..core.branches import DEVELOP, FEATURE_PREFIX, BranchType, kebab_case
from ..core.setup import ensure_develop_up_to_date
from ..tracker.issues import ISSUE_ID_PATTERN, clean_title, detect_issue
from ..utils.logger import Logger

MAX_SLUG = 50


def feature_branch_name(slug: str, issue_id: Optional[str] = None) -> str:
    """``feature/{id-}{slug}`` in kebab case."""
    name = kebab_case(slug)
    if issue_id:
        name = f"{issue_id.lower()}-{name}"
    return f"{FEATURE_PREFIX}{name}"


def validate_slug(value: str) -> Optional[str]:
    if not value:
        return "Branch name cannot be empty"
    if len(value) > MAX_SLUG:
        return f"Branch name must be {MAX_SLUG} characters or less"
    if not kebab_case(value):
        return "Branch name needs at least one letter or digit"
    return None


def _validate_issue_id(value: str) -> Optional[str]:
    if value and not ISSUE_ID_PATTERN.match(value):
        return "Invalid format. Use DEV-123"
    return None


class FeatureStartWorkflow(Workflow):
    """Branch ``feature/...`` off an up-to-date develop."""

    name = "feature start"

    def __init__(self, ctx):
        super().__init__(ctx)
        self.stashed = False

    def steps(self):
        return [self.set_aside, self.update_develop, self.restore, self.create_branch]

    def set_aside(self):
        Logger.start("Starting new feature...")
        self.stashed = self.set_aside_changes()

    def update_develop(self):
        ensure_develop_up_to_date(self.git, self.runner, self.prompter)
        self.switch_to_trunk(DEVELOP)

    def restore(self):
        if self.stashed:
            self.pop_stash()

    def create_branch(self):
        issue_id = None
        if self.ctx.linear_enabled:
            issue_id = self.prompter.text(
                "Linear issue ID (e.g. DEV-123, blank to skip)",
                default="",
                validate=_validate_issue_id
            ) or None
        else:
            Logger.note("Linear integration is disabled. Skipping Linear issue ID.")

        slug = self.prompter.text(
            "Feature branch name (short identifier, e.g. 'add-user-auth')",
            validate=validate_slug
        )
        branch = feature_branch_name(slug, issue_id)
        Logger.note(f"Branch name will be: {branch}")
        self.create_and_push(branch, "feature")


class FeatureFinishWorkflow(Workflow):
    """Open a pull request from the current feature branch into develop."""

    name = "feature finish"

    def __init__(self, ctx, token: str):
        super().__init__(ctx)
        self.token = token
        self.draft: Optional[PullRequestDraft] = None
        self.stashed = False
        self.pr_url: Optional[str] = None

    def steps(self):
        return [
            self.check_branch,
            self.prepare,
            self.compose,
            self.open_pull_request,
            self.link_issue,
            self.cleanup,
        ]

    def check_branch(self):
        Logger.start("Finishing feature...")
        branch = self.require_branch_type(BranchType.FEATURE)
        Logger.note(f"Current branch: {branch}")
        Logger.note(f"Base branch: {DEVELOP}")

    def prepare(self):
        self.stashed = handle_uncommitted_changes(self.ctx)

        # The commit step may have renamed the branch after a new issue
        current = self.git.current_branch()
        if current != self.branch:
            Logger.note(f"Branch was renamed to: {current}")
            self.branch = current

        push_branch_if_needed(self.ctx, self.branch)
        self.runner.run_with_status(f"git fetch origin {DEVELOP}", f"Fetching latest {DEVELOP}...")
        show_changes(self.ctx, DEVELOP)

    def compose(self):
        hint = self.prompter.text("Briefly describe your changes (optional)", default="")
        self.draft = draft_with_review(self.ctx, self.branch, DEVELOP, hint)

    def open_pull_request(self):
        self.pr_url = create_pull_request(self.ctx, self.token, self.draft, DEVELOP)
        if not self.pr_url:
            restore_stash_if_needed(self.ctx, self.stashed)
            self.fail("Failed to create PR. Branch cleanup skipped.")

    def link_issue(self):
        issue_id = detect_issue(self.branch)
        tracker = self.ctx.tracker
        if not issue_id or tracker is None:
            return
        if tracker.link_issue_to_pr(
            issue_id,
            clean_title(self.draft.title),
            self.pr_url,
            custom_comment=self.draft.linear_comment
        ):
            Logger.success(f"Linked Linear issue {issue_id} to PR")

    def cleanup(self):
        restore_stash_if_needed(self.ctx, self.stashed)
        cleanup_branch(self.ctx, self.branch, DEVELOP)
