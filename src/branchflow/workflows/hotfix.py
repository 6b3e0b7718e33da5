"""Hotfix branch workflows."""

from typing import Optional

from .base import Workflow
from .feature import validate_slug
from .pr import (
    PullRequestDraft, cleanup_branch, create_pull_request, draft_with_fallback,
    handle_uncommitted_changes, push_branch_if_needed, restore_stash_if_needed, show_changes
)
from ..core.branches import DEVELOP, HOTFIX_PREFIX, MAIN, BranchType, kebab_case
from ..utils.logger import Logger


def backport_draft(draft: PullRequestDraft) -> PullRequestDraft:
    return PullRequestDraft(
        f"Backport: {draft.title}",
        f"Backport of hotfix to {DEVELOP}\n\n{draft.description}"
    )


class HotfixStartWorkflow(Workflow):
    """Branch ``hotfix/...`` off main."""

    name = "hotfix start"

    def __init__(self, ctx):
        super().__init__(ctx)
        self.stashed = False

    def steps(self):
        return [self.set_aside, self.update_main, self.create_branch, self.restore]

    def set_aside(self):
        Logger.start("Starting hotfix...")
        self.stashed = self.set_aside_changes()

    def update_main(self):
        self.switch_to_trunk(MAIN)

    def create_branch(self):
        slug = self.prompter.text(
            "Hotfix branch name (short identifier, e.g. 'fix-login-bug')",
            validate=validate_slug
        )
        branch = f"{HOTFIX_PREFIX}{kebab_case(slug)}"
        Logger.note(f"Branch name will be: {branch}")
        self.create_and_push(branch, "hotfix")

    def restore(self):
        if self.stashed:
            self.pop_stash()


class HotfixFinishWorkflow(Workflow):
    """Open the hotfix pull request into main, optionally backporting to develop."""

    name = "hotfix finish"

    def __init__(self, ctx, token: str):
        super().__init__(ctx)
        self.token = token
        self.draft: Optional[PullRequestDraft] = None
        self.stashed = False

    def steps(self):
        return [self.check_branch, self.prepare, self.compose, self.open_pull_requests, self.cleanup]

    def check_branch(self):
        Logger.start("Finishing hotfix...")
        branch = self.require_branch_type(BranchType.HOTFIX)
        Logger.note(f"Current branch: {branch}")
        Logger.note(f"Base branch: {MAIN}")

    def prepare(self):
        self.stashed = handle_uncommitted_changes(self.ctx)
        current = self.git.current_branch()
        if current != self.branch:
            Logger.note(f"Branch was renamed to: {current}")
            self.branch = current

        push_branch_if_needed(self.ctx, self.branch)
        if not self.runner.run_with_status(
            f"git fetch origin {MAIN} {DEVELOP}", "Fetching latest main and develop..."
        ):
            Logger.warn("Failed to fetch latest changes")
        show_changes(self.ctx, MAIN, title="Hotfix Changes")

    def compose(self):
        hint = self.prompter.text("Describe the fix (optional)", default="")
        slug = self.branch[len(HOTFIX_PREFIX):]
        self.draft = draft_with_fallback(
            self.ctx, self.branch, MAIN, hint,
            PullRequestDraft(f"Hotfix: {slug}", "Urgent fix for production")
        )

    def open_pull_requests(self):
        main_url = create_pull_request(self.ctx, self.token, self.draft, MAIN)
        if not main_url:
            restore_stash_if_needed(self.ctx, self.stashed)
            self.fail(f"Failed to create PR to {MAIN}. Branch cleanup skipped.")
        Logger.success(f"Main PR created: {main_url}")

        if self.prompter.confirm(f"Create PR to {DEVELOP} (backport fix)?", default=True):
            develop_url = create_pull_request(
                self.ctx, self.token, backport_draft(self.draft), DEVELOP
            )
            if develop_url:
                Logger.success(f"Develop PR created: {develop_url}")

    def cleanup(self):
        restore_stash_if_needed(self.ctx, self.stashed)
        cleanup_branch(self.ctx, self.branch, DEVELOP)
