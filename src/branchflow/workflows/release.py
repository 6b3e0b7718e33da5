"""Release branch workflows."""

import re
from datetime import date
from typing import Iterable, Optional

from .base import Workflow
from .pr import (
    PullRequestDraft, create_pull_request, draft_with_fallback,
    handle_uncommitted_changes, push_branch_if_needed, restore_stash_if_needed, show_changes
)
from ..core.branches import DEVELOP, MAIN, RELEASE_PREFIX, STAGING, BranchType
from ..utils.logger import Logger

_RELEASE = re.compile(r"release/(\d{8})\.(\d+)$")


def today_tag(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime("%Y%m%d")


def next_release_increment(branches: Iterable[str], release_date: str) -> int:
    """One more than the highest ``release/{date}.N`` among ``branches``."""
    increments = [
        int(match.group(2))
        for match in (_RELEASE.search(name.strip()) for name in branches)
        if match and match.group(1) == release_date
    ]
    return max(increments) + 1 if increments else 1


def _validate_date(value: str) -> Optional[str]:
    if not re.fullmatch(r"\d{8}", value):
        return "Invalid format. Use YYYYMMDD"
    return None


class ReleaseStartWorkflow(Workflow):
    """Cut ``release/{YYYYMMDD}.{n}`` from develop."""

    name = "release start"

    def steps(self):
        return [self.switch_to_develop, self.create_branch]

    def switch_to_develop(self):
        Logger.start("Starting new release...")
        current = self.git.current_branch()
        if current != DEVELOP:
            Logger.warn(f"You're currently on: {current}")
            if not self.prompter.confirm(f"Switch to {DEVELOP} first?", default=True):
                self.fail(f"Release should branch from {DEVELOP}")
        self.switch_to_trunk(DEVELOP)

    def create_branch(self):
        release_date = self.prompter.text(
            "Release date (YYYYMMDD)",
            default=today_tag(),
            validate=_validate_date
        )
        if not self.runner.run_with_status("git fetch origin --prune", "Fetching remote branches..."):
            Logger.warn("Failed to fetch remote branches. The release number may be stale.")
        increment = next_release_increment(self.git.remote_branches(), release_date)
        branch = f"{RELEASE_PREFIX}{release_date}.{increment}"
        self.create_and_push(branch, "release")
        Logger.info("Next steps:")
        Logger.info("1. Test on staging: branchflow release stage")
        Logger.info("2. When ready: branchflow release finish")


class ReleaseStageWorkflow(Workflow):
    """Force the release tip onto the ephemeral staging branch."""

    name = "release stage"

    def steps(self):
        return [self.push_to_staging]

    def push_to_staging(self):
        branch = self.require_branch_type(BranchType.RELEASE)
        Logger.note(f"Pushing {branch} to {STAGING}...")
        # staging is rebuilt from each release, so overwriting it is expected
        if not self.runner.run_with_status(
            f"git push -u origin {branch}:{STAGING} --force",
            f"Pushing release to {STAGING}..."
        ):
            self.fail(f"Failed to push to {STAGING}")
        Logger.info("Staging deployment is in progress...")


class ReleaseFinishWorkflow(Workflow):
    """Open the release pull request into main."""

    name = "release finish"

    def __init__(self, ctx, token: str):
        super().__init__(ctx)
        self.token = token
        self.draft: Optional[PullRequestDraft] = None
        self.stashed = False

    def steps(self):
        return [self.check_branch, self.prepare, self.compose, self.open_pull_request]

    def check_branch(self):
        Logger.start("Finishing release...")
        branch = self.require_branch_type(BranchType.RELEASE)
        Logger.note(f"Current branch: {branch}")
        Logger.note(f"Base branch: {MAIN}")

    def prepare(self):
        self.stashed = handle_uncommitted_changes(self.ctx)
        push_branch_if_needed(self.ctx, self.branch)
        if not self.runner.run_with_status(f"git fetch origin {MAIN}", f"Fetching latest {MAIN}..."):
            Logger.warn("Failed to fetch latest changes")
        show_changes(self.ctx, MAIN, title="Release Changes")

    def compose(self):
        hint = self.prompter.text("Summary of release (optional)", default="")
        version = self.branch[len(RELEASE_PREFIX):]
        self.draft = draft_with_fallback(
            self.ctx, self.branch, MAIN, hint,
            PullRequestDraft(f"Release {version}", "Release to production")
        )

    def open_pull_request(self):
        url = create_pull_request(self.ctx, self.token, self.draft, MAIN)
        restore_stash_if_needed(self.ctx, self.stashed)
        if not url:
            self.fail("Failed to create release PR.")
        Logger.success("Release PR created and ready for merge")
