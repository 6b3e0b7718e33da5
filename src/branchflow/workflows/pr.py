"""Steps shared by the finish workflows that open pull requests."""

import re
import shlex
import shutil
from dataclasses import dataclass
from typing import Optional

from .base import Outcome, StopWorkflow
from .commit import CommitWorkflow
from ..core.branches import DEVELOP, is_protected
from ..core.context import FlowContext
from ..storage.filesystem import write_temp_text
from ..utils.logger import Logger, console

STASH_FOR_PR = "branchflow: stash for pull request"
MAX_TITLE = 72

_PR_URL = re.compile(r"(https://github\.com/\S+)")


@dataclass
class PullRequestDraft:
    title: str
    description: str
    linear_comment: Optional[str] = None


def _validate_title(value: str) -> Optional[str]:
    if not value:
        return "Title cannot be empty"
    if len(value) > MAX_TITLE:
        return f"Title must be {MAX_TITLE} characters or less"
    return None


def handle_uncommitted_changes(ctx: FlowContext) -> bool:
    """Commit, stash or abort when the tree is dirty. Returns True if stashed."""
    Logger.start("Checking for uncommitted changes...")
    porcelain = ctx.runner.run_capture("git status --porcelain")
    if porcelain is None:
        raise StopWorkflow(Outcome.FAILED, "Failed to check git status")
    if not porcelain:
        Logger.success("No uncommitted changes")
        return False

    Logger.warn("You have uncommitted changes!")
    Logger.box(porcelain)
    action = ctx.prompter.select(
        "What would you like to do?",
        [
            ("commit", "Commit changes first"),
            ("stash", "Stash changes and continue"),
            ("abort", "Abort PR creation"),
        ]
    )

    if action == "commit":
        outcome = CommitWorkflow(ctx).run()
        if outcome in (Outcome.FAILED, Outcome.CANCELLED):
            raise StopWorkflow(outcome, "PR creation stopped because the commit did not complete.")
        return False

    if action == "stash":
        if not ctx.runner.run_with_status(
            f"git stash push -m {shlex.quote(STASH_FOR_PR)}", "Stashing changes..."
        ):
            raise StopWorkflow(Outcome.FAILED, "Failed to stash changes")
        return True

    raise StopWorkflow(Outcome.CANCELLED, "PR creation aborted.")


def push_branch_if_needed(ctx: FlowContext, branch: str) -> None:
    """Make sure origin has every local commit of ``branch``."""
    Logger.start("Checking remote status...")
    quoted = shlex.quote(branch)

    if not ctx.git.branch_exists_remote(branch):
        Logger.warn("Branch not found on remote")
        if not ctx.prompter.confirm("Push branch to origin?", default=True):
            raise StopWorkflow(Outcome.FAILED, "Cannot create PR without pushing branch")
        if not ctx.runner.run_with_status(f"git push -u origin {quoted}", "Pushing branch to origin..."):
            raise StopWorkflow(Outcome.FAILED, "Failed to push branch")
        return

    counts = ctx.git.ahead_behind(branch)
    if counts is None:
        if ctx.git.has_upstream():
            Logger.success("Branch is tracking remote")
        else:
            Logger.note("Branch appears to be pushed (may have been renamed)")
        return

    _, ahead = counts
    if ahead == 0:
        Logger.success("Branch is up to date with remote")
        return

    Logger.warn(f"Local branch is {ahead} commit(s) ahead of remote")
    if not ctx.prompter.confirm("Push commits to origin?", default=True):
        raise StopWorkflow(Outcome.FAILED, "Cannot create PR without pushing all commits")
    if not ctx.runner.run_with_status(f"git push origin {quoted}", "Pushing commits to origin..."):
        raise StopWorkflow(Outcome.FAILED, "Failed to push commits")


def show_changes(ctx: FlowContext, base: str, title: str = "Changes Summary") -> int:
    """Show commits and diffstat against ``origin/base``; returns the commit count."""
    count = ctx.git.commit_count(base)
    if count == 0:
        raise StopWorkflow(Outcome.NOTHING_TO_DO, "No commits to create PR from.")
    diff_summary = ctx.runner.run_capture_or_raise(
        f"git diff origin/{base}..HEAD --stat", "Failed to get diff summary"
    )
    Logger.box(f"Commits: {count}\n\n{diff_summary}", title=title)
    return count


def _show_draft(draft: PullRequestDraft) -> None:
    Logger.box(draft.title, title="PR Title")
    console.rule("PR Description")
    console.print(draft.description)
    console.rule()


def draft_with_review(ctx: FlowContext, branch: str, base: str, hint: str) -> PullRequestDraft:
    """Generate PR text and let the user create, edit or cancel; manual entry on failure."""
    generated = ctx.generator.generate_pr_content(branch, base, hint) if ctx.generator else None

    if generated is None:
        if not ctx.prompter.confirm("Enter PR details manually?", default=True):
            raise StopWorkflow(Outcome.FAILED, "No PR details.")
        title = ctx.prompter.text("PR title", validate=_validate_title)
        description = ctx.prompter.text("PR description", default="")
        return PullRequestDraft(title, description or title)

    draft = PullRequestDraft(generated.title, generated.description, generated.linear_comment)
    _show_draft(draft)
    action = ctx.prompter.select(
        "What would you like to do?",
        [
            ("create", "Create PR"),
            ("edit", "Edit the details"),
            ("cancel", "Cancel"),
        ]
    )
    if action == "cancel":
        raise StopWorkflow(Outcome.CANCELLED, "PR creation cancelled.")
    if action == "edit":
        draft.title = ctx.prompter.text("PR title", default=draft.title, validate=_validate_title)
        draft.description = ctx.prompter.text("PR description", default=draft.description)
    return draft


def draft_with_fallback(
    ctx: FlowContext,
    branch: str,
    base: str,
    hint: str,
    fallback: PullRequestDraft
) -> PullRequestDraft:
    """Generate PR text, using ``fallback`` when generation fails; confirm before use."""
    generated = ctx.generator.generate_pr_content(branch, base, hint) if ctx.generator else None
    if generated is None:
        Logger.note(f"Using default PR title: {fallback.title}")
        return fallback

    draft = PullRequestDraft(generated.title, generated.description)
    _show_draft(draft)
    if not ctx.prompter.confirm("Proceed?", default=True):
        raise StopWorkflow(Outcome.CANCELLED, "PR creation cancelled.")
    return draft


def create_pull_request(
    ctx: FlowContext,
    token: str,
    draft: PullRequestDraft,
    base: str
) -> Optional[str]:
    """Open a PR with the gh CLI and return its URL."""
    if shutil.which("gh") is None:
        raise StopWorkflow(
            Outcome.FAILED,
            "GitHub CLI (gh) is not installed! Install it from https://cli.github.com"
        )

    env = {"GH_TOKEN": token}
    body_file = write_temp_text(draft.description, suffix=".md")
    parts = ["gh pr create"]
    slug = ctx.git.repo_slug()
    if slug:
        parts.append(f"--repo {shlex.quote(slug)}")
    parts += [
        f"--base {shlex.quote(base)}",
        f"--title {shlex.quote(draft.title)}",
        f"--body-file {shlex.quote(str(body_file))}",
    ]

    Logger.start("Creating pull request...")
    try:
        result = ctx.runner.run_checked(" ".join(parts), env=env)
    finally:
        body_file.unlink()

    if not result.ok:
        Logger.fail("Failed to create pull request")
        if result.output:
            Logger.box(result.output, style="red")
        return None

    Logger.success("Pull request created successfully")
    match = _PR_URL.search(result.stdout)
    if not match:
        return None

    url = match.group(1)
    Logger.box(url, title="PR Created!")
    if ctx.prompter.confirm("Open PR in browser?", default=True):
        ctx.runner.run_checked(f"gh pr view --web {shlex.quote(url)}", env=env)
    return url


def restore_stash_if_needed(ctx: FlowContext, stashed: bool) -> None:
    """Pop the stash made by ``handle_uncommitted_changes``.

    Only pops when this run stashed and its entry is still stash@{0}.
    """
    if not stashed:
        return
    stashes = (ctx.runner.run_capture("git stash list") or "").splitlines()
    if not stashes or not stashes[0].endswith(f": {STASH_FOR_PR}"):
        Logger.warn("Your stashed changes are no longer on top of the stash. Restore them with: git stash list")
        return
    if not ctx.prompter.confirm("Restore your stashed changes?", default=True):
        return
    if ctx.runner.run_with_status("git stash pop", "Restoring stashed changes..."):
        return
    Logger.warn("Failed to restore stash automatically. Run: git stash pop")


def cleanup_branch(ctx: FlowContext, branch: str, trunk: str = DEVELOP) -> None:
    """Return to ``trunk`` and offer to delete the finished local branch."""
    if not ctx.runner.run_with_status(f"git checkout {trunk}", f"Switching to {trunk}..."):
        Logger.warn(f"Failed to switch to {trunk}. Please switch manually.")
        return
    ctx.runner.run_with_status(f"git pull origin {trunk}", f"Pulling latest {trunk}...")

    if is_protected(branch):
        return
    if not ctx.prompter.confirm(f'Delete local branch "{branch}"?', default=True):
        Logger.note(f"Local branch kept. Delete it later with: git branch -d {branch}")
        return
    if not ctx.runner.run_with_status(
        f"git branch -d {shlex.quote(branch)}", f"Deleting local branch {branch}..."
    ):
        Logger.warn(
            f"Failed to delete branch. It may have unmerged changes. "
            f"Use 'git branch -D {branch}' to force delete."
        )
