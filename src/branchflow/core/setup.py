"""Trunk branch bootstrap."""

import shlex

from .branches import DEVELOP, MAIN, PROTECTED_BRANCHES, STAGING
from .git import GitRepository
from .shell import CommandRunner
from ..ui.prompts import Prompter
from ..utils.errors import WorkflowError
from ..utils.logger import Logger

# Branch each trunk is created from, in order of preference
_TRUNK_SOURCES = {
    MAIN: (),
    DEVELOP: (MAIN,),
    STAGING: (DEVELOP, MAIN),
}


def ensure_required_branches(git: GitRepository, runner: CommandRunner, prompter: Prompter) -> bool:
    """Create any missing trunk branch locally.

    Returns False when branches could not be created yet (no commits).
    Raises WorkflowError if the user declines.
    """
    missing = [b for b in PROTECTED_BRANCHES if not git.branch_exists_local(b)]
    if not missing:
        return True

    Logger.warn(f"Missing required branches: {', '.join(missing)}")
    if not prompter.confirm("Would you like to create the missing branches?", default=True):
        raise WorkflowError(
            "branchflow needs main, develop and staging branches. "
            "Create them manually or accept the prompt next time."
        )

    if not git.has_commits():
        Logger.warn("No commits found. Branches can only be created after the first commit.")
        Logger.info("Create an initial commit, then run branchflow again.")
        return False

    original = runner.run_capture("git branch --show-current") or MAIN

    for branch in missing:
        source = next((s for s in _TRUNK_SOURCES[branch] if git.branch_exists_local(s)), None)
        if source:
            runner.run_with_status(f"git checkout {source}", f"Switching to {source}...")
        runner.run_with_status(f"git checkout -b {branch}", f"Creating {branch} branch...")
        if git.branch_exists_remote(branch):
            runner.run_with_status(
                f"git branch --set-upstream-to=origin/{branch} {branch}",
                "Setting upstream..."
            )

    if git.branch_exists_local(original):
        runner.run_with_status(f"git checkout {shlex.quote(original)}", f"Returning to {original}...")
    elif git.branch_exists_local(MAIN):
        runner.run_with_status(f"git checkout {MAIN}", f"Switching to {MAIN}...")

    Logger.success("Required branches created")
    return True


def ensure_develop_up_to_date(git: GitRepository, runner: CommandRunner, prompter: Prompter) -> bool:
    """Offer to merge origin/main into develop when develop is behind.

    Returns False only when the user skips the update.
    """
    behind = git.develop_behind_main()
    if not behind:
        return True

    Logger.warn(f"Develop is {behind} commit(s) behind main")
    if not prompter.confirm("Update develop with the latest from main?", default=True):
        Logger.info("Skipping develop update. You may want to update it later.")
        return False

    original = runner.run_capture("git branch --show-current") or MAIN
    runner.run_with_status(f"git checkout {DEVELOP}", f"Switching to {DEVELOP}...")
    runner.run_with_status(f"git fetch origin {MAIN}", f"Fetching latest {MAIN}...")
    merged = runner.run_with_status(f"git merge origin/{MAIN}", f"Merging {MAIN} into {DEVELOP}...")

    if original != DEVELOP and git.branch_exists_local(original):
        runner.run_with_status(f"git checkout {shlex.quote(original)}", f"Returning to {original}...")

    if merged:
        Logger.success("Develop is now up to date with main")
    return True
