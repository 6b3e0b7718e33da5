"""Workflow skeleton: named steps ending in an outcome."""

import shlex
from enum import Enum
from typing import Callable, List, Optional

from ..core.branches import BranchType, classify
from ..core.context import FlowContext
from ..core.git import display_status
from ..utils.errors import CommandError, ProtectedBranchError, WorkflowError
from ..utils.logger import Logger

STASH_ON_START = "branchflow: temporary stash for branch start"


class Outcome(str, Enum):
    """How a workflow ended. The CLI turns this into an exit status."""
    COMPLETED = "completed"
    NOTHING_TO_DO = "nothing_to_do"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        return 1 if self is Outcome.FAILED else 0


class StopWorkflow(Exception):
    """Raised by a step to end the workflow early."""

    def __init__(self, outcome: Outcome, message: Optional[str] = None):
        super().__init__(message or outcome.value)
        self.outcome = outcome
        self.message = message


class Workflow:
    """Base class for interactive workflows.

    Subclasses list their steps in ``steps()``; ``run()`` executes them in
    order and never raises for expected failures.
    """

    name = "workflow"

    def __init__(self, ctx: FlowContext):
        self.ctx = ctx
        self.git = ctx.git
        self.runner = ctx.runner
        self.prompter = ctx.prompter
        self.branch: Optional[str] = None

    def steps(self) -> List[Callable[[], None]]:
        raise NotImplementedError

    def run(self) -> Outcome:
        try:
            for step in self.steps():
                Logger.debug(f"{self.name}: {step.__name__}")
                step()
        except StopWorkflow as stop:
            self._report(stop)
            return stop.outcome
        except (CommandError, WorkflowError, ProtectedBranchError) as e:
            Logger.fail(str(e))
            return Outcome.FAILED
        return Outcome.COMPLETED

    @staticmethod
    def _report(stop: StopWorkflow) -> None:
        if not stop.message:
            return
        if stop.outcome is Outcome.FAILED:
            Logger.fail(stop.message)
        elif stop.outcome is Outcome.NOTHING_TO_DO:
            Logger.warn(stop.message)
        else:
            Logger.note(stop.message)

    # -- step helpers -----------------------------------------------------

    def fail(self, message: str):
        raise StopWorkflow(Outcome.FAILED, message)

    def cancel(self, message: str = "Cancelled."):
        raise StopWorkflow(Outcome.CANCELLED, message)

    def nothing_to_do(self, message: str):
        raise StopWorkflow(Outcome.NOTHING_TO_DO, message)

    def require_branch_type(self, expected: BranchType) -> str:
        branch = self.git.current_branch()
        if classify(branch) is not expected:
            self.fail(f"You're not on a {expected.value} branch! Current: {branch}")
        self.branch = branch
        return branch

    def set_aside_changes(self) -> bool:
        """Stash or discard local changes before switching branches.

        Returns True when changes were stashed and must be popped later.
        """
        status = self.git.status()
        if status.is_clean:
            return False

        display_status(status)
        action = self.prompter.select(
            "You have uncommitted changes. What would you like to do?",
            [
                ("stash", "Stash changes and reapply after switching"),
                ("discard", "Discard all changes"),
                ("cancel", "Cancel"),
            ]
        )
        if action == "cancel":
            self.cancel()

        if action == "stash":
            if not self.runner.run_with_status(
                f"git stash push -u -m {shlex.quote(STASH_ON_START)}",
                "Stashing changes..."
            ):
                self.fail("Failed to stash changes")
            return True

        if not self.prompter.confirm(
            "Are you sure you want to discard all changes? This cannot be undone.",
            default=False
        ):
            self.cancel()
        self.runner.run_with_status("git reset --hard HEAD", "Discarding staged changes...")
        self.runner.run_with_status("git clean -fd", "Removing untracked files...")
        return False

    def switch_to_trunk(self, trunk: str) -> None:
        """Fetch, check out and pull ``trunk``; fetch and checkout failures end the workflow."""
        if not self.runner.run_with_status(f"git fetch origin {trunk}", f"Fetching latest {trunk}..."):
            self.fail(f"Failed to fetch {trunk}. Make sure the {trunk} branch exists.")
        if not self.runner.run_with_status(f"git checkout {trunk}", f"Switching to {trunk}..."):
            self.fail(f"Failed to switch to {trunk}. Make sure the {trunk} branch exists.")
        if not self.runner.run_with_status(f"git pull origin {trunk}", f"Pulling latest {trunk}..."):
            Logger.warn(f"Failed to pull latest {trunk}. Continuing anyway...")

    def pop_stash(self) -> None:
        if not self.runner.run_with_status("git stash pop", "Reapplying stashed changes..."):
            Logger.warn("Failed to reapply stashed changes. Run 'git stash pop' manually.")

    def create_and_push(self, branch: str, kind: str) -> None:
        quoted = shlex.quote(branch)
        if not self.runner.run_with_status(f"git checkout -b {quoted}", f"Creating {kind} branch: {branch}..."):
            self.fail(f"Failed to create {kind} branch")
        self.branch = branch
        if self.runner.run_with_status(f"git push -u origin {quoted}", "Pushing branch to origin..."):
            Logger.success(f"{kind.capitalize()} branch created: {branch}")
        else:
            Logger.warn("Branch created locally but failed to push to origin. You can push manually later.")
