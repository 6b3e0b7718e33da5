"""Commit workflow: stage, draft a message, commit and push."""

import shlex
from typing import Optional

from .base import Outcome, StopWorkflow, Workflow
from .issues import offer_issue_creation
from ..core.branches import is_protected
from ..core.git import display_status
from ..models.types import COMMIT_TYPES, CommitMessage
from ..storage.filesystem import write_temp_text
from ..tracker.issues import has_issue_pattern
from ..utils.logger import Logger


def is_push_rejection(output: str) -> bool:
    return "non-fast-forward" in output or "rejected" in output


class CommitWorkflow(Workflow):
    """Draft a conventional commit message for the staged changes and commit it."""

    name = "commit"

    def __init__(self, ctx):
        super().__init__(ctx)
        self.message: Optional[str] = None

    def steps(self):
        return [
            self.ensure_staged,
            self.link_issue,
            self.compose_message,
            self.commit,
            self.push,
        ]

    def ensure_staged(self):
        status = self.git.status()
        if status.is_clean:
            self.nothing_to_do("No changes detected. Working tree is clean.")

        display_status(status)

        if not status.has_staged:
            if not self.prompter.confirm("No files are staged. Stage all changes?", default=True):
                self.cancel("Please stage your changes first.")
            if not self.runner.run_with_status("git add -A", "Staging all changes..."):
                self.fail("Failed to stage changes")
            status = self.git.status()
            if not status.has_staged:
                self.nothing_to_do("Nothing to commit after staging.")

    def link_issue(self):
        self.branch = self.git.current_branch()
        if has_issue_pattern(self.branch) or not self.ctx.linear_enabled:
            return
        renamed = offer_issue_creation(self.ctx, self.branch)
        if renamed:
            self.branch = renamed

    def compose_message(self):
        hint = self.prompter.text(
            "Briefly describe your changes (optional, helps the AI)",
            default=""
        )
        generated = self._generate(hint)

        if generated is None:
            self.message = self._manual_message()
            return

        while True:
            formatted = generated.format()
            Logger.box(formatted, title="Commit message")
            action = self.prompter.select(
                "What would you like to do?",
                [
                    ("commit", "Commit with this message"),
                    ("edit", "Edit the message"),
                    ("refine", "Describe the changes and try again"),
                    ("cancel", "Cancel"),
                ]
            )
            if action == "commit":
                self.message = formatted
                return
            if action == "edit":
                edited = self.prompter.text(
                    "Edit commit message",
                    default=formatted,
                    validate=lambda v: None if v else "Message cannot be empty"
                )
                self.message = edited
                return
            if action == "refine":
                hint = self.prompter.text(
                    "Describe the changes (this will be heavily prioritized)",
                    default=""
                )
                retry = self._generate(hint)
                if retry is None:
                    Logger.fail("Failed to regenerate commit message")
                else:
                    generated = retry
                continue
            self.cancel("Commit cancelled.")

    def _generate(self, hint: str) -> Optional[CommitMessage]:
        if self.ctx.generator is None:
            Logger.warn("Google AI key not configured. Run: branchflow config init")
            return None
        return self.ctx.generator.generate_commit_message(hint)

    def _manual_message(self) -> str:
        if not self.prompter.confirm("Enter commit message manually?", default=True):
            self.fail("No commit message.")
        commit_type = self.prompter.select(
            "Select commit type:",
            [(name, f"{name}: {desc}") for name, desc in COMMIT_TYPES.items()]
        )
        description = self.prompter.text(
            "Description",
            validate=lambda v: None if v else "Description cannot be empty"
        )
        return CommitMessage(type=commit_type, description=description).format()

    def commit(self):
        Logger.start("Committing changes...")
        path = write_temp_text(self.message, suffix=".commitmsg")
        try:
            result = self.runner.run_checked(f"git commit -F {shlex.quote(str(path))}")
        finally:
            path.unlink()

        if result.ok:
            Logger.success("Changes committed successfully")
            return

        output = result.output
        Logger.fail("Failed to commit changes")
        if output:
            Logger.box(output, title="git commit output", style="red")
            if self.ctx.generator is not None:
                explanation = self.ctx.generator.explain_error(output)
                if explanation:
                    Logger.box(explanation, title="What went wrong", style="yellow")
        raise StopWorkflow(Outcome.FAILED)

    def push(self):
        branch = self.git.current_branch()
        self.branch = branch
        Logger.note(f"Current branch: {branch}")
        if not self.prompter.confirm("Push to origin?", default=True):
            return

        quoted = shlex.quote(branch)
        Logger.start(f"Pushing to origin/{branch}...")
        result = self.runner.run_checked(f"git push origin {quoted}")
        if result.ok:
            Logger.success("Changes pushed successfully")
            return

        Logger.fail("Failed to push changes")
        if is_push_rejection(result.output):
            self._resolve_rejection(branch)
        elif self.prompter.confirm("Force push?", default=False):
            self._force_push(branch)

    def _resolve_rejection(self, branch: str):
        quoted = shlex.quote(branch)
        action = self.prompter.select(
            "Remote has changes. What would you like to do?",
            [
                ("pull", "Pull and merge remote changes"),
                ("rebase", "Pull and rebase on remote changes"),
                ("force", "Force push (overwrites remote)"),
                ("skip", "Skip push for now"),
            ]
        )
        if action == "pull":
            if (self.runner.run_visible(f"git pull origin {quoted}", "Pulling remote changes...")
                    and self.runner.run_with_status(f"git push origin {quoted}", "Pushing changes...")):
                return
            Logger.fail("Failed to pull and push. You may need to resolve conflicts.")
        elif action == "rebase":
            if (self.runner.run_visible(
                    f"git pull --rebase origin {quoted}", "Rebasing on remote changes...")
                    and self.runner.run_with_status(f"git push origin {quoted}", "Pushing changes...")):
                return
            Logger.fail("Failed to rebase. You may need to resolve conflicts.")
        elif action == "force":
            self._force_push(branch)
        else:
            Logger.note("Push skipped.")

    def _force_push(self, branch: str):
        if is_protected(branch):
            Logger.fail(f"Force push to protected branch '{branch}' is not allowed.")
            Logger.info(f"Pull the remote changes instead: git pull --rebase origin {branch}")
            return
        self.runner.run_with_status(
            f"git push --force origin {shlex.quote(branch)}",
            "Force pushing..."
        )
