"""Git repository helpers."""

import shlex
from typing import List, Optional

from .shell import CommandRunner
from .branches import BranchType, MAIN, DEVELOP, classify, parse_repo_slug
from ..models.types import GitStatus
from ..utils.logger import Logger, console

REMOTE_PROBE_TIMEOUT = 5


def _lines(output: Optional[str]) -> List[str]:
    if not output:
        return []
    return [line for line in output.split("\n") if line.strip()]


class GitRepository:
    """Thin facade over the ``git`` command line."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_repository(self) -> bool:
        return self.runner.run_silent("git rev-parse --git-dir")

    def has_commits(self) -> bool:
        return self.runner.run_silent("git rev-parse --verify HEAD")

    def current_branch(self) -> str:
        """Name of the checked-out branch. Raises CommandError when it cannot be read."""
        return self.runner.run_capture_or_raise(
            "git branch --show-current",
            "Failed to get current branch"
        )

    def branch_type(self) -> BranchType:
        return classify(self.current_branch())

    def status(self) -> GitStatus:
        """Snapshot of staged, modified and untracked paths."""
        message = "Failed to get git status"
        return GitStatus(
            staged=_lines(self.runner.run_capture_or_raise("git diff --cached --name-only", message)),
            unstaged=_lines(self.runner.run_capture_or_raise("git diff --name-only", message)),
            untracked=_lines(self.runner.run_capture_or_raise(
                "git ls-files --others --exclude-standard", message
            )),
        )

    def has_uncommitted_changes(self) -> bool:
        output = self.runner.run_capture("git status --porcelain")
        return bool(output)

    def repo_slug(self) -> Optional[str]:
        """``owner/repo`` of the origin remote when it is hosted on GitHub."""
        remote_url = self.runner.run_capture("git remote get-url origin")
        if not remote_url:
            return None
        return parse_repo_slug(remote_url)

    def branch_exists_local(self, branch: str) -> bool:
        output = self.runner.run_capture(f"git branch --list {shlex.quote(branch)}")
        return bool(output and output.strip())

    def branch_exists_remote(self, branch: str) -> bool:
        """Probe origin for ``branch``; network failures count as absent."""
        output = self.runner.run_capture(
            f"git ls-remote --heads origin {shlex.quote(branch)}",
            timeout=REMOTE_PROBE_TIMEOUT
        )
        return bool(output)

    def branch_exists(self, branch: str) -> bool:
        return self.branch_exists_local(branch) or self.branch_exists_remote(branch)

    def remote_branches(self) -> List[str]:
        """Remote branch names with the ``origin/`` prefix stripped."""
        names = []
        for line in _lines(self.runner.run_capture("git branch -r")):
            name = line.strip()
            if "->" in name:
                continue
            if name.startswith("origin/"):
                name = name[len("origin/"):]
            names.append(name)
        return names

    def develop_behind_main(self) -> Optional[int]:
        """Commits on origin/main missing from origin/develop, None if unknown."""
        if not self.branch_exists(MAIN) or not self.branch_exists(DEVELOP):
            return None
        self.runner.run_silent(f"git fetch origin {MAIN} {DEVELOP}")
        output = self.runner.run_capture(f"git rev-list --count origin/{DEVELOP}..origin/{MAIN}")
        if output is None:
            return None
        try:
            return max(int(output.strip()), 0)
        except ValueError:
            return None

    def commit_count(self, base: str, head: str = "HEAD") -> int:
        output = self.runner.run_capture(f"git rev-list --count origin/{base}..{head}")
        try:
            return int(output) if output else 0
        except ValueError:
            return 0

    def ahead_behind(self, branch: str) -> Optional[tuple]:
        """(behind, ahead) of HEAD relative to ``origin/branch``."""
        output = self.runner.run_capture(
            f"git rev-list --left-right --count origin/{branch}...HEAD"
        )
        if not output:
            return None
        parts = output.split()
        if len(parts) != 2:
            return None
        try:
            return int(parts[0]), int(parts[1])
        except ValueError:
            return None

    def has_upstream(self) -> bool:
        return self.runner.run_silent("git rev-parse --abbrev-ref --symbolic-full-name @{u}")


def display_status(status: GitStatus) -> None:
    """Render a status snapshot."""
    Logger.box("Git Status")

    if status.staged:
        Logger.success("Staged files:")
        for path in status.staged:
            console.print(f"  ✓ {path}", style="green")
        console.print()

    if status.unstaged:
        Logger.warn("Modified files (not staged):")
        for path in status.unstaged:
            console.print(f"  ● {path}", style="yellow")
        console.print()

    if status.untracked:
        Logger.note("Untracked files:")
        for path in status.untracked:
            console.print(f"  ? {path}", style="dim")
        console.print()
