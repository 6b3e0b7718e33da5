"""Unit tests for the git facade and trunk setup."""

import pytest

from branchflow.core.git import GitRepository
from branchflow.core.setup import ensure_develop_up_to_date, ensure_required_branches
from branchflow.utils.errors import CommandError, WorkflowError


def test_current_branch(runner):
    """Test branch lookup and its failure mode."""
    runner.on("git branch --show-current", "feature/x\n")
    git = GitRepository(runner)
    assert git.current_branch() == "feature/x"
    assert git.branch_type().value == "feature"


def test_current_branch_failure_raises(runner):
    """Test an unreadable branch is a CommandError."""
    runner.fail("git branch --show-current")
    with pytest.raises(CommandError):
        GitRepository(runner).current_branch()


def test_status(runner):
    """Test the three status lists are collected."""
    runner.on("git diff --cached --name-only", "a.py\nb.py\n")
    runner.on("git diff --name-only", "c.py")
    runner.on("git ls-files --others", "")
    status = GitRepository(runner).status()
    assert status.staged == ["a.py", "b.py"]
    assert status.unstaged == ["c.py"]
    assert status.untracked == []
    assert status.has_staged
    assert not status.is_clean


def test_branch_exists_remote_uses_output(runner):
    """Test an empty ls-remote answer means the branch is absent."""
    git = GitRepository(runner)
    runner.on("ls-remote --heads origin gone", "")
    runner.on("ls-remote --heads origin here", "abc123\trefs/heads/here")
    assert not git.branch_exists_remote("gone")
    assert git.branch_exists_remote("here")

    runner.fail("ls-remote --heads origin offline")
    assert not git.branch_exists_remote("offline")


def test_remote_branches(runner):
    """Test origin/ is stripped and symbolic refs skipped."""
    runner.on("git branch -r", "  origin/HEAD -> origin/main\n  origin/main\n  origin/release/20240101.2\n")
    assert GitRepository(runner).remote_branches() == ["main", "release/20240101.2"]


def test_counts(runner):
    """Test commit counting helpers."""
    runner.on("rev-list --count origin/develop..HEAD", "4")
    runner.on("rev-list --left-right --count origin/feature/x...HEAD", "1\t3")
    git = GitRepository(runner)
    assert git.commit_count("develop") == 4
    assert git.ahead_behind("feature/x") == (1, 3)

    runner.fail("rev-list --count origin/main..HEAD")
    assert git.commit_count("main") == 0


def test_develop_behind_main(runner):
    """Test the lag count and the unknown case."""
    runner.on("git branch --list", "  main")
    runner.on("rev-list --count origin/develop..origin/main", "2")
    assert GitRepository(runner).develop_behind_main() == 2


def test_repo_slug(runner):
    """Test slug from origin."""
    runner.on("git remote get-url origin", "git@github.com:acme/app.git")
    assert GitRepository(runner).repo_slug() == "acme/app"


def test_required_branches_present(runner, prompter):
    """Test nothing happens when every trunk exists."""
    runner.on("git branch --list", "  main")
    assert ensure_required_branches(GitRepository(runner), runner, prompter)
    assert not runner.ran("checkout -b")


def test_required_branches_created(runner, prompter):
    """Test missing trunks are created from their sources."""
    runner.on("git branch --list main", "* main")
    runner.on("git branch --list develop", "", times=1)
    runner.on("git branch --list develop", "  develop")
    runner.on("git branch --list staging", "", times=1)
    runner.on("git branch --list staging", "  staging")
    runner.on("git branch --show-current", "main")
    runner.on("ls-remote --heads origin develop", "abc\trefs/heads/develop")

    assert ensure_required_branches(GitRepository(runner), runner, prompter)

    assert runner.ran("git checkout -b develop")
    assert runner.ran("git checkout -b staging")
    assert runner.ran("--set-upstream-to=origin/develop develop")
    assert not runner.ran("--set-upstream-to=origin/staging")
    assert runner.calls[-1] == "git checkout main"


def test_required_branches_declined(runner, prompter):
    """Test declining creation is a WorkflowError."""
    runner.on("git branch --list", "")
    prompter.confirms = [False]
    with pytest.raises(WorkflowError):
        ensure_required_branches(GitRepository(runner), runner, prompter)


def test_required_branches_without_commits(runner, prompter):
    """Test branches wait for the first commit."""
    runner.on("git branch --list", "")
    runner.fail("git rev-parse --verify HEAD")
    assert not ensure_required_branches(GitRepository(runner), runner, prompter)
    assert not runner.ran("checkout -b")


def test_develop_update_merges_main(runner, prompter):
    """Test develop is merged with origin/main when behind."""
    runner.on("git branch --list", "  x")
    runner.on("rev-list --count origin/develop..origin/main", "3")
    runner.on("git branch --show-current", "feature/x")

    assert ensure_develop_up_to_date(GitRepository(runner), runner, prompter)
    assert runner.ran("git merge origin/main")
    assert runner.calls[-1] == "git checkout feature/x"
