"""Unit tests for the release workflows."""

import json
from datetime import date

import pytest

from branchflow.workflows.base import Outcome
from branchflow.workflows.release import (
    ReleaseFinishWorkflow, ReleaseStageWorkflow, ReleaseStartWorkflow,
    next_release_increment, today_tag
)

BRANCH = "release/20240315.1"


@pytest.fixture
def gh(monkeypatch, runner):
    monkeypatch.setattr("branchflow.workflows.pr.shutil.which", lambda name: "/usr/bin/gh")
    runner.on("gh pr create", "https://github.com/acme/app/pull/12\n")
    return runner


def _release_branch(runner):
    runner.on("git branch --show-current", BRANCH)
    runner.on(f"ls-remote --heads origin {BRANCH}", "abc")
    runner.on("rev-list --left-right --count", "0\t0")
    runner.on("rev-list --count origin/main..HEAD", "3")


def test_today_tag():
    """Test the date format."""
    assert today_tag(date(2024, 3, 5)) == "20240305"
    assert len(today_tag()) == 8


def test_next_release_increment():
    """Test the increment follows the highest release of the same day."""
    branches = ["release/20240315.1", "release/20240315.3", "release/20240314.9", "main"]
    assert next_release_increment(branches, "20240315") == 4
    assert next_release_increment(branches, "20240316") == 1
    assert next_release_increment([], "20240315") == 1


def test_start_creates_next_release(flow_ctx, runner, prompter):
    """Test the release branch is numbered from remote branches."""
    runner.on("git branch --show-current", "develop")
    runner.on("git branch -r", "  origin/release/20240315.1\n  origin/release/20240315.2\n")
    prompter.texts = ["20240315"]

    assert ReleaseStartWorkflow(flow_ctx).run() is Outcome.COMPLETED
    assert runner.ran("git checkout -b release/20240315.3")
    assert runner.ran("git push -u origin release/20240315.3")
    assert runner.ran("git pull origin develop")
    fetch = runner.calls.index("git fetch origin --prune")
    assert fetch < runner.calls.index("git branch -r")


def test_start_switches_to_develop(flow_ctx, runner, prompter):
    """Test starting elsewhere offers to switch."""
    runner.on("git branch --show-current", "feature/x")
    prompter.texts = ["20240315"]

    assert ReleaseStartWorkflow(flow_ctx).run() is Outcome.COMPLETED
    assert runner.ran("git checkout develop")


def test_start_declining_switch_fails(flow_ctx, runner, prompter):
    """Test a release must branch from develop."""
    runner.on("git branch --show-current", "main")
    prompter.confirms = [False]
    assert ReleaseStartWorkflow(flow_ctx).run() is Outcome.FAILED
    assert not runner.ran("checkout -b")


def test_stage_force_pushes_to_staging(flow_ctx, runner):
    """Test the release tip overwrites staging."""
    runner.on("git branch --show-current", BRANCH)
    assert ReleaseStageWorkflow(flow_ctx).run() is Outcome.COMPLETED
    assert runner.ran(f"git push -u origin {BRANCH}:staging --force")


def test_stage_requires_release_branch(flow_ctx, runner):
    """Test staging from a feature branch fails."""
    runner.on("git branch --show-current", "feature/x")
    assert ReleaseStageWorkflow(flow_ctx).run() is Outcome.FAILED
    assert not runner.ran("staging --force")


def test_stage_push_failure(flow_ctx, runner):
    """Test a rejected staging push fails."""
    runner.on("git branch --show-current", BRANCH)
    runner.fail(":staging --force")
    assert ReleaseStageWorkflow(flow_ctx).run() is Outcome.FAILED


def test_finish_uses_fallback_title(make_ctx, gh, runner, prompter):
    """Test the default title is used when AI is unavailable."""
    _release_branch(runner)
    ctx = make_ctx(ai=False, settings={"linearEnabled": False})
    prompter.confirms = [False]

    assert ReleaseFinishWorkflow(ctx, "token").run() is Outcome.COMPLETED
    create = next(c for c in runner.calls if c.startswith("gh pr create"))
    assert "--base main" in create
    assert "--title 'Release 20240315.1'" in create


def test_finish_with_generated_content(make_ctx, gh, runner, prompter):
    """Test generated content is confirmed before use."""
    _release_branch(runner)
    reply = json.dumps({"title": "Release: login and billing", "description": "Two features"})
    ctx = make_ctx(responses=[reply], settings={"linearEnabled": False})
    prompter.confirms = [True, False]

    assert ReleaseFinishWorkflow(ctx, "token").run() is Outcome.COMPLETED
    assert runner.ran("--title 'Release: login and billing'")
    assert not runner.ran("git branch -d")


def test_finish_declined_proceed_cancels(make_ctx, gh, runner, prompter):
    """Test declining the generated content cancels."""
    _release_branch(runner)
    reply = json.dumps({"title": "Release", "description": "x"})
    ctx = make_ctx(responses=[reply], settings={"linearEnabled": False})
    prompter.confirms = [False]

    assert ReleaseFinishWorkflow(ctx, "token").run() is Outcome.CANCELLED
    assert not runner.ran("gh pr create")
