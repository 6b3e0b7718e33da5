"""Unit tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from branchflow import __version__
from branchflow.cli.main import InterruptHandler, cli, menu_choices
from branchflow.core.branches import BranchType


@pytest.fixture
def invoke(make_ctx):
    """Run the CLI against a FlowContext built from fakes."""
    def run(args, settings=None, **kwargs):
        ctx = make_ctx(settings=settings, **kwargs)
        return CliRunner().invoke(cli, args, obj={'flow': ctx})
    return run


def test_version():
    """Test --version reports the package version."""
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_config_set_and_get(invoke, config_paths):
    """Test values are written to the global file and read back."""
    result = invoke(["config", "set", "githubToken", "ghp_secret"])
    assert result.exit_code == 0
    assert json.loads(config_paths[1].read_text()) == {"githubToken": "ghp_secret"}

    result = invoke(["config", "get", "githubToken"])
    assert result.exit_code == 0
    assert "ghp_secret" in result.output


def test_config_set_linear_enabled_parses_bool(invoke, config_paths):
    """Test linearEnabled is stored as a boolean."""
    assert invoke(["config", "set", "linearEnabled", "no"]).exit_code == 0
    assert json.loads(config_paths[1].read_text()) == {"linearEnabled": False}


def test_config_invalid_key(invoke):
    """Test unknown keys exit with status 1."""
    result = invoke(["config", "get", "openaiKey"])
    assert result.exit_code == 1
    assert "googleAiKey" in result.output

    assert invoke(["config", "set", "openaiKey", "x"]).exit_code == 1


def test_config_get_unset(invoke):
    """Test an unset key exits with status 1."""
    result = invoke(["config", "get", "linearApiKey"])
    assert result.exit_code == 1
    assert "not set" in result.output


def test_config_list_masks_secrets(invoke):
    """Test secrets are masked in the listing."""
    result = invoke(["config", "list"], settings={"googleAiKey": "abcd1234efgh"})
    assert result.exit_code == 0
    assert "abcd****efgh" in result.output
    assert "(not set)" in result.output


def test_config_init(invoke, prompter, config_paths):
    """Test the wizard saves every answer."""
    prompter.texts = ["gkey-0123456789", "ghp-0123456789", "lin-0123456789"]
    prompter.confirms = [True]

    result = invoke(["config", "init"])

    assert result.exit_code == 0
    assert json.loads(config_paths[1].read_text()) == {
        "googleAiKey": "gkey-0123456789",
        "githubToken": "ghp-0123456789",
        "linearEnabled": True,
        "linearApiKey": "lin-0123456789",
    }


def test_config_init_requires_ai_key(invoke, prompter, config_paths):
    """Test an empty AI key aborts the wizard."""
    prompter.texts = [""]
    assert invoke(["config", "init"]).exit_code == 1
    assert not config_paths[1].exists()


def test_config_edit(invoke, prompter, config_paths):
    """Test a single value can be changed from the menu."""
    prompter.selects = ["linearEnabled"]
    prompter.confirms = [False]
    assert invoke(["config", "edit"]).exit_code == 0
    assert json.loads(config_paths[1].read_text()) == {"linearEnabled": False}


def test_commit_clean_tree_exits_zero(invoke):
    """Test a no-op workflow exits successfully."""
    assert invoke(["commit"]).exit_code == 0


def test_finish_requires_github_token(invoke):
    """Test finish commands refuse to run without a token."""
    result = invoke(["feature", "finish"], settings={"linearEnabled": False})
    assert result.exit_code == 1
    assert "branchflow config init" in result.output


def test_failed_workflow_exits_one(invoke, runner):
    """Test FAILED maps to exit status 1."""
    runner.on("git branch --show-current", "feature/x")
    assert invoke(["release", "stage"]).exit_code == 1


def test_menu_choices():
    """Test menu entries follow the branch type."""
    feature = [value for value, _ in menu_choices(BranchType.FEATURE)]
    assert "feature-finish" in feature
    assert "feature-start" not in feature

    main = [value for value, _ in menu_choices(BranchType.MAIN)]
    assert {"feature-start", "release-start", "hotfix-start"} <= set(main)

    release = [value for value, _ in menu_choices(BranchType.RELEASE)]
    assert {"release-stage", "release-finish"} <= set(release)

    for branch_type in BranchType:
        values = [value for value, _ in menu_choices(branch_type)]
        assert values[0] == "commit"
        assert values[-1] == "exit"


def test_menu_exit(invoke, runner, prompter):
    """Test the menu runs setup checks and can exit."""
    runner.on("git branch --list", "  x")
    runner.on("git branch --show-current", "feature/x")
    prompter.selects = ["exit"]

    result = invoke([])
    assert result.exit_code == 0
    assert "What would you like to do?" in prompter.asked


def test_menu_runs_selected_command(invoke, runner, prompter):
    """Test a menu entry dispatches to its command."""
    runner.on("git branch --list", "  x")
    runner.on("git branch --show-current", "release/20240101.1")
    prompter.selects = ["release-stage"]

    result = invoke([])
    assert result.exit_code == 0
    assert runner.ran("git push -u origin release/20240101.1:staging --force")


def test_menu_outside_repository(invoke, runner, prompter):
    """Test declining git init exits cleanly."""
    runner.fail("git rev-parse --git-dir")
    prompter.confirms = [False]

    assert invoke([]).exit_code == 0
    assert not runner.ran("git init")


def test_interrupt_handler(monkeypatch):
    """Test the first interrupt exits gracefully and arms the grace timer."""
    timers = []

    class FakeTimer:
        def __init__(self, interval, function, args=None):
            timers.append((interval, function, args))
            self.daemon = False

        def start(self):
            pass

    monkeypatch.setattr("branchflow.cli.main.threading.Timer", FakeTimer)
    handler = InterruptHandler(grace=1.5)

    with pytest.raises(SystemExit) as exc:
        handler.handle(2, None)

    assert exc.value.code == 0
    assert handler.exiting
    assert timers[0][0] == 1.5
    assert timers[0][2] == (0,)
