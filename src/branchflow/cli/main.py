"""Main CLI entry point."""

import os
import signal
import sys
import threading

import click

from .config import config, config_init, config_list
from .. import __version__
from ..core.branches import BranchType, classify
from ..core.context import FlowContext
from ..core.setup import ensure_required_branches
from ..core.shell import clear_terminal
from ..utils.errors import CommandError, WorkflowError
from ..utils.logger import Logger, console
from ..workflows.base import Outcome
from ..workflows.commit import CommitWorkflow
from ..workflows.feature import FeatureFinishWorkflow, FeatureStartWorkflow
from ..workflows.hotfix import HotfixFinishWorkflow, HotfixStartWorkflow
from ..workflows.release import ReleaseFinishWorkflow, ReleaseStageWorkflow, ReleaseStartWorkflow

GRACE_SECONDS = 2.0


class InterruptHandler:
    """First interrupt exits gracefully, a second one terminates at once."""

    def __init__(self, grace: float = GRACE_SECONDS):
        self.grace = grace
        self.exiting = False

    def install(self):
        signal.signal(signal.SIGINT, self.handle)
        signal.signal(signal.SIGTERM, self.handle)

    def handle(self, signum, frame):
        if self.exiting:
            os._exit(1)
        self.exiting = True
        console.print("\n[yellow]Exiting... press Ctrl+C again to force quit[/yellow]")
        timer = threading.Timer(self.grace, os._exit, (0,))
        timer.daemon = True
        timer.start()
        raise SystemExit(0)


interrupts = InterruptHandler()


def _flow(ctx) -> FlowContext:
    return ctx.obj['flow']


def _finish(outcome: Outcome):
    sys.exit(outcome.exit_code)


def _github_token(flow: FlowContext) -> str:
    token = flow.settings.githubToken
    if not token:
        Logger.error("GitHub token not configured. Run: branchflow config init")
        sys.exit(1)
    return token


@click.group(invoke_without_command=True)
@click.option('--debug', is_flag=True, help='Enable debug mode')
@click.version_option(version=__version__, prog_name='branchflow')
@click.pass_context
def cli(ctx, debug):
    """branchflow - AI-assisted git-flow for feature, release and hotfix branches.

    Run without a command to pick an action from an interactive menu.
    """
    ctx.ensure_object(dict)

    if debug or os.environ.get("BRANCHFLOW_DEBUG") == "1":
        Logger().setup_logger(debug=True)

    if 'flow' not in ctx.obj:
        ctx.obj['flow'] = FlowContext.create()
    flow = _flow(ctx)
    ctx.obj.setdefault('config', flow.config)
    ctx.obj.setdefault('prompter', flow.prompter)

    if ctx.invoked_subcommand is None:
        interactive_menu(ctx)


cli.add_command(config)


@cli.command()
@click.pass_context
def commit(ctx):
    """Draft a commit message with AI, commit and push."""
    _finish(CommitWorkflow(_flow(ctx)).run())


@cli.group()
def feature():
    """Feature branches off develop."""
    pass


@feature.command('start')
@click.pass_context
def feature_start(ctx):
    """Create feature/<name> from develop."""
    _finish(FeatureStartWorkflow(_flow(ctx)).run())


@feature.command('finish')
@click.pass_context
def feature_finish(ctx):
    """Open a pull request into develop."""
    flow = _flow(ctx)
    _finish(FeatureFinishWorkflow(flow, _github_token(flow)).run())


@cli.group()
def release():
    """Release branches cut from develop."""
    pass


@release.command('start')
@click.pass_context
def release_start(ctx):
    """Create release/<YYYYMMDD>.<n> from develop."""
    _finish(ReleaseStartWorkflow(_flow(ctx)).run())


@release.command('stage')
@click.pass_context
def release_stage(ctx):
    """Force-push the release branch to staging."""
    _finish(ReleaseStageWorkflow(_flow(ctx)).run())


@release.command('finish')
@click.pass_context
def release_finish(ctx):
    """Open the release pull request into main."""
    flow = _flow(ctx)
    _finish(ReleaseFinishWorkflow(flow, _github_token(flow)).run())


@cli.group()
def hotfix():
    """Hotfix branches off main."""
    pass


@hotfix.command('start')
@click.pass_context
def hotfix_start(ctx):
    """Create hotfix/<name> from main."""
    _finish(HotfixStartWorkflow(_flow(ctx)).run())


@hotfix.command('finish')
@click.pass_context
def hotfix_finish(ctx):
    """Open pull requests into main and develop."""
    flow = _flow(ctx)
    _finish(HotfixFinishWorkflow(flow, _github_token(flow)).run())


def menu_choices(branch_type: BranchType):
    """Menu entries offered for the current branch type."""
    choices = [("commit", "Commit changes")]
    if branch_type is BranchType.FEATURE:
        choices.append(("feature-finish", "Finish feature (open PR to develop)"))
    if branch_type is BranchType.RELEASE:
        choices.append(("release-stage", "Deploy release to staging"))
        choices.append(("release-finish", "Finish release (open PR to main)"))
    if branch_type is BranchType.HOTFIX:
        choices.append(("hotfix-finish", "Finish hotfix (open PR to main)"))
    if branch_type in (BranchType.MAIN, BranchType.DEVELOP):
        choices.append(("feature-start", "Start new feature"))
        choices.append(("release-start", "Start new release"))
    if branch_type is BranchType.MAIN:
        choices.append(("hotfix-start", "Start new hotfix"))
    choices.extend([
        ("config-init", "Set up configuration"),
        ("config-list", "Show configuration"),
        ("exit", "Exit"),
    ])
    return choices


_MENU_COMMANDS = {
    "commit": commit,
    "feature-start": feature_start,
    "feature-finish": feature_finish,
    "release-start": release_start,
    "release-stage": release_stage,
    "release-finish": release_finish,
    "hotfix-start": hotfix_start,
    "hotfix-finish": hotfix_finish,
    "config-init": config_init,
    "config-list": config_list,
}


def _ensure_repository(flow: FlowContext) -> bool:
    """Offer to initialize a repository and an initial commit when missing."""
    git = flow.git
    if not git.is_repository():
        Logger.warn("This directory is not a git repository.")
        if not flow.prompter.confirm("Initialize a new git repository here?", default=True):
            return False
        if not flow.runner.run_with_status("git init -b main", "Initializing git repository..."):
            return False

    if not git.has_commits():
        Logger.warn("Repository has no commits yet.")
        if not flow.prompter.confirm("Create an initial commit?", default=True):
            return False
        if not flow.runner.run_with_status(
            'git add -A && git commit --allow-empty -m "Initial commit"',
            "Creating initial commit..."
        ):
            return False
    return True


def interactive_menu(ctx):
    """Pick an action for the current branch and run it."""
    flow = _flow(ctx)
    if console.is_terminal:
        clear_terminal()

    if not _ensure_repository(flow):
        Logger.info("Nothing to do without a git repository with commits.")
        sys.exit(0)

    try:
        if not ensure_required_branches(flow.git, flow.runner, flow.prompter):
            sys.exit(0)
        branch = flow.git.current_branch()
    except (CommandError, WorkflowError) as e:
        Logger.fail(str(e))
        sys.exit(1)

    branch_type = classify(branch)
    Logger.note(f"Current branch: {branch} ({branch_type.value})")

    action = flow.prompter.select("What would you like to do?", menu_choices(branch_type))
    if action == "exit":
        return
    ctx.invoke(_MENU_COMMANDS[action])


def main():
    """Main entry point."""
    interrupts.install()
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(0)
    except Exception as e:
        if interrupts.exiting:
            sys.exit(0)
        Logger.error(f"Unexpected error: {e}")
        if Logger.is_debug():
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
