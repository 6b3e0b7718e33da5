"""Pytest configuration and fixtures."""

import json
from typing import List, Optional

import pytest

from branchflow.core.context import FlowContext
from branchflow.core.shell import CommandResult, CommandRunner
from branchflow.llm import MockProvider
from branchflow.ui.prompts import Prompter
from branchflow.utils.config import ConfigManager


class FakeRunner(CommandRunner):
    """Runner that answers commands from scripted rules instead of a shell.

    Rules match when their pattern is a substring of the command; the first
    live rule wins. A rule with ``times`` is used that many times, then
    skipped. Unmatched commands succeed with empty output.
    """

    def __init__(self):
        super().__init__()
        self.calls: List[str] = []
        self._rules = []

    def on(self, pattern: str, stdout: str = "", returncode: int = 0,
           stderr: str = "", times: Optional[int] = None):
        self._rules.append({
            "pattern": pattern,
            "result": (returncode, stdout, stderr),
            "times": times,
        })
        return self

    def fail(self, pattern: str, stderr: str = "error", stdout: str = "",
             times: Optional[int] = None):
        return self.on(pattern, stdout=stdout, returncode=1, stderr=stderr, times=times)

    def run_checked(self, command, timeout=None, env=None, capture=True):
        self.calls.append(command)
        for rule in self._rules:
            if rule["pattern"] not in command:
                continue
            if rule["times"] is not None:
                if rule["times"] <= 0:
                    continue
                rule["times"] -= 1
            returncode, stdout, stderr = rule["result"]
            return CommandResult(command, returncode, stdout, stderr)
        return CommandResult(command, 0, "", "")

    def ran(self, pattern: str) -> bool:
        return any(pattern in call for call in self.calls)

    def count(self, pattern: str) -> int:
        return sum(1 for call in self.calls if pattern in call)


class ScriptedPrompter(Prompter):
    """Prompter fed from queued answers.

    An exhausted queue falls back to the question's default; a text answer
    rejected by its validator fails the test.
    """

    def __init__(self, texts=None, confirms=None, selects=None):
        self.texts = list(texts or [])
        self.confirms = list(confirms or [])
        self.selects = list(selects or [])
        self.asked: List[str] = []

    def text(self, question, default=None, validate=None, password=False):
        self.asked.append(question)
        answer = self.texts.pop(0) if self.texts else (default or "")
        if validate:
            error = validate(answer)
            assert error is None, f"{question!r} rejected {answer!r}: {error}"
        return answer

    def confirm(self, question, default=True):
        self.asked.append(question)
        return self.confirms.pop(0) if self.confirms else default

    def select(self, question, choices, default=None):
        self.asked.append(question)
        values = [value for value, _ in choices]
        if self.selects:
            answer = self.selects.pop(0)
            assert answer in values, f"{answer!r} not offered for {question!r}: {values}"
            return answer
        return default if default in values else values[0]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def config_paths(tmp_path):
    """Project and global config file locations inside a temp dir."""
    return tmp_path / "project" / ".branchflow.json", tmp_path / "home" / "config.json"


@pytest.fixture
def config_manager(config_paths):
    project, global_path = config_paths
    return ConfigManager(project_path=project, global_path=global_path, environ={})


@pytest.fixture
def write_global(config_paths):
    """Write settings to the global config file."""
    def write(data):
        path = config_paths[1]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path
    return write


@pytest.fixture
def make_ctx(runner, prompter, config_manager, write_global):
    """Build a FlowContext from fakes.

    ``responses`` feeds a MockProvider; ``ai=False`` leaves the context
    without a generator. ``settings`` are written to the global config.
    """
    def make(responses=None, ai=True, settings=None, tracker=None, fail_stream=False):
        if settings is not None:
            write_global(settings)
        provider = MockProvider(responses=responses, fail_stream=fail_stream) if ai else None
        return FlowContext(runner, prompter, config_manager, provider, tracker)
    return make


@pytest.fixture
def flow_ctx(make_ctx):
    """Context with AI enabled, Linear disabled and no queued AI replies."""
    return make_ctx(settings={"googleAiKey": "test-key", "githubToken": "gh-token",
                              "linearEnabled": False})
