"""AI-drafted commit messages, pull requests and issues."""

import json
import re
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from . import prompts
from .provider import LLMProvider, SystemPrompt
from ..core.shell import CommandRunner
from ..models.types import (
    CommitMessage, DiffStats, IssueContent, IssueUpdateComment, PRContent
)
from ..tracker.issues import detect_issue
from ..ui.progress import StreamProgress, estimate_seconds, show_dot
from ..utils.errors import GenerationError, LLMError
from ..utils.logger import Logger, console

T = TypeVar("T", bound=BaseModel)

COMMIT_DIFF_LIMIT = 2000
PR_DIFF_LIMIT = 3000
ISSUE_DIFF_LIMIT = 2000


def parse_diff_stats(diff_summary: str) -> DiffStats:
    """Read totals from the last line of ``git diff --stat`` output."""
    lines = diff_summary.strip().split("\n")
    last = lines[-1] if lines else ""

    def number(pattern: str) -> int:
        match = re.search(pattern, last)
        return int(match.group(1)) if match else 0

    return DiffStats(
        file_count=number(r"(\d+) files? changed"),
        insertions=number(r"(\d+) insertions?"),
        deletions=number(r"(\d+) deletions?"),
    )


def validate_json(text: str, schema: Type[T]) -> T:
    """Parse ``text`` as JSON and validate it against ``schema``."""
    try:
        data = json.loads(text) if isinstance(text, str) else text
    except json.JSONDecodeError as e:
        raise GenerationError(f"Invalid JSON response from AI: {e}") from e
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise GenerationError(f"Response validation failed: {e}") from e


class ContentGenerator:
    """Drafts text with an injected LLM provider.

    Every public ``generate_*`` method returns None instead of raising when
    generation fails; callers offer manual entry in that case.
    """

    def __init__(self, provider: LLMProvider, runner: CommandRunner):
        self.provider = provider
        self.runner = runner

    def _git(self, command: str) -> str:
        output = self.runner.run_capture(command)
        if output is None:
            raise GenerationError(f"Could not read repository state: {command}")
        return output

    def _structured(
        self,
        label: str,
        prompt: str,
        system: SystemPrompt,
        schema: Type[T],
        thinking_budget: int,
        temperature: float = 0.3
    ) -> T:
        """Stream a structured reply, falling back once to a blocking call."""
        Logger.start(f"Generating {label} with AI...")
        progress = StreamProgress()
        try:
            text = ""
            with console.status(f"Waiting for {label}..."):
                for chunk in self.provider.stream_json(
                    prompt, system, schema, temperature, thinking_budget
                ):
                    text += chunk
                    if progress.record(chunk):
                        show_dot()
            result = validate_json(text, schema)
            Logger.debug(
                f"Streamed {progress.chunks} chunks ({progress.characters} chars) "
                f"in {progress.elapsed:.1f}s, first chunk after {progress.waited or 0:.1f}s"
            )
            return result
        except LLMError as e:
            Logger.warn("Streaming failed, falling back to standard generation...")
            Logger.debug(f"Streaming error: {e}")

        with console.status(f"Generating {label}..."):
            text = self.provider.generate_json(prompt, system, schema, temperature, thinking_budget)
        return validate_json(text, schema)

    def _report_stats(self, diff_summary: str, prefix: str = "Changes") -> DiffStats:
        stats = parse_diff_stats(diff_summary)
        Logger.note(
            f"{prefix}: {stats.file_count} files, +{stats.insertions} -{stats.deletions} lines"
        )
        return stats

    def generate_commit_message(self, hint: Optional[str] = None) -> Optional[CommitMessage]:
        try:
            Logger.start("Analyzing staged changes...")
            diff_summary = self._git("git diff --cached --stat")
            diff_content = self._git("git diff --cached")
            self._report_stats(diff_summary)
            Logger.note(
                f"Estimated processing time: ~{estimate_seconds(len(diff_content), 2, 10, 5000)}s"
            )

            prompt = prompts.commit_prompt(diff_summary, diff_content[:COMMIT_DIFF_LIMIT], hint)
            message = self._structured(
                "commit message", prompt, prompts.COMMIT_SYSTEM, CommitMessage, 1024
            )
            Logger.success("Generated commit message")
            return message
        except LLMError as e:
            Logger.fail(f"Failed to generate commit message: {e}")
            return None

    def generate_pr_content(
        self,
        branch: str,
        base: str,
        hint: Optional[str] = None
    ) -> Optional[PRContent]:
        try:
            Logger.start("Analyzing branch changes...")
            diff_summary = self._git(f"git diff origin/{base}..HEAD --stat")
            diff_content = self._git(f"git diff origin/{base}..HEAD")
            commit_log = self._git(f'git log origin/{base}..HEAD --pretty=format:"- %s"')
            commit_count = int(self._git(f"git rev-list --count origin/{base}..HEAD") or 0)

            stats = parse_diff_stats(diff_summary)
            Logger.note(
                f"PR changes: {commit_count} commits, {stats.file_count} files, "
                f"+{stats.insertions} -{stats.deletions} lines"
            )
            size = len(diff_content) + len(commit_log)
            Logger.note(f"Estimated processing time: ~{estimate_seconds(size, 3, 15, 3000)}s")

            prompt = prompts.pr_prompt(
                branch,
                commit_count,
                commit_log,
                diff_summary,
                diff_content[:PR_DIFF_LIMIT],
                hint,
                detect_issue(branch)
            )
            content = self._structured("PR content", prompt, prompts.PR_SYSTEM, PRContent, 4096)
            Logger.success("Generated PR content")
            return content
        except (LLMError, ValueError) as e:
            Logger.fail(f"Failed to generate PR content: {e}")
            return None

    def generate_issue_content(self, hint: Optional[str] = None) -> Optional[IssueContent]:
        try:
            Logger.start("Analyzing staged changes for Linear issue...")
            diff_summary = self._git("git diff --cached --stat")
            diff_content = self._git("git diff --cached")
            self._report_stats(diff_summary)

            prompt = prompts.issue_prompt(diff_summary, diff_content[:ISSUE_DIFF_LIMIT], hint)
            content = self._structured(
                "Linear issue", prompt, prompts.ISSUE_SYSTEM, IssueContent, 1024
            )
            Logger.success("Generated Linear issue content")
            return content
        except LLMError as e:
            Logger.fail(f"Failed to generate Linear issue content: {e}")
            return None

    def generate_issue_update_comment(self, hint: Optional[str] = None) -> Optional[str]:
        """One or two sentence progress note for an issue; plain-text replies are accepted."""
        try:
            Logger.start("Analyzing recent PR changes...")
            recent_commits = self._git('git log -3 --pretty=format:"- %s" HEAD')
            recent_diff = self.runner.run_capture("git diff HEAD~3..HEAD --stat") or ""

            prompt = prompts.update_comment_prompt(recent_commits, recent_diff, hint)
            text = self.provider.generate_json(
                prompt, prompts.UPDATE_COMMENT_SYSTEM, IssueUpdateComment, 0.4
            )
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                data = {"comment": text.strip()}
            comment = validate_json(data, IssueUpdateComment).comment
            Logger.success("Generated Linear update comment")
            return comment
        except LLMError as e:
            Logger.fail(f"Failed to generate Linear update comment: {e}")
            return None

    def explain_error(self, error_output: str) -> Optional[str]:
        """Plain-language explanation of a tool error, or None without any report."""
        try:
            Logger.start("Analyzing error with AI...")
            explanation = self.provider.generate_text(
                prompts.explain_error_prompt(error_output),
                prompts.EXPLAIN_ERROR_SYSTEM,
                temperature=0.2,
                max_output_tokens=800
            )
        except LLMError:
            return None
        return explanation.strip() or None
