"""Prompt templates for generated content."""

from typing import Optional

from ..models.types import COMMIT_TYPES, ISSUE_LABELS

COMMIT_SYSTEM = [
    "You generate structured git commit messages.",
    "Weight the user's description heavily for intent; use the diff as factual context.",
    "Pick the commit type that best matches the changes.",
    "Keep descriptions short and clear.",
    "When the change clearly targets one area of the codebase, put it in scope without parentheses.",
    "The description is only the change itself, with no type or scope prefix.",
]

PR_SYSTEM = [
    "You write clear, informative pull request titles and descriptions.",
    "Describe strictly WHAT changed; do not explain WHY.",
    "Use markdown in the description.",
    "PR titles must be 72 characters or fewer, counting spaces. When unsure, make it shorter.",
    "Write descriptions that help a reviewer.",
]

ISSUE_SYSTEM = [
    "You write factual Linear issue titles and descriptions.",
    "Stay concise and stick to the developer's input and the code changes.",
    "Do not speculate about business benefits or use marketing language.",
    "Describe what was implemented, not potential future value.",
]

UPDATE_COMMENT_SYSTEM = [
    "You write brief first-person comments for Linear issues.",
    "Cover recent changes only, not the whole PR history.",
    "Sound like a teammate posting an update, in one or two sentences.",
]

EXPLAIN_ERROR_SYSTEM = [
    "You explain technical errors in plain language.",
    "Focus on clear, actionable fixes.",
    "For linter or type-checker failures, name the violated rule and how to fix it.",
]


def _hint(label: str, hint: Optional[str]) -> str:
    if hint and hint.strip():
        return f"\n\n{label}:\n{hint.strip()}"
    return ""


def commit_prompt(diff_summary: str, diff_excerpt: str, hint: Optional[str] = None) -> str:
    types_list = "\n".join(f"- {name}: {desc}" for name, desc in COMMIT_TYPES.items())
    return f"""Analyze this git diff and generate a structured commit message. Prefer the user's description for intent and use the diff to keep it correct.

Commit types:
{types_list}

Summary of changes:
{diff_summary}

Detailed changes (truncated):
{diff_excerpt}{_hint("User's description of changes (heavily prioritize this for intent)", hint)}

Respond with JSON containing:
- type: one of [{", ".join(COMMIT_TYPES)}]
- scope: optional area without parentheses (e.g. "auth", "ui")
- description: at most 50 characters, a complete phrase that does not end mid-word"""


def pr_prompt(
    branch: str,
    commit_count: int,
    commit_log: str,
    diff_summary: str,
    diff_excerpt: str,
    hint: Optional[str] = None,
    issue_id: Optional[str] = None
) -> str:
    issue_context = ""
    fields = "'title' and 'description'"
    if issue_id:
        issue_context = (
            f"\n\nThis branch is linked to Linear issue {issue_id}. Also write a short "
            "first-person comment for that issue saying I opened a PR and what the key "
            "changes are, in 'linear_comment'."
        )
        fields = "'title', 'description' and 'linear_comment'"

    return f"""Based on the following changes, write a concise PR title (70 characters at most) and a detailed PR description. Describe only WHAT changed. The description should cover:
- a summary of what changed
- the key areas, components or files affected
- user-visible or API changes
- migration steps or follow-ups, if any

Branch: {branch}
Commits: {commit_count}
Commit messages:
{commit_log}{_hint("User's description of changes", hint)}{issue_context}

Files changed summary:
{diff_summary}

Detailed changes (truncated):
{diff_excerpt}

Respond with JSON containing {fields}. Use markdown in the description. The title must be 70 characters or fewer."""


def issue_prompt(diff_summary: str, diff_excerpt: str, hint: Optional[str] = None) -> str:
    labels = ", ".join(f'"{label}"' for label in ISSUE_LABELS)
    return f"""Write a Linear issue title, description and metadata from the developer's intent and the code changes. The developer's description is the primary source.{_hint("Developer's description of the work (HEAVILY PRIORITIZE THIS)", hint)}

Summary of changes:
{diff_summary}

Detailed changes (truncated):
{diff_excerpt}

Guidelines:
- Base the title on what the developer said they are doing
- Keep the description to what the code actually implements, 2-3 sentences
- Priority: 3 (Medium) by default; 2 (High) for bugs or blocking fixes; 1 (Urgent) for critical bugs
- Estimate: 0=none, 1=-, 2=XS, 3=S, 4=M, 5=L, 6=XL, judged from lines, files and logic complexity
- Label: the single best of [{labels}]
  * Bug: fixes and error handling
  * Feature: new user-facing functionality
  * Improvement: refactoring or enhancement of existing features
  * Chore: tooling, dependencies, build
  * L10: localization
  * Research: investigation or proof of concept

Respond with JSON containing title (max 200 chars), description, priority (0-4), estimate (0-6, optional) and suggested_label (optional)."""


def update_comment_prompt(recent_commits: str, recent_diff: str, hint: Optional[str] = None) -> str:
    return f"""Based on the recent changes to this PR, write a brief, casual first-person comment for a Linear issue. It should:
- read like an update to teammates
- cover only what changed recently
- be one or two sentences
- use first person ("I updated...", "I fixed...")
- leave out links and automation notes

Recent commits on this branch:
{recent_commits}{_hint("User's description of this update", hint)}

Recent changes summary:
{recent_diff}

Respond with JSON containing 'comment'."""


def explain_error_prompt(error_output: str) -> str:
    return f"""A pre-commit hook failed. Explain this error with specific, actionable guidance.

Error output:
{error_output[:2000]}

In 2-4 sentences:
1. Name the specific problem
2. Say why it happens
3. Give the exact steps to fix it

Reference files and lines when the output shows them."""
