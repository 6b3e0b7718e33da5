"""Interactive Linear issue creation."""

from typing import Optional

from ..core.branches import is_protected
from ..core.context import FlowContext
from ..models.types import IssueContent, IssueMetadata
from ..tracker.issues import ESTIMATE_NAMES, PRIORITY_NAMES, generate_branch_name
from ..tracker.linear import LinearClient, rename_branch
from ..ui.prompts import Prompter
from ..utils.logger import Logger, console

LINEAR_KEY_URL = "https://linear.app/settings/api"


def _label_id(tracker: LinearClient, name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    labels = tracker.fetch_labels() or []
    return next((label.id for label in labels if label.name == name), None)


def confirm_issue_metadata(
    prompter: Prompter,
    tracker: LinearClient,
    content: IssueContent
) -> Optional[IssueMetadata]:
    """Let the user accept or adjust the suggested priority, estimate and label.

    Returns None when the user cancels issue creation.
    """
    estimate = content.estimate
    Logger.box(
        f"Priority: {PRIORITY_NAMES[content.priority]}\n"
        f"Estimate: {ESTIMATE_NAMES[estimate] if estimate else 'Not set'}\n"
        f"Label: {content.suggested_label or 'Not set'}",
        title="AI suggestions"
    )

    if prompter.confirm("Accept all AI suggestions?", default=True):
        label_id = _label_id(tracker, content.suggested_label)
        return IssueMetadata(
            priority=content.priority,
            estimate=estimate,
            label_ids=[label_id] if label_id else []
        )

    choice = prompter.select(
        "What would you like to change?",
        [
            ("priority", "Priority"),
            ("estimate", "Estimate"),
            ("label", "Label"),
            ("all", "All fields"),
            ("cancel", "Cancel issue creation"),
        ]
    )
    if choice == "cancel":
        return None

    priority = content.priority
    label_ids = []

    if choice in ("priority", "all"):
        priority = int(prompter.select(
            "Select priority:",
            [(str(i), f"{name} ({i})") for i, name in enumerate(PRIORITY_NAMES)],
            default=str(content.priority)
        ))

    if choice in ("estimate", "all"):
        estimate = int(prompter.select(
            "Select estimate:",
            [(str(i), f"{name} ({i})") for i, name in enumerate(ESTIMATE_NAMES)],
            default=str(estimate or 0)
        )) or None

    if choice in ("label", "all"):
        labels = tracker.fetch_labels()
        if labels:
            suggested = next(
                (label.id for label in labels if label.name == content.suggested_label), "none"
            )
            picked = prompter.select(
                "Select label:",
                [("none", "No label")] + [(label.id, label.name) for label in labels],
                default=suggested
            )
            if picked != "none":
                label_ids = [picked]
    else:
        label_id = _label_id(tracker, content.suggested_label)
        label_ids = [label_id] if label_id else []

    return IssueMetadata(priority=priority, estimate=estimate, label_ids=label_ids)


def offer_issue_creation(ctx: FlowContext, branch: str) -> Optional[str]:
    """Offer to file a Linear issue for the staged work and rename ``branch`` after it.

    Returns the new branch name, or None when nothing was renamed.
    """
    if is_protected(branch):
        Logger.debug(f"Not offering a Linear issue on protected branch {branch}")
        return None

    Logger.warn("No Linear issue detected in branch name.")
    Logger.note(f"Current branch: {branch}")

    prompter = ctx.prompter
    if not prompter.confirm("Create a Linear issue for this work?", default=True):
        return None

    tracker = ctx.tracker
    if tracker is None:
        Logger.fail("Linear API key not configured.")
        Logger.info("Run: branchflow config init")
        Logger.info(f"You can find your API key at: {LINEAR_KEY_URL}")
        return None

    if ctx.generator is None:
        Logger.warn("Google AI key not configured; skipping Linear issue drafting.")
        return None

    hint = prompter.text(
        "Briefly describe what this work accomplishes (helps AI draft the issue)",
        default=""
    )
    content = ctx.generator.generate_issue_content(hint)
    if content is None:
        return None

    Logger.box(f"Title: {content.title}")
    console.print(content.description)

    action = prompter.select(
        "What would you like to do?",
        [
            ("create", "Create Linear issue with this content"),
            ("edit", "Edit the title and description"),
            ("skip", "Skip Linear issue creation"),
        ]
    )
    if action == "skip":
        return None

    if action == "edit":
        title = prompter.text(
            "Issue title",
            default=content.title,
            validate=lambda v: None if 0 < len(v) <= 200 else "Title must be 1-200 characters"
        )
        description = prompter.text("Issue description", default=content.description)
        content = content.model_copy(update={"title": title, "description": description or content.description})

    metadata = confirm_issue_metadata(prompter, tracker, content)
    if metadata is None:
        Logger.note("Linear issue creation cancelled by user")
        return None

    issue = tracker.create_issue(content.title, content.description, metadata)
    if issue is None:
        return None
    Logger.success(f"Linear issue created: {issue.url}")

    new_branch = generate_branch_name(issue.identifier, branch)
    Logger.note(f"Renaming branch to {new_branch} to link with the Linear issue...")
    if rename_branch(ctx.runner, new_branch, branch):
        return new_branch
    return None
