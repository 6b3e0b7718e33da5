"""
branchflow - git-flow automation with AI-drafted messages
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Drives feature, release and hotfix branches against main/develop/staging,
drafts commit messages and pull requests with Gemini, and keeps Linear
issues in sync.

Basic usage:
    >>> from branchflow import FlowContext
    >>> from branchflow.workflows.commit import CommitWorkflow
    >>> ctx = FlowContext.create(".")
    >>> CommitWorkflow(ctx).run()
"""

__version__ = "0.1.0"

from .core.context import FlowContext
from .core.branches import BranchType, classify, base_branch_for, is_protected
from .workflows.base import Outcome

__all__ = [
    "FlowContext",
    "BranchType",
    "classify",
    "base_branch_for",
    "is_protected",
    "Outcome",
]
