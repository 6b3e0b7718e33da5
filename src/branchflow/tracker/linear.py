"""Linear GraphQL API client."""

import shlex
from typing import Any, Dict, List, Optional

import requests

from .issues import clean_title, issue_number, issue_team_key
from ..core.branches import assert_not_protected
from ..core.shell import CommandRunner
from ..models.types import CreatedIssue, IssueLabel, IssueMetadata
from ..utils.errors import IssueTrackerError, ProtectedBranchError
from ..utils.logger import Logger

LINEAR_API_URL = "https://api.linear.app/graphql"
COMMENT_FOOTER = "_Automated via branchflow_"

TEAM_KEYS = ("dev", "development")


class LinearClient:
    """Minimal Linear client. Every public method reports failures and
    returns None or False instead of raising."""

    def __init__(self, api_key: str, url: str = LINEAR_API_URL, timeout: int = 30):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def execute(self, query: str, variables: Optional[dict] = None) -> Dict[str, Any]:
        """Run one GraphQL request and return its ``data``.

        Raises IssueTrackerError on transport, decoding or GraphQL errors.
        """
        try:
            response = requests.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                # Linear API keys are sent without a Bearer prefix
                headers={"Authorization": self.api_key, "Content-Type": "application/json"},
                timeout=self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            raise IssueTrackerError(f"Linear API error: {e}") from e
        except ValueError as e:
            raise IssueTrackerError(f"Linear API returned invalid JSON: {e}") from e

        if result.get("errors"):
            raise IssueTrackerError(f"Linear GraphQL error: {result['errors']}")
        if result.get("data") is None:
            raise IssueTrackerError("Linear API returned no data")
        return result["data"]

    def query(self, query: str, variables: Optional[dict] = None) -> Optional[Dict[str, Any]]:
        """Like execute, but logs the failure and returns None."""
        try:
            return self.execute(query, variables)
        except IssueTrackerError as e:
            Logger.error(str(e))
            return None

    def _find_team(self) -> Optional[Dict[str, Any]]:
        data = self.query("query { teams { nodes { id key name } } }")
        if not data:
            return None

        teams = data["teams"]["nodes"]
        for team in teams:
            key = team["key"].lower()
            if key in TEAM_KEYS or "dev" in team["name"].lower():
                return team

        Logger.error("DEV team not found in Linear")
        available = ", ".join(f"{t['name']} ({t['key']})" for t in teams)
        Logger.info(f"Available teams: {available or 'none'}")
        return None

    def create_issue(
        self,
        title: str,
        description: str,
        metadata: Optional[IssueMetadata] = None
    ) -> Optional[CreatedIssue]:
        Logger.start("Creating Linear issue...")
        team = self._find_team()
        if not team:
            return None

        issue_input: Dict[str, Any] = {
            "teamId": team["id"],
            "title": title,
            "description": description,
        }
        if metadata:
            issue_input["priority"] = metadata.priority
            if metadata.estimate:
                issue_input["estimate"] = metadata.estimate
            if metadata.label_ids:
                issue_input["labelIds"] = metadata.label_ids

        data = self.query(
            """
            mutation($input: IssueCreateInput!) {
              issueCreate(input: $input) {
                success
                issue { id identifier title description url }
              }
            }
            """,
            {"input": issue_input}
        )
        payload = (data or {}).get("issueCreate") or {}
        if not payload.get("success") or not payload.get("issue"):
            Logger.fail("Failed to create Linear issue")
            return None

        issue = CreatedIssue(**payload["issue"])
        Logger.success(f"Created Linear issue: {issue.identifier}")
        return issue

    def fetch_labels(self) -> Optional[List[IssueLabel]]:
        data = self.query("query { issueLabels { nodes { id name color } } }")
        if data is None:
            Logger.fail("Failed to fetch Linear labels")
            return None
        labels = [IssueLabel(**node) for node in data["issueLabels"]["nodes"]]
        Logger.debug(f"Found {len(labels)} Linear labels")
        return labels

    def find_issue(self, identifier: str) -> Optional[Dict[str, Any]]:
        """Look up an issue by team key and number."""
        number = issue_number(identifier)
        if number is None:
            Logger.error(f"Invalid Linear issue identifier: {identifier}")
            return None

        data = self.query(
            """
            query($number: Float!, $team: String!) {
              issues(filter: { number: { eq: $number }, team: { key: { eq: $team } } }) {
                nodes { id identifier title url }
              }
            }
            """,
            {"number": number, "team": issue_team_key(identifier)}
        )
        nodes = (data or {}).get("issues", {}).get("nodes", [])
        if not nodes:
            Logger.error(f"Linear issue {identifier} not found")
            return None
        return nodes[0]

    def _update(self, issue_id: str, fields: Dict[str, Any]) -> bool:
        data = self.query(
            """
            mutation($id: String!, $input: IssueUpdateInput!) {
              issueUpdate(id: $id, input: $input) { success }
            }
            """,
            {"id": issue_id, "input": fields}
        )
        return bool(data and data.get("issueUpdate", {}).get("success"))

    def _comments(self, issue_id: str) -> List[str]:
        data = self.query(
            """
            query($id: String!) {
              issue(id: $id) { comments { nodes { body } } }
            }
            """,
            {"id": issue_id}
        )
        if not data or not data.get("issue"):
            return []
        return [c["body"] for c in data["issue"]["comments"]["nodes"]]

    def _comment(self, issue_id: str, body: str) -> bool:
        data = self.query(
            """
            mutation($input: CommentCreateInput!) {
              commentCreate(input: $input) { success }
            }
            """,
            {"input": {"issueId": issue_id, "body": body}}
        )
        return bool(data and data.get("commentCreate", {}).get("success"))

    def update_issue(self, identifier: str, title: str, description: str) -> bool:
        Logger.start(f"Updating Linear issue {identifier}...")
        issue = self.find_issue(identifier)
        if not issue:
            return False
        if not self._update(issue["id"], {"title": title, "description": description}):
            Logger.fail(f"Failed to update Linear issue {identifier}")
            return False
        Logger.success(f"Updated Linear issue: {identifier}")
        return True

    def link_issue_to_pr(
        self,
        identifier: str,
        pr_title: str,
        pr_url: str,
        is_update: bool = False,
        custom_comment: Optional[str] = None
    ) -> bool:
        """Retitle the issue after the PR and leave a comment linking to it.

        New PRs get one comment, skipped when a comment already mentions
        ``pr_url``. Updates only comment when ``custom_comment`` is given.
        """
        action = "Updating" if is_update else "Linking"
        Logger.start(f"{action} Linear issue {identifier} to PR...")

        issue = self.find_issue(identifier)
        if not issue:
            return False

        if not self._update(issue["id"], {"title": clean_title(pr_title)}):
            Logger.fail(f"Failed to link Linear issue {identifier} to PR")
            return False

        body = None
        if not is_update:
            if not any(pr_url in comment for comment in self._comments(issue["id"])):
                if custom_comment:
                    body = f"{custom_comment} [Link to PR]({pr_url})\n\n{COMMENT_FOOTER}"
                else:
                    body = f"I created a PR for this: [{pr_title}]({pr_url})\n\n{COMMENT_FOOTER}"
        elif custom_comment:
            body = f"{custom_comment} [Link to PR]({pr_url})\n\n{COMMENT_FOOTER}"

        if body and not self._comment(issue["id"], body):
            Logger.warn(f"Could not comment on Linear issue {identifier}")

        Logger.success(f"Linear issue {identifier} {'updated' if is_update else 'linked to PR'}")
        return True


def rename_branch(runner: CommandRunner, new_branch: str, current_branch: str) -> bool:
    """Rename the current branch locally and on origin.

    Two phases, not atomic:

    1. ``git branch -m`` locally, then delete the old ref on origin.
    2. push the new ref with upstream tracking.

    If phase 2 fails the remote has neither name; the user is told to run
    ``git push -u origin <new>`` to recover.
    """
    try:
        assert_not_protected(current_branch, "rename")
        assert_not_protected(new_branch, "rename onto")
    except ProtectedBranchError as e:
        Logger.fail(str(e))
        return False

    old, new = shlex.quote(current_branch), shlex.quote(new_branch)
    Logger.start(f"Renaming branch {current_branch} -> {new_branch}...")

    if not runner.run_silent(f"git branch -m {old} {new}"):
        Logger.fail(f"Failed to rename local branch {current_branch}")
        return False

    if runner.run_silent(f"git ls-remote --exit-code --heads origin {old}", timeout=5):
        if not runner.run_silent(f"git push origin --delete {old}"):
            Logger.warn(f"Could not delete remote branch {current_branch}; remove it manually")

    if not runner.run_silent(f"git push -u origin {new}"):
        Logger.fail(f"Renamed locally but failed to push {new_branch}")
        Logger.info(f"Recover with: git push -u origin {new_branch}")
        return False

    Logger.success(f"Branch renamed to {new_branch}")
    return True
