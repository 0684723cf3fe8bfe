"""
Approval Validator - decides whether a team member approved the run in the comments.
"""
import logging
from typing import Iterable, Optional

from .config import ApprovalConfig
from .models import ApprovalDecision, Comment, RunContext

# Every reply the gate posts starts with this
REPLY_PREFIX = "Hey, @"


def normalize_command(text: Optional[str]) -> str:
    """Drop every whitespace character, including tabs and newlines."""
    return "".join((text or "").split())


def is_approval_command(body: Optional[str], approve_command: str) -> bool:
    """
    Check whether a comment body is exactly the approval command.

    Whitespace is ignored everywhere, case is not. A command inside a longer
    sentence does not count.
    """
    return normalize_command(body) == normalize_command(approve_command)


def find_approval(comments: Iterable[Comment], team_members: frozenset, approve_command: str,
                  team_name: str = "") -> ApprovalDecision:
    """
    Scan comments in thread order and return the first approval by a team member.

    Matches from users outside the team are skipped.
    """
    for comment in comments:
        if not is_approval_command(comment.body, approve_command):
            logging.info(f"Approval command not found in comment id {comment.id}...")
            continue

        logging.info(f"Approval command found in comment id {comment.id}...")
        if comment.author in team_members:
            logging.info(f"Found {comment.author} in team: {team_name}")
            return ApprovalDecision(approved=True, approver=comment.author, comment_id=comment.id)

        logging.info(f"Not found {comment.author} in team: {team_name}")

    return ApprovalDecision(approved=False)


class ApprovalValidator:
    """Validates run approvals based on comments from team members."""

    def __init__(self, github_client, config: ApprovalConfig):
        """
        Initialize the approval validator.

        Args:
            github_client: GitHubClient instance
            config: Approval settings
        """
        self.github_client = github_client
        self.config = config

    def missing_approval_message(self, context: RunContext) -> str:
        return (
            f"There is no {self.config.approve_command} command in the comments "
            f"from someone in the @{context.owner}/{self.config.team_name} team"
        )

    def success_comment(self, context: RunContext) -> str:
        return f"{REPLY_PREFIX}{context.triggering_actor}!\n{self.config.successful_approval_comment}"

    def rejection_comment(self, context: RunContext) -> str:
        """
        Build the reminder posted when nobody approved the run.

        The status line depends on whether the run is going to be failed.
        """
        is_failure = self.config.fail_if_approval_not_found
        if is_failure:
            status_line = f"_:no_entry_sign: :no_entry: Marking the [workflow run]({context.run_url}) as failed_"
        else:
            status_line = f"_:warning: :pause_button: See [workflow run]({context.run_url}) for reference_"

        return (
            f"{REPLY_PREFIX}{context.triggering_actor}!\n"
            f":cry: No one approved your run yet! Have someone from the "
            f"@{context.owner}/{self.config.team_name} team {'comment' if is_failure else 'run'} "
            f"`{self.config.approve_command}` and then try your command again\n"
            f"\n"
            f"{status_line}"
        )

    def decide(self, context: RunContext) -> ApprovalDecision:
        """
        Look for an approval without posting anything.

        Args:
            context: The thread and run being checked

        Returns:
            The approval decision
        """
        team_name = self.config.team_name
        logging.info(f"Checking for '{self.config.approve_command}' command in comments "
                     f"from someone in the '{team_name}' team")

        logging.info(f"Getting team membership for: @{context.owner}/{team_name}...")
        team_members = self.github_client.get_team_members(context.owner, team_name)
        logging.info(f"Found {len(team_members)} team members")

        comments = self.github_client.list_issue_comments(context.owner, context.repo, context.issue_number)
        logging.info(f"Found {len(comments)} comments to check")

        return find_approval(comments, team_members, self.config.approve_command, team_name)

    def notify(self, context: RunContext, decision: ApprovalDecision) -> None:
        """Post the success or reminder comment for a decision."""
        if decision.approved:
            logging.info(f"Approval authorized by {decision.approver}")
            if self.config.post_successful_approval_comment:
                self.github_client.create_issue_comment(
                    context.owner, context.repo, context.issue_number, self.success_comment(context)
                )
        else:
            logging.info("Approval not found or not authorized")
            self.github_client.create_issue_comment(
                context.owner, context.repo, context.issue_number, self.rejection_comment(context)
            )

    def evaluate(self, context: RunContext) -> ApprovalDecision:
        """
        Look for an approval and post the matching feedback comment.

        Reporting a missing approval as a notice or a failure is left to the caller.
        """
        decision = self.decide(context)
        self.notify(context, decision)
        return decision
