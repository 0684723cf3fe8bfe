"""Pytest configuration and shared fixtures."""

import pytest

from approveops import ApprovalConfig, Comment, RunContext

API = "https://api.github.com"


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient that records posted comments."""

    def __init__(self, members=(), comments=()):
        self.members = frozenset(members)
        self.comments = list(comments)
        self.posted = []
        self.calls = []

    def get_team_members(self, org, team_slug):
        self.calls.append(("members", org, team_slug))
        return self.members

    def list_issue_comments(self, repo_owner, repo_name, issue_number):
        self.calls.append(("comments", repo_owner, repo_name, issue_number))
        return list(self.comments)

    def create_issue_comment(self, repo_owner, repo_name, issue_number, body):
        self.posted.append(body)
        return {"id": 999, "body": body}


def make_comment(comment_id, body, author):
    return Comment(id=comment_id, body=body, author=author)


@pytest.fixture
def config():
    return ApprovalConfig(
        token="test-token",
        approve_command="/approve",
        team_name="approver-team",
        fail_if_approval_not_found=True,
        post_successful_approval_comment=True,
        successful_approval_comment=":tada: Approved!",
    )


@pytest.fixture
def run_context():
    return RunContext(
        owner="test-owner",
        repo="test-repo",
        issue_number=1,
        triggering_actor="test-user",
        repository_url="https://github.com/test-owner/test-repo",
        run_id="12345",
    )


@pytest.fixture
def action_inputs():
    return {
        "INPUT_TOKEN": "test-token",
        "INPUT_APPROVE-COMMAND": "/approve",
        "INPUT_TEAM-NAME": "approver-team",
        "INPUT_FAIL-IF-APPROVAL-NOT-FOUND": "true",
        "INPUT_POST-SUCCESSFUL-APPROVAL-COMMENT": "true",
        "INPUT_SUCCESSFUL-APPROVAL-COMMENT": ":tada: Approved!",
    }
