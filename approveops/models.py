"""
Data objects passed between the GitHub client, the validator and the entrypoints.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Comment:
    """A single comment on an issue or pull request thread."""

    id: int
    body: str
    author: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Comment":
        user = data.get("user") or {}
        return cls(
            id=data["id"],
            body=data.get("body") or "",
            author=user.get("login", ""),
        )


@dataclass(frozen=True)
class ApprovalDecision:
    approved: bool
    approver: Optional[str] = None
    comment_id: Optional[int] = None


@dataclass(frozen=True)
class RunContext:
    """
    Identifies the thread being checked and the run that asked for approval.

    Attributes:
        owner: Repository owner, also used as the organization for team lookups
        repo: Repository name
        issue_number: Issue or pull request number
        triggering_actor: Login of the user whose comment triggered the run
        repository_url: HTML URL of the repository
        run_id: Workflow run ID, when running inside GitHub Actions
    """

    owner: str
    repo: str
    issue_number: int
    triggering_actor: str
    repository_url: str
    run_id: Optional[str] = None

    @property
    def run_url(self) -> str:
        if self.run_id:
            return f"{self.repository_url}/actions/runs/{self.run_id}"
        # Webhook deliveries carry no run, so point at the thread instead
        return f"{self.repository_url}/issues/{self.issue_number}"
