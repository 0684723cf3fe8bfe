"""
ApproveOps - gate workflow runs on an approval comment from a team member.

This package contains the GitHub API client, the approval validator and
configuration loading shared by the Actions and Azure Functions entrypoints.
"""

from .approval_validator import ApprovalValidator, find_approval, is_approval_command, normalize_command
from .config import ApprovalConfig
from .errors import ApproveOpsError, ConfigurationError, TeamNotFoundError
from .github_client import GitHubClient
from .models import ApprovalDecision, Comment, RunContext

__all__ = [
    "ApprovalConfig",
    "ApprovalDecision",
    "ApprovalValidator",
    "ApproveOpsError",
    "Comment",
    "ConfigurationError",
    "GitHubClient",
    "RunContext",
    "TeamNotFoundError",
    "find_approval",
    "is_approval_command",
    "normalize_command",
]
