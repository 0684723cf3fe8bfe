"""
Exceptions raised by the approval gate.
"""


class ApproveOpsError(Exception):
    """Base class for approval gate errors."""


class TeamNotFoundError(ApproveOpsError):
    """Raised when the approver team does not exist or the token cannot see it."""

    def __init__(self, team_slug: str):
        self.team_slug = team_slug
        super().__init__(f"Team '{team_slug}' doesn't exist or the token doesn't have access to it")


class ConfigurationError(ApproveOpsError):
    """Raised when a required setting is missing."""
