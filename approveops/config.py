"""
Approval settings, loaded from GitHub Actions inputs or Function App settings.
"""
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from .errors import ConfigurationError

# Setting name -> (action input name, function app env var)
SETTINGS = {
    "token": ("token", "GITHUB_TOKEN"),
    "approve_command": ("approve-command", "APPROVE_COMMAND"),
    "team_name": ("team-name", "TEAM_NAME"),
    "fail_if_approval_not_found": ("fail-if-approval-not-found", "FAIL_IF_APPROVAL_NOT_FOUND"),
    "post_successful_approval_comment": ("post-successful-approval-comment", "POST_SUCCESSFUL_APPROVAL_COMMENT"),
    "successful_approval_comment": ("successful-approval-comment", "SUCCESSFUL_APPROVAL_COMMENT"),
}

BOOLEAN_SETTINGS = ("fail_if_approval_not_found", "post_successful_approval_comment")


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def input_env_name(name: str) -> str:
    """Environment variable the Actions runner uses for an input, e.g. INPUT_TEAM-NAME."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


@dataclass(frozen=True)
class ApprovalConfig:
    token: str
    approve_command: str
    team_name: str
    fail_if_approval_not_found: bool
    post_successful_approval_comment: bool
    successful_approval_comment: str

    @classmethod
    def _load(cls, lookup: Callable[[str], Optional[str]], describe: Callable[[str], str]) -> "ApprovalConfig":
        values = {}
        for field in SETTINGS:
            raw = (lookup(field) or "").strip()
            if not raw:
                raise ConfigurationError(f"Input required and not supplied: {describe(field)}")
            values[field] = parse_bool(raw) if field in BOOLEAN_SETTINGS else raw
        return cls(**values)

    @classmethod
    def from_action_inputs(cls, environ: Optional[Mapping[str, str]] = None) -> "ApprovalConfig":
        """
        Load settings from the INPUT_* variables set by the Actions runner.

        Args:
            environ: Environment mapping, defaults to os.environ

        Raises:
            ConfigurationError: If an input is missing or empty
        """
        environ = os.environ if environ is None else environ
        return cls._load(
            lambda field: environ.get(input_env_name(SETTINGS[field][0])),
            lambda field: SETTINGS[field][0],
        )

    @classmethod
    def from_app_settings(cls, environ: Optional[Mapping[str, str]] = None) -> "ApprovalConfig":
        """Load settings from Function App settings such as TEAM_NAME."""
        environ = os.environ if environ is None else environ
        return cls._load(
            lambda field: environ.get(SETTINGS[field][1]),
            lambda field: SETTINGS[field][1],
        )
