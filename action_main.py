"""
GitHub Actions entrypoint.

Reads the action inputs and the workflow event, runs the approval check and
reports the result with workflow commands and the step output file.
"""
import json
import logging
import os
import sys
import uuid
from typing import Any, Dict, Mapping, Optional

from approveops import ApprovalConfig, ApprovalValidator, GitHubClient, RunContext
from approveops.errors import ConfigurationError


def set_output(name: str, value: str, environ: Mapping[str, str]) -> None:
    """Write a step output to $GITHUB_OUTPUT, or as a workflow command on old runners."""
    output_file = environ.get("GITHUB_OUTPUT")
    if not output_file:
        print(f"::set-output name={name}::{value}")
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(output_file, "a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def notice(message: str) -> None:
    print(f"::notice::{message}")


def set_failed(message: str) -> None:
    print(f"::error::{message}")


def load_event(environ: Mapping[str, str]) -> Dict[str, Any]:
    event_path = environ.get("GITHUB_EVENT_PATH")
    if not event_path or not os.path.exists(event_path):
        return {}
    with open(event_path, encoding="utf-8") as fh:
        return json.load(fh)


def build_context(environ: Mapping[str, str], event: Optional[Dict[str, Any]] = None) -> RunContext:
    """
    Build the run context from the runner environment and the event payload.

    Raises:
        ConfigurationError: If the repository or issue number cannot be determined
    """
    event = load_event(environ) if event is None else event

    repository = environ.get("GITHUB_REPOSITORY", "")
    if "/" not in repository:
        raise ConfigurationError("GITHUB_REPOSITORY is not set")
    owner, repo = repository.split("/", 1)

    issue = event.get("issue") or event.get("pull_request") or {}
    issue_number = issue.get("number")
    if issue_number is None:
        raise ConfigurationError("Could not determine the issue or pull request number from the event payload")

    comment_user = (event.get("comment") or {}).get("user") or {}
    triggering_actor = comment_user.get("login") or environ.get("GITHUB_ACTOR", "")

    server_url = environ.get("GITHUB_SERVER_URL", "https://github.com")
    repository_url = (event.get("repository") or {}).get("html_url") or f"{server_url}/{owner}/{repo}"

    return RunContext(
        owner=owner,
        repo=repo,
        issue_number=int(issue_number),
        triggering_actor=triggering_actor,
        repository_url=repository_url,
        run_id=environ.get("GITHUB_RUN_ID"),
    )


def run(environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Run the approval check.

    Returns:
        Process exit status: 1 when the run must fail, 0 otherwise
    """
    environ = os.environ if environ is None else environ

    try:
        config = ApprovalConfig.from_action_inputs(environ)
        context = build_context(environ)

        api_url = environ.get("GITHUB_API_URL", "https://api.github.com")
        with GitHubClient(config.token, base_url=api_url) as github_client:
            validator = ApprovalValidator(github_client, config)
            decision = validator.decide(context)

            # Written before posting so the output survives a failed reply
            set_output("approved", str(decision.approved).lower(), environ)
            validator.notify(context, decision)

        if decision.approved:
            return 0

        message = validator.missing_approval_message(context)
        if not config.fail_if_approval_not_found:
            notice(message)
            return 0

        set_failed(message)
        return 1

    except Exception as e:
        logging.error(f"Approval check failed: {e}", exc_info=True)
        set_failed(str(e))
        return 1


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)
    sys.exit(run())


if __name__ == "__main__":
    main()
