import azure.functions as func
import logging
import json
import os
import hmac
import hashlib
from typing import Any, Dict, Mapping, Optional

import requests

from approveops import ApprovalConfig, ApprovalValidator, GitHubClient, RunContext, is_approval_command
from approveops.approval_validator import REPLY_PREFIX
from approveops.errors import ConfigurationError, TeamNotFoundError

app = func.FunctionApp()


def json_response(body: Dict[str, Any], status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body),
        status_code=status_code,
        mimetype="application/json"
    )


def context_from_payload(payload: Dict[str, Any]) -> RunContext:
    """
    Build the run context from an issue_comment webhook payload.

    Raises:
        ValueError: If the repository or issue cannot be determined
    """
    repository = payload.get("repository") or {}
    issue = payload.get("issue") or {}
    comment = payload.get("comment") or {}

    owner = (repository.get("owner") or {}).get("login")
    repo = repository.get("name")
    issue_number = issue.get("number")
    if not owner or not repo or issue_number is None:
        raise ValueError("payload is missing repository.owner.login, repository.name or issue.number")

    return RunContext(
        owner=owner,
        repo=repo,
        issue_number=int(issue_number),
        triggering_actor=(comment.get("user") or {}).get("login") or (payload.get("sender") or {}).get("login", ""),
        repository_url=repository.get("html_url") or f"https://github.com/{owner}/{repo}",
    )


def skip_reason(payload: Dict[str, Any], trigger_command: Optional[str] = None) -> Optional[str]:
    """
    Return why a comment should not start an approval check, or None to run it.

    Replies posted by the gate come back as new deliveries, so bot comments and
    the gate's own replies are never acted on.
    """
    comment = payload.get("comment") or {}
    user = comment.get("user") or {}
    body = comment.get("body") or ""

    if user.get("type") == "Bot":
        return f"Comment author {user.get('login')} is a bot"
    if body.lstrip().startswith(REPLY_PREFIX):
        return "Comment is an approval gate reply"
    if trigger_command is not None and not is_approval_command(body, trigger_command):
        return f"Comment is not the '{trigger_command}' command"
    return None


@app.function_name(name="ApprovalWebhook")
@app.route(route="approval-webhook", auth_level=func.AuthLevel.FUNCTION, methods=["POST"])
def approval_webhook(req: func.HttpRequest) -> func.HttpResponse:
    return handle_webhook(req)


def handle_webhook(req: func.HttpRequest, environ: Optional[Mapping[str, str]] = None,
                   github_client: Optional[GitHubClient] = None) -> func.HttpResponse:
    """
    Handle a GitHub issue_comment webhook and run the approval check.

    This function:
    1. Verifies the webhook signature when a secret is configured
    2. Skips anything other than a newly created trigger command comment,
       including bot comments and the gate's own replies
    3. Looks for the approval command from a member of the approver team
    4. Replies on the thread and reports the decision in the response
    """
    logging.info('ApproveOps webhook function received a request.')
    environ = os.environ if environ is None else environ

    try:
        req_body = req.get_json()

        webhook_secret = environ.get("GITHUB_WEBHOOK_SECRET")
        if webhook_secret:
            signature = req.headers.get("X-Hub-Signature-256")
            if not verify_signature(req.get_body(), signature, webhook_secret):
                logging.error("Invalid webhook signature")
                return json_response({"error": "Invalid signature"}, status_code=401)

        event_type = req.headers.get("X-GitHub-Event", "")
        action = req_body.get("action")
        if event_type != "issue_comment" or action != "created":
            logging.warning(f"Received non issue comment event: {event_type}, action: {action}")
            return json_response({"message": "Not a new issue comment, skipping", "skipped": True})

        reason = skip_reason(req_body)
        if reason:
            logging.info(f"{reason}, skipping")
            return json_response({"message": f"{reason}, skipping", "skipped": True})

        config = ApprovalConfig.from_app_settings(environ)
        trigger_command = (environ.get("TRIGGER_COMMAND") or "").strip()
        if not trigger_command:
            raise ConfigurationError("Input required and not supplied: TRIGGER_COMMAND")

        reason = skip_reason(req_body, trigger_command)
        if reason:
            logging.info(f"{reason}, skipping")
            return json_response({"message": f"{reason}, skipping", "skipped": True})

        context = context_from_payload(req_body)
        logging.info(f"Processing approval check for {context.owner}/{context.repo}#{context.issue_number}")

        if github_client is None:
            with GitHubClient(config.token) as client:
                validator = ApprovalValidator(client, config)
                decision = validator.evaluate(context)
        else:
            validator = ApprovalValidator(github_client, config)
            decision = validator.evaluate(context)

        if decision.approved:
            return json_response({
                "approved": True,
                "approver": decision.approver,
                "comment_id": decision.comment_id,
            })

        message = validator.missing_approval_message(context)
        if not config.fail_if_approval_not_found:
            logging.warning(message)
            return json_response({"approved": False, "notice": message})

        logging.error(message)
        return json_response({"approved": False, "error": message}, status_code=403)

    except ValueError as ve:
        error_msg = f"Invalid request body: {str(ve)}"
        logging.error(error_msg)
        return json_response({"error": error_msg}, status_code=400)

    except TeamNotFoundError as e:
        logging.error(str(e))
        return json_response({"error": str(e)}, status_code=404)

    except ConfigurationError as e:
        error_msg = f"Configuration is missing: {str(e)}"
        logging.error(error_msg)
        return json_response({"error": error_msg}, status_code=500)

    except requests.exceptions.RequestException as e:
        error_msg = f"GitHub API request failed: {str(e)}"
        logging.error(error_msg)
        if e.response is not None:
            logging.error(f"Response: {e.response.text}")
        return json_response({"error": error_msg}, status_code=502)

    except Exception as e:
        error_msg = f"Unexpected error processing webhook: {str(e)}"
        logging.error(error_msg, exc_info=True)
        return json_response({"error": error_msg}, status_code=500)


def verify_signature(payload_body: bytes, signature_header: str, secret: str) -> bool:
    """
    Verify that the payload was sent from GitHub by validating SHA256 signature.

    Args:
        payload_body: Request body bytes
        signature_header: X-Hub-Signature-256 header value
        secret: GitHub webhook secret

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature_header:
        return False

    hash_object = hmac.new(secret.encode('utf-8'), msg=payload_body, digestmod=hashlib.sha256)
    expected_signature = "sha256=" + hash_object.hexdigest()

    return hmac.compare_digest(expected_signature, signature_header)
