import json

import pytest
import responses

import action_main
from approveops import ConfigurationError

from .conftest import API

MEMBERS_URL = f"{API}/orgs/test-owner/teams/approver-team/members"
COMMENTS_URL = f"{API}/repos/test-owner/test-repo/issues/1/comments"


@pytest.fixture
def environ(tmp_path, action_inputs):
    event = {
        "action": "created",
        "issue": {"number": 1},
        "comment": {"user": {"login": "test-user"}},
        "repository": {"html_url": "https://github.com/test-owner/test-repo"},
    }
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps(event))
    output_path = tmp_path / "output"
    output_path.write_text("")

    env = dict(action_inputs)
    env.update({
        "GITHUB_REPOSITORY": "test-owner/test-repo",
        "GITHUB_RUN_ID": "12345",
        "GITHUB_EVENT_PATH": str(event_path),
        "GITHUB_OUTPUT": str(output_path),
    })
    return env


def read_output(environ):
    with open(environ["GITHUB_OUTPUT"], encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    assert lines[0].startswith("approved<<")
    assert lines[2] == lines[0].split("<<", 1)[1]
    return lines[1]


@responses.activate
def test_run_approved(environ):
    responses.add(responses.GET, MEMBERS_URL, json=[{"login": "team-member"}])
    responses.add(responses.GET, COMMENTS_URL, json=[{"id": 1, "body": "/approve", "user": {"login": "team-member"}}])
    responses.add(responses.POST, COMMENTS_URL, status=201, json={"id": 2})

    assert action_main.run(environ) == 0
    assert read_output(environ) == "true"
    assert json.loads(responses.calls[2].request.body) == {"body": "Hey, @test-user!\n:tada: Approved!"}


@responses.activate
def test_run_non_member_fails(environ, capsys):
    responses.add(responses.GET, MEMBERS_URL, json=[{"login": "team-member"}])
    responses.add(responses.GET, COMMENTS_URL, json=[{"id": 1, "body": "/approve", "user": {"login": "non-member"}}])
    responses.add(responses.POST, COMMENTS_URL, status=201, json={"id": 2})

    assert action_main.run(environ) == 1
    assert read_output(environ) == "false"
    out = capsys.readouterr().out
    assert "::error::There is no /approve command in the comments from someone in the @test-owner/approver-team team" in out
    posted = json.loads(responses.calls[2].request.body)["body"]
    assert "https://github.com/test-owner/test-repo/actions/runs/12345" in posted


@responses.activate
def test_run_soft_mode_emits_notice(environ, capsys):
    environ["INPUT_FAIL-IF-APPROVAL-NOT-FOUND"] = "false"
    responses.add(responses.GET, MEMBERS_URL, json=[{"login": "team-member"}])
    responses.add(responses.GET, COMMENTS_URL, json=[])
    responses.add(responses.POST, COMMENTS_URL, status=201, json={"id": 2})

    assert action_main.run(environ) == 0
    assert read_output(environ) == "false"
    assert "::notice::There is no /approve command" in capsys.readouterr().out


@responses.activate
def test_run_team_not_found_fails(environ, capsys):
    responses.add(responses.GET, MEMBERS_URL, status=404, json={"message": "Not Found"})

    assert action_main.run(environ) == 1
    assert "::error::Team 'approver-team' doesn't exist" in capsys.readouterr().out
    assert len(responses.calls) == 1


def test_run_missing_input_fails(environ, capsys):
    del environ["INPUT_TOKEN"]

    assert action_main.run(environ) == 1
    assert "::error::Input required and not supplied: token" in capsys.readouterr().out


def test_set_output_without_file(capsys):
    action_main.set_output("approved", "true", {})

    assert capsys.readouterr().out.strip() == "::set-output name=approved::true"


def test_build_context_from_pull_request_event():
    context = action_main.build_context(
        {"GITHUB_REPOSITORY": "o/r", "GITHUB_ACTOR": "runner-actor", "GITHUB_RUN_ID": "7"},
        event={"pull_request": {"number": 42}},
    )

    assert context.issue_number == 42
    assert context.triggering_actor == "runner-actor"
    assert context.run_url == "https://github.com/o/r/actions/runs/7"


def test_build_context_requires_issue_number():
    with pytest.raises(ConfigurationError):
        action_main.build_context({"GITHUB_REPOSITORY": "o/r"}, event={})


@responses.activate
def test_run_writes_output_before_a_failed_success_comment(environ, capsys):
    responses.add(responses.GET, MEMBERS_URL, json=[{"login": "team-member"}])
    responses.add(responses.GET, COMMENTS_URL, json=[{"id": 1, "body": "/approve", "user": {"login": "team-member"}}])
    responses.add(responses.POST, COMMENTS_URL, status=403, json={"message": "Resource not accessible by integration"})

    assert action_main.run(environ) == 1
    assert read_output(environ) == "true"
    assert "::error::403 Client Error" in capsys.readouterr().out


@responses.activate
def test_run_fails_when_reminder_comment_cannot_be_posted(environ, capsys):
    environ["INPUT_FAIL-IF-APPROVAL-NOT-FOUND"] = "false"
    responses.add(responses.GET, MEMBERS_URL, json=[{"login": "team-member"}])
    responses.add(responses.GET, COMMENTS_URL, json=[])
    responses.add(responses.POST, COMMENTS_URL, status=500)

    assert action_main.run(environ) == 1
    assert read_output(environ) == "false"
    out = capsys.readouterr().out
    assert "::error::500 Server Error" in out
    assert "::notice::" not in out
