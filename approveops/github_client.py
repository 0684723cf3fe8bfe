"""
GitHub API Client for reading team membership and issue comments, and posting replies.
"""
import requests
import logging
from typing import Any, Dict, Iterator, List, Optional

from .errors import TeamNotFoundError
from .models import Comment

PER_PAGE = 100


class GitHubClient:
    """Client for interacting with GitHub REST API."""

    def __init__(self, token: str, base_url: str = "https://api.github.com", session: Optional[requests.Session] = None):
        """
        Initialize GitHub client.

        Args:
            token: GitHub Personal Access Token or GitHub App token
            base_url: REST API root, override for GitHub Enterprise Server
            session: Optional requests session to reuse
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28"
        }

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _paginate(self, url: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """
        Yield every item of a list endpoint, following the Link header.

        Errors are raised as requests.HTTPError on the first failing page.
        """
        params = dict(params or {})
        params.setdefault("per_page", PER_PAGE)
        next_url: Optional[str] = url

        while next_url:
            response = self.session.get(next_url, headers=self.headers, params=params)
            response.raise_for_status()
            yield from response.json()

            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

    def get_team_members(self, org: str, team_slug: str) -> frozenset:
        """
        Get the logins of every member of a team.

        Args:
            org: Organization login
            team_slug: Team slug

        Returns:
            Set of member logins

        Raises:
            TeamNotFoundError: If the team does not exist or is not visible to the token
        """
        url = f"{self.base_url}/orgs/{org}/teams/{team_slug}/members"

        try:
            members = list(self._paginate(url))
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise TeamNotFoundError(team_slug) from e
            raise

        return frozenset(member["login"] for member in members)

    def list_issue_comments(self, repo_owner: str, repo_name: str, issue_number: int) -> List[Comment]:
        """
        Get all comments on an issue or pull request, oldest first.

        Args:
            repo_owner: Repository owner
            repo_name: Repository name
            issue_number: Issue or pull request number

        Returns:
            Comments in thread order
        """
        url = f"{self.base_url}/repos/{repo_owner}/{repo_name}/issues/{issue_number}/comments"
        return [Comment.from_api(item) for item in self._paginate(url)]

    def create_issue_comment(self, repo_owner: str, repo_name: str, issue_number: int, body: str) -> Dict[str, Any]:
        """
        Post a comment to an issue or pull request.

        Args:
            repo_owner: Repository owner
            repo_name: Repository name
            issue_number: Issue or pull request number
            body: Markdown comment body

        Returns:
            The created comment as returned by the API
        """
        url = f"{self.base_url}/repos/{repo_owner}/{repo_name}/issues/{issue_number}/comments"

        response = self.session.post(url, headers=self.headers, json={"body": body})
        response.raise_for_status()
        created = response.json()
        logging.info(f"Posted comment {created.get('id')} on {repo_owner}/{repo_name}#{issue_number}")
        return created
