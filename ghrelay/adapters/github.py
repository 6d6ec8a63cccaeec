"""GitHub API adapter."""

from typing import Any, Dict, List

import requests

from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError
from ghrelay.models import PullRequest, ReviewComment

_MARK_READY_MUTATION = """
mutation markPullRequestReadyForReview($pullRequestId: ID!) {
  markPullRequestReadyForReview(input: { pullRequestId: $pullRequestId }) {
    pullRequest {
      isDraft
    }
  }
}
"""


def _pr_from_api(data: Dict[str, Any]) -> PullRequest:
    head = data.get("head") or {}
    base = data.get("base") or {}
    assignees = [a["login"] for a in (data.get("assignees") or []) if isinstance(a, dict) and a.get("login")]
    return PullRequest(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        head_branch=head.get("ref", ""),
        base_branch=base.get("ref", ""),
        state=data.get("state", "open"),
        draft=bool(data.get("draft")),
        node_id=data.get("node_id") or "",
        assignees=assignees,
        html_url=data.get("html_url"),
        raw=data,
    )


def _review_comment_from_api(data: Dict[str, Any]) -> ReviewComment:
    return ReviewComment(
        id=data["id"],
        path=data.get("path") or "",
        line=data.get("line"),
        body=data.get("body") or "",
        raw=data,
    )


def graphql_url_for(api_url: str) -> str:
    """GraphQL endpoint for a REST base URL (github.com or GHES /api/v3)."""
    base = api_url.rstrip("/")
    if base.endswith("/v3"):
        return base[: -len("/v3")] + "/graphql"
    return f"{base}/graphql"


class GitHubAdapter(GitPlatformAdapter):
    """GitHub REST (and one GraphQL mutation) implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        if path.startswith(("http://", "https://")):
            url = path
        elif path.startswith("/"):
            url = f"{self._api_url}{path}"
        else:
            url = f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=30)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {url}: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except ValueError:
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}", status_code=resp.status_code)
        return resp

    def _paginate(self, path: str, params: Dict[str, Any] | None = None) -> List[Any]:
        """GET every page of a list endpoint, following Link rel="next"."""
        items: List[Any] = []
        resp = self._request("GET", path, params=params)
        items.extend(resp.json() or [])
        next_link = (resp.links or {}).get("next")
        while next_link:
            # The next URL already carries the query string
            resp = self._request("GET", next_link["url"])
            items.extend(resp.json() or [])
            next_link = (resp.links or {}).get("next")
        return items

    def list_issue_labels(self, repo: str, issue_number: int) -> List[str]:
        resp = self._request("GET", f"/repos/{repo}/issues/{issue_number}/labels", params={"per_page": 100})
        return [lb["name"] for lb in (resp.json() or []) if isinstance(lb, dict) and "name" in lb]

    def add_labels(self, repo: str, issue_number: int, labels: List[str]) -> None:
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/labels", json={"labels": labels})

    def add_assignees(self, repo: str, issue_number: int, assignees: List[str]) -> None:
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/assignees", json={"assignees": assignees})

    def list_matching_branches(self, repo: str, prefix: str) -> List[str]:
        """Branches whose name starts with prefix (git matching-refs API)."""
        resp = self._request("GET", f"/repos/{repo}/git/matching-refs/heads/{prefix}")
        names = []
        for ref in resp.json() or []:
            name = (ref.get("ref") or "").removeprefix("refs/heads/")
            if name.startswith(prefix):
                names.append(name)
        return names

    def get_branch_sha(self, repo: str, branch: str) -> str:
        resp = self._request("GET", f"/repos/{repo}/git/ref/heads/{branch}")
        return resp.json()["object"]["sha"]

    def create_branch(self, repo: str, branch: str, sha: str) -> None:
        self._request("POST", f"/repos/{repo}/git/refs", json={"ref": f"refs/heads/{branch}", "sha": sha})

    def update_branch(self, repo: str, branch: str, sha: str, force: bool = False) -> None:
        self._request("PATCH", f"/repos/{repo}/git/refs/heads/{branch}", json={"sha": sha, "force": force})

    def create_empty_commit(self, repo: str, parent_sha: str, message: str) -> str:
        parent = self._request("GET", f"/repos/{repo}/git/commits/{parent_sha}").json()
        resp = self._request(
            "POST",
            f"/repos/{repo}/git/commits",
            json={"message": message, "tree": parent["tree"]["sha"], "parents": [parent_sha]},
        )
        return resp.json()["sha"]

    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = False,
    ) -> PullRequest:
        resp = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base, "draft": draft},
        )
        return _pr_from_api(resp.json())

    def get_pr(self, repo: str, pr_number: int) -> PullRequest:
        resp = self._request("GET", f"/repos/{repo}/pulls/{pr_number}")
        return _pr_from_api(resp.json())

    def update_pr_title(self, repo: str, pr_number: int, title: str) -> None:
        self._request("PATCH", f"/repos/{repo}/pulls/{pr_number}", json={"title": title})

    def mark_pr_ready_for_review(self, pr: PullRequest) -> None:
        """Draft status can only be cleared through GraphQL."""
        resp = self._request(
            "POST",
            graphql_url_for(self._api_url),
            json={"query": _MARK_READY_MUTATION, "variables": {"pullRequestId": pr.node_id}},
        )
        errors = (resp.json() or {}).get("errors")
        if errors:
            raise GitPlatformError(f"GraphQL error: {errors[0].get('message', errors)}")

    def list_review_comments(self, repo: str, pr_number: int, review_id: int) -> List[ReviewComment]:
        data = self._paginate(
            f"/repos/{repo}/pulls/{pr_number}/reviews/{review_id}/comments",
            params={"per_page": 100},
        )
        return [_review_comment_from_api(d) for d in data]

    def create_issue_reaction(self, repo: str, issue_number: int, content: str) -> None:
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/reactions", json={"content": content})

    def create_issue_comment_reaction(self, repo: str, comment_id: int, content: str) -> None:
        self._request("POST", f"/repos/{repo}/issues/comments/{comment_id}/reactions", json={"content": content})

    def create_review_comment_reaction(self, repo: str, comment_id: int, content: str) -> None:
        self._request("POST", f"/repos/{repo}/pulls/comments/{comment_id}/reactions", json={"content": content})

    def create_repository_dispatch(self, repo: str, event_type: str, client_payload: Dict[str, Any]) -> None:
        self._request(
            "POST",
            f"/repos/{repo}/dispatches",
            json={"event_type": event_type, "client_payload": client_payload},
        )
