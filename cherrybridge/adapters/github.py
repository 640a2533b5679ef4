"""GitHub REST API adapter."""

import logging
from typing import Any, Dict, List

import requests

from cherrybridge.adapters.base import HostAdapter, sort_by_merged_at
from cherrybridge.errors import HostQueryFailedError, HostToolUnavailableError
from cherrybridge.models import PRRecord

PER_PAGE = 100

LOG = logging.getLogger("cherrybridge.adapters.github")


def _has_label(data: Dict[str, Any], label: str) -> bool:
    return any(isinstance(lb, dict) and lb.get("name") == label for lb in (data.get("labels") or []))


def _pr_from_api(data: Dict[str, Any]) -> PRRecord | None:
    sha = data.get("merge_commit_sha")
    merged_at = data.get("merged_at")
    if not sha or not merged_at:
        return None
    return PRRecord(
        number=data["number"],
        title=data.get("title") or "",
        merge_commit_sha=sha,
        merged_at=merged_at,
    )


class GitHubApiAdapter(HostAdapter):
    """GitHub API implementation (token auth, no gh CLI needed)."""

    def __init__(self, token: str | None, repo: str | None, api_url: str = "https://api.github.com") -> None:
        self._token = token
        self._repo = repo
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        unavailable_statuses: tuple[int, ...] = (401, 403),
    ) -> requests.Response:
        """Send one API request.

        Statuses in unavailable_statuses mean the token cannot reach the
        repository and raise HostToolUnavailableError; a rate-limited 403
        and every other error status raise HostQueryFailedError.
        """
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, timeout=30)
        except requests.RequestException as e:
            raise HostQueryFailedError(f"GitHub API request failed: {e}") from e
        if resp.status_code < 400:
            return resp

        msg = resp.text or resp.reason or str(resp.status_code)
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            msg = body["message"]
        LOG.warning("GitHub API %s %s failed: %s", method, path, msg)
        rate_limited = resp.status_code == 403 and "rate limit" in str(msg).lower()
        if resp.status_code in unavailable_statuses and not rate_limited:
            raise HostToolUnavailableError(
                f"GitHub API denied access to {self._repo} ({resp.status_code}: {msg}). "
                "Check that GITHUB_TOKEN is valid and can read the repository."
            )
        raise HostQueryFailedError(f"{resp.status_code}: {msg}")

    def ensure_available(self) -> None:
        if not self._token:
            raise HostToolUnavailableError("GitHub token is required for the API provider (set GITHUB_TOKEN).")
        if not self._repo:
            raise HostToolUnavailableError("Cannot determine owner/repo from remote.origin.url.")
        self._request("GET", f"/repos/{self._repo}", unavailable_statuses=(401, 403, 404))

    def list_merged_prs(self, base_branch: str, label: str) -> List[PRRecord]:
        prs: List[PRRecord] = []
        page = 1
        while True:
            resp = self._request(
                "GET",
                f"/repos/{self._repo}/pulls",
                params={"state": "closed", "base": base_branch, "per_page": PER_PAGE, "page": page},
            )
            try:
                data = resp.json() or []
            except ValueError as e:
                raise HostQueryFailedError(f"GitHub API returned invalid JSON: {e}") from e
            for item in data:
                if not _has_label(item, label):
                    continue
                pr = _pr_from_api(item)
                if pr is not None:
                    prs.append(pr)
            if len(data) < PER_PAGE:
                break
            page += 1
        return sort_by_merged_at(prs)
