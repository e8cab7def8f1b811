"""GitHub API gateway: the capability set the sync engine calls through.

The live implementation wraps PyGithub. Rate limiting is handled entirely
inside PyGithub: ``GithubRetry`` waits out primary/secondary rate limits and
retries transient failures, and the requester spaces consecutive requests
and writes. Callers only ever see ``GatewayError``.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable
from urllib.parse import parse_qs, quote, urlparse

from github import Auth, Github, GithubException
from github.GithubRetry import GithubRetry
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from ghadmin.config import settings
from ghadmin.exceptions import GatewayError

logger = logging.getLogger(__name__)

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


@dataclass
class Page:
    """One page of a paginated listing. ``next_page`` is None on the last page."""

    items: list[dict[str, Any]] = field(default_factory=list)
    next_page: int | None = None


@runtime_checkable
class GitHubGateway(Protocol):
    """Interface for every GitHub call the engine makes."""

    def get_authenticated_user(self) -> dict[str, Any]: ...

    def list_organizations(self) -> list[str]: ...

    def list_repositories_for_org(self, org: str, page: int = 1) -> Page: ...

    def list_repositories_for_user(self, page: int = 1) -> Page: ...

    def get_repository(self, owner: str, repo: str) -> dict[str, Any]: ...

    def search_open_pull_requests(self, owner: str, repo: str) -> int: ...

    def list_branches(self, owner: str, repo: str, page: int = 1) -> Page: ...

    def get_branch_protection(self, owner: str, repo: str, branch: str) -> dict[str, Any]: ...

    def update_branch_protection(
        self, owner: str, repo: str, branch: str, protection: dict[str, Any]
    ) -> dict[str, Any]: ...

    def remove_branch_protection(self, owner: str, repo: str, branch: str) -> None: ...

    def list_all_topics(self, owner: str, repo: str) -> list[str]: ...

    def replace_all_topics(self, owner: str, repo: str, topics: list[str]) -> list[str]: ...

    def list_teams(self, org: str, page: int = 1) -> Page: ...

    def get_team_by_slug(self, org: str, slug: str) -> dict[str, Any]: ...

    def list_repository_teams(self, owner: str, repo: str, page: int = 1) -> Page: ...

    def add_team_repo(self, org: str, slug: str, owner: str, repo: str, permission: str) -> None: ...

    def remove_team_repo(self, org: str, slug: str, owner: str, repo: str) -> None: ...

    def get_all_custom_property_values(self, owner: str, repo: str) -> list[dict[str, Any]]: ...

    def create_or_update_custom_property_values(
        self, org: str, repo_names: list[str], properties: list[dict[str, Any]]
    ) -> None: ...

    def get_all_custom_property_definitions(self, org: str) -> list[dict[str, Any]]: ...

    def list_rulesets(self, owner: str, repo: str) -> list[dict[str, Any]]: ...

    def get_ruleset(self, owner: str, repo: str, ruleset_id: int) -> dict[str, Any]: ...

    def create_ruleset(self, owner: str, repo: str, ruleset: dict[str, Any]) -> dict[str, Any]: ...

    def update_ruleset(
        self, owner: str, repo: str, ruleset_id: int, ruleset: dict[str, Any]
    ) -> dict[str, Any]: ...

    def delete_ruleset(self, owner: str, repo: str, ruleset_id: int) -> None: ...

    def close(self) -> None: ...


def next_page_from_link(link: str | None) -> int | None:
    """Page number of the rel="next" entry of a Link header, if any."""
    if not link:
        return None
    match = _NEXT_LINK_RE.search(link)
    if not match:
        return None
    values = parse_qs(urlparse(match.group(1)).query).get("page")
    return int(values[0]) if values else None


def _error_message(e: GithubException) -> str:
    if isinstance(e.data, dict) and e.data.get("message"):
        return f"{e.status}: {e.data['message']}"
    return str(e)


class PyGithubGateway:
    """GitHubGateway backed by PyGithub.

    PyGithub's object API is used where it covers the call; everything that
    needs page boundaries, or that PyGithub has no wrapper for (rulesets,
    custom property values), goes through its requester so it still gets
    the same auth, throttling and retry handling.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        per_page: int | None = None,
        max_retries: int | None = None,
        max_wait: float | None = None,
    ):
        self._per_page = per_page or settings.per_page
        retry = GithubRetry(
            secondary_rate_wait=max_wait if max_wait is not None else settings.rate_limit_max_wait,
            total=max_retries if max_retries is not None else settings.rate_limit_max_retries,
            # PATCH is not retried by default; the org custom property write uses it
            allowed_methods=Retry.DEFAULT_ALLOWED_METHODS | {"GET", "POST", "PATCH"},
        )
        self.gh = Github(
            auth=Auth.Token(access_token),
            base_url=base_url or settings.github_api_url,
            timeout=settings.request_timeout,
            per_page=self._per_page,
            retry=retry,
            seconds_between_requests=settings.seconds_between_requests,
            seconds_between_writes=settings.seconds_between_writes,
        )

    def close(self) -> None:
        self.gh.close()

    @contextmanager
    def _translate(self):
        try:
            yield
        except GithubException as e:
            raise GatewayError(_error_message(e), status_code=e.status) from e
        except RequestException as e:
            raise GatewayError(f"GitHub request failed: {e}") from e

    def _request(self, verb: str, path: str, parameters: dict | None = None, body: Any = None):
        with self._translate():
            headers, data = self.gh.requester.requestJsonAndCheck(
                verb, path, parameters=parameters, input=body
            )
        return headers, data

    def _get_page(self, path: str, page: int, **params: Any) -> Page:
        parameters = {"per_page": self._per_page, "page": page, **params}
        headers, data = self._request("GET", path, parameters=parameters)
        return Page(items=list(data or []), next_page=next_page_from_link(headers.get("link")))

    # ── Identity ──

    def get_authenticated_user(self) -> dict[str, Any]:
        with self._translate():
            return self.gh.get_user().raw_data

    def list_organizations(self) -> list[str]:
        with self._translate():
            return [org.login for org in self.gh.get_user().get_orgs()]

    # ── Repositories ──

    def list_repositories_for_org(self, org: str, page: int = 1) -> Page:
        return self._get_page(f"/orgs/{org}/repos", page, sort="full_name")

    def list_repositories_for_user(self, page: int = 1) -> Page:
        return self._get_page("/user/repos", page, affiliation="owner", sort="full_name")

    def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        _, data = self._request("GET", f"/repos/{owner}/{repo}")
        return data

    def search_open_pull_requests(self, owner: str, repo: str) -> int:
        query = f"repo:{owner}/{repo} type:pr state:open"
        _, data = self._request("GET", "/search/issues", parameters={"q": query, "per_page": 1})
        return int((data or {}).get("total_count", 0))

    def list_branches(self, owner: str, repo: str, page: int = 1) -> Page:
        return self._get_page(f"/repos/{owner}/{repo}/branches", page)

    def get_branch_protection(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        _, data = self._request("GET", _protection_path(owner, repo, branch))
        return data or {}

    def update_branch_protection(
        self, owner: str, repo: str, branch: str, protection: dict[str, Any]
    ) -> dict[str, Any]:
        _, data = self._request("PUT", _protection_path(owner, repo, branch), body=protection)
        return data or {}

    def remove_branch_protection(self, owner: str, repo: str, branch: str) -> None:
        self._request("DELETE", _protection_path(owner, repo, branch))

    # ── Topics ──

    def list_all_topics(self, owner: str, repo: str) -> list[str]:
        _, data = self._request("GET", f"/repos/{owner}/{repo}/topics")
        return list((data or {}).get("names", []))

    def replace_all_topics(self, owner: str, repo: str, topics: list[str]) -> list[str]:
        _, data = self._request("PUT", f"/repos/{owner}/{repo}/topics", body={"names": topics})
        return list((data or {}).get("names", []))

    # ── Teams ──

    def list_teams(self, org: str, page: int = 1) -> Page:
        return self._get_page(f"/orgs/{org}/teams", page)

    def get_team_by_slug(self, org: str, slug: str) -> dict[str, Any]:
        _, data = self._request("GET", f"/orgs/{org}/teams/{slug}")
        return data or {}

    def list_repository_teams(self, owner: str, repo: str, page: int = 1) -> Page:
        return self._get_page(f"/repos/{owner}/{repo}/teams", page)

    def add_team_repo(self, org: str, slug: str, owner: str, repo: str, permission: str) -> None:
        self._request(
            "PUT", f"/orgs/{org}/teams/{slug}/repos/{owner}/{repo}", body={"permission": permission}
        )

    def remove_team_repo(self, org: str, slug: str, owner: str, repo: str) -> None:
        self._request("DELETE", f"/orgs/{org}/teams/{slug}/repos/{owner}/{repo}")

    # ── Custom properties ──

    def get_all_custom_property_values(self, owner: str, repo: str) -> list[dict[str, Any]]:
        _, data = self._request("GET", f"/repos/{owner}/{repo}/properties/values")
        return list(data or [])

    def create_or_update_custom_property_values(
        self, org: str, repo_names: list[str], properties: list[dict[str, Any]]
    ) -> None:
        self._request(
            "PATCH",
            f"/orgs/{org}/properties/values",
            body={"repository_names": repo_names, "properties": properties},
        )

    def get_all_custom_property_definitions(self, org: str) -> list[dict[str, Any]]:
        _, data = self._request("GET", f"/orgs/{org}/properties/schema")
        return list(data or [])

    # ── Rulesets ──

    def list_rulesets(self, owner: str, repo: str) -> list[dict[str, Any]]:
        _, data = self._request("GET", f"/repos/{owner}/{repo}/rulesets")
        return list(data or [])

    def get_ruleset(self, owner: str, repo: str, ruleset_id: int) -> dict[str, Any]:
        _, data = self._request(
            "GET",
            f"/repos/{owner}/{repo}/rulesets/{ruleset_id}",
            parameters={"includes_parents": "false"},
        )
        return data or {}

    def create_ruleset(self, owner: str, repo: str, ruleset: dict[str, Any]) -> dict[str, Any]:
        _, data = self._request("POST", f"/repos/{owner}/{repo}/rulesets", body=ruleset)
        return data or {}

    def update_ruleset(
        self, owner: str, repo: str, ruleset_id: int, ruleset: dict[str, Any]
    ) -> dict[str, Any]:
        _, data = self._request("PUT", f"/repos/{owner}/{repo}/rulesets/{ruleset_id}", body=ruleset)
        return data or {}

    def delete_ruleset(self, owner: str, repo: str, ruleset_id: int) -> None:
        self._request("DELETE", f"/repos/{owner}/{repo}/rulesets/{ruleset_id}")


def _protection_path(owner: str, repo: str, branch: str) -> str:
    return f"/repos/{owner}/{repo}/branches/{quote(branch, safe='')}/protection"


def create_gateway(access_token: str) -> PyGithubGateway:
    """Default gateway factory used by the session manager."""
    return PyGithubGateway(access_token)
