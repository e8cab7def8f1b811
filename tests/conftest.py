"""Shared test fixtures for ghadmin."""

from __future__ import annotations

import threading
import time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ghadmin.exceptions import GatewayError
from ghadmin.models.app_config import AppConfig
from ghadmin.services.config_store import MemoryConfigStore
from ghadmin.services.events import EventBus
from ghadmin.services.github_gateway import Page
from ghadmin.services.session_service import SessionManager

VALID_TOKEN = "ghp_validtoken1234567890"
LOGIN = "alice"


# ---------------------------------------------------------------------------
# Fake gateway
# ---------------------------------------------------------------------------

def _page(pages: list[list[dict]], page: int) -> Page:
    if not pages:
        return Page(items=[], next_page=None)
    items = pages[page - 1] if page <= len(pages) else []
    return Page(items=list(items), next_page=page + 1 if page < len(pages) else None)


class FakeGateway:
    """In-memory GitHubGateway. Every call is recorded in ``calls``.

    ``fail(method, *args)`` makes calls to ``method`` whose leading
    arguments equal ``args`` raise GatewayError.
    """

    def __init__(self, login: str = LOGIN, orgs: list[str] | None = None):
        self.login = login
        self.orgs = orgs if orgs is not None else []
        self.user_repo_pages: list[list[dict]] = []
        self.org_repo_pages: dict[str, list[list[dict]]] = {}
        self.team_pages: dict[str, list[list[dict]]] = {}
        self.team_details: dict[tuple[str, str], dict] = {}
        self.repos: dict[str, dict] = {}
        self.open_prs: dict[str, int] = {}
        self.branch_pages: dict[str, list[list[dict]]] = {}
        self.protections: dict[tuple[str, str], dict] = {}
        self.topics: dict[str, list[str]] = {}
        self.repo_team_pages: dict[str, list[list[dict]]] = {}
        self.property_values: dict[str, list[dict]] = {}
        self.property_definitions: dict[str, list[dict]] = {}
        self.rulesets: dict[str, list[dict]] = {}
        self.ruleset_details: dict[tuple[str, int], dict] = {}
        self.team_access: dict[tuple[str, str, str], str] = {}
        self.property_writes: list[tuple[str, list[str], list[dict]]] = []
        self.lookup_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self.calls: list[tuple] = []
        self._failures: dict[str, list[tuple]] = {}
        self._lock = threading.Lock()

    def fail(self, method: str, *args) -> None:
        self._failures.setdefault(method, []).append(args)

    def calls_to(self, method: str) -> list[tuple]:
        with self._lock:
            return [c[1:] for c in self.calls if c[0] == method]

    def _record(self, method: str, *args) -> None:
        with self._lock:
            self.calls.append((method, *args))
        for pattern in self._failures.get(method, []):
            if args[: len(pattern)] == pattern:
                raise GatewayError(f"{method} failed", status_code=500)

    def get_authenticated_user(self):
        self._record("get_authenticated_user")
        return {"login": self.login}

    def list_organizations(self):
        self._record("list_organizations")
        return list(self.orgs)

    def list_repositories_for_org(self, org, page=1):
        self._record("list_repositories_for_org", org, page)
        return _page(self.org_repo_pages.get(org, []), page)

    def list_repositories_for_user(self, page=1):
        self._record("list_repositories_for_user", page)
        return _page(self.user_repo_pages, page)

    def get_repository(self, owner, repo):
        self._record("get_repository", owner, repo)
        return self.repos[f"{owner}/{repo}"]

    def search_open_pull_requests(self, owner, repo):
        self._record("search_open_pull_requests", owner, repo)
        return self.open_prs.get(f"{owner}/{repo}", 0)

    def list_branches(self, owner, repo, page=1):
        self._record("list_branches", owner, repo, page)
        return _page(self.branch_pages.get(f"{owner}/{repo}", []), page)

    def get_branch_protection(self, owner, repo, branch):
        self._record("get_branch_protection", owner, repo, branch)
        return self.protections[(f"{owner}/{repo}", branch)]

    def update_branch_protection(self, owner, repo, branch, protection):
        self._record("update_branch_protection", owner, repo, branch)
        self.protections[(f"{owner}/{repo}", branch)] = protection
        return protection

    def remove_branch_protection(self, owner, repo, branch):
        self._record("remove_branch_protection", owner, repo, branch)
        self.protections.pop((f"{owner}/{repo}", branch), None)

    def list_all_topics(self, owner, repo):
        self._record("list_all_topics", owner, repo)
        return list(self.topics.get(f"{owner}/{repo}", []))

    def replace_all_topics(self, owner, repo, topics):
        self._record("replace_all_topics", owner, repo)
        self.topics[f"{owner}/{repo}"] = list(topics)
        return list(topics)

    def list_teams(self, org, page=1):
        self._record("list_teams", org, page)
        return _page(self.team_pages.get(org, []), page)

    def get_team_by_slug(self, org, slug):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self._record("get_team_by_slug", org, slug)
            if self.lookup_delay:
                time.sleep(self.lookup_delay)
            return self.team_details.get((org, slug), {"slug": slug, "members_count": 0})
        finally:
            with self._lock:
                self.in_flight -= 1

    def list_repository_teams(self, owner, repo, page=1):
        self._record("list_repository_teams", owner, repo, page)
        return _page(self.repo_team_pages.get(f"{owner}/{repo}", []), page)

    def add_team_repo(self, org, slug, owner, repo, permission):
        self._record("add_team_repo", org, slug, owner, repo, permission)
        self.team_access[(org, slug, f"{owner}/{repo}")] = permission

    def remove_team_repo(self, org, slug, owner, repo):
        self._record("remove_team_repo", org, slug, owner, repo)
        self.team_access.pop((org, slug, f"{owner}/{repo}"), None)

    def get_all_custom_property_values(self, owner, repo):
        self._record("get_all_custom_property_values", owner, repo)
        return list(self.property_values.get(f"{owner}/{repo}", []))

    def create_or_update_custom_property_values(self, org, repo_names, properties):
        self._record("create_or_update_custom_property_values", org)
        self.property_writes.append((org, list(repo_names), list(properties)))

    def get_all_custom_property_definitions(self, org):
        self._record("get_all_custom_property_definitions", org)
        return list(self.property_definitions.get(org, []))

    def list_rulesets(self, owner, repo):
        self._record("list_rulesets", owner, repo)
        return list(self.rulesets.get(f"{owner}/{repo}", []))

    def get_ruleset(self, owner, repo, ruleset_id):
        self._record("get_ruleset", owner, repo, ruleset_id)
        return self.ruleset_details[(f"{owner}/{repo}", ruleset_id)]

    def create_ruleset(self, owner, repo, ruleset):
        self._record("create_ruleset", owner, repo)
        return {"id": 99, **ruleset}

    def update_ruleset(self, owner, repo, ruleset_id, ruleset):
        self._record("update_ruleset", owner, repo, ruleset_id)
        return {"id": ruleset_id, **ruleset}

    def delete_ruleset(self, owner, repo, ruleset_id):
        self._record("delete_ruleset", owner, repo, ruleset_id)

    def close(self):
        self.closed = True


def make_repo(full_name: str, **overrides) -> dict:
    """GitHub-style repository payload."""
    owner, name = full_name.split("/")
    data = {
        "name": name,
        "full_name": full_name,
        "html_url": f"https://github.com/{full_name}",
        "topics": [],
        "archived": False,
        "private": False,
        "visibility": "public",
        "fork": False,
        "default_branch": "main",
        "permissions": {"admin": False, "maintain": False, "push": True, "pull": True},
        "description": f"{name} repository",
        "stargazers_count": 0,
        "watchers_count": 0,
        "forks_count": 0,
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(orgs=["orgA", "orgB"])


@pytest.fixture
def config_store() -> MemoryConfigStore:
    return MemoryConfigStore(AppConfig())


@pytest.fixture
def events() -> EventBus:
    return EventBus(backlog_size=100)


@pytest.fixture
def recorded(events) -> list[tuple[str, dict]]:
    """Every event emitted on the ``events`` bus, in order."""
    seen: list[tuple[str, dict]] = []
    events.subscribe(lambda name, payload: seen.append((name, payload)))
    return seen


@pytest.fixture
def gateway_factory(gateway):
    """Returns ``gateway`` for VALID_TOKEN and a rejecting gateway for anything else."""
    def _factory(token: str):
        if token == VALID_TOKEN:
            return gateway
        rejected = FakeGateway()
        rejected.fail("get_authenticated_user")
        return rejected
    return _factory


@pytest_asyncio.fixture
async def manager(config_store, events, gateway_factory):
    mgr = SessionManager(
        config_store=config_store,
        events=events,
        gateway_factory=gateway_factory,
        poll_interval=3600,
    )
    yield mgr
    mgr.close()


# ---------------------------------------------------------------------------
# App / client fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def app(manager):
    """FastAPI app with the test session manager injected."""
    from ghadmin import runtime

    original = runtime._manager
    runtime._manager = manager

    from ghadmin.main import app as fastapi_app

    yield fastapi_app

    runtime._manager = original


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
