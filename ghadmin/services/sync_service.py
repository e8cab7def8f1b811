"""Sync service: fetches repositories and teams per organization and reports them as events."""

from __future__ import annotations

import logging

from ghadmin.exceptions import GatewayError
from ghadmin.models.status import FetchErrorEvent, ReposUpdatedEvent, TeamsUpdatedEvent
from ghadmin.services.events import FETCH_ERROR, REPOS_UPDATED, TEAMS_UPDATED, EventBus
from ghadmin.services.github_gateway import GitHubGateway
from ghadmin.services.repo_service import list_repos
from ghadmin.services.team_service import list_teams

logger = logging.getLogger(__name__)


async def sync_org(gateway: GitHubGateway, org: str, login: str, events: EventBus) -> None:
    """Fetch repositories, then teams, for one organization."""
    await sync_repos(gateway, org, login, events)
    await sync_teams(gateway, org, login, events)


async def sync_repos(gateway: GitHubGateway, org: str, login: str, events: EventBus) -> bool:
    try:
        repos = await list_repos(gateway, org, login)
    except GatewayError as e:
        logger.error("Failed to fetch repos for %s: %s", org, e)
        events.emit(FETCH_ERROR, FetchErrorEvent(org=org, type="repos", error=str(e)))
        return False

    logger.info("Fetched %d repos for %s", len(repos), org)
    events.emit(REPOS_UPDATED, ReposUpdatedEvent(org=org, repos=repos))
    return True


async def sync_teams(gateway: GitHubGateway, org: str, login: str, events: EventBus) -> bool:
    try:
        teams = await list_teams(gateway, org, login)
    except GatewayError as e:
        logger.error("Failed to fetch teams for %s: %s", org, e)
        events.emit(FETCH_ERROR, FetchErrorEvent(org=org, type="teams", error=str(e)))
        return False

    logger.info("Fetched %d teams for %s", len(teams), org)
    events.emit(TEAMS_UPDATED, TeamsUpdatedEvent(org=org, teams=teams))
    return True
