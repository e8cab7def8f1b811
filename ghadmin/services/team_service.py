"""Organization team listing with member-count enrichment."""

from __future__ import annotations

import asyncio
import logging

from ghadmin.config import settings
from ghadmin.exceptions import GatewayError
from ghadmin.models.team import Team
from ghadmin.services.github_gateway import GitHubGateway

logger = logging.getLogger(__name__)


async def list_teams(
    gateway: GitHubGateway, org: str, login: str, concurrency: int | None = None
) -> list[Team]:
    """List every team of ``org``, filling in member counts the listing omits.

    Personal accounts have no teams: when ``org`` is the authenticated
    ``login`` the result is empty and no call is made. Each page's lookups
    run concurrently, at most ``concurrency`` at a time, and the whole page
    is finished before the next page is requested. Listing errors propagate.
    """
    if org == login:
        return []

    sem = asyncio.Semaphore(concurrency or settings.team_lookup_concurrency)
    teams: list[Team] = []
    page_number = 1
    while True:
        page = await asyncio.to_thread(gateway.list_teams, org, page_number)
        teams.extend(await asyncio.gather(*(_enrich(gateway, org, t, sem) for t in page.items)))
        if not page.next_page:
            break
        page_number = page.next_page
    return teams


async def _enrich(gateway: GitHubGateway, org: str, data: dict, sem: asyncio.Semaphore) -> Team:
    async with sem:
        members_count = data.get("members_count") or 0
        if members_count == 0:
            # The listing endpoint usually leaves members_count out
            try:
                full = await asyncio.to_thread(gateway.get_team_by_slug, org, data["slug"])
                members_count = full.get("members_count") or 0
            except GatewayError as e:
                logger.debug("Team lookup failed for %s/%s: %s", org, data["slug"], e)

    return Team(
        name=data.get("name", ""),
        slug=data.get("slug", ""),
        url=data.get("html_url") or "",
        members_count=members_count,
    )
