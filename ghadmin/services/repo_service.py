"""Repository listing and the multi-call repository detail view."""

from __future__ import annotations

import asyncio
import logging

from ghadmin.exceptions import GatewayError
from ghadmin.models.repo import BranchProtectionDetail, RepoDetail, RepoSummary, RepoTeam, summary_fields
from ghadmin.services.github_gateway import GitHubGateway

logger = logging.getLogger(__name__)


async def list_repos(gateway: GitHubGateway, org: str, login: str) -> list[RepoSummary]:
    """List all repositories of ``org``; the user's own when ``org`` is their login."""
    repos: list[RepoSummary] = []
    page_number = 1
    while True:
        if org == login:
            page = await asyncio.to_thread(gateway.list_repositories_for_user, page_number)
        else:
            page = await asyncio.to_thread(gateway.list_repositories_for_org, org, page_number)
        repos.extend(RepoSummary.from_api(item) for item in page.items)
        if not page.next_page:
            break
        page_number = page.next_page
    return repos


async def get_repo_detail(gateway: GitHubGateway, owner: str, repo: str) -> RepoDetail:
    """Assemble the full detail record for one repository.

    Only the basic repository lookup is fatal. Every later step degrades its
    own field to an empty value on failure and the rest carry on.
    """
    data = await asyncio.to_thread(gateway.get_repository, owner, repo)
    detail = RepoDetail(
        **summary_fields(data),
        description=data.get("description") or "",
        stars=data.get("stargazers_count") or 0,
        watchers=data.get("watchers_count") or 0,
        forks_count=data.get("forks_count") or 0,
    )

    try:
        detail.open_prs = await asyncio.to_thread(gateway.search_open_pull_requests, owner, repo)
    except GatewayError as e:
        logger.warning("Open PR search failed for %s/%s: %s", owner, repo, e)

    branches = await _list_all_branches(gateway, owner, repo)
    detail.branches_count = len(branches)

    try:
        values = await asyncio.to_thread(gateway.get_all_custom_property_values, owner, repo)
        detail.custom_properties = {v["property_name"]: v.get("value") for v in values}
    except GatewayError as e:
        logger.warning("Custom properties unavailable for %s/%s: %s", owner, repo, e)

    try:
        detail.teams = await _list_repo_teams(gateway, owner, repo)
    except GatewayError as e:
        logger.warning("Team access unavailable for %s/%s: %s", owner, repo, e)

    for branch in branches:
        if not branch.get("protected"):
            continue
        try:
            protection = await asyncio.to_thread(
                gateway.get_branch_protection, owner, repo, branch["name"]
            )
        except GatewayError as e:
            logger.debug("Skipping protection for %s/%s@%s: %s", owner, repo, branch["name"], e)
            continue
        detail.protection.append(
            BranchProtectionDetail(branch_name=branch["name"], protection=protection)
        )

    try:
        rulesets = await asyncio.to_thread(gateway.list_rulesets, owner, repo)
    except GatewayError as e:
        logger.warning("Rulesets unavailable for %s/%s: %s", owner, repo, e)
        rulesets = []
    for ruleset in rulesets:
        try:
            detail.rulesets.append(
                await asyncio.to_thread(gateway.get_ruleset, owner, repo, ruleset["id"])
            )
        except GatewayError as e:
            logger.debug("Keeping summary for ruleset %s on %s/%s: %s", ruleset.get("id"), owner, repo, e)
            detail.rulesets.append(ruleset)

    return detail


async def _list_all_branches(gateway: GitHubGateway, owner: str, repo: str) -> list[dict]:
    """Every branch across all pages. A failed page stops paging; what was read is kept."""
    branches: list[dict] = []
    page_number = 1
    while True:
        try:
            page = await asyncio.to_thread(gateway.list_branches, owner, repo, page_number)
        except GatewayError as e:
            logger.warning("Branch listing failed for %s/%s (page %d): %s", owner, repo, page_number, e)
            break
        branches.extend(page.items)
        if not page.next_page:
            break
        page_number = page.next_page
    return branches


async def _list_repo_teams(gateway: GitHubGateway, owner: str, repo: str) -> list[RepoTeam]:
    teams: list[RepoTeam] = []
    page_number = 1
    while True:
        page = await asyncio.to_thread(gateway.list_repository_teams, owner, repo, page_number)
        teams.extend(
            RepoTeam(name=t.get("name", ""), slug=t.get("slug", ""), permission=t.get("permission") or "")
            for t in page.items
        )
        if not page.next_page:
            break
        page_number = page.next_page
    return teams
