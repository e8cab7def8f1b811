"""Single-repository and bulk mutations: topics, team access, custom properties,
branch protection and rulesets.

Single-repository calls raise on failure. Bulk calls walk the repositories
one at a time, skip identifiers that are not "owner/repo", record every
other repository's outcome in a BulkResult and never raise.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from ghadmin.exceptions import GatewayError, InvalidArgumentError
from ghadmin.models.bulk import BulkResult
from ghadmin.models.team import TeamGroupMember
from ghadmin.services.config_store import ConfigStore
from ghadmin.services.github_gateway import GitHubGateway
from ghadmin.services.topics import combine_topics
from ghadmin.utils.validators import repo_name_for_org_write, split_full_name

logger = logging.getLogger(__name__)


def to_property_values(properties: dict[str, Any]) -> list[dict[str, Any]]:
    """Custom property mapping -> API payload. Booleans are sent as "true"/"false"."""
    values = []
    for name, value in properties.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        values.append({"property_name": name, "value": value})
    return values


class BulkDispatcher:
    def __init__(
        self,
        gateway_provider: Callable[[], GitHubGateway],
        config_store: ConfigStore | None = None,
    ):
        self._gateway_provider = gateway_provider
        self._config_store = config_store

    @property
    def gateway(self) -> GitHubGateway:
        return self._gateway_provider()

    async def _each_repo(
        self, full_names: list[str], action: Callable[[str, str], Any], label: str
    ) -> BulkResult:
        result = BulkResult()
        for full_name in full_names:
            parsed = split_full_name(full_name)
            if parsed is None:
                logger.debug("Skipping malformed repository name %r", full_name)
                continue
            owner, repo = parsed
            try:
                await action(owner, repo)
            except Exception as e:
                logger.warning("%s failed for %s: %s", label, full_name, e)
                result.record(full_name, e)
            else:
                result.record(full_name)
        logger.info("%s: %d succeeded, %d failed", label, result.succeeded, result.failed)
        return result

    # ── Topics ──

    async def update_topics(self, owner: str, repo: str, topics: list[str], mode: str) -> list[str]:
        """Apply a topic change to one repository. Returns the topics now set."""
        gateway = self.gateway
        current = await asyncio.to_thread(gateway.list_all_topics, owner, repo)
        new_topics = combine_topics(current, topics, mode)
        return await asyncio.to_thread(gateway.replace_all_topics, owner, repo, new_topics)

    async def bulk_update_topics(self, full_names: list[str], topics: list[str], mode: str) -> BulkResult:
        async def _apply(owner: str, repo: str):
            await self.update_topics(owner, repo, topics, mode)

        return await self._each_repo(full_names, _apply, "Topic update")

    # ── Team access ──

    async def update_team_access(
        self, owner: str, repo: str, org: str, team_slug: str, permission: str, remove: bool = False
    ) -> None:
        gateway = self.gateway
        if remove:
            await asyncio.to_thread(gateway.remove_team_repo, org, team_slug, owner, repo)
        else:
            await asyncio.to_thread(gateway.add_team_repo, org, team_slug, owner, repo, permission)

    async def bulk_update_team_access(
        self, full_names: list[str], org: str, team_slug: str, permission: str, remove: bool = False
    ) -> BulkResult:
        async def _apply(owner: str, repo: str):
            await self.update_team_access(owner, repo, org, team_slug, permission, remove)

        return await self._each_repo(full_names, _apply, f"Team access ({team_slug})")

    async def bulk_apply_team_group(
        self, full_names: list[str], org: str, group: str, remove: bool = False
    ) -> BulkResult:
        """Grant (or revoke) every team of a saved team group on each repository."""
        members = self._team_group(org, group)

        async def _apply(owner: str, repo: str):
            errors = []
            for member in members:
                try:
                    await self.update_team_access(owner, repo, org, member.slug, member.permission, remove)
                except GatewayError as e:
                    errors.append(f"{member.slug}: {e}")
            if errors:
                raise GatewayError("; ".join(errors))

        return await self._each_repo(full_names, _apply, f"Team group ({group})")

    def _team_group(self, org: str, group: str) -> list[TeamGroupMember]:
        if self._config_store is None:
            raise InvalidArgumentError("team groups are not available")
        members = self._config_store.load().team_groups.get(org, {}).get(group)
        if members is None:
            raise InvalidArgumentError(f"unknown team group {group!r} for {org}")
        return members

    # ── Custom properties ──

    async def update_custom_properties(self, org: str, repo: str, properties: dict[str, Any]) -> None:
        await asyncio.to_thread(
            self.gateway.create_or_update_custom_property_values,
            org, [repo], to_property_values(properties),
        )

    async def bulk_update_custom_properties(
        self, org: str, full_names: list[str], properties: dict[str, Any]
    ) -> BulkResult:
        """One org-level write covering every repository."""
        repo_names = [repo_name_for_org_write(name) for name in full_names]
        result = BulkResult()
        try:
            await asyncio.to_thread(
                self.gateway.create_or_update_custom_property_values,
                org, repo_names, to_property_values(properties),
            )
        except Exception as e:
            logger.warning("Custom property update failed for %s: %s", org, e)
            for name in full_names:
                result.record(name, e)
        else:
            for name in full_names:
                result.record(name)
        return result

    async def get_custom_property_definitions(self, org: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self.gateway.get_all_custom_property_definitions, org)

    # ── Branch protection ──

    async def update_branch_protection(
        self, owner: str, repo: str, branch: str, protection: dict[str, Any]
    ) -> dict[str, Any]:
        return await asyncio.to_thread(
            self.gateway.update_branch_protection, owner, repo, branch, protection
        )

    async def bulk_update_branch_protection(
        self, full_names: list[str], branch: str, protection: dict[str, Any]
    ) -> BulkResult:
        async def _apply(owner: str, repo: str):
            await self.update_branch_protection(owner, repo, branch, protection)

        return await self._each_repo(full_names, _apply, f"Branch protection ({branch})")

    async def delete_branch_protection(self, owner: str, repo: str, branch: str) -> None:
        await asyncio.to_thread(self.gateway.remove_branch_protection, owner, repo, branch)

    # ── Rulesets ──

    async def create_ruleset(self, owner: str, repo: str, ruleset: dict[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self.gateway.create_ruleset, owner, repo, ruleset)

    async def update_ruleset(
        self, owner: str, repo: str, ruleset_id: int, ruleset: dict[str, Any]
    ) -> dict[str, Any]:
        return await asyncio.to_thread(self.gateway.update_ruleset, owner, repo, ruleset_id, ruleset)

    async def delete_ruleset(self, owner: str, repo: str, ruleset_id: int) -> None:
        await asyncio.to_thread(self.gateway.delete_ruleset, owner, repo, ruleset_id)
