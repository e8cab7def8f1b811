"""Host API routes: session control, sync, repository detail and mutations."""

from __future__ import annotations

import logging
from contextlib import contextmanager

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from ghadmin.exceptions import GitHubAdminError
from ghadmin.models.app_config import AppConfig
from ghadmin.models.bulk import BulkResult
from ghadmin.models.requests import (
    BranchProtectionUpdate,
    BulkBranchProtectionUpdate,
    BulkCustomPropertiesUpdate,
    BulkTeamAccessUpdate,
    BulkTeamGroupUpdate,
    BulkTopicsUpdate,
    ConnectRequest,
    CustomPropertiesUpdate,
    OrgRequest,
    TeamAccessUpdate,
    TopicsUpdate,
)
from ghadmin.runtime import get_dispatcher, get_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["admin"])


@contextmanager
def _api_errors():
    try:
        yield
    except GitHubAdminError as e:
        raise HTTPException(
            status_code=e.status_code or 500,
            detail={"error": {"code": e.code, "message": e.message}},
        ) from e


def _bulk_response(result: BulkResult) -> dict:
    return {
        "items": [item.model_dump() for item in result.items],
        "succeeded": result.succeeded,
        "failed": result.failed,
    }


# ── Session ──

@router.get("/status")
async def get_status():
    return get_manager().get_status()


@router.post("/session/connect")
async def connect(body: ConnectRequest):
    with _api_errors():
        return await get_manager().login_with_token(body.token)


@router.post("/session/disconnect")
async def disconnect():
    manager = get_manager()
    manager.disconnect()
    return manager.get_status()


@router.put("/session/organization")
async def select_organization(body: OrgRequest):
    manager = get_manager()
    manager.select_organization(body.org)
    return manager.get_status()


@router.put("/session/default-organization")
async def set_default_organization(body: OrgRequest):
    manager = get_manager()
    manager.set_default_organization(body.org)
    return manager.get_status()


@router.post("/orgs/{org}/refresh", status_code=202)
async def refresh_organization(org: str):
    manager = get_manager()
    with _api_errors():
        manager.require_gateway()
    manager.refresh_organization(org)
    return {"org": org, "status": "scheduled"}


# ── Events ──

@router.get("/events")
async def list_events(after: int = 0):
    events = get_manager().events.since(after)
    return {
        "items": [
            {"seq": e.seq, "name": e.name, "payload": e.payload, "emitted_at": e.emitted_at}
            for e in events
        ],
        "last_seq": events[-1].seq if events else after,
    }


# ── Settings file ──

@router.get("/config")
async def get_config():
    cfg = get_manager().config_store.load()
    return cfg.model_dump(exclude={"github_token"})


@router.put("/config")
async def update_config(request: Request):
    store = get_manager().config_store
    current = store.load()
    body = await request.json()
    if not isinstance(body, dict):
        raise HTTPException(
            status_code=400,
            detail={"error": {"code": "VALIDATION_ERROR", "message": "config body must be a JSON object"}},
        )
    body.pop("github_token", None)
    try:
        updated = AppConfig.model_validate({**current.model_dump(), **body})
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": {"code": "VALIDATION_ERROR", "message": str(e)}},
        ) from e
    store.save(updated)
    return updated.model_dump(exclude={"github_token"})


# ── Repositories ──

@router.get("/repos/{owner}/{repo}")
async def get_repo_detail(owner: str, repo: str):
    with _api_errors():
        return await get_manager().get_repo_detail(owner, repo)


@router.put("/repos/{owner}/{repo}/topics")
async def update_topics(owner: str, repo: str, body: TopicsUpdate):
    with _api_errors():
        topics = await get_dispatcher().update_topics(owner, repo, body.topics, body.mode)
    return {"topics": topics}


@router.put("/repos/{owner}/{repo}/teams")
async def update_team_access(owner: str, repo: str, body: TeamAccessUpdate):
    with _api_errors():
        await get_dispatcher().update_team_access(
            owner, repo, body.org, body.team_slug, body.permission, body.remove
        )
    return {"status": "ok"}


@router.put("/orgs/{org}/repos/{repo}/properties")
async def update_custom_properties(org: str, repo: str, body: CustomPropertiesUpdate):
    with _api_errors():
        await get_dispatcher().update_custom_properties(org, repo, body.properties)
    return {"status": "ok"}


@router.get("/orgs/{org}/properties/schema")
async def get_custom_property_definitions(org: str):
    with _api_errors():
        return {"items": await get_dispatcher().get_custom_property_definitions(org)}


@router.put("/repos/{owner}/{repo}/branches/{branch:path}/protection")
async def update_branch_protection(owner: str, repo: str, branch: str, body: BranchProtectionUpdate):
    with _api_errors():
        return await get_dispatcher().update_branch_protection(owner, repo, branch, body.protection)


@router.delete("/repos/{owner}/{repo}/branches/{branch:path}/protection", status_code=204)
async def delete_branch_protection(owner: str, repo: str, branch: str):
    with _api_errors():
        await get_dispatcher().delete_branch_protection(owner, repo, branch)


@router.post("/repos/{owner}/{repo}/rulesets", status_code=201)
async def create_ruleset(owner: str, repo: str, request: Request):
    ruleset = await request.json()
    with _api_errors():
        return await get_dispatcher().create_ruleset(owner, repo, ruleset)


@router.put("/repos/{owner}/{repo}/rulesets/{ruleset_id}")
async def update_ruleset(owner: str, repo: str, ruleset_id: int, request: Request):
    ruleset = await request.json()
    with _api_errors():
        return await get_dispatcher().update_ruleset(owner, repo, ruleset_id, ruleset)


@router.delete("/repos/{owner}/{repo}/rulesets/{ruleset_id}", status_code=204)
async def delete_ruleset(owner: str, repo: str, ruleset_id: int):
    with _api_errors():
        await get_dispatcher().delete_ruleset(owner, repo, ruleset_id)


# ── Bulk ──

@router.post("/bulk/topics")
async def bulk_update_topics(body: BulkTopicsUpdate):
    result = await get_dispatcher().bulk_update_topics(body.repos, body.topics, body.mode)
    return _bulk_response(result)


@router.post("/bulk/teams")
async def bulk_update_team_access(body: BulkTeamAccessUpdate):
    result = await get_dispatcher().bulk_update_team_access(
        body.repos, body.org, body.team_slug, body.permission, body.remove
    )
    return _bulk_response(result)


@router.post("/bulk/team-groups")
async def bulk_apply_team_group(body: BulkTeamGroupUpdate):
    with _api_errors():
        result = await get_dispatcher().bulk_apply_team_group(body.repos, body.org, body.group, body.remove)
    return _bulk_response(result)


@router.post("/bulk/properties")
async def bulk_update_custom_properties(body: BulkCustomPropertiesUpdate):
    result = await get_dispatcher().bulk_update_custom_properties(body.org, body.repos, body.properties)
    return _bulk_response(result)


@router.post("/bulk/protection")
async def bulk_update_branch_protection(body: BulkBranchProtectionUpdate):
    result = await get_dispatcher().bulk_update_branch_protection(body.repos, body.branch, body.protection)
    return _bulk_response(result)
