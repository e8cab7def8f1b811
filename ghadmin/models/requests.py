from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ConnectRequest(BaseModel):
    token: str


class OrgRequest(BaseModel):
    org: str


class TopicsUpdate(BaseModel):
    topics: list[str] = Field(default_factory=list)
    mode: str = "replace"


class BulkTopicsUpdate(TopicsUpdate):
    repos: list[str]


class TeamAccessUpdate(BaseModel):
    org: str
    team_slug: str
    permission: str = "pull"
    remove: bool = False


class BulkTeamAccessUpdate(TeamAccessUpdate):
    repos: list[str]


class BulkTeamGroupUpdate(BaseModel):
    repos: list[str]
    org: str
    group: str
    remove: bool = False


class CustomPropertiesUpdate(BaseModel):
    properties: dict[str, Any]


class BulkCustomPropertiesUpdate(CustomPropertiesUpdate):
    org: str
    repos: list[str]


class BranchProtectionUpdate(BaseModel):
    protection: dict[str, Any]


class BulkBranchProtectionUpdate(BranchProtectionUpdate):
    repos: list[str]
    branch: str
