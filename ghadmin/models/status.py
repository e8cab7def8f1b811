from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ghadmin.models.repo import RepoSummary
from ghadmin.models.team import Team


class OrgStatus(BaseModel):
    is_connected: bool = False
    is_polling: bool = False
    organizations: list[str] = Field(default_factory=list)
    selected_org: str = ""
    default_org: str = ""


class ReposUpdatedEvent(BaseModel):
    org: str
    repos: list[RepoSummary] = Field(default_factory=list)


class TeamsUpdatedEvent(BaseModel):
    org: str
    teams: list[Team] = Field(default_factory=list)


class FetchErrorEvent(BaseModel):
    org: str
    type: Literal["repos", "teams"]
    error: str
