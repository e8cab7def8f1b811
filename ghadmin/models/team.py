from __future__ import annotations

from pydantic import BaseModel


class Team(BaseModel):
    name: str
    slug: str
    url: str = ""
    members_count: int = 0


class TeamGroupMember(BaseModel):
    """One entry of a saved team group: a team and the permission it is granted."""

    slug: str
    permission: str = "pull"
