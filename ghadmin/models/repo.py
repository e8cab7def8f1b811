from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RepoSummary(BaseModel):
    name: str
    full_name: str
    url: str = ""
    topics: list[str] = Field(default_factory=list)
    archived: bool = False
    public: bool = True
    visibility: str = "public"
    is_fork: bool = False
    default_branch: str = ""
    can_manage: bool = False

    @classmethod
    def from_api(cls, data: dict) -> RepoSummary:
        """Build a summary from a GitHub repository payload."""
        return cls(**summary_fields(data))


class RepoTeam(BaseModel):
    name: str
    slug: str
    permission: str = ""


class BranchProtectionDetail(BaseModel):
    branch_name: str
    protection: dict[str, Any] = Field(default_factory=dict)


class RepoDetail(RepoSummary):
    description: str = ""
    stars: int = 0
    watchers: int = 0
    forks_count: int = 0
    open_prs: int = 0
    branches_count: int = 0
    custom_properties: dict[str, Any] = Field(default_factory=dict)
    teams: list[RepoTeam] = Field(default_factory=list)
    protection: list[BranchProtectionDetail] = Field(default_factory=list)
    rulesets: list[dict[str, Any]] = Field(default_factory=list)


def can_manage(permissions: dict | None) -> bool:
    if not permissions:
        return False
    return bool(permissions.get("admin") or permissions.get("maintain") or permissions.get("push"))


def summary_fields(data: dict) -> dict:
    private = bool(data.get("private", False))
    return {
        "name": data.get("name", ""),
        "full_name": data.get("full_name", ""),
        "url": data.get("html_url") or "",
        "topics": list(data.get("topics") or []),
        "archived": bool(data.get("archived", False)),
        "public": not private,
        "visibility": data.get("visibility") or ("private" if private else "public"),
        "is_fork": bool(data.get("fork", False)),
        "default_branch": data.get("default_branch") or "",
        "can_manage": can_manage(data.get("permissions")),
    }
