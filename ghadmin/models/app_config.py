from __future__ import annotations

from pydantic import BaseModel, Field

from ghadmin.models.team import TeamGroupMember


class AppConfig(BaseModel):
    """Contents of the desktop settings file."""

    github_token: str = ""
    selected_org: str = ""
    default_org: str = ""
    window_x: int = -1
    window_y: int = -1
    window_width: int = 1280
    window_height: int = 1024
    remember_pos: bool = True
    theme: str = "system"
    # org -> group name -> repo full names
    repo_groups: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    # org -> group name -> team grants
    team_groups: dict[str, dict[str, list[TeamGroupMember]]] = Field(default_factory=dict)
