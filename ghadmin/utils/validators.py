"""Validation utilities for repository identifiers."""

from __future__ import annotations


def split_full_name(full_name: str) -> tuple[str, str] | None:
    """Split "owner/repo" into (owner, repo).

    Returns None unless there are exactly two non-empty segments.
    """
    parts = full_name.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def repo_name_for_org_write(full_name: str) -> str:
    """Repo segment of "owner/repo"; anything else is passed through as-is."""
    parsed = split_full_name(full_name)
    return parsed[1] if parsed else full_name
