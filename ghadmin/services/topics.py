"""Topic set algebra for replace/add/remove topic updates."""

from __future__ import annotations

from collections.abc import Iterable

from ghadmin.exceptions import InvalidArgumentError

VALID_MODES = {"replace", "add", "remove"}


def combine_topics(current: Iterable[str], requested: Iterable[str], mode: str) -> list[str]:
    """Compute the topic list to write back.

    ``replace`` returns ``requested`` as given. ``add`` unions it into
    ``current`` (empty strings dropped), ``remove`` subtracts it. Results of
    ``add``/``remove`` are de-duplicated and sorted.
    """
    requested = list(requested)
    if mode == "replace":
        return requested
    if mode == "add":
        return sorted(set(current) | {t for t in requested if t != ""})
    if mode == "remove":
        return sorted(set(current) - set(requested))
    raise InvalidArgumentError(f"invalid mode: {mode!r} (expected one of: {', '.join(sorted(VALID_MODES))})")
