from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

"""Set comparison of primary keys against the reference key set."""

__all__ = [
    "partition",
]

logger = logging.getLogger(__name__)


def partition(
    primary_keys: Sequence[str], reference_keys: Collection[str]
) -> tuple[list[str], list[str]]:
    """Split primary keys into (matched, unmatched) by reference membership.

    One ordered pass over primary_keys; each partition keeps the input order.
    reference_keys should support O(1) membership (set/frozenset); any other
    collection is converted once.
    """
    if not isinstance(reference_keys, (set, frozenset)):
        reference_keys = frozenset(reference_keys)

    matched: list[str] = []
    unmatched: list[str] = []
    for key in primary_keys:
        if key in reference_keys:
            matched.append(key)
        else:
            unmatched.append(key)

    logger.debug(f"partition: matched={len(matched)} unmatched={len(unmatched)}")
    return matched, unmatched
