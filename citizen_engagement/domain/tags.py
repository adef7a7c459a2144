# SPDX-License-Identifier: Apache-2.0

"""
Tag set operations over an issue's tags.

Tags behave as a set: duplicates collapse and ordering carries no meaning.
Results keep first-seen order so responses stay stable between calls.
"""

from typing import Iterable, Tuple


def normalize_tags(tags: Iterable[str]) -> Tuple[str, ...]:
    """Drop duplicates while keeping first-seen order."""
    return tuple(dict.fromkeys(tags))


def union_tags(current: Iterable[str], incoming: Iterable[str]) -> Tuple[str, ...]:
    """Tags present in either collection."""
    return normalize_tags([*current, *incoming])


def difference_tags(current: Iterable[str], incoming: Iterable[str]) -> Tuple[str, ...]:
    """Current tags not listed in ``incoming``."""
    removed = set(incoming)
    return normalize_tags(tag for tag in current if tag not in removed)


def replace_tags(current: Iterable[str], incoming: Iterable[str]) -> Tuple[str, ...]:
    """Exactly the incoming tags."""
    return normalize_tags(incoming)
