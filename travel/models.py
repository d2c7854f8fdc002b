"""
travel/models.py -- Travel-state domain types and the country-code rule.

A (user, country) pair is in exactly one of three states: no mark, visited,
or wishlisted. MarkStatus names the two stored states; "no mark" is the
absence of a row.

Country codes are ISO-3166 alpha-2 *shaped*: two ASCII letters, uppercased.
Membership in the real ISO list is not checked: "XX" is accepted, "X1" is
not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from core.errors import InvalidCountryCode

_CODE_RE = re.compile(r"[A-Za-z]{2}")


class MarkStatus(str, Enum):
    visited = "visited"
    wishlist = "wishlist"


def normalize_country_code(raw: str) -> str:
    """Return the uppercased code, or raise InvalidCountryCode.

    Validation runs on the raw input so non-ASCII letters whose uppercase form
    happens to be two ASCII letters (e.g. "ß" -> "SS") are rejected.
    """
    if not isinstance(raw, str) or not _CODE_RE.fullmatch(raw):
        raise InvalidCountryCode(detail=f"{str(raw)[:20]!r} is not a two-letter country code.")
    return raw.upper()


@dataclass(frozen=True)
class TravelState:
    """Consistent snapshot of one user's two country sets (sorted, disjoint)."""

    visited: list[str] = field(default_factory=list)
    wishlist: list[str] = field(default_factory=list)

    def status_of(self, code: str) -> MarkStatus | None:
        if code in self.visited:
            return MarkStatus.visited
        if code in self.wishlist:
            return MarkStatus.wishlist
        return None
