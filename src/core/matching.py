"""Strict and digit-reversal matching (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class MatchType(str, Enum):
    STRICT = "strict"
    REVERSE = "reverse"


@dataclass(frozen=True)
class Match:
    """A matched candidate value and the rule that matched it."""

    number: int
    match_type: MatchType


def reverse_digits(number: int) -> int:
    """Reverse a value read as a zero-padded 2-digit string (7 -> 70)."""

    return int(f"{number:02d}"[::-1])


def check_match(candidate: int, targets: Iterable[int]) -> Optional[Match]:
    """Compare one value against a target set.

    Rules, in order:
    - strict: the candidate itself is a target
    - reverse: the digit-reversed candidate is a target
    The returned number is always the candidate, not the target it hit.
    """

    target_set = set(targets)
    if candidate in target_set:
        return Match(number=candidate, match_type=MatchType.STRICT)
    if reverse_digits(candidate) in target_set:
        return Match(number=candidate, match_type=MatchType.REVERSE)
    return None


def dedupe_key(number: int, match_type: MatchType) -> Tuple[int, str]:
    """Return the key used everywhere hits are deduplicated."""

    return number, MatchType(match_type).value
