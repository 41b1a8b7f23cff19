# dupscan - Find and rank duplicate code across a project
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Block fingerprints and token sets.

The hash is a cheap 32-bit polynomial hash, not a cryptographic one:
collisions are possible but rare enough for duplicate grouping.
"""

import re
from typing import Iterable, List

_NON_WORD = re.compile(r"[^\w\s]")


def calculate_hash(code: str) -> int:
    """
    Hash block text with a 32-bit rolling polynomial (base 31).

    Args:
        code: Raw block text

    Returns:
        Signed 32-bit integer
    """
    h = 0
    for ch in code:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def tokenize(code: str) -> List[str]:
    """Split code into lowercase word tokens, dropping single characters."""
    words = _NON_WORD.sub(" ", code).lower().split()
    return [w for w in words if len(w) > 1]


def jaccard_similarity(tokens1: Iterable[str], tokens2: Iterable[str]) -> float:
    """|A & B| / |A | B| over the token sets (0.0 when both are empty)."""
    set1 = set(tokens1)
    set2 = set(tokens2)
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)
