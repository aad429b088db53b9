"""Reading order - a deterministic total order over artifacts.

Nodes are ordered by first appearance in the source document when a
position is known, by structured labels such as "VIII:3-2-3" otherwise,
and finally by id, so heterogeneous or partial metadata still yields a
stable order.
"""

from __future__ import annotations

import dataclasses
import re
from functools import cmp_to_key
from typing import Iterable, Sequence, Union

from constellations.graph.GraphNode import GraphNode

SortKey = Union[int, str]

_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}

# "<roman>:<integers separated by dots or dashes>", e.g. "VIII:3-2-3"
_STRUCTURED_LABEL = re.compile(r"^([IVXLCDM]+)\s*:(.*)$", re.IGNORECASE)
_NUMBER_SEPARATOR = re.compile(r"[^0-9]+")


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def roman_to_int(roman: str) -> int:
    """Parse a Roman numeral using subtractive notation.

    Returns:
        The value, or 0 for empty or malformed input.
    """
    s = roman.strip().upper()
    if not s or any(ch not in _ROMAN_VALUES for ch in s):
        return 0
    total = 0
    for i, ch in enumerate(s):
        cur = _ROMAN_VALUES[ch]
        nxt = _ROMAN_VALUES[s[i + 1]] if i + 1 < len(s) else 0
        total += -cur if cur < nxt else cur
    return max(total, 0)


def label_sort_key(label: str) -> list[SortKey]:
    """Split a structured label into sortable components.

    >>> label_sort_key("VIII:3-2-3")
    [8, 3, 2, 3]
    >>> label_sort_key("Lemma A.1")
    ['Lemma A.1']
    """
    text = label.strip()
    match = _STRUCTURED_LABEL.match(text)
    if not match:
        return [text]
    nums = [int(part) for part in _NUMBER_SEPARATOR.split(match.group(2)) if part]
    return [roman_to_int(match.group(1)), *nums]


def compare_text(a: str, b: str) -> int:
    """Locale-style string comparison: case-insensitive first, then exact."""
    fa, fb = a.casefold(), b.casefold()
    if fa != fb:
        return -1 if fa < fb else 1
    if a != b:
        return -1 if a < b else 1
    return 0


def compare_lex(a: Sequence[SortKey], b: Sequence[SortKey]) -> int:
    """Compare two mixed number/string key lists lexicographically.

    Numbers compare numerically and strings with compare_text. A number
    sorts before a string, and a list that runs out first sorts first.
    """
    for av, bv in zip(a, b):
        a_num = isinstance(av, int)
        b_num = isinstance(bv, int)
        if a_num and b_num:
            if av != bv:
                return _sign(av - bv)
            continue
        if a_num != b_num:
            return -1 if a_num else 1
        result = compare_text(str(av), str(bv))
        if result:
            return result
    return _sign(len(a) - len(b))


def _compare_optional_int(a: int | None, b: int | None) -> int:
    """Present values ascending; a missing value sorts after a present one."""
    if a is not None and b is not None:
        return _sign(a - b)
    if a is not None:
        return -1
    if b is not None:
        return 1
    return 0


def compare_first_occurrence(a: GraphNode, b: GraphNode) -> int:
    """Compare two nodes by first appearance in the source.

    Tie-break chain:
        1. position.line_start ascending (missing sorts last)
        2. position.col_start ascending (missing sorts last)
        3. label present before absent, then compare_lex of label_sort_key
        4. id
    """
    ap, bp = a.position, b.position

    result = _compare_optional_int(
        ap.line_start if ap else None,
        bp.line_start if bp else None,
    )
    if result:
        return result

    result = _compare_optional_int(
        ap.col_start if ap else None,
        bp.col_start if bp else None,
    )
    if result:
        return result

    al = (a.label or "").strip()
    bl = (b.label or "").strip()
    if al and bl:
        result = compare_lex(label_sort_key(al), label_sort_key(bl))
        if result:
            return result
    elif al:
        return -1
    elif bl:
        return 1

    if a.id != b.id:
        return -1 if a.id < b.id else 1
    return 0


def sort_reading_order(nodes: Iterable[GraphNode]) -> list[GraphNode]:
    """Return nodes sorted into reading order."""
    return sorted(nodes, key=cmp_to_key(compare_first_occurrence))


def assign_order_indices(nodes: Iterable[GraphNode]) -> list[GraphNode]:
    """Sort every node and assign dense 1-based order indices.

    The whole node set is re-sorted each time so indices stay a single
    consistent total order as nodes arrive. The input nodes are left
    untouched; indexed copies are returned so earlier snapshots keep
    their own indices.

    Returns:
        Copies of the nodes in reading order, with order_index set.
    """
    return [
        dataclasses.replace(node, order_index=i + 1)
        for i, node in enumerate(sort_reading_order(nodes))
    ]


__all__ = [
    "roman_to_int",
    "label_sort_key",
    "compare_text",
    "compare_lex",
    "compare_first_occurrence",
    "sort_reading_order",
    "assign_order_indices",
]
