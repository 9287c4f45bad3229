"""
Generic version ordering.

Versions are split into items at ``.``, ``-`` and ``_`` and at every
transition between digits and letters. Numeric items compare as numbers;
well-known qualifiers compare by rank:

    alpha < beta < milestone < rc = cr < snapshot < "" = ga = final = release < sp

Any other text compares case-insensitively and sorts after every
qualifier but before numbers. Trailing zero/release items are padding,
so ``1.0.0`` equals ``1`` and ``1.0-ga`` equals ``1``.

Usage:
    from depkit.core.versions import parse_version

    sorted(parse_version(v) for v in ["1.0", "1.0-rc1", "1.0-SNAPSHOT"])
    # [1.0-rc1, 1.0-SNAPSHOT, 1.0]
"""

from __future__ import annotations

import functools
from enum import IntEnum

from depkit.core.ir.artifacts import is_snapshot_version

__all__ = [
    "Version",
    "is_preview_version",
    "is_snapshot_version",
    "parse_version",
]


class ItemKind(IntEnum):
    """Item kinds, ordered: a qualifier sorts before a string, a string before a number."""

    QUALIFIER = 2
    STRING = 3
    INT = 4


_QUALIFIER_ALPHA = -5
_QUALIFIER_BETA = -4
_QUALIFIER_MILESTONE = -3

_QUALIFIERS: dict[str, int] = {
    "alpha": _QUALIFIER_ALPHA,
    "beta": _QUALIFIER_BETA,
    "milestone": _QUALIFIER_MILESTONE,
    "cr": -2,
    "rc": -2,
    "snapshot": -1,
    "ga": 0,
    "final": 0,
    "release": 0,
    "": 0,
    "sp": 1,
}

_SHORT_QUALIFIERS: dict[str, int] = {
    "a": _QUALIFIER_ALPHA,
    "b": _QUALIFIER_BETA,
    "m": _QUALIFIER_MILESTONE,
}

_SEPARATORS = ".-_"


class _Item:
    __slots__ = ("kind", "value")

    def __init__(self, kind: ItemKind, value: int | str) -> None:
        self.kind = kind
        self.value = value

    @property
    def is_number(self) -> bool:
        return self.kind == ItemKind.INT

    def compare(self, other: _Item | None) -> int:
        if other is None:
            # padding: compare against an absent item
            if self.kind == ItemKind.STRING:
                return 1
            assert isinstance(self.value, int)
            return (self.value > 0) - (self.value < 0)
        if self.kind != other.kind:
            return self.kind - other.kind
        a, b = self.value, other.value
        return (a > b) - (a < b)  # type: ignore[operator]

    def key(self) -> tuple[int, int | str]:
        return (int(self.kind), self.value)

    def __repr__(self) -> str:
        return f"_Item({self.kind.name}, {self.value!r})"


def _tokenize(text: str) -> list[_Item]:
    source = text or "0"
    items: list[_Item] = []
    i = 0
    n = len(source)

    while i < n:
        # state: -2 nothing yet, -1 letters, 0 leading zeros, 1 digits
        state = -2
        start = i
        end = n
        terminated_by_number = False
        while i < n:
            c = source[i]
            if c in _SEPARATORS:
                end = i
                i += 1
                break
            if c.isdigit():
                if state == -1:
                    end = i
                    terminated_by_number = True
                    break
                if state == 0:
                    start += 1
                state = 1 if (state > 0 or c != "0") else 0
            else:
                if state >= 0:
                    end = i
                    break
                state = -1
            i += 1

        if end > start:
            token = source[start:end]
            is_number = state >= 0
        else:
            token = "0"
            is_number = True
        items.append(_make_item(token, is_number, terminated_by_number))

    _trim_padding(items)
    return items


def _make_item(token: str, is_number: bool, terminated_by_number: bool) -> _Item:
    if is_number:
        return _Item(ItemKind.INT, int(token))
    lowered = token.lower()
    if terminated_by_number and lowered in _SHORT_QUALIFIERS:
        return _Item(ItemKind.QUALIFIER, _SHORT_QUALIFIERS[lowered])
    if lowered in _QUALIFIERS:
        return _Item(ItemKind.QUALIFIER, _QUALIFIERS[lowered])
    return _Item(ItemKind.STRING, lowered)


def _trim_padding(items: list[_Item]) -> None:
    number: bool | None = None
    end = len(items) - 1
    for i in range(end, 0, -1):
        item = items[i]
        if item.is_number is not number:
            end = i
            number = item.is_number
        if (
            end == i
            and (i == len(items) - 1 or items[i - 1].is_number == item.is_number)
            and item.compare(None) == 0
        ):
            del items[i]
            end -= 1


def _compare_padding(items: list[_Item], index: int, number: bool | None) -> int:
    rel = 0
    for item in items[index:]:
        if number is not None and number != item.is_number:
            break
        rel = item.compare(None)
        if rel != 0:
            break
    return rel


@functools.total_ordering
class Version:
    """A parsed version; orders by the generic scheme, prints as written."""

    __slots__ = ("text", "_items")

    def __init__(self, text: str) -> None:
        self.text = text
        self._items = _tokenize(text)

    def compare(self, other: Version) -> int:
        these, those = self._items, other._items
        number = True
        index = 0
        while True:
            if index >= len(these) and index >= len(those):
                return 0
            if index >= len(these):
                return -_compare_padding(those, index, None)
            if index >= len(those):
                return _compare_padding(these, index, None)
            this_item, that_item = these[index], those[index]
            if this_item.is_number != that_item.is_number:
                if number == this_item.is_number:
                    return _compare_padding(these, index, number)
                return -_compare_padding(those, index, number)
            rel = this_item.compare(that_item)
            if rel != 0:
                return rel
            number = this_item.is_number
            index += 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash(tuple(item.key() for item in self._items))

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Version({self.text!r})"


def parse_version(text: str) -> Version:
    """Parse a version string; blank text is rejected."""
    if not text or not text.strip():
        raise ValueError("Version must not be blank")
    return Version(text.strip())


def is_preview_version(version: str) -> bool:
    """
    True for alpha/beta/milestone/release-candidate versions.

    Matches the qualifier words anywhere in the version, or one of the
    short forms ``a``, ``b``, ``m`` immediately followed by a digit
    (``1.0a1``, ``3.1.0M1``).
    """
    if len(version) <= 1:
        return False
    ver = version.lower()
    if any(word in ver for word in ("alpha", "beta", "milestone", "rc", "cr")):
        return True
    for ch in "abm":
        idx = ver.rfind(ch)
        if idx > -1 and idx + 1 < len(ver) and ver[idx + 1].isdigit():
            return True
    return False
