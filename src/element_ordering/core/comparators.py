"""
Comparator Factory.

Builds the total order applied to elements that share a group tier. Every
comparator returns a negative number, zero or a positive number, and a
``fallback_sort`` chain is consulted only on ties.
"""

import re
from collections.abc import Callable
from functools import cmp_to_key

from .collation import collation_key
from .config import SUBGROUP_ORDER, GroupTier, SortSpec
from .element import Element

Comparator = Callable[[Element, Element], int]

_LETTERS = "a-zÀ-ɏḀ-ỿ"
_NON_LETTERS_RE = re.compile(f"[^{_LETTERS}]+", re.IGNORECASE)
_LEADING_NON_LETTERS_RE = re.compile(f"^[^{_LETTERS}]+", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s")
_DIGITS_RE = re.compile(r"(\d+)")


def format_key(value: str, spec: SortSpec) -> str:
    """Apply case and special-character policies to a sort key.

    Whitespace is always removed.
    """
    if spec.ignore_case:
        value = value.lower()
    if spec.special_characters == "remove":
        value = _NON_LETTERS_RE.sub("", value)
    elif spec.special_characters == "trim":
        value = _LEADING_NON_LETTERS_RE.sub("", value)
    return _WHITESPACE_RE.sub("", value)


def natural_key(value: str, locale_name: str | None = None) -> list:
    """Split ``value`` so digit runs compare as numbers.

    ``re.split`` with a capturing group alternates text and digits, so the
    same list position always holds the same kind of chunk.
    """
    key: list = []
    for position, chunk in enumerate(_DIGITS_RE.split(value)):
        if position % 2:
            key.append(int(chunk))
        else:
            key.append(collation_key(chunk, locale_name))
    return key


def _sign(value) -> int:
    return (value > 0) - (value < 0)


def _compare_values(a, b) -> int:
    return (a > b) - (a < b)


def _ordered(result: int, order: str) -> int:
    return -result if order == "desc" else result


def unsorted_comparator(a: Element, b: Element) -> int:
    return 0


class ComparatorFactory:
    """Creates comparators for sort specs.

    Args:
        tiers: Configured group tiers, used by the ``subgroup-order`` sentinel
        group_of: Resolved group label per element id
        name_of: Sort name of an element (overload runs share one)
        text_of: Rendered text of an element, for line-length comparison
    """

    def __init__(
        self,
        tiers: tuple[GroupTier, ...] = (),
        group_of: dict[int, str] | None = None,
        name_of: Callable[[Element], str] | None = None,
        text_of: Callable[[Element], str] | None = None,
    ):
        self.tiers = tiers
        self.group_of = group_of or {}
        self.name_of = name_of or (lambda element: element.name)
        self.text_of = text_of or (lambda element: element.text or element.name)
        self._alphabet_cache: dict[str, dict[str, int]] = {}

    def build(self, spec: SortSpec) -> Comparator:
        """Build a comparator for ``spec`` including its fallback chain."""
        comparators = [self._build_single(spec)]
        fallback = spec.fallback()
        while fallback is not None:
            comparators.append(self._build_single(fallback))
            fallback = fallback.fallback()

        if len(comparators) == 1:
            return comparators[0]

        def compare(a: Element, b: Element) -> int:
            for comparator in comparators:
                result = comparator(a, b)
                if result:
                    return result
            return 0

        return compare

    def sort_key(self, spec: SortSpec):
        """Key function for ``sorted`` (Python's sort is stable)."""
        return cmp_to_key(self.build(spec))

    def _build_single(self, spec: SortSpec) -> Comparator:
        if spec.type == "alphabetical":
            return self._alphabetical(spec)
        if spec.type == "natural":
            return self._natural(spec)
        if spec.type == "line-length":
            return self._line_length(spec)
        if spec.type == "custom-alphabet":
            return self._custom_alphabet(spec)
        if spec.type == SUBGROUP_ORDER:
            return self._subgroup_order(spec)
        return unsorted_comparator

    # ============================================================
    # COMPARATORS
    # ============================================================

    def _alphabetical(self, spec: SortSpec) -> Comparator:
        def key(element: Element):
            return collation_key(format_key(self.name_of(element), spec), spec.locale)

        return lambda a, b: _ordered(_compare_values(key(a), key(b)), spec.order)

    def _natural(self, spec: SortSpec) -> Comparator:
        def key(element: Element):
            return natural_key(format_key(self.name_of(element), spec), spec.locale)

        return lambda a, b: _ordered(_compare_values(key(a), key(b)), spec.order)

    def _line_length(self, spec: SortSpec) -> Comparator:
        return lambda a, b: _ordered(
            _sign(len(self.text_of(a)) - len(self.text_of(b))), spec.order
        )

    def _custom_alphabet(self, spec: SortSpec) -> Comparator:
        positions = self._alphabet_cache.get(spec.alphabet)
        if positions is None:
            positions = {}
            for index, character in enumerate(spec.alphabet):
                positions.setdefault(character, index)
            self._alphabet_cache[spec.alphabet] = positions
        # Characters outside the alphabet sort after all of it
        missing = len(spec.alphabet)

        def compare(a: Element, b: Element) -> int:
            a_value = format_key(self.name_of(a), spec)
            b_value = format_key(self.name_of(b), spec)
            for a_char, b_char in zip(a_value, b_value):
                a_index = positions.get(a_char, missing)
                b_index = positions.get(b_char, missing)
                if a_index != b_index:
                    return _ordered(_sign(a_index - b_index), spec.order)
            return _ordered(_sign(len(a_value) - len(b_value)), spec.order)

        return compare

    def _subgroup_order(self, spec: SortSpec) -> Comparator:
        def compare(a: Element, b: Element) -> int:
            a_group = self.group_of.get(a.id)
            b_group = self.group_of.get(b.id)
            labels = self._subgroup_containing(a_group)
            if labels is None or b_group not in labels:
                return 0
            return _ordered(
                _sign(labels.index(a_group) - labels.index(b_group)), spec.order
            )

        return compare

    def _subgroup_containing(self, group: str | None) -> tuple[str, ...] | None:
        for tier in self.tiers:
            if len(tier.labels) > 1 and group in tier.labels:
                return tier.labels
        return None
