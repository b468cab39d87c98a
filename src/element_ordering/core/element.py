"""
Element model shared by every stage of the ordering pipeline.

An Element is one orderable structural unit (class member, object field,
parameter, markup attribute) as produced by an external extractor. The
engine never sees source text; everything it needs is precomputed here.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from .expressions import Expr

# ============================================================
# VOCABULARY
# ============================================================

ALL_SELECTORS: tuple[str, ...] = (
    "accessor-property",
    "index-signature",
    "constructor",
    "static-block",
    "get-method",
    "set-method",
    "function-property",
    "property",
    "method",
    "attribute",
    "spread",
    "unknown",
)

# Specific selector -> generic selector it also satisfies
SELECTOR_PARENTS: dict[str, str] = {
    "function-property": "property",
    "get-method": "method",
    "set-method": "method",
    "constructor": "method",
}

OPAQUE_SELECTOR = "unknown"

# Highest priority first. Built-in classification compares the modifiers a
# group requires against this table, never against how many it requires.
MODIFIER_PRIORITY: tuple[str, ...] = (
    "static",
    "declare",
    "abstract",
    "override",
    "decorated",
    "private",
    "protected",
    "public",
    "readonly",
    "optional",
    "required",
    "async",
    "shorthand",
    "multiline",
)

ALL_MODIFIERS: frozenset[str] = frozenset(MODIFIER_PRIORITY)

MODIFIER_RANK: dict[str, int] = {
    modifier: rank for rank, modifier in enumerate(MODIFIER_PRIORITY)
}


UNKNOWN_GROUP = "unknown"


def selector_chain(selector: str) -> tuple[str, ...]:
    """Return the selector followed by every generic selector it implies."""
    chain = [selector]
    while chain[-1] in SELECTOR_PARENTS:
        chain.append(SELECTOR_PARENTS[chain[-1]])
    return tuple(chain)


def _alternation(words) -> str:
    return "|".join(re.escape(word) for word in sorted(words, key=len, reverse=True))


_GROUP_NAME_RE = re.compile(
    rf"^(?P<modifiers>(?:(?:{_alternation(ALL_MODIFIERS)})-)*)"
    rf"(?P<selector>{_alternation(ALL_SELECTORS)})$"
)
_MODIFIER_RE = re.compile(rf"({_alternation(ALL_MODIFIERS)})-")


def parse_group_name(name: str) -> tuple[frozenset[str], str] | None:
    """Split a built-in group name into its modifiers and selector.

    ``"static-private-property"`` gives ``({"static", "private"}, "property")``.
    Returns None when the name is not a built-in group, including names that
    repeat a modifier.
    """
    match = _GROUP_NAME_RE.match(name)
    if not match:
        return None
    modifiers = _MODIFIER_RE.findall(match.group("modifiers"))
    if len(set(modifiers)) != len(modifiers):
        return None
    return frozenset(modifiers), match.group("selector")


# ============================================================
# ELEMENTS
# ============================================================


@dataclass(frozen=True)
class Comment:
    """A comment attached above an element."""

    text: str
    kind: str = "line"  # line or block


@dataclass(frozen=True)
class Element:
    """One orderable sibling within a construct."""

    id: int
    name: str
    text: str = ""
    selector: str = "property"
    modifiers: frozenset[str] = frozenset()
    decorators: tuple[str, ...] = ()
    index: int | None = None
    comments: tuple[Comment, ...] = ()
    pinned: bool = False
    value: Expr | None = None
    value_text: str | None = None
    computed_key: Expr | None = None
    lines_before: int = 0

    @property
    def position(self) -> int:
        """Source position, defaulting to the id."""
        return self.id if self.index is None else self.index

    @property
    def selectors(self) -> tuple[str, ...]:
        return selector_chain(self.selector)

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    @property
    def is_opaque(self) -> bool:
        """Opaque elements bound their neighbours but are never reordered."""
        return self.selector == OPAQUE_SELECTOR

    @property
    def is_fixed(self) -> bool:
        return self.pinned or self.is_opaque

    @property
    def is_method_like(self) -> bool:
        return "method" in self.selectors

    @property
    def dependency_name(self) -> tuple[str, str]:
        """Namespace-qualified name used to resolve sibling references."""
        return ("static" if self.is_static else "instance", self.name)


# ============================================================
# VIOLATIONS
# ============================================================


class ViolationKind(Enum):
    """Kinds of ordering and spacing violations"""

    ORDER = "order"
    GROUP_ORDER = "group-order"
    DEPENDENCY_ORDER = "dependency-order"
    MISSING_SPACING = "missing-spacing"
    EXTRA_SPACING = "extra-spacing"


@dataclass(frozen=True)
class Violation:
    """A single diagnostic about an adjacent pair of elements.

    ``element_id`` is the right-hand element of the pair, the one a reporter
    should underline. Dependency violations also carry the name of the
    element that depends on ``right``.
    """

    kind: ViolationKind
    left: str
    right: str
    element_id: int
    left_group: str | None = None
    right_group: str | None = None
    dependent: str | None = None
    expected_lines: int | None = None
    actual_lines: int | None = None

    @property
    def message(self) -> str:
        left = _single_line(self.left)
        right = _single_line(self.right)
        if self.kind == ViolationKind.ORDER:
            return f'Expected "{right}" to come before "{left}".'
        if self.kind == ViolationKind.GROUP_ORDER:
            return (
                f'Expected "{right}" ({self.right_group}) to come before '
                f'"{left}" ({self.left_group}).'
            )
        if self.kind == ViolationKind.DEPENDENCY_ORDER:
            return f'Expected dependency "{right}" to come before "{self.dependent}".'
        if self.kind == ViolationKind.MISSING_SPACING:
            return f'Missed spacing between "{left}" and "{right}".'
        return f'Extra spacing between "{left}" and "{right}" objects.'

    def to_dict(self) -> dict:
        """Serialisable view used by reporters"""
        return {
            "kind": self.kind.value,
            "left": self.left,
            "right": self.right,
            "element_id": self.element_id,
            "left_group": self.left_group,
            "right_group": self.right_group,
            "dependent": self.dependent,
            "expected_lines": self.expected_lines,
            "actual_lines": self.actual_lines,
            "message": self.message,
        }


def _single_line(value: str) -> str:
    return " ".join(value.split())


@dataclass
class Partition:
    """A maximal run of elements ordered independently of its neighbours."""

    index: int
    elements: list[Element] = field(default_factory=list)
    # Partition comments above the first element; they mark the position,
    # so a rewrite keeps them in place when that element moves
    boundary: tuple[Comment, ...] = ()

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)
