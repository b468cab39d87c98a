"""
Group classification rules for the ordering engine.
Provides a rule-based system assigning each element one group label,
from user-declared custom groups first and built-in groups second.
"""

from collections.abc import Callable
from dataclasses import dataclass

from .config import CustomGroupRule, GroupPredicate, SortingConfig
from .element import (
    MODIFIER_PRIORITY,
    MODIFIER_RANK,
    UNKNOWN_GROUP,
    Element,
    parse_group_name,
    selector_chain,
)

Matcher = Callable[[Element], bool]


def predicate_matches(predicate: GroupPredicate, element: Element) -> bool:
    """Check a conjunction of constraints against an element.

    Args:
        predicate: Selector, modifiers and pattern constraints
        element: Element to test

    Returns:
        bool: True if every declared constraint holds
    """
    if predicate.selector and predicate.selector not in element.selectors:
        return False

    if not predicate.modifiers <= element.modifiers:
        return False

    if predicate.element_name_pattern and not predicate.element_name_pattern.matches(
        element.name
    ):
        return False

    if predicate.element_value_pattern:
        if element.value_text is None:
            return False
        if not predicate.element_value_pattern.matches(element.value_text):
            return False

    if predicate.decorator_name_pattern and not any(
        predicate.decorator_name_pattern.matches(decorator)
        for decorator in element.decorators
    ):
        return False

    return True


@dataclass
class ClassificationRuleGroup:
    """A single group classification rule: a matcher and the label it yields."""

    group_name: str
    matcher: Matcher

    def matches(self, element: Element) -> bool:
        return self.matcher(element)

    @classmethod
    def from_custom(cls, rule: CustomGroupRule) -> "ClassificationRuleGroup":
        predicates = rule.predicates
        if rule.any_of:
            return cls(
                rule.group_name,
                lambda element: any(predicate_matches(p, element) for p in predicates),
            )
        return cls(
            rule.group_name,
            lambda element: all(predicate_matches(p, element) for p in predicates),
        )

    @classmethod
    def from_builtin(
        cls, group_name: str, modifiers: frozenset[str], selector: str
    ) -> "ClassificationRuleGroup":
        return cls(
            group_name,
            lambda element: selector in element.selectors
            and modifiers <= element.modifiers,
        )


def modifier_bitmask(modifiers: frozenset[str]) -> int:
    """Encode modifiers so that a higher-priority modifier is a higher bit.

    Comparing two masks compares the highest-priority modifier first, then the
    next one, so a single ``static`` outranks ``private-readonly``.
    """
    size = len(MODIFIER_PRIORITY)
    mask = 0
    for modifier in modifiers:
        mask |= 1 << (size - 1 - MODIFIER_RANK[modifier])
    return mask


def builtin_rank(modifiers: frozenset[str], selector: str) -> tuple[int, int]:
    """Sort key of a built-in group; lower ranks are tried first."""
    specificity = len(selector_chain(selector)) - 1
    return (-specificity, -modifier_bitmask(modifiers))


class GroupClassifier:
    """Priority-list dispatch over the groups a profile configures.

    Custom groups are tried in declaration order and only count when their
    label appears in ``groups``. Built-in groups follow, most specific
    selector first and then by the modifier-priority table. Anything left
    is ``unknown``.
    """

    def __init__(self, config: SortingConfig):
        configured = config.group_names
        configured_set = set(configured)

        self.rules: list[ClassificationRuleGroup] = [
            ClassificationRuleGroup.from_custom(rule)
            for rule in config.custom_groups
            if rule.group_name in configured_set
        ]

        builtins = []
        for label in configured:
            parsed = parse_group_name(label)
            if parsed is None:
                continue
            modifiers, selector = parsed
            builtins.append(
                (builtin_rank(modifiers, selector), label, modifiers, selector)
            )
        builtins.sort(key=lambda item: item[0])
        self.rules.extend(
            ClassificationRuleGroup.from_builtin(label, modifiers, selector)
            for _rank, label, modifiers, selector in builtins
        )

    def classify(self, element: Element) -> str:
        """Return the group label of ``element``"""
        for rule in self.rules:
            if rule.matches(element):
                return rule.group_name
        return UNKNOWN_GROUP

    def classify_all(self, elements: list[Element]) -> dict[int, str]:
        return {element.id: self.classify(element) for element in elements}
