"""
Spacing Resolver.

Blank-line requirements come from three layers, most specific first:

1. an inline ``newlines_between`` directive between two tiers,
2. ``newlines_inside`` of the tier object or of the custom group both
   neighbours share,
3. the global ``newlines_between`` / ``newlines_inside`` settings.

Members of one overload run are always separated by zero blank lines.
"""

import logging
from dataclasses import dataclass

from .config import IGNORE, Spacing, SortingConfig
from .element import Element, Violation, ViolationKind

logger = logging.getLogger(__name__)


def combine_spacing(first: Spacing | None, second: Spacing | None, same_group: bool) -> Spacing | None:
    """Combine two spacing requests for the same gap.

    ``ignore`` yields to any exact count. Between different groups an exact
    0 wins; otherwise the larger count wins.
    """
    if first is None:
        return second
    if second is None:
        return first
    if first == IGNORE:
        return second
    if second == IGNORE:
        return first
    if not same_group and (first == 0 or second == 0):
        return 0
    return max(first, second)


@dataclass(frozen=True)
class SpacingRequirement:
    """Blank lines required between two neighbours of the target order.

    ``lines`` is None when the gap is not constrained.
    """

    left_id: int
    right_id: int
    lines: int | None


class SpacingResolver:
    """Resolves blank-line requirements for one profile."""

    def __init__(
        self,
        config: SortingConfig,
        group_of: dict[int, str],
        tier_of: dict[int, int],
        partition_of: dict[int, int],
        overload_run_of: dict[int, int] | None = None,
    ):
        self.config = config
        self.group_of = group_of
        self.tier_of = tier_of
        self.partition_of = partition_of
        self.overload_run_of = overload_run_of or {}
        self.directives = config.directives

    def between_tiers(self, left_tier: int, right_tier: int) -> Spacing:
        """Spacing between two different tiers, ``left_tier < right_tier``.

        Boundary ``k`` sits between tier ``k`` and tier ``k + 1``; a directive
        there replaces the global setting. Spans over several boundaries
        combine every boundary on the way.
        """
        result: Spacing | None = None
        for boundary in range(left_tier, right_tier):
            value = self.directives.get(boundary, self.config.newlines_between)
            result = combine_spacing(result, value, same_group=False)
        return IGNORE if result is None else result

    def inside_tier(self, tier: int, left_group: str | None, right_group: str | None) -> Spacing:
        tiers = self.config.tiers
        tier_value = tiers[tier].newlines_inside if tier < len(tiers) else None

        group_value = None
        if left_group is not None and left_group == right_group:
            rule = self.config.custom_group(left_group)
            if rule is not None:
                group_value = rule.newlines_inside

        value = combine_spacing(tier_value, group_value, same_group=left_group == right_group)
        return self.config.newlines_inside if value is None else value

    def required(self, left: Element, right: Element) -> Spacing | None:
        """
        Blank lines required between ``left`` followed by ``right``.

        Returns:
            An integer, ``"ignore"``, or None when the pair is not checked
            (different partitions, pinned or opaque elements, or tiers in
            reverse order)
        """
        if left.is_fixed or right.is_fixed:
            return None
        if self.partition_of.get(left.id) != self.partition_of.get(right.id):
            return None

        left_run = self.overload_run_of.get(left.id)
        if left_run is not None and left_run == self.overload_run_of.get(right.id):
            return 0

        left_tier = self.tier_of[left.id]
        right_tier = self.tier_of[right.id]
        if left_tier > right_tier:
            return None
        if left_tier < right_tier:
            return self.between_tiers(left_tier, right_tier)
        return self.inside_tier(
            left_tier, self.group_of.get(left.id), self.group_of.get(right.id)
        )

    def requirements(self, target_order: list[Element]) -> list[SpacingRequirement]:
        """Required blank lines for each neighbour pair of the target order"""
        requirements = []
        for left, right in zip(target_order, target_order[1:]):
            value = self.required(left, right)
            requirements.append(
                SpacingRequirement(
                    left_id=left.id,
                    right_id=right.id,
                    lines=None if value in (None, IGNORE) else value,
                )
            )
        return requirements

    def find_violations(self, elements: list[Element]) -> list[Violation]:
        """
        Compare source blank lines with the required counts.

        Args:
            elements: Elements in source order, ``lines_before`` filled in

        Returns:
            list[Violation]: Missing and extra spacing violations
        """
        violations = []
        for left, right in zip(elements, elements[1:]):
            value = self.required(left, right)
            if value is None or value == IGNORE:
                continue
            actual = right.lines_before
            if actual == value:
                continue
            violations.append(
                Violation(
                    kind=(
                        ViolationKind.MISSING_SPACING
                        if actual < value
                        else ViolationKind.EXTRA_SPACING
                    ),
                    left=left.name,
                    right=right.name,
                    element_id=right.id,
                    left_group=self.group_of.get(left.id),
                    right_group=self.group_of.get(right.id),
                    expected_lines=value,
                    actual_lines=actual,
                )
            )

        logger.debug(f"Found {len(violations)} spacing violation(s)")
        return violations
