"""
Order Resolver.

Combines group tiers, comparators, partitions and the dependency graph into
a target permutation of the elements, then compares the source order with it
to produce ordering violations.

Resolution steps:

1. Per partition, elements are bucketed by group tier (labels absent from
   ``groups`` float to the end).
2. Pinned and opaque elements keep their position and split the partition
   into independent runs.
3. Each tier bucket is sorted with its own comparator; Python's sort is
   stable, so ties keep source order.
4. Dependencies are applied last, over the whole sequence, by a depth-first
   walk that places every dependency before its dependents. Pinned elements
   take part, so an edge can move them; opaque elements never move. Cyclic
   edges are skipped, so the walk always terminates.
"""

import logging
from dataclasses import dataclass, field

from .comparators import ComparatorFactory
from .config import SortingConfig, SortSpec
from .dependency_analyzer import DependencyGraph
from .element import Element, Partition, Violation, ViolationKind

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    """Target order of a construct plus its ordering violations"""

    target_order: list[Element] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)
    tier_of: dict[int, int] = field(default_factory=dict)
    partition_of: dict[int, int] = field(default_factory=dict)

    @property
    def target_ids(self) -> list[int]:
        return [element.id for element in self.target_order]


class OrderResolver:
    """Computes target order and ordering violations for one profile."""

    def __init__(
        self,
        config: SortingConfig,
        group_of: dict[int, str],
        comparator_factory: ComparatorFactory | None = None,
    ):
        self.config = config
        self.group_of = group_of
        self.tiers = config.tiers
        self.factory = comparator_factory or ComparatorFactory(
            tiers=self.tiers, group_of=group_of
        )
        self._tier_by_label = {
            label: index for index, tier in enumerate(self.tiers) for label in tier.labels
        }
        self._keys: dict[int, object] = {}

    # ============================================================
    # TIERS
    # ============================================================

    def tier_index(self, group: str) -> int:
        """Tier index of a group label; unlisted labels share the last tier."""
        if not self.tiers:
            return 0
        return self._tier_by_label.get(group, len(self.tiers))

    def tier_of(self, element: Element) -> int:
        return self.tier_index(self.group_of.get(element.id, ""))

    def spec_for_tier(self, tier_index: int) -> SortSpec:
        """Sort spec of a tier, with tier or custom-group overrides applied.

        An override declared on the tier object wins; otherwise a tier made
        of a single custom group uses that group's overrides.
        """
        spec = self.config.sort
        if tier_index >= len(self.tiers):
            return spec
        tier = self.tiers[tier_index]
        if tier.overrides is not None:
            return spec.with_override(tier.overrides)
        if len(tier.labels) == 1:
            rule = self.config.custom_group(tier.labels[0])
            if rule is not None and rule.overrides is not None:
                return spec.with_override(rule.overrides)
        return spec

    def _key_for_tier(self, tier_index: int):
        if tier_index not in self._keys:
            self._keys[tier_index] = self.factory.sort_key(self.spec_for_tier(tier_index))
        return self._keys[tier_index]

    # ============================================================
    # SORTING
    # ============================================================

    def sort_run(self, elements: list[Element]) -> list[Element]:
        """Sort a run of movable elements by tier, then by tier comparator"""
        buckets: dict[int, list[Element]] = {}
        for element in elements:
            buckets.setdefault(self.tier_of(element), []).append(element)

        result: list[Element] = []
        for tier_index in sorted(buckets):
            result.extend(sorted(buckets[tier_index], key=self._key_for_tier(tier_index)))
        return result

    def sort_partition(self, partition: Partition) -> list[Element]:
        """Sort a partition, keeping fixed elements where they are"""
        result: list[Element] = []
        run: list[Element] = []
        for element in partition:
            if element.is_fixed:
                result.extend(self.sort_run(run))
                result.append(element)
                run = []
            else:
                run.append(element)
        result.extend(self.sort_run(run))
        return result

    def apply_dependencies(
        self, order: list[Element], graph: DependencyGraph
    ) -> list[Element]:
        """
        Move dependencies ahead of their dependents.

        Depth-first over the non-opaque elements in their current order;
        opaque elements are spliced back at their indices afterwards.

        Args:
            order: Sequence sorted by groups and comparators
            graph: Dependency graph with cycles detected

        Returns:
            list[Element]: Sequence satisfying every non-cyclic edge
        """
        participants = [element for element in order if not element.is_opaque]
        position = {element.id: index for index, element in enumerate(participants)}
        by_id = {element.id: element for element in participants}

        visited: set[int] = set()
        in_process: set[int] = set()
        adjusted: list[Element] = []

        def visit(element: Element) -> None:
            if element.id in visited or element.id in in_process:
                return
            in_process.add(element.id)
            dependencies = [
                dependency
                for dependency in graph.acyclic_dependencies_of(element.id)
                if dependency in by_id
            ]
            for dependency in sorted(dependencies, key=position.__getitem__):
                visit(by_id[dependency])
            in_process.discard(element.id)
            visited.add(element.id)
            adjusted.append(element)

        for element in participants:
            visit(element)

        remaining = iter(adjusted)
        return [element if element.is_opaque else next(remaining) for element in order]

    def resolve(
        self,
        elements: list[Element],
        partitions: list[Partition],
        graph: DependencyGraph,
    ) -> OrderResult:
        """
        Compute the target order and the ordering violations.

        Args:
            elements: Elements in source order
            partitions: Partitions covering ``elements``
            graph: Dependency graph over element ids

        Returns:
            OrderResult
        """
        result = OrderResult()
        for partition in partitions:
            for element in partition:
                result.partition_of[element.id] = partition.index
                result.tier_of[element.id] = self.tier_of(element)

        sorted_order: list[Element] = []
        for partition in partitions:
            sorted_order.extend(self.sort_partition(partition))

        result.target_order = self.apply_dependencies(sorted_order, graph)
        result.violations = self.find_violations(elements, result, graph)
        return result

    # ============================================================
    # VIOLATIONS
    # ============================================================

    def find_violations(
        self,
        elements: list[Element],
        result: OrderResult,
        graph: DependencyGraph,
    ) -> list[Violation]:
        """One violation per adjacent out-of-order pair of non-opaque elements"""
        target_index = {element.id: index for index, element in enumerate(result.target_order)}
        source_index = {element.id: index for index, element in enumerate(elements)}
        by_id = {element.id: element for element in elements}

        dependents: dict[int, list[int]] = {}
        for dependent, dependency in graph.edge_list():
            if graph.is_cyclic(dependent, dependency):
                continue
            if by_id[dependent].is_opaque or by_id[dependency].is_opaque:
                continue
            dependents.setdefault(dependency, []).append(dependent)

        checked = [element for element in elements if not element.is_opaque]
        violations = []
        for left, right in zip(checked, checked[1:]):
            dependent = self._first_dependent_before(
                right, dependents, source_index, by_id
            )
            left_group = self.group_of.get(left.id)
            right_group = self.group_of.get(right.id)

            if dependent is not None:
                violations.append(
                    Violation(
                        kind=ViolationKind.DEPENDENCY_ORDER,
                        left=left.name,
                        right=right.name,
                        element_id=right.id,
                        left_group=left_group,
                        right_group=right_group,
                        dependent=dependent.name,
                    )
                )
            elif target_index[left.id] > target_index[right.id]:
                same_tier = result.tier_of[left.id] == result.tier_of[right.id]
                violations.append(
                    Violation(
                        kind=ViolationKind.ORDER if same_tier else ViolationKind.GROUP_ORDER,
                        left=left.name,
                        right=right.name,
                        element_id=right.id,
                        left_group=left_group,
                        right_group=right_group,
                    )
                )

        logger.debug(f"Found {len(violations)} ordering violation(s)")
        return violations

    @staticmethod
    def _first_dependent_before(
        element: Element,
        dependents: dict[int, list[int]],
        source_index: dict[int, int],
        by_id: dict[int, Element],
    ) -> Element | None:
        """First element, in source order, that depends on ``element`` but precedes it"""
        earlier = [
            dependent
            for dependent in dependents.get(element.id, ())
            if source_index[dependent] < source_index[element.id]
        ]
        if not earlier:
            return None
        return by_id[min(earlier, key=source_index.__getitem__)]
