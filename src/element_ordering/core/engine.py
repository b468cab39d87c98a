"""
Ordering engine: the pipeline facade.

Classify -> analyze dependencies -> partition -> resolve order -> resolve
spacing, over one immutable element list. Each call builds its own working
structures, so independent evaluations may run in parallel.
"""

import logging
from dataclasses import dataclass, field, replace

from .classification_rule_group import GroupClassifier
from .comparators import ComparatorFactory
from .config import Config, SortingConfig
from .dependency_analyzer import DependencyAnalyzer, DependencyGraph
from .element import Comment, Element, Partition, Violation
from .ordering import OrderResolver
from .partitioner import Partitioner
from .spacing import SpacingRequirement, SpacingResolver

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Everything a reporter needs to render diagnostics and fixes"""

    target_order: list[Element] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)
    groups: dict[int, str] = field(default_factory=dict)
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    partitions: list[Partition] = field(default_factory=list)
    spacing: list[SpacingRequirement] = field(default_factory=list)
    profile: SortingConfig | None = None
    elements: list[Element] = field(default_factory=list)

    @property
    def target_ids(self) -> list[int]:
        return [element.id for element in self.target_order]

    @property
    def is_ordered(self) -> bool:
        return not self.violations

    def fixed_elements(self) -> list[Element]:
        """
        Rewrite the construct in target order.

        Required blank lines are applied between neighbours. Gaps left
        unconstrained keep the blank lines found at that source position,
        and partition boundary comments stay above the element that now
        opens the partition.

        Returns:
            list[Element]: Elements in target order with updated
            ``lines_before``, ``comments`` and ``index``
        """
        position = {element.id: index for index, element in enumerate(self.elements)}
        boundary_at: dict[int, tuple[Comment, ...]] = {}
        moved_boundary: dict[int, tuple[Comment, ...]] = {}
        for partition in self.partitions:
            if partition.boundary and partition.elements:
                first = partition.elements[0]
                boundary_at[position[first.id]] = partition.boundary
                moved_boundary[first.id] = partition.boundary

        required = {requirement.right_id: requirement.lines for requirement in self.spacing}
        fixed = []
        for index, element in enumerate(self.target_order):
            lines = required.get(element.id) if index else None
            if lines is None:
                lines = self.elements[index].lines_before
            own = tuple(
                comment
                for comment in element.comments
                if comment not in moved_boundary.get(element.id, ())
            )
            fixed.append(
                replace(
                    element,
                    comments=boundary_at.get(index, ()) + own,
                    lines_before=lines,
                    index=None if element.index is None else index,
                )
            )
        return fixed

    def to_dict(self) -> dict:
        """Serialisable view used by the JSON reporter"""
        return {
            "target_order": [element.name for element in self.target_order],
            "target_ids": self.target_ids,
            "groups": {str(key): value for key, value in self.groups.items()},
            "spacing": [
                {
                    "left_id": requirement.left_id,
                    "right_id": requirement.right_id,
                    "lines": requirement.lines,
                }
                for requirement in self.spacing
            ],
            "partitions": [
                {
                    "element_ids": [element.id for element in partition],
                    "boundary": [comment.text for comment in partition.boundary],
                }
                for partition in self.partitions
            ],
            "violations": [violation.to_dict() for violation in self.violations],
        }


def compute_overload_runs(elements: list[Element]) -> dict[int, int]:
    """
    Find repeated declarations of the same method.

    Plain methods sharing name and static-ness form a run wherever they sit
    in the construct, so membership does not depend on the current order.
    Accessors and constructors never form runs; only runs of two or more
    are returned.

    Returns:
        dict: element id -> id of the last member of its run
    """
    runs: dict[tuple[str, bool], list[Element]] = {}
    for element in elements:
        if element.selector != "method":
            continue
        runs.setdefault((element.name, element.is_static), []).append(element)

    result = {}
    for run in runs.values():
        if len(run) > 1:
            for element in run:
                result[element.id] = run[-1].id
    return result


class OrderingEngine:
    """Evaluates constructs against an ordering configuration.

    Args:
        config: Top-level ``Config`` (profiles are selected per construct)
            or a single ``SortingConfig``
    """

    def __init__(self, config: Config | SortingConfig | None = None):
        if isinstance(config, SortingConfig):
            config = Config(profiles=[config])
        self.config = config or Config()

    def evaluate(
        self,
        elements: list[Element],
        construct_name: str | None = None,
    ) -> EvaluationResult:
        """
        Evaluate one construct.

        Args:
            elements: Elements in source order
            construct_name: Name of the enclosing construct, used both for
                ``declaration_matches_pattern`` guards and to resolve
                container-qualified references

        Returns:
            EvaluationResult with the target order and all violations
        """
        profile = self.config.select_profile(
            [element.name for element in elements], construct_name
        )
        logger.debug(
            f"Evaluating {len(elements)} element(s) of {construct_name or 'construct'} "
            f"with profile {profile.name or '<default>'}"
        )

        by_id = {element.id: element for element in elements}

        # Classification, with overload runs adopting their last member's group
        classifier = GroupClassifier(profile)
        groups = classifier.classify_all(elements)
        overloads = compute_overload_runs(elements)
        for element_id, last_id in overloads.items():
            groups[element_id] = groups[last_id]

        def name_of(element: Element) -> str:
            return by_id[overloads.get(element.id, element.id)].name

        def text_of(element: Element) -> str:
            source = by_id[overloads.get(element.id, element.id)]
            return source.text or source.name

        # Dependencies
        analyzer = DependencyAnalyzer(
            container_name=construct_name,
            ignore_callback_patterns=profile.ignore_callback_dependencies_patterns,
        )
        graph = analyzer.build_graph(elements)

        # Partitions
        partitions = Partitioner(profile).split(elements)

        # Order
        factory = ComparatorFactory(
            tiers=profile.tiers, group_of=groups, name_of=name_of, text_of=text_of
        )
        order = OrderResolver(profile, groups, factory).resolve(elements, partitions, graph)

        # Spacing
        spacing = SpacingResolver(
            profile,
            group_of=groups,
            tier_of=order.tier_of,
            partition_of=order.partition_of,
            overload_run_of=overloads,
        )

        violations = order.violations + spacing.find_violations(elements)
        position = {element.id: index for index, element in enumerate(elements)}
        violations.sort(key=lambda violation: position[violation.element_id])

        logger.debug(f"{len(violations)} violation(s) in {construct_name or 'construct'}")
        return EvaluationResult(
            target_order=order.target_order,
            violations=violations,
            groups=groups,
            graph=graph,
            partitions=partitions,
            spacing=spacing.requirements(order.target_order),
            profile=profile,
            elements=list(elements),
        )

