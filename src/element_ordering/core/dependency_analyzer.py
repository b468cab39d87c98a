"""
Dependency Analysis for Elements.

Finds references from an element's value to its siblings and builds a
directed graph over element ids. A reference is either self-qualified
(``this.x`` / ``self.x``, or a private ``#x``) or container-qualified
(``Container.x``). Static and instance references live in separate
namespaces, so a static ``x`` never resolves to an instance ``x``.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from .element import Element
from .expressions import Expr, ExprKind
from .patterns import PatternSet

logger = logging.getLogger(__name__)

DependencyName = tuple[str, str]


@dataclass
class DependencyGraph:
    """Directed graph over element ids.

    ``edges[dependent]`` holds the ids the dependent needs to come after.
    Edges inside a strongly connected component are cyclic; they are kept
    for reporting but never used to move elements.
    """

    nodes: list[int] = field(default_factory=list)
    edges: dict[int, set[int]] = field(default_factory=lambda: defaultdict(set))
    cyclic_edges: set[tuple[int, int]] = field(default_factory=set)

    def add_edge(self, dependent: int, dependency: int) -> None:
        if dependent != dependency:
            self.edges[dependent].add(dependency)

    def dependencies_of(self, node: int) -> set[int]:
        return self.edges.get(node, set())

    def edge_list(self) -> list[tuple[int, int]]:
        """All (dependent, dependency) pairs in a deterministic order"""
        return sorted(
            (dependent, dependency)
            for dependent, dependencies in self.edges.items()
            for dependency in dependencies
        )

    def is_cyclic(self, dependent: int, dependency: int) -> bool:
        return (dependent, dependency) in self.cyclic_edges

    def acyclic_dependencies_of(self, node: int) -> list[int]:
        return sorted(
            dependency
            for dependency in self.dependencies_of(node)
            if not self.is_cyclic(node, dependency)
        )

    def detect_cycles(self) -> list[list[int]]:
        """Mark every edge inside a strongly connected component as cyclic.

        Tarjan's algorithm, written iteratively.

        Returns:
            list: Components with more than one node, in discovery order
        """
        index_of: dict[int, int] = {}
        lowlink: dict[int, int] = {}
        on_stack: set[int] = set()
        stack: list[int] = []
        components: list[list[int]] = []
        counter = 0

        for root in self.nodes:
            if root in index_of:
                continue
            work = [(root, iter(sorted(self.dependencies_of(root))))]
            index_of[root] = lowlink[root] = counter
            counter += 1
            stack.append(root)
            on_stack.add(root)

            while work:
                node, successors = work[-1]
                advanced = False
                for successor in successors:
                    if successor not in index_of:
                        index_of[successor] = lowlink[successor] = counter
                        counter += 1
                        stack.append(successor)
                        on_stack.add(successor)
                        work.append(
                            (successor, iter(sorted(self.dependencies_of(successor))))
                        )
                        advanced = True
                        break
                    if successor in on_stack:
                        lowlink[node] = min(lowlink[node], index_of[successor])
                if advanced:
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

                if lowlink[node] == index_of[node]:
                    component = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    if len(component) > 1:
                        components.append(sorted(component))

        self.cyclic_edges = set()
        for component in components:
            members = set(component)
            for dependent in component:
                for dependency in self.dependencies_of(dependent):
                    if dependency in members:
                        self.cyclic_edges.add((dependent, dependency))

        if components:
            logger.debug(f"Detected {len(components)} dependency cycle(s): {components}")
        return components


class DependencyAnalyzer:
    """Analyzes references between sibling elements."""

    def __init__(
        self,
        container_name: str | None = None,
        ignore_callback_patterns: PatternSet | None = None,
    ):
        self.container_name = container_name
        self.ignore_callback_patterns = ignore_callback_patterns

    def references(self, element: Element) -> set[DependencyName]:
        """
        Collect the sibling names an element's value reads.

        Args:
            element: Element whose value and computed key are walked

        Returns:
            Set of (namespace, name) pairs
        """
        found: set[DependencyName] = set()
        for expression in (element.computed_key, element.value):
            if expression is not None:
                self._walk(expression, element.is_static, found, suppressed=False)
        return found

    def build_graph(self, elements: list[Element]) -> DependencyGraph:
        """
        Build the dependency graph of a construct.

        Method-like elements are never dependency targets, and opaque
        elements take no part in dependency analysis.

        Args:
            elements: Elements of one construct

        Returns:
            DependencyGraph over element ids, with cycles detected
        """
        graph = DependencyGraph(nodes=[element.id for element in elements])

        targets: dict[DependencyName, list[int]] = defaultdict(list)
        for element in elements:
            if element.is_opaque or element.is_method_like:
                continue
            targets[element.dependency_name].append(element.id)

        for element in elements:
            if element.is_opaque:
                continue
            for name in sorted(self.references(element)):
                for dependency in targets.get(name, ()):
                    graph.add_edge(element.id, dependency)

        graph.detect_cycles()
        return graph

    # ============================================================
    # WALKER
    # ============================================================

    def _walk(
        self,
        expr: Expr,
        static: bool,
        found: set[DependencyName],
        suppressed: bool,
    ) -> None:
        kind = expr.kind

        if kind in (ExprKind.LITERAL, ExprKind.THIS, ExprKind.IDENTIFIER):
            return

        if kind == ExprKind.FUNCTION:
            # Deferred body, only walked when invoked (see CALL)
            return

        if kind == ExprKind.MEMBER:
            self._walk_member(expr, static, found, suppressed)
            return

        if kind == ExprKind.CALL:
            callee = expr.callee
            if callee is not None:
                if callee.kind == ExprKind.FUNCTION:
                    self._walk_body(callee, static, found, suppressed)
                else:
                    self._walk(callee, static, found, suppressed)

            ignored = self._is_ignored_callback(callee)
            for argument in expr.arguments:
                if argument.kind == ExprKind.FUNCTION:
                    self._walk_body(argument, static, found, ignored)
                else:
                    self._walk(argument, static, found, ignored)
            return

        # TEMPLATE, SPREAD and COMPOUND: every child is evaluated
        for child in expr.children:
            self._walk(child, static, found, suppressed)

    def _walk_body(
        self,
        function: Expr,
        static: bool,
        found: set[DependencyName],
        suppressed: bool,
    ) -> None:
        for part in function.children:
            self._walk(part, static, found, suppressed)

    def _walk_member(
        self,
        expr: Expr,
        static: bool,
        found: set[DependencyName],
        suppressed: bool,
    ) -> None:
        obj = expr.children[0]
        namespace = self._qualifier_namespace(obj, static)

        if namespace is None:
            for child in expr.children:
                self._walk(child, static, found, suppressed)
            return

        if expr.computed:
            key = expr.children[1]
            if key.kind == ExprKind.LITERAL:
                if key.name is not None and not suppressed:
                    found.add((namespace, key.name))
                return
            # Dynamic key: the member itself is unknown, the key is still read
            self._walk(key, static, found, suppressed)
            return

        if suppressed or expr.name is None:
            return
        name = f"#{expr.name}" if expr.private else expr.name
        found.add((namespace, name))

    def _qualifier_namespace(self, obj: Expr, static: bool) -> str | None:
        if obj.kind == ExprKind.THIS:
            return "static" if static else "instance"
        if (
            obj.kind == ExprKind.IDENTIFIER
            and self.container_name is not None
            and obj.name == self.container_name
        ):
            return "static"
        return None

    def _is_ignored_callback(self, callee: Expr | None) -> bool:
        if self.ignore_callback_patterns is None or callee is None:
            return False
        if callee.kind not in (ExprKind.IDENTIFIER, ExprKind.MEMBER) or not callee.name:
            return False
        return self.ignore_callback_patterns.matches(callee.name)
