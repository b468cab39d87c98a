"""
Neutral value-expression tree.

Extractors describe an element's value as a small tree of ``Expr`` nodes so
that dependency analysis stays independent of the source language. The
``from_python`` adapter builds such a tree from a Python ``ast`` node, with
``self``/``cls`` playing the role of the self-qualifier.
"""

import ast
from dataclasses import dataclass
from enum import Enum


class ExprKind(Enum):
    """Node kinds understood by the dependency analyzer"""

    THIS = "this"
    IDENTIFIER = "identifier"
    MEMBER = "member"
    CALL = "call"
    FUNCTION = "function"
    LITERAL = "literal"
    TEMPLATE = "template"
    SPREAD = "spread"
    COMPOUND = "compound"


@dataclass(frozen=True)
class Expr:
    """One node of a value expression.

    Layout of ``children`` per kind:

    - MEMBER: ``(object,)``, or ``(object, key)`` when ``computed``
    - CALL: ``(callee, *arguments)``
    - FUNCTION: body parts, evaluated only when the function runs
    - TEMPLATE: interpolated parts only, literal text is dropped
    - SPREAD: ``(argument,)``
    - COMPOUND: any eagerly evaluated sub-expressions
    """

    kind: ExprKind
    name: str | None = None
    children: tuple["Expr", ...] = ()
    private: bool = False
    computed: bool = False

    @property
    def callee(self) -> "Expr | None":
        if self.kind == ExprKind.CALL and self.children:
            return self.children[0]
        return None

    @property
    def arguments(self) -> tuple["Expr", ...]:
        if self.kind == ExprKind.CALL:
            return self.children[1:]
        return ()


# ============================================================
# BUILDERS
# ============================================================


def this() -> Expr:
    return Expr(ExprKind.THIS)


def identifier(name: str) -> Expr:
    return Expr(ExprKind.IDENTIFIER, name=name)


def member(obj: Expr, name: str, private: bool = False) -> Expr:
    return Expr(ExprKind.MEMBER, name=name, children=(obj,), private=private)


def computed_member(obj: Expr, key: Expr) -> Expr:
    return Expr(ExprKind.MEMBER, children=(obj, key), computed=True)


def call(callee: Expr, *arguments: Expr) -> Expr:
    return Expr(ExprKind.CALL, children=(callee, *arguments))


def function(*body: Expr) -> Expr:
    return Expr(ExprKind.FUNCTION, children=body)


def literal(value: str | None = None) -> Expr:
    """Literal node; string literals keep their value for bracketed keys."""
    return Expr(ExprKind.LITERAL, name=value)


def template(*parts: Expr) -> Expr:
    return Expr(ExprKind.TEMPLATE, children=parts)


def spread(argument: Expr) -> Expr:
    return Expr(ExprKind.SPREAD, children=(argument,))


def compound(*children: Expr) -> Expr:
    return Expr(ExprKind.COMPOUND, children=children)


# ============================================================
# PYTHON ADAPTER
# ============================================================

SELF_NAMES = frozenset({"self", "cls"})

_SKIPPED_NODES = (ast.expr_context, ast.operator, ast.unaryop, ast.cmpop,
                  ast.boolop, ast.arguments, ast.alias)


def from_python(node: ast.AST, self_names: frozenset[str] = SELF_NAMES) -> Expr:
    """Convert a Python AST node into an ``Expr`` tree.

    Args:
        node: Expression, statement or module node
        self_names: Names that act as the self-qualifier

    Returns:
        Expr tree describing the evaluated parts of ``node``
    """
    if isinstance(node, ast.Expression):
        return from_python(node.body, self_names)

    if isinstance(node, ast.Name):
        if node.id in self_names:
            return this()
        return identifier(node.id)

    if isinstance(node, ast.Attribute):
        return member(from_python(node.value, self_names), node.attr)

    if isinstance(node, ast.Subscript):
        return computed_member(
            from_python(node.value, self_names),
            from_python(node.slice, self_names),
        )

    if isinstance(node, ast.Call):
        arguments = [from_python(arg, self_names) for arg in node.args]
        arguments.extend(
            from_python(keyword.value, self_names) for keyword in node.keywords
        )
        return call(from_python(node.func, self_names), *arguments)

    if isinstance(node, ast.Lambda):
        return function(from_python(node.body, self_names))

    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return function(*(from_python(stmt, self_names) for stmt in node.body))

    if isinstance(node, ast.Constant):
        return literal(node.value if isinstance(node.value, str) else None)

    if isinstance(node, ast.JoinedStr):
        parts = []
        for value in node.values:
            if isinstance(value, ast.FormattedValue):
                parts.append(from_python(value.value, self_names))
                if value.format_spec is not None:
                    parts.append(from_python(value.format_spec, self_names))
        return template(*parts)

    if isinstance(node, ast.Starred):
        return spread(from_python(node.value, self_names))

    if isinstance(node, ast.Dict):
        children = []
        for key, value in zip(node.keys, node.values):
            if key is None:
                children.append(spread(from_python(value, self_names)))
                continue
            children.append(from_python(key, self_names))
            children.append(from_python(value, self_names))
        return compound(*children)

    if isinstance(node, ast.comprehension):
        # The target is a binding, not a read
        return compound(
            from_python(node.iter, self_names),
            *(from_python(test, self_names) for test in node.ifs),
        )

    return compound(
        *(
            from_python(child, self_names)
            for child in ast.iter_child_nodes(node)
            if not isinstance(child, _SKIPPED_NODES)
        )
    )


def parse_python_value(source: str, self_names: frozenset[str] = SELF_NAMES) -> Expr:
    """Parse Python source text into an ``Expr`` tree.

    Expressions are tried first; statement blocks (static initialisers) fall
    back to module parsing.

    Raises:
        SyntaxError: If ``source`` is neither an expression nor a block
    """
    try:
        tree: ast.AST = ast.parse(source.strip(), mode="eval")
    except SyntaxError:
        tree = ast.parse(source)
    return from_python(tree, self_names)
