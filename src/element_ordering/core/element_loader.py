"""
Element documents.

The engine consumes normalized elements produced by an extractor. This module
reads such elements from YAML or JSON documents so that the command line and
the tests can describe constructs without a parser:

    construct: Basket
    elements:
      - name: items
        value: "[]"
      - name: total
        value: "sum(self.items)"
        lines_before: 1
      - name: clear
        selector: method

A document may also hold ``constructs:`` (a list of the above) or be a bare
list of elements. Values are Python expressions, read through ``ast`` with
``self``/``cls`` as the self-qualifier.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .element import ALL_MODIFIERS, ALL_SELECTORS, Comment, Element
from .errors import ElementLoadError
from .expressions import parse_python_value

logger = logging.getLogger(__name__)


@dataclass
class Construct:
    """A named sequence of sibling elements"""

    name: str | None = None
    elements: list[Element] = field(default_factory=list)


def _parse_comments(raw: Any, element_name: str) -> tuple[Comment, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (str, dict)):
        raw = [raw]
    comments = []
    for item in raw:
        if isinstance(item, str):
            comments.append(Comment(text=item))
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            kind = item.get("kind", "line")
            if kind not in ("line", "block"):
                raise ElementLoadError(
                    f"Invalid comment kind {kind!r} on element {element_name!r}"
                )
            comments.append(Comment(text=item["text"], kind=kind))
        else:
            raise ElementLoadError(f"Invalid comment on element {element_name!r}: {item!r}")
    return tuple(comments)


def _parse_expression(source: Any, element_name: str, option: str):
    if source is None:
        return None
    if not isinstance(source, str):
        source = json.dumps(source)
    try:
        return parse_python_value(source)
    except SyntaxError as e:
        raise ElementLoadError(
            f"Cannot parse {option} of element {element_name!r}: {e.msg}"
        ) from e


def element_from_dict(data: Any, element_id: int) -> Element:
    """
    Build an Element from one entry of an element document.

    Args:
        data: Mapping, or a bare string used as the element name
        element_id: Position-stable id

    Returns:
        Element

    Raises:
        ElementLoadError: On missing name, unknown selector or modifier, or an
            unparsable value
    """
    if isinstance(data, str):
        data = {"name": data}
    if not isinstance(data, dict):
        raise ElementLoadError(f"Invalid element entry: {data!r}")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ElementLoadError(f"Element without name: {data!r}")

    selector = data.get("selector", "property")
    if selector not in ALL_SELECTORS:
        raise ElementLoadError(f"Unknown selector {selector!r} on element {name!r}")

    modifiers = frozenset(data.get("modifiers") or ())
    unknown = modifiers - ALL_MODIFIERS
    if unknown:
        raise ElementLoadError(
            f"Unknown modifier(s) {', '.join(sorted(unknown))} on element {name!r}"
        )

    value_source = data.get("value")
    value_text = data.get("value_text")
    if value_text is None and value_source is not None:
        value_text = value_source if isinstance(value_source, str) else json.dumps(value_source)

    text = data.get("text")
    if text is None:
        text = f"{name} = {value_text}" if value_text is not None else name

    lines_before = data.get("lines_before", 0)
    if isinstance(lines_before, bool) or not isinstance(lines_before, int) or lines_before < 0:
        raise ElementLoadError(f"Invalid lines_before on element {name!r}: {lines_before!r}")

    return Element(
        id=element_id,
        name=name,
        text=text,
        selector=selector,
        modifiers=modifiers,
        decorators=tuple(data.get("decorators") or ()),
        index=data.get("index"),
        comments=_parse_comments(data.get("comments"), name),
        pinned=bool(data.get("pinned", False)),
        value=_parse_expression(value_source, name, "value"),
        value_text=value_text,
        computed_key=_parse_expression(data.get("computed_key"), name, "computed_key"),
        lines_before=lines_before,
    )


def construct_from_dict(data: Any) -> Construct:
    if isinstance(data, list):
        data = {"elements": data}
    if not isinstance(data, dict):
        raise ElementLoadError(f"Invalid construct: {data!r}")
    elements = data.get("elements")
    if not isinstance(elements, list):
        raise ElementLoadError("Construct without 'elements' list")
    return Construct(
        name=data.get("construct", data.get("name")),
        elements=[element_from_dict(item, index) for index, item in enumerate(elements)],
    )


def constructs_from_data(data: Any) -> list[Construct]:
    """Read every construct of a parsed document"""
    if isinstance(data, dict) and "constructs" in data:
        if not isinstance(data["constructs"], list):
            raise ElementLoadError("'constructs' must be a list")
        return [construct_from_dict(item) for item in data["constructs"]]
    return [construct_from_dict(data)]


def load_constructs(filepath: Path) -> list[Construct]:
    """
    Load constructs from a YAML or JSON element document.

    Raises:
        ElementLoadError: On a missing file, unsupported format or malformed contents
    """
    if not filepath.exists():
        raise ElementLoadError(f"Element file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        try:
            if filepath.suffix == ".json":
                data = json.load(f)
            elif filepath.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            else:
                raise ElementLoadError(f"Unsupported element file format: {filepath.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ElementLoadError(f"Error loading element file {filepath}: {e}") from e

    constructs = constructs_from_data(data)
    logger.debug(f"Loaded {len(constructs)} construct(s) from {filepath}")
    return constructs
