"""
Pytest configuration and shared fixtures
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from element_ordering.core.element import Element  # noqa: E402
from element_ordering.core.expressions import parse_python_value  # noqa: E402


def make_element(element_id: int, name: str, **kwargs) -> Element:
    """Build an element; ``value`` may be given as Python source."""
    value = kwargs.pop("value", None)
    if isinstance(value, str):
        kwargs.setdefault("value_text", value)
        value = parse_python_value(value)
    kwargs.setdefault("text", name)
    return Element(id=element_id, name=name, value=value, **kwargs)


def make_elements(*specs) -> list[Element]:
    """Build elements from names or ``(name, kwargs)`` pairs, ids in order."""
    elements = []
    for element_id, spec in enumerate(specs):
        if isinstance(spec, str):
            elements.append(make_element(element_id, spec))
        else:
            name, kwargs = spec
            elements.append(make_element(element_id, name, **kwargs))
    return elements


@pytest.fixture
def build_elements():
    """Factory building element lists, see ``make_elements``"""
    return make_elements


@pytest.fixture
def build_element():
    """Factory building a single element, see ``make_element``"""
    return make_element


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_elements_file(temp_dir: Path) -> Path:
    """Element document with an unordered construct"""
    elements_file = temp_dir / "members.yaml"
    elements_file.write_text(
        """
construct: Basket
elements:
  - name: total
    value: "sum(self.items)"
  - name: items
    value: "[]"
  - name: add
    selector: method
    lines_before: 1
  - name: MAX_ITEMS
    modifiers: [static]
    value: "100"
"""
    )
    return elements_file


@pytest.fixture
def ordered_elements_file(temp_dir: Path) -> Path:
    """Element document that already satisfies the sample configuration"""
    elements_file = temp_dir / "ordered.yaml"
    elements_file.write_text(
        """
construct: Basket
elements:
  - name: MAX_ITEMS
    modifiers: [static]
    value: "100"
  - name: items
    value: "[]"
    lines_before: 1
  - name: total
    value: "sum(self.items)"
  - name: add
    selector: method
    lines_before: 1
"""
    )
    return elements_file


@pytest.fixture
def sample_config_file(temp_dir: Path) -> Path:
    """Configuration with groups and spacing between them"""
    config_file = temp_dir / "ordering.yaml"
    config_file.write_text(
        """
type: alphabetical
order: asc
groups:
  - static-property
  - property
  - method
newlines_between: 1
newlines_inside: 0
"""
    )
    return config_file
