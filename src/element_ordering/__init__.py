"""
element-ordering - Deterministic ordering of sibling structural elements
"""

__version__ = "1.0.0"

from element_ordering.core import (  # noqa: E402
    Config,
    ConfigurationError,
    Element,
    ElementLoadError,
    EvaluationResult,
    OrderingEngine,
    SortingConfig,
    Violation,
    ViolationKind,
)

__all__ = [
    "__version__",
    "Config",
    "ConfigurationError",
    "Element",
    "ElementLoadError",
    "EvaluationResult",
    "OrderingEngine",
    "SortingConfig",
    "Violation",
    "ViolationKind",
]
