"""
Core ordering engine: classification, dependencies, comparators,
partitions, order and spacing resolution.
"""

from .config import Config, SortingConfig
from .element import Comment, Element, Partition, Violation, ViolationKind
from .engine import EvaluationResult, OrderingEngine
from .errors import ConfigurationError, ElementLoadError

__all__ = [
    "Comment",
    "Config",
    "ConfigurationError",
    "Element",
    "ElementLoadError",
    "EvaluationResult",
    "OrderingEngine",
    "Partition",
    "SortingConfig",
    "Violation",
    "ViolationKind",
]
