"""
Exceptions raised by element-ordering
"""


class ConfigurationError(ValueError):
    """Raised when an ordering configuration is invalid"""


class ElementLoadError(ValueError):
    """Raised when an element document cannot be turned into elements"""
