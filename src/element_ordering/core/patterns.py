"""
Pattern options.

A pattern option is a single regular expression string, a mapping with
``pattern`` and optional ``flags``, or a list of those (any may match).
Patterns are compiled once when the configuration is loaded so that invalid
expressions surface as configuration errors.
"""

import re
from dataclasses import dataclass
from typing import Any

from .errors import ConfigurationError

_FLAG_MAP: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}

# Flags that have no Python equivalent but do not change matching
_IGNORED_FLAGS = {"u", "v", "g", "y", "d"}


def compile_flags(flags: str) -> int:
    """Translate a flags string such as ``"iu"`` into ``re`` flags."""
    compiled = 0
    for flag in flags:
        if flag in _FLAG_MAP:
            compiled |= _FLAG_MAP[flag]
        elif flag not in _IGNORED_FLAGS:
            raise ConfigurationError(f"Invalid regular expression flag: {flag!r}")
    return compiled


@dataclass(frozen=True)
class PatternSet:
    """Compiled pattern option; matches if any pattern searches successfully."""

    patterns: tuple[re.Pattern, ...]

    @classmethod
    def compile(cls, option: Any) -> "PatternSet":
        """Compile a raw pattern option.

        Args:
            option: String, ``{"pattern": ..., "flags": ...}`` or list of those

        Returns:
            PatternSet

        Raises:
            ConfigurationError: On a malformed option or invalid expression
        """
        options = option if isinstance(option, (list, tuple)) else [option]
        compiled = []
        for single in options:
            if isinstance(single, re.Pattern):
                compiled.append(single)
                continue
            if isinstance(single, str):
                pattern, flags = single, ""
            elif isinstance(single, dict) and isinstance(single.get("pattern"), str):
                pattern, flags = single["pattern"], single.get("flags") or ""
            else:
                raise ConfigurationError(f"Invalid pattern option: {single!r}")
            try:
                compiled.append(re.compile(pattern, compile_flags(flags)))
            except re.error as e:
                raise ConfigurationError(
                    f"Invalid regular expression {pattern!r}: {e}"
                ) from e
        return cls(tuple(compiled))

    def matches(self, value: str) -> bool:
        return any(pattern.search(value) for pattern in self.patterns)

    def to_option(self) -> list[dict[str, str]] | str:
        """Serialise back to a pattern option"""
        options = []
        for pattern in self.patterns:
            flags = "".join(
                letter for letter, flag in _FLAG_MAP.items() if pattern.flags & flag
            )
            if flags:
                options.append({"pattern": pattern.pattern, "flags": flags})
            else:
                options.append(pattern.pattern)
        if len(options) == 1 and isinstance(options[0], str):
            return options[0]
        return options


def compile_optional(option: Any) -> PatternSet | None:
    """Compile a pattern option that may be absent."""
    if option is None:
        return None
    return PatternSet.compile(option)
