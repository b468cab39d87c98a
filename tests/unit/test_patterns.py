"""
Unit tests for pattern options
"""

import re

import pytest
from element_ordering.core.errors import ConfigurationError
from element_ordering.core.patterns import PatternSet, compile_flags, compile_optional


class TestPatternSet:
    """Test compilation and matching of pattern options"""

    def test_single_pattern(self):
        """Test a plain string pattern searches anywhere"""
        patterns = PatternSet.compile("Id$")

        assert patterns.matches("partnerId")
        assert not patterns.matches("identity")

    def test_pattern_with_flags(self):
        """Test pattern objects with flags"""
        patterns = PatternSet.compile({"pattern": "^on", "flags": "i"})

        assert patterns.matches("OnClick")

    def test_list_is_any_of(self):
        """Test a list of patterns matches if any pattern matches"""
        patterns = PatternSet.compile(["^get", {"pattern": "^SET", "flags": "i"}])

        assert patterns.matches("getValue")
        assert patterns.matches("setValue")
        assert not patterns.matches("value")

    def test_invalid_expression(self):
        """Test invalid regular expressions raise configuration errors"""
        with pytest.raises(ConfigurationError):
            PatternSet.compile("[a-")

    def test_invalid_option(self):
        """Test non-pattern values are rejected"""
        with pytest.raises(ConfigurationError):
            PatternSet.compile(42)

    def test_to_option(self):
        """Test serialising back to a pattern option"""
        assert PatternSet.compile("^a").to_option() == "^a"
        assert PatternSet.compile({"pattern": "^a", "flags": "i"}).to_option() == [
            {"pattern": "^a", "flags": "i"}
        ]

    def test_compile_optional(self):
        """Test absent options stay absent"""
        assert compile_optional(None) is None
        assert isinstance(compile_optional("x"), PatternSet)


class TestFlags:
    """Test flag translation"""

    def test_known_flags(self):
        """Test supported flags map onto re flags"""
        assert compile_flags("ims") == re.IGNORECASE | re.MULTILINE | re.DOTALL

    def test_ignored_flags(self):
        """Test flags without a Python meaning are accepted"""
        assert compile_flags("gu") == 0

    def test_unknown_flag(self):
        """Test unknown flags are rejected"""
        with pytest.raises(ConfigurationError, match="flag"):
            compile_flags("q")
