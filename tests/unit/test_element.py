"""
Unit tests for the element model
"""

from element_ordering.core.element import (
    MODIFIER_PRIORITY,
    Comment,
    Element,
    Violation,
    ViolationKind,
    parse_group_name,
    selector_chain,
)


class TestGroupNames:
    """Test parsing of built-in group names"""

    def test_selector_only(self):
        """Test a bare selector"""
        assert parse_group_name("property") == (frozenset(), "property")

    def test_modifiers_in_any_order(self):
        """Test modifiers may be written in any order"""
        expected = (frozenset({"static", "private"}), "property")

        assert parse_group_name("static-private-property") == expected
        assert parse_group_name("private-static-property") == expected

    def test_hyphenated_selectors(self):
        """Test selectors that contain a modifier-like prefix"""
        assert parse_group_name("static-block") == (frozenset(), "static-block")
        assert parse_group_name("async-get-method") == (frozenset({"async"}), "get-method")

    def test_repeated_modifier(self):
        """Test a modifier may not be repeated"""
        assert parse_group_name("static-static-property") is None

    def test_unknown_names(self):
        """Test names that are not built-in groups"""
        assert parse_group_name("callbacks") is None
        assert parse_group_name("sealed-property") is None


class TestElement:
    """Test element helpers"""

    def test_selector_chain(self):
        """Test specific selectors imply their generic parent"""
        assert selector_chain("get-method") == ("get-method", "method")
        assert selector_chain("function-property") == ("function-property", "property")
        assert selector_chain("property") == ("property",)

    def test_dependency_namespaces(self):
        """Test static and instance names live in different namespaces"""
        static = Element(id=0, name="x", modifiers=frozenset({"static"}))
        instance = Element(id=1, name="x")

        assert static.dependency_name == ("static", "x")
        assert instance.dependency_name == ("instance", "x")

    def test_fixed_elements(self):
        """Test pinned and opaque elements are fixed"""
        assert Element(id=0, name="a", pinned=True).is_fixed
        assert Element(id=1, name="b", selector="unknown").is_opaque
        assert Element(id=1, name="b", selector="unknown").is_fixed
        assert not Element(id=2, name="c").is_fixed

    def test_method_like(self):
        """Test constructors and accessors count as methods"""
        assert Element(id=0, name="constructor", selector="constructor").is_method_like
        assert not Element(id=1, name="a", selector="function-property").is_method_like

    def test_position_defaults_to_id(self):
        """Test source position falls back to the id"""
        assert Element(id=3, name="a").position == 3
        assert Element(id=3, name="a", index=7).position == 7

    def test_comment_kind(self):
        """Test comments default to line comments"""
        assert Comment("Part 1").kind == "line"

    def test_priority_table_starts_with_static(self):
        """Test the modifier priority table order"""
        assert MODIFIER_PRIORITY[:3] == ("static", "declare", "abstract")


class TestViolation:
    """Test diagnostic messages"""

    def test_messages(self):
        """Test the wording of each violation kind"""
        order = Violation(ViolationKind.ORDER, left="a", right="b", element_id=1)
        group = Violation(
            ViolationKind.GROUP_ORDER,
            left="a",
            right="b",
            element_id=1,
            left_group="group-a",
            right_group="group-b",
        )
        dependency = Violation(
            ViolationKind.DEPENDENCY_ORDER, left="x", right="b", element_id=1, dependent="a"
        )
        missing = Violation(ViolationKind.MISSING_SPACING, left="a", right="b", element_id=1)
        extra = Violation(ViolationKind.EXTRA_SPACING, left="a", right="b", element_id=1)

        assert order.message == 'Expected "b" to come before "a".'
        assert group.message == 'Expected "b" (group-b) to come before "a" (group-a).'
        assert dependency.message == 'Expected dependency "b" to come before "a".'
        assert missing.message == 'Missed spacing between "a" and "b".'
        assert extra.message == 'Extra spacing between "a" and "b" objects.'

    def test_message_collapses_whitespace(self):
        """Test multi-line names render on one line"""
        violation = Violation(ViolationKind.ORDER, left="a\n  b", right="c", element_id=1)

        assert violation.message == 'Expected "c" to come before "a b".'

    def test_to_dict(self):
        """Test serialisation for reporters"""
        violation = Violation(ViolationKind.ORDER, left="a", right="b", element_id=1)

        data = violation.to_dict()
        assert data["kind"] == "order"
        assert data["element_id"] == 1
        assert data["message"] == violation.message
