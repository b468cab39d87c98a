"""
Unit tests for the spacing resolver
"""

import pytest
from element_ordering.core.config import IGNORE, SortingConfig
from element_ordering.core.element import ViolationKind
from element_ordering.core.spacing import SpacingResolver, combine_spacing


class TestCombineSpacing:
    """Test the combination rule for two spacing requests"""

    @pytest.mark.parametrize(
        "first,second,same_group,expected",
        [
            (IGNORE, 2, False, 2),
            (1, IGNORE, True, 1),
            (IGNORE, IGNORE, False, IGNORE),
            (0, 2, False, 0),
            (2, 0, False, 0),
            (0, 2, True, 2),
            (1, 3, False, 3),
            (3, 1, True, 3),
            (None, 1, False, 1),
            (None, None, True, None),
        ],
    )
    def test_combination(self, first, second, same_group, expected):
        """Test ignore yields, zero wins between groups, otherwise the maximum"""
        assert combine_spacing(first, second, same_group) == expected


def resolver_for(config: SortingConfig, elements, tiers, groups=None, overloads=None):
    return SpacingResolver(
        config,
        group_of=groups or {element.id: "" for element in elements},
        tier_of=dict(zip([element.id for element in elements], tiers)),
        partition_of={element.id: 0 for element in elements},
        overload_run_of=overloads,
    )


class TestSpacingResolver:
    """Test precedence of spacing layers"""

    def test_directive_replaces_global(self, build_elements):
        """Test an inline directive between two tiers"""
        config = SortingConfig.from_dict(
            {
                "groups": ["static-property", {"newlines_between": 0}, "property", "method"],
                "newlines_between": 2,
            }
        )
        elements = build_elements("s", "p", "m")
        resolver = resolver_for(config, elements, [0, 1, 2])

        assert resolver.required(elements[0], elements[1]) == 0
        assert resolver.required(elements[1], elements[2]) == 2

    def test_span_over_empty_tier(self, build_elements):
        """Test boundaries are combined when a tier in between is empty"""
        config = SortingConfig.from_dict(
            {
                "groups": ["static-property", {"newlines_between": 3}, "property", "method"],
                "newlines_between": 1,
            }
        )
        elements = build_elements("s", "m")
        resolver = resolver_for(config, elements, [0, 2])

        assert resolver.required(elements[0], elements[1]) == 3

    def test_custom_group_inside(self, build_elements):
        """Test newlines_inside of a shared custom group"""
        config = SortingConfig.from_dict(
            {
                "groups": ["handlers", "property"],
                "custom_groups": [
                    {"group_name": "handlers", "element_name_pattern": "^on", "newlines_inside": 1}
                ],
                "newlines_inside": 0,
            }
        )
        elements = build_elements("on_a", "on_b", "x", "y")
        groups = {0: "handlers", 1: "handlers", 2: "property", 3: "property"}
        resolver = resolver_for(config, elements, [0, 0, 1, 1], groups)

        assert resolver.required(elements[0], elements[1]) == 1
        assert resolver.required(elements[2], elements[3]) == 0

    def test_tier_inside(self, build_elements):
        """Test newlines_inside declared on a tier object"""
        config = SortingConfig.from_dict(
            {"groups": [{"group": ["property", "method"], "newlines_inside": 2}]}
        )
        elements = build_elements("a", "b")
        groups = {0: "property", 1: "method"}
        resolver = resolver_for(config, elements, [0, 0], groups)

        assert resolver.required(elements[0], elements[1]) == 2

    def test_overload_run_is_zero(self, build_elements):
        """Test members of one overload run are never separated"""
        config = SortingConfig.from_dict({"newlines_inside": 1})
        elements = build_elements("f", "f")
        resolver = resolver_for(config, elements, [0, 0], overloads={0: 1, 1: 1})

        assert resolver.required(elements[0], elements[1]) == 0

    def test_unchecked_pairs(self, build_elements):
        """Test opaque elements and reversed tiers are not checked"""
        config = SortingConfig.from_dict({"groups": ["property", "method"], "newlines_between": 1})
        elements = build_elements("a", ("x", {"selector": "unknown"}), "b")
        resolver = resolver_for(config, elements, [1, 2, 0])

        assert resolver.required(elements[0], elements[1]) is None
        assert resolver.required(elements[0], elements[2]) is None

    def test_pinned_pairs_unchecked(self, build_elements):
        """Test spacing around a pinned element is not checked"""
        config = SortingConfig.from_dict({"groups": ["property", "method"], "newlines_between": 1})
        elements = build_elements("a", ("p", {"pinned": True, "selector": "method"}), "b")
        resolver = resolver_for(config, elements, [0, 1, 0])

        assert resolver.required(elements[0], elements[1]) is None
        assert resolver.required(elements[1], elements[2]) is None
        assert resolver.find_violations(elements) == []

    def test_violations(self, build_elements):
        """Test missing and extra spacing against source blank lines"""
        config = SortingConfig.from_dict({"groups": ["property", "method"], "newlines_between": 1})
        elements = build_elements("a", ("b", {"lines_before": 2}), ("m", {"selector": "method"}))
        resolver = resolver_for(config, elements, [0, 0, 1])

        violations = resolver.find_violations(elements)

        assert [violation.kind for violation in violations] == [ViolationKind.MISSING_SPACING]
        assert violations[0].right == "m"
        assert violations[0].expected_lines == 1
        assert violations[0].actual_lines == 0

    def test_requirements(self, build_elements):
        """Test required counts for the target order"""
        config = SortingConfig.from_dict({"groups": ["property", "method"], "newlines_between": 1})
        elements = build_elements("a", "b", ("m", {"selector": "method"}))
        resolver = resolver_for(config, elements, [0, 0, 1])

        assert [requirement.lines for requirement in resolver.requirements(elements)] == [None, 1]
