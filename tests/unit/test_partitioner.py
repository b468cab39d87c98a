"""
Unit tests for the partitioner
"""

from element_ordering.core.config import SortingConfig
from element_ordering.core.element import Comment
from element_ordering.core.partitioner import Partitioner


def partition_names(config: SortingConfig, elements) -> list[list[str]]:
    return [[element.name for element in partition] for partition in Partitioner(config).split(elements)]


class TestPartitioner:
    """Test partition boundaries"""

    def test_single_partition_by_default(self, build_elements):
        """Test no boundaries without partition options"""
        elements = build_elements(
            "a", ("b", {"comments": (Comment("Part 2"),), "lines_before": 3}), "c"
        )

        assert partition_names(SortingConfig(), elements) == [["a", "b", "c"]]

    def test_any_comment(self, build_elements):
        """Test every comment starts a partition"""
        elements = build_elements("b", "a", ("d", {"comments": (Comment("Part 2"),)}), "c")
        config = SortingConfig.from_dict({"partition_by_comment": True})

        assert partition_names(config, elements) == [["b", "a"], ["d", "c"]]

    def test_comment_pattern(self, build_elements):
        """Test only matching comments start a partition"""
        elements = build_elements(
            "a",
            ("b", {"comments": (Comment("note"),)}),
            ("c", {"comments": (Comment(" Part: c "),)}),
        )
        config = SortingConfig.from_dict({"partition_by_comment": "^Part:"})

        assert partition_names(config, elements) == [["a", "b"], ["c"]]

    def test_comment_kinds(self, build_elements):
        """Test per-kind comment settings"""
        elements = build_elements(
            "a",
            ("b", {"comments": (Comment("line"),)}),
            ("c", {"comments": (Comment("block", kind="block"),)}),
        )
        config = SortingConfig.from_dict({"partition_by_comment": {"block": True}})

        assert partition_names(config, elements) == [["a", "b"], ["c"]]

    def test_new_line(self, build_elements):
        """Test any blank line starts a partition"""
        elements = build_elements("a", ("b", {"lines_before": 1}), "c")
        config = SortingConfig.from_dict({"partition_by_new_line": True})

        assert partition_names(config, elements) == [["a"], ["b", "c"]]

    def test_new_line_threshold(self, build_elements):
        """Test an integer threshold of blank lines"""
        elements = build_elements("a", ("b", {"lines_before": 1}), ("c", {"lines_before": 2}))
        config = SortingConfig.from_dict({"partition_by_new_line": 2})

        assert partition_names(config, elements) == [["a", "b"], ["c"]]

    def test_every_element_in_one_partition(self, build_elements):
        """Test partitions cover the sequence exactly once"""
        elements = build_elements(
            "a", ("b", {"lines_before": 1}), ("c", {"comments": (Comment("x"),)}), "d"
        )
        config = SortingConfig.from_dict({"partition_by_new_line": True, "partition_by_comment": True})

        partitions = Partitioner(config).split(elements)

        assert [element.id for partition in partitions for element in partition] == [0, 1, 2, 3]
        assert [partition.index for partition in partitions] == [0, 1, 2]

    def test_empty_sequence(self):
        """Test an empty sequence has no partitions"""
        assert Partitioner(SortingConfig()).split([]) == []

    def test_boundary_comments(self, build_elements):
        """Test each partition records the comments that opened it"""
        elements = build_elements(
            ("a", {"comments": (Comment("Part 1"),)}),
            "b",
            ("c", {"comments": (Comment("Part 2"), Comment("about c"))}),
        )
        config = SortingConfig.from_dict({"partition_by_comment": "^Part"})

        partitions = Partitioner(config).split(elements)

        assert [partition.boundary for partition in partitions] == [
            (Comment("Part 1"),),
            (Comment("Part 2"),),
        ]

    def test_no_boundary_on_new_line(self, build_elements):
        """Test blank-line partitions carry no boundary comments"""
        elements = build_elements("a", ("b", {"lines_before": 1, "comments": (Comment("x"),)}))
        config = SortingConfig.from_dict({"partition_by_new_line": True})

        partitions = Partitioner(config).split(elements)

        assert [partition.boundary for partition in partitions] == [(), ()]
