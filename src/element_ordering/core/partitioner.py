"""
Partitioner: split an element sequence into independently ordered runs.
"""

import logging

from .config import CommentPartition, SortingConfig
from .element import Comment, Element, Partition
from .patterns import PatternSet

logger = logging.getLogger(__name__)


def _comment_option_matches(option: bool | PatternSet, comment: Comment) -> bool:
    if isinstance(option, PatternSet):
        return option.matches(comment.text.strip())
    return option


def is_partition_comment(
    option: bool | PatternSet | CommentPartition, comment: Comment
) -> bool:
    """Check whether ``comment`` starts a new partition under ``option``"""
    if isinstance(option, CommentPartition):
        selected = option.block if comment.kind == "block" else option.line
        return _comment_option_matches(selected, comment)
    return _comment_option_matches(option, comment)


class Partitioner:
    """Splits elements on qualifying comments and blank lines."""

    def __init__(self, config: SortingConfig):
        self.partition_by_comment = config.partition_by_comment
        self.new_line_threshold = (
            int(config.partition_by_new_line) if config.partition_by_new_line else 0
        )

    def boundary_comments(self, element: Element) -> tuple[Comment, ...]:
        """Comments above ``element`` that act as partition boundaries"""
        if not self.partition_by_comment:
            return ()
        return tuple(
            comment
            for comment in element.comments
            if is_partition_comment(self.partition_by_comment, comment)
        )

    def starts_partition(self, element: Element) -> bool:
        """Check if a boundary sits right above ``element``"""
        if self.new_line_threshold and element.lines_before >= self.new_line_threshold:
            return True
        return bool(self.boundary_comments(element))

    def split(self, elements: list[Element]) -> list[Partition]:
        """
        Split elements into partitions.

        Args:
            elements: Elements in source order

        Returns:
            list[Partition]: Every element belongs to exactly one partition
        """
        partitions: list[Partition] = []
        for element in elements:
            if not partitions or self.starts_partition(element):
                partitions.append(
                    Partition(
                        index=len(partitions), boundary=self.boundary_comments(element)
                    )
                )
            partitions[-1].elements.append(element)

        logger.debug(f"Split {len(elements)} element(s) into {len(partitions)} partition(s)")
        return partitions
