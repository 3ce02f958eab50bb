"""Exception taxonomy for DazzleTreeSelect."""

from typing import Any


class TreeSelectError(Exception):
    """Base class for all tree select errors."""


class LookupFailure(TreeSelectError):
    """A children or parent lookup raised or was rejected.

    Attributes:
        lookup: Name of the failed lookup (e.g. 'get_children')
        node: The node the lookup was called with
    """

    def __init__(self, lookup: str, node: Any, error: BaseException):
        self.lookup = lookup
        self.node = node
        super().__init__(f"{lookup}({node!r}) failed: {error}")


class ClassificationFailure(LookupFailure):
    """An is_branch or is_branch_selectable predicate raised or was rejected."""


class ConsistencyViolation(TreeSelectError):
    """Engine state that a well-behaved caller cannot produce.

    Raised for parent chains that exceed the configured depth guard and
    for options with an unknown shape.
    """
