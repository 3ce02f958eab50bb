"""Ancestor path resolution."""

from typing import Any, List, Optional

from ..errors import ConsistencyViolation
from .adapter import TreeSelectAdapter
from .option import FreeSoloNode
from .trampoline import Await, Done, SyncOrAsync, run, then


def resolve_path(
    node: Any,
    adapter: TreeSelectAdapter,
    max_depth: Optional[int] = None,
) -> SyncOrAsync[List[Any]]:
    """Resolve the ancestors of a node, nearest first and root last.

    A FreeSoloNode has no discoverable parent; its walk starts from the
    branch it was created under.

    Args:
        node: Node whose ancestors are wanted
        adapter: Source of the parent lookup
        max_depth: Longest chain accepted before the walk is treated as a
            cycle. None trusts the parent lookup to reach a root.

    Returns:
        List of ancestors (empty for a root node), or an awaitable of it
        when any parent lookup is deferred.

    Raises:
        ConsistencyViolation: If the chain grows past ``max_depth``
    """
    path: List[Any] = []

    def visit(parent: Any):
        if parent is None:
            return Done(path)
        path.append(parent)
        if max_depth is not None and len(path) > max_depth:
            raise ConsistencyViolation(
                f"Parent chain of {node!r} exceeds max_path_depth={max_depth}"
            )
        return Await(adapter.get_parent(parent), visit)

    if isinstance(node, FreeSoloNode):
        return run(Await(node.parent, visit))
    return run(Await(adapter.get_parent(node), visit))


def resolve_branch_path(
    branch: Optional[Any],
    adapter: TreeSelectAdapter,
    max_depth: Optional[int] = None,
) -> SyncOrAsync[List[Any]]:
    """Resolve the chain of a branch including the branch itself.

    Returns ``[]`` for the root and ``[branch, *ancestors]`` otherwise.
    """
    if branch is None:
        return []
    return then(resolve_path(branch, adapter, max_depth), lambda path: [branch, *path])
