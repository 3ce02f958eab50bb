"""Option list assembly for the active branch.

The builder lists one UP_BRANCH option for the active branch (unless at
the root) followed by the branch's children, each classified as a branch
or a leaf. Options come out in children-lookup order no matter which
classification lookup finishes first; no sort is applied afterwards.
"""

from typing import Any, List, Optional

from ..config import NodeType
from .adapter import TreeSelectAdapter
from .option import TreeOption
from .path import resolve_branch_path
from .trampoline import Await, Done, SyncOrAsync, gather, run


def build_options(
    branch: Optional[Any],
    adapter: TreeSelectAdapter,
    max_depth: Optional[int] = None,
) -> SyncOrAsync[List[TreeOption]]:
    """Build the options listed under ``branch``.

    Args:
        branch: Active branch node, or None for the root
        adapter: Tree source
        max_depth: Cycle guard forwarded to the path resolver

    Returns:
        Ordered options, or an awaitable of them when any lookup is
        deferred. A failed lookup fails the whole build.
    """
    def assemble(resolved):
        path, children = resolved
        options: List[TreeOption] = []

        if branch is not None:
            options.append(TreeOption(branch, NodeType.UP_BRANCH, path[1:]))

        # Each child classifies independently; gather keeps lookup order
        child_options = gather(
            classify_child(adapter, child, path) for child in children or ()
        )

        def flatten(groups):
            for group in groups:
                options.extend(group)
            return Done(options)

        return Await(child_options, flatten)

    # The branch path and its children are independent lookups
    lookups = gather([
        resolve_branch_path(branch, adapter, max_depth),
        adapter.get_children(branch),
    ])
    return run(Await(lookups, assemble))


def classify_child(
    adapter: TreeSelectAdapter,
    child: Any,
    path: List[Any],
) -> SyncOrAsync[List[TreeOption]]:
    """Produce the options for one child of the listing branch.

    A leaf gets a LEAF option. A branch gets a DOWN_BRANCH option, plus a
    LEAF option right after it when the branch is selectable.
    """
    def on_branch(is_branch: bool):
        if not is_branch:
            return Done([TreeOption(child, NodeType.LEAF, path)])

        down = TreeOption(child, NodeType.DOWN_BRANCH, path)

        def on_selectable(selectable: bool):
            if selectable:
                return Done([down, TreeOption(child, NodeType.LEAF, path)])
            return Done([down])

        return Await(adapter.is_branch_selectable(child), on_selectable)

    return run(Await(adapter.is_branch(child), on_branch))
