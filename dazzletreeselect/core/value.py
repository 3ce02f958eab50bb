"""Resolution of the held selection into annotated options."""

from typing import Any, Optional

from ..config import NodeType
from .adapter import TreeSelectAdapter
from .option import TreeOption
from .path import resolve_path
from .trampoline import gather, then


def resolve_value(
    value: Any,
    adapter: TreeSelectAdapter,
    multiple: bool = False,
    max_depth: Optional[int] = None,
):
    """Resolve the held value into LEAF options with their ancestor paths.

    Args:
        value: A node, a FreeSoloNode or None in single mode; a sequence of
            them (or None) in multiple mode
        adapter: Source of the parent lookup
        multiple: Whether ``value`` is a sequence
        max_depth: Cycle guard forwarded to the path resolver

    Returns:
        None or a TreeOption in single mode, a list of TreeOption in
        multiple mode (input order kept), or an awaitable of either when
        any parent lookup is deferred.
    """
    if multiple:
        return gather(_resolve_one(node, adapter, max_depth) for node in value or ())
    if value is None:
        return None
    return _resolve_one(value, adapter, max_depth)


def _resolve_one(node: Any, adapter: TreeSelectAdapter, max_depth: Optional[int]):
    return then(
        resolve_path(node, adapter, max_depth),
        lambda path: TreeOption(node, NodeType.LEAF, path),
    )


def unresolved_value(value: Any, multiple: bool = False):
    """Wrap the held value as LEAF options with empty paths.

    Stands in for the resolved value while its paths are still loading.
    """
    if multiple:
        return [TreeOption(node, NodeType.LEAF) for node in value or ()]
    if value is None:
        return None
    return TreeOption(value, NodeType.LEAF)
