"""High-level API for DazzleTreeSelect.

Plain functions for one-off resolutions without a TreeSelect instance.
The ``*_async`` variants accept any source; the synchronous variants
require every lookup to answer immediately.
"""

from typing import Any, Callable, List, Optional, Sequence

from .core.adapter import CallbackTreeAdapter, GuardedTreeAdapter, TreeSelectAdapter
from .core.builder import build_options
from .core.labels import get_path_label
from .core.option import TreeOption
from .core.path import resolve_path
from .core.trampoline import discard, is_deferred
from .core.value import resolve_value
from .errors import TreeSelectError


def make_adapter(
    get_children: Callable,
    get_parent: Callable,
    is_branch: Optional[Callable] = None,
    is_branch_selectable: Optional[Callable] = None,
    get_option_label: Optional[Callable[[Any], str]] = None,
) -> TreeSelectAdapter:
    """Build an adapter from lookup callables."""
    return CallbackTreeAdapter(
        get_children,
        get_parent,
        is_branch=is_branch,
        is_branch_selectable=is_branch_selectable,
        get_option_label=get_option_label,
    )


def _immediate(result: Any, name: str) -> Any:
    if is_deferred(result):
        discard(result)
        raise TreeSelectError(
            f"{name}() got a deferred lookup result; use {name}_async() for asynchronous sources"
        )
    return result


async def _settled(result: Any) -> Any:
    if is_deferred(result):
        return await result
    return result


def get_options(branch: Optional[Any], adapter: TreeSelectAdapter,
                max_depth: Optional[int] = None) -> List[TreeOption]:
    """Options listed under ``branch`` (None for the root) from a synchronous source."""
    return _immediate(build_options(branch, GuardedTreeAdapter(adapter), max_depth), 'get_options')


async def get_options_async(branch: Optional[Any], adapter: TreeSelectAdapter,
                            max_depth: Optional[int] = None) -> List[TreeOption]:
    """Options listed under ``branch`` from any source.

    Args:
        branch: Branch node, or None for the root
        adapter: Tree source
        max_depth: Optional cycle guard for the parent walk

    Returns:
        Ordered options: UP_BRANCH first (unless at root), then children
    """
    return await _settled(build_options(branch, GuardedTreeAdapter(adapter), max_depth))


def get_path(node: Any, adapter: TreeSelectAdapter,
             max_depth: Optional[int] = None) -> List[Any]:
    """Ancestors of ``node``, nearest first, from a synchronous source."""
    return _immediate(resolve_path(node, GuardedTreeAdapter(adapter), max_depth), 'get_path')


async def get_path_async(node: Any, adapter: TreeSelectAdapter,
                         max_depth: Optional[int] = None) -> List[Any]:
    """Ancestors of ``node``, nearest first, from any source."""
    return await _settled(resolve_path(node, GuardedTreeAdapter(adapter), max_depth))


def get_value(value: Any, adapter: TreeSelectAdapter, multiple: bool = False,
              max_depth: Optional[int] = None):
    """Selection as LEAF options with paths, from a synchronous source."""
    return _immediate(
        resolve_value(value, GuardedTreeAdapter(adapter), multiple, max_depth), 'get_value'
    )


async def get_value_async(value: Any, adapter: TreeSelectAdapter, multiple: bool = False,
                          max_depth: Optional[int] = None):
    """Selection as LEAF options with paths, from any source."""
    return await _settled(resolve_value(value, GuardedTreeAdapter(adapter), multiple, max_depth))


def get_path_labels(options: Sequence[TreeOption], get_option_label: Callable[[Any], str] = str,
                    delimiter: str = " > ") -> List[str]:
    """Full path labels (root first, option last) for a list of options."""
    return [get_path_label(option, True, get_option_label, delimiter) for option in options]
