"""Tree source adapter abstraction.

Adapters bridge between the resolution engine and a specific tree. Every
lookup may answer immediately or return an awaitable, so the same adapter
interface serves an in-memory dict, a database, or a remote API. Methods
may be written as plain functions or as ``async def``.
"""

import functools
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from ..errors import ClassificationFailure, LookupFailure, TreeSelectError
from .trampoline import Deferred, SyncOrAsync, is_deferred, then


class TreeSelectAdapter(ABC):
    """Abstract base class for tree select sources.

    Subclasses implement ``get_children`` and ``get_parent``. The
    classification predicates and the label have defaults.
    """

    @abstractmethod
    def get_children(self, node: Optional[Any]) -> SyncOrAsync[Optional[Sequence[Any]]]:
        """Get the children of a node.

        Args:
            node: Parent node, or None to request the root options

        Returns:
            Child nodes, or None when ``node`` is a leaf
        """
        pass

    @abstractmethod
    def get_parent(self, node: Any) -> SyncOrAsync[Optional[Any]]:
        """Get the parent of a node.

        Returns:
            Parent node or None if ``node`` is a root option
        """
        pass

    # Optional methods with default implementations

    def is_branch(self, node: Any) -> SyncOrAsync[bool]:
        """Check if a node is a branch.

        Default implementation asks for the children and treats any
        non-None answer as a branch.
        """
        return then(self.get_children(node), lambda children: children is not None)

    def is_branch_selectable(self, node: Any) -> SyncOrAsync[bool]:
        """Check if a branch node may also be selected as a value.

        When True, the node gets a LEAF option next to its DOWN_BRANCH.
        """
        return False

    def get_option_label(self, node: Any) -> str:
        """Get the display label for a node."""
        return str(node)


class CallbackTreeAdapter(TreeSelectAdapter):
    """Adapter assembled from plain callables.

    Example:
        adapter = CallbackTreeAdapter(
            get_children=lambda node: tree.get(node),
            get_parent=lambda node: parents.get(node),
        )
    """

    def __init__(
        self,
        get_children: Callable[[Optional[Any]], SyncOrAsync[Optional[Sequence[Any]]]],
        get_parent: Callable[[Any], SyncOrAsync[Optional[Any]]],
        is_branch: Optional[Callable[[Any], SyncOrAsync[bool]]] = None,
        is_branch_selectable: Optional[Callable[[Any], SyncOrAsync[bool]]] = None,
        get_option_label: Optional[Callable[[Any], str]] = None,
    ):
        self._get_children = get_children
        self._get_parent = get_parent
        self._is_branch = is_branch
        self._is_branch_selectable = is_branch_selectable
        self._get_option_label = get_option_label

    def get_children(self, node):
        return self._get_children(node)

    def get_parent(self, node):
        return self._get_parent(node)

    def is_branch(self, node):
        if self._is_branch is None:
            return super().is_branch(node)
        return self._is_branch(node)

    def is_branch_selectable(self, node):
        if self._is_branch_selectable is None:
            return super().is_branch_selectable(node)
        return self._is_branch_selectable(node)

    def get_option_label(self, node):
        if self._get_option_label is None:
            return super().get_option_label(node)
        return self._get_option_label(node)


class GuardedTreeAdapter(TreeSelectAdapter):
    """
    Adapter that wraps another adapter and translates lookup errors.

    Exceptions raised synchronously and rejections of returned awaitables
    are both re-raised as LookupFailure (children, parent) or
    ClassificationFailure (is_branch, is_branch_selectable), chained to
    the original error. Errors already in the TreeSelectError family pass
    through untouched.
    """

    def __init__(self, base_adapter: TreeSelectAdapter):
        self._base_adapter = base_adapter

    @property
    def base_adapter(self) -> TreeSelectAdapter:
        return self._base_adapter

    def get_children(self, node):
        return self._guard(LookupFailure, 'get_children', self._base_adapter.get_children, node)

    def get_parent(self, node):
        return self._guard(LookupFailure, 'get_parent', self._base_adapter.get_parent, node)

    def is_branch(self, node):
        return self._guard(ClassificationFailure, 'is_branch', self._base_adapter.is_branch, node)

    def is_branch_selectable(self, node):
        return self._guard(
            ClassificationFailure, 'is_branch_selectable',
            self._base_adapter.is_branch_selectable, node
        )

    def get_option_label(self, node):
        return self._base_adapter.get_option_label(node)

    @staticmethod
    def _guard(error_class, lookup: str, method, node):
        try:
            result = method(node)
        except TreeSelectError:
            raise
        except Exception as e:
            raise error_class(lookup, node, e) from e

        if is_deferred(result):
            return Deferred(functools.partial(_guard_deferred, error_class, lookup, node), result)
        return result


async def _guard_deferred(error_class, lookup: str, node, awaitable):
    try:
        return await awaitable
    except TreeSelectError:
        raise
    except Exception as e:
        raise error_class(lookup, node, e) from e
