"""Option types produced by the resolution engine."""

from typing import Any, Optional, Sequence

from ..config import NodeType


class FreeSoloNode:
    """A value typed by the user that is not backed by a tree node.

    Free solo nodes are always leaves. ``parent`` is the branch that was
    active when the value was created and stands in for the parent lookup.
    """

    __slots__ = ('text', 'parent')

    def __init__(self, text: str, parent: Optional[Any] = None):
        self.text = text
        self.parent = parent

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"FreeSoloNode({self.text!r}, parent={self.parent!r})"


class TreeOption:
    """A node placed in the select menu.

    Attributes:
        node: The tree node or FreeSoloNode
        type: How the option participates in the menu
        path: Ancestors of the listing branch, nearest first. For UP_BRANCH
            options this excludes the branch itself; for LEAF and
            DOWN_BRANCH options it starts with the branch they are listed
            under.
        free_solo: True when ``node`` is a FreeSoloNode
    """

    __slots__ = ('node', 'type', 'path', 'free_solo')

    def __init__(self, node: Any, type: NodeType, path: Sequence[Any] = ()):
        object.__setattr__(self, 'node', node)
        object.__setattr__(self, 'type', type)
        object.__setattr__(self, 'path', tuple(path))
        object.__setattr__(self, 'free_solo', isinstance(node, FreeSoloNode))

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def is_branch(self) -> bool:
        return self.type is not NodeType.LEAF

    def __str__(self) -> str:
        return str(self.node)

    def __repr__(self) -> str:
        return f"TreeOption({self.node!r}, {self.type.name}, path={list(self.path)!r})"
