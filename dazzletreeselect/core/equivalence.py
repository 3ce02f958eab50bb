"""Option equivalence.

Decides whether a listed option denotes the same selection as a held
value. Branch options are navigation, never values, so they match nothing.
The same node reached through two tree positions counts as two different
selections, which is why plain node identity is not enough.
"""

from typing import Any, Callable, Optional

from ..config import NodeType
from .option import FreeSoloNode, TreeOption

_UNSET = object()

IsEquivalent = Callable[[Any, Any], bool]


def is_option_equal(
    option: Any,
    value: TreeOption,
    is_equivalent: Optional[IsEquivalent] = None,
    free_solo_branch: Any = _UNSET,
) -> bool:
    """Check whether ``option`` and ``value`` denote the same selection.

    Args:
        option: Candidate option. When ``free_solo_branch`` is given, a
            raw string is accepted too and read as a free solo value
            created under that branch.
        value: Held value option
        is_equivalent: Optional override comparing the two nodes
        free_solo_branch: Active branch used to wrap raw string options

    Returns:
        True if both denote the same selection
    """
    if isinstance(option, str) and free_solo_branch is not _UNSET:
        option = TreeOption(FreeSoloNode(option, free_solo_branch), NodeType.LEAF)

    if option.is_branch or value.is_branch:
        return False

    if is_equivalent is not None:
        return bool(is_equivalent(option.node, value.node))

    if option.free_solo or value.free_solo:
        return (
            option.free_solo
            and value.free_solo
            and option.node.text == value.node.text
            and option.node.parent is value.node.parent
        )

    return (
        option.node is value.node
        and len(option.path) == len(value.path)
        and all(a is b for a, b in zip(option.path, value.path))
    )
