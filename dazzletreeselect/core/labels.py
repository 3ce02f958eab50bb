"""Label projection for options and their paths."""

from typing import Any, Callable, Optional, Sequence

from .option import TreeOption


def get_path_label(
    option: TreeOption,
    include_self: bool,
    get_option_label: Callable[[Any], str] = str,
    delimiter: str = " > ",
    path_label: Optional[Callable[[Sequence[Any]], str]] = None,
) -> str:
    """Render the path of an option, root first.

    Args:
        option: Option whose path is rendered
        include_self: Whether the option's own node ends the label
        get_option_label: Label of a single node
        delimiter: Separator between nodes
        path_label: Optional override receiving the nodes nearest first

    Returns:
        e.g. ``"Europe > France > Paris"``; ``""`` for an empty path
    """
    nodes = [option.node, *option.path] if include_self else list(option.path)

    if path_label is not None:
        return path_label(nodes)

    return delimiter.join(get_option_label(node) for node in reversed(nodes))
