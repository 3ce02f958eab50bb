"""
Two-tier option filtering.

The text predicate only ever sees tree nodes. The UP_BRANCH option is
navigation and free solo options echo the user's own input, so both are
pinned: the UP_BRANCH stays first and free solo options stay last whatever
the query. Surviving branches are listed before surviving leaves.
"""

import unicodedata
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from ..config import NodeType
from .equivalence import is_option_equal
from .option import TreeOption


@dataclass(frozen=True)
class FilterState:
    """Query handed to a filter predicate."""

    input_value: str
    get_option_label: Callable[[Any], str] = str


FilterPredicate = Callable[[List[Any], FilterState], Sequence[Any]]


class FilteredOptions(NamedTuple):
    """Result of filter_options.

    Attributes:
        options: Options to present, in display order
        no_options: True when nothing but the UP_BRANCH option survived
    """
    options: List[TreeOption]
    no_options: bool


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(char for char in decomposed if not unicodedata.combining(char))


def create_filter_options(
    ignore_case: bool = True,
    ignore_accents: bool = True,
    match_from: str = "any",
    trim: bool = False,
    limit: Optional[int] = None,
    stringify: Optional[Callable[[Any], str]] = None,
) -> FilterPredicate:
    """Create a label-matching filter predicate.

    Args:
        ignore_case: Compare case-insensitively
        ignore_accents: Compare with combining accents removed
        match_from: "any" keeps labels containing the query, "start" keeps
            labels starting with it
        trim: Strip whitespace around the query
        limit: Keep at most this many matches
        stringify: Label used for matching; defaults to the state's
            ``get_option_label``

    Returns:
        Predicate ``(nodes, state) -> matched nodes`` preserving order
    """
    if match_from not in ("any", "start"):
        raise ValueError(f"match_from must be 'any' or 'start', got {match_from!r}")

    def normalize(text: str) -> str:
        if ignore_case:
            text = text.lower()
        if ignore_accents:
            text = _strip_accents(text)
        return text

    def filter_nodes(nodes: List[Any], state: FilterState) -> List[Any]:
        query = state.input_value.strip() if trim else state.input_value
        query = normalize(query)
        label = stringify or state.get_option_label

        if not query:
            matched = list(nodes)
        elif match_from == "start":
            matched = [node for node in nodes if normalize(label(node)).startswith(query)]
        else:
            matched = [node for node in nodes if query in normalize(label(node))]

        if limit is not None:
            return matched[:limit]
        return matched

    return filter_nodes


default_filter_options = create_filter_options()


def filter_options(
    options: Sequence[TreeOption],
    state: FilterState,
    filter_predicate: FilterPredicate = default_filter_options,
    value: Optional[TreeOption] = None,
    multiple: bool = False,
    is_equal: Callable[[TreeOption, TreeOption], bool] = is_option_equal,
) -> FilteredOptions:
    """Narrow options to those matching the query.

    Args:
        options: Options from the builder (plus any free solo option)
        state: Query text and label projection
        filter_predicate: Text predicate over tree nodes
        value: Held value in single mode
        multiple: Whether the select holds several values
        is_equal: Equivalence used to find the held value among options

    Returns:
        FilteredOptions ordered ``[UP_BRANCH?, *branches, *leaves, *free_solo]``
    """
    options = list(options)

    # A held value whose label is the query text but which is not listed
    # under this branch would otherwise be filtered out of sight.
    if (
        not multiple
        and value is not None
        and state.get_option_label(value.node) == state.input_value
        and not any(is_equal(option, value) for option in options)
    ):
        no_options = all(option.type is NodeType.UP_BRANCH for option in options)
        return FilteredOptions(options, no_options)

    up_branch = None
    free_solo: List[TreeOption] = []
    branches: Dict[int, TreeOption] = {}
    leaves: Dict[int, TreeOption] = {}
    candidates: Dict[int, Any] = {}

    for option in options:
        if option.type is NodeType.UP_BRANCH:
            up_branch = option
        elif option.free_solo:
            free_solo.append(option)
        elif option.type is NodeType.DOWN_BRANCH:
            branches[id(option.node)] = option
            candidates.setdefault(id(option.node), option.node)
        else:
            leaves[id(option.node)] = option
            candidates.setdefault(id(option.node), option.node)

    matched_branches: List[TreeOption] = []
    matched_leaves: List[TreeOption] = []
    for node in filter_predicate(list(candidates.values()), state):
        key = id(node)
        if key in branches:
            matched_branches.append(branches[key])
        if key in leaves:
            matched_leaves.append(leaves[key])

    filtered = matched_branches + matched_leaves
    no_options = not filtered and not free_solo

    if up_branch is None:
        return FilteredOptions(filtered + free_solo, no_options)
    return FilteredOptions([up_branch, *filtered, *free_solo], no_options)
