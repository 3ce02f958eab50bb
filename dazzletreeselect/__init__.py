"""DazzleTreeSelect - Headless tree select engine.

DazzleTreeSelect turns a lazily loaded tree into the flat, filterable option
list of a select menu: one "up" option to leave the active branch, one
"down" option per child branch, one leaf option per selectable node.

The tree is reached through lookups that may be plain functions or
coroutines. Synchronous sources give synchronous results:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from dazzletreeselect import TreeSelect

    select = TreeSelect(get_children=children_of, get_parent=parent_of)
    select.options                 # complete immediately

Asynchronous sources give the same results once awaited:
    await select.load_options()
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

from .config import (
    TreeSelectConfig,
    NodeType,
    PathDirection,
    ChangeReason,
    InputReason,
    CloseReason,
)
from .errors import (
    TreeSelectError,
    LookupFailure,
    ClassificationFailure,
    ConsistencyViolation,
)
from .error_policies import (
    ErrorPolicy,
    FailFastPolicy,
    CallbackPolicy,
    CollectErrorsPolicy,
)
from .core import (
    FreeSoloNode,
    TreeOption,
    TreeSelectAdapter,
    CallbackTreeAdapter,
    GuardedTreeAdapter,
    FilterState,
    create_filter_options,
    is_option_equal,
)
from .caching import Resolution, ResolutionCache
from .state import ControlledValue
from .navigation import KeyEvent, NavigationController, TreeSelectHandlers
from .select import TreeSelect
from .api import (
    make_adapter,
    get_options,
    get_options_async,
    get_path,
    get_path_async,
    get_value,
    get_value_async,
    get_path_labels,
)

__all__ = [
    "__version__",
    # Configuration
    "TreeSelectConfig",
    "NodeType",
    "PathDirection",
    "ChangeReason",
    "InputReason",
    "CloseReason",
    # Errors
    "TreeSelectError",
    "LookupFailure",
    "ClassificationFailure",
    "ConsistencyViolation",
    "ErrorPolicy",
    "FailFastPolicy",
    "CallbackPolicy",
    "CollectErrorsPolicy",
    # Options and adapters
    "FreeSoloNode",
    "TreeOption",
    "TreeSelectAdapter",
    "CallbackTreeAdapter",
    "GuardedTreeAdapter",
    "FilterState",
    "create_filter_options",
    "is_option_equal",
    # Caching and state
    "Resolution",
    "ResolutionCache",
    "ControlledValue",
    # Navigation
    "KeyEvent",
    "NavigationController",
    "TreeSelectHandlers",
    # Facade
    "TreeSelect",
    # High-level API
    "make_adapter",
    "get_options",
    "get_options_async",
    "get_path",
    "get_path_async",
    "get_value",
    "get_value_async",
    "get_path_labels",
]
