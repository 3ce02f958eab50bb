"""Core resolution engine.

Everything in this package works the same for synchronous and asynchronous
tree sources: results are plain values when every lookup answered
immediately and awaitables otherwise.
"""

from .trampoline import (
    Step,
    Done,
    Await,
    SyncOrAsync,
    is_deferred,
    run,
    then,
    gather,
    Deferred,
    discard,
)
from .option import FreeSoloNode, TreeOption
from .adapter import TreeSelectAdapter, CallbackTreeAdapter, GuardedTreeAdapter
from .path import resolve_path, resolve_branch_path
from .builder import build_options, classify_child
from .value import resolve_value, unresolved_value
from .equivalence import is_option_equal
from .filtering import (
    FilterState,
    FilteredOptions,
    create_filter_options,
    default_filter_options,
    filter_options,
)
from .labels import get_path_label

__all__ = [
    # Trampoline
    'Step',
    'Done',
    'Await',
    'SyncOrAsync',
    'is_deferred',
    'run',
    'then',
    'gather',
    'Deferred',
    'discard',
    # Options
    'FreeSoloNode',
    'TreeOption',
    # Adapters
    'TreeSelectAdapter',
    'CallbackTreeAdapter',
    'GuardedTreeAdapter',
    # Resolution
    'resolve_path',
    'resolve_branch_path',
    'build_options',
    'classify_child',
    'resolve_value',
    'unresolved_value',
    'is_option_equal',
    # Filtering
    'FilterState',
    'FilteredOptions',
    'create_filter_options',
    'default_filter_options',
    'filter_options',
    # Labels
    'get_path_label',
]
