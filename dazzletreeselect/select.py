"""TreeSelect: the headless tree select.

Wires the resolution engine, the resolution cache, the state holders and
the navigation controller into one object that a UI layer can bind to.
Reads like ``options`` and ``value`` never block: with a synchronous tree
they are complete immediately; with an asynchronous tree they return a
loading placeholder until the background resolution lands, and
``load_options()`` / ``load_value()`` can be awaited for the final result.
"""

from typing import Any, Callable, List, Optional, Sequence

from .caching import IdentityKey, Resolution, ResolutionCache
from .config import NodeType, TreeSelectConfig
from .core import filtering
from .core.adapter import CallbackTreeAdapter, GuardedTreeAdapter, TreeSelectAdapter
from .core.builder import build_options
from .core.equivalence import is_option_equal
from .core.labels import get_path_label
from .core.option import FreeSoloNode, TreeOption
from .core.trampoline import Deferred, is_deferred
from .core.value import resolve_value, unresolved_value
from .error_policies import CallbackPolicy, ErrorPolicy, FailFastPolicy
from .errors import TreeSelectError
from .navigation import KeyEvent, NavigationController, TreeSelectHandlers
from .state import UNSET, ControlledValue


class TreeSelect:
    """
    Headless select over a lazily loaded tree.

    Example:
        select = TreeSelect(
            get_children=lambda node: tree.get(node),
            get_parent=lambda node: parents.get(node),
            on_change=lambda event, value, reason, details: print(value),
        )
        for option in select.filter_options():
            print(option.type.name, select.get_option_label(option))

    Args:
        adapter: Tree source. Alternatively pass ``get_children`` and
            ``get_parent`` (plus the optional predicates) as callables.
        config: TreeSelectConfig (defaults apply when omitted)
        branch / default_branch: Controlled or initial active branch
        value / default_value: Controlled or initial selection
        input_value: Controlled input text
        open: Controlled menu open flag
        filter_options: Text predicate ``(nodes, FilterState) -> nodes``
        get_option_disabled: Whether a node's option is disabled
        get_path_label: Path label override, receives nodes nearest first
        group_by: Group name of a node
        is_option_equal_to_value: Node equivalence override
        on_error: Receives resolution failures instead of the caller
        error_policy: Explicit ErrorPolicy (takes precedence over on_error)
        on_branch_change, on_change, on_close, on_highlight_change,
        on_input_change, on_open: Event callbacks (see TreeSelectHandlers)
    """

    def __init__(
        self,
        adapter: Optional[TreeSelectAdapter] = None,
        *,
        get_children: Optional[Callable] = None,
        get_parent: Optional[Callable] = None,
        is_branch: Optional[Callable] = None,
        is_branch_selectable: Optional[Callable] = None,
        get_option_label: Optional[Callable[[Any], str]] = None,
        config: Optional[TreeSelectConfig] = None,
        branch: Any = UNSET,
        default_branch: Any = None,
        value: Any = UNSET,
        default_value: Any = UNSET,
        input_value: Any = UNSET,
        open: Any = UNSET,
        filter_options: Optional[filtering.FilterPredicate] = None,
        get_option_disabled: Optional[Callable[[Any], bool]] = None,
        get_path_label: Optional[Callable[[Sequence[Any]], str]] = None,
        group_by: Optional[Callable[[Any], str]] = None,
        is_option_equal_to_value: Optional[Callable[[Any, Any], bool]] = None,
        on_error: Optional[Callable[[Exception], Any]] = None,
        error_policy: Optional[ErrorPolicy] = None,
        on_branch_change: Optional[Callable] = None,
        on_change: Optional[Callable] = None,
        on_close: Optional[Callable] = None,
        on_highlight_change: Optional[Callable] = None,
        on_input_change: Optional[Callable] = None,
        on_open: Optional[Callable] = None,
    ):
        self.config = config or TreeSelectConfig()
        self.config.validate()

        if adapter is None:
            if get_children is None or get_parent is None:
                raise ValueError("TreeSelect needs an adapter or both get_children and get_parent")
            adapter = CallbackTreeAdapter(
                get_children,
                get_parent,
                is_branch=is_branch,
                is_branch_selectable=is_branch_selectable,
                get_option_label=get_option_label,
            )
        self._adapter_version = 0
        self.adapter = adapter

        self._get_option_label = get_option_label
        self._filter_predicate = filter_options or filtering.default_filter_options
        self._get_option_disabled = get_option_disabled
        self._get_path_label = get_path_label
        self._group_by = group_by
        self._is_equivalent = is_option_equal_to_value

        if error_policy is None:
            error_policy = CallbackPolicy(on_error) if on_error else FailFastPolicy()
        self._cache = ResolutionCache(
            max_size=self.config.cache_max_size,
            ttl=self.config.cache_ttl,
            error_policy=error_policy,
        )

        if default_value is UNSET:
            default_value = [] if self.config.multiple else None

        self._branch = ControlledValue('branch', branch, default_branch)
        self._value = ControlledValue('value', value, default_value)
        self._input_value = ControlledValue('input_value', input_value, "")
        self._open = ControlledValue('open', open, False)

        self.navigation = NavigationController(
            self._branch,
            self._value,
            self._input_value,
            self._open,
            TreeSelectHandlers(
                on_branch_change=on_branch_change,
                on_change=on_change,
                on_close=on_close,
                on_highlight_change=on_highlight_change,
                on_input_change=on_input_change,
                on_open=on_open,
            ),
            multiple=self.config.multiple,
            get_option_label=self._node_label,
            get_value=lambda: self.value,
            get_up_target=self._up_target,
        )

        self._no_options: Optional[bool] = None

    # === Sources and state ===

    @property
    def adapter(self) -> TreeSelectAdapter:
        return self._guarded.base_adapter

    @adapter.setter
    def adapter(self, adapter: TreeSelectAdapter) -> None:
        """Swap the tree source; cached resolutions of the old one are no longer used."""
        self._guarded = GuardedTreeAdapter(adapter)
        self._adapter_version += 1

    @property
    def branch(self) -> Optional[Any]:
        return self._branch.value

    @branch.setter
    def branch(self, node: Optional[Any]) -> None:
        self._branch.control(node)

    @property
    def raw_value(self) -> Any:
        """The held selection: nodes and FreeSoloNodes, not options."""
        return self._value.value

    @raw_value.setter
    def raw_value(self, value: Any) -> None:
        self._value.control(value)

    @property
    def input_value(self) -> str:
        return self._input_value.value

    @input_value.setter
    def input_value(self, text: str) -> None:
        self._input_value.control(text)

    @property
    def open(self) -> bool:
        return self._open.value

    @open.setter
    def open(self, is_open: bool) -> None:
        self._open.control(is_open)

    @property
    def is_at_root(self) -> bool:
        return self.branch is None

    # === Resolutions ===

    def _options_key(self, branch: Any = UNSET) -> tuple:
        if branch is UNSET:
            branch = self.branch
        return ('options', self._adapter_version, IdentityKey(branch))

    def _value_key(self) -> tuple:
        raw = self.raw_value
        if self.config.multiple:
            identity = tuple(IdentityKey(node) for node in raw or ())
        else:
            identity = IdentityKey(raw)
        return ('value', self._adapter_version, self.config.multiple, identity)

    def _options_resolution(self, raise_errors: bool = True) -> Resolution:
        branch = self.branch
        return self._cache.get(
            self._options_key(),
            lambda: build_options(branch, self._guarded, self.config.max_path_depth),
            raise_errors,
        )

    def _value_resolution(self, raise_errors: bool = True) -> Resolution:
        raw = self.raw_value
        return self._cache.get(
            self._value_key(),
            lambda: resolve_value(raw, self._guarded, self.config.multiple, self.config.max_path_depth),
            raise_errors,
        )

    @property
    def options(self) -> List[TreeOption]:
        """Options for the active branch, before text filtering.

        While the branch is loading (or after it failed) this is ``[]`` at
        the root and just the UP_BRANCH option elsewhere.
        """
        resolution = self._options_resolution()
        if resolution.data is not None:
            return self._with_free_solo_option(resolution.data)
        if self.branch is None:
            return []
        return [TreeOption(self.branch, NodeType.UP_BRANCH)]

    @property
    def value(self) -> Any:
        """The selection as LEAF options carrying resolved paths.

        Paths are empty while they are still loading.
        """
        resolution = self._value_resolution()
        if resolution.data is not None:
            return resolution.data
        return unresolved_value(self.raw_value, self.config.multiple)

    @property
    def is_loading(self) -> bool:
        """True while the options or the value are still resolving.

        Starts both resolutions if needed but never raises their failures;
        a failed resolution is not loading.
        """
        return (
            self._options_resolution(raise_errors=False).loading
            or self._value_resolution(raise_errors=False).loading
        )

    @property
    def error(self) -> Optional[Exception]:
        """Failure of the current options or value resolution, if any."""
        return self._cache.error_for(self._options_key()) or self._cache.error_for(self._value_key())

    async def load_options(self) -> List[TreeOption]:
        """Wait for the options of the active branch.

        If the branch or the adapter changes while waiting, the stale
        result is dropped and the current branch is loaded instead.
        """
        # An UP_BRANCH picked while loading may still be looking up its parent
        pending, self.navigation.pending = self.navigation.pending, None
        if pending is not None:
            await pending

        while True:
            version = (self._branch.version, self._adapter_version)
            branch = self.branch
            await self._cache.resolve(
                self._options_key(),
                lambda: build_options(branch, self._guarded, self.config.max_path_depth),
            )
            if (self._branch.version, self._adapter_version) == version:
                return self.options

    async def load_value(self) -> Any:
        """Wait for the selection's paths to resolve."""
        while True:
            version = (self._value.version, self._adapter_version)
            raw = self.raw_value
            await self._cache.resolve(
                self._value_key(),
                lambda: resolve_value(raw, self._guarded, self.config.multiple, self.config.max_path_depth),
            )
            if (self._value.version, self._adapter_version) == version:
                return self.value

    def invalidate(self) -> None:
        """Forget cached resolutions so the tree is asked again."""
        self._cache.invalidate()

    def get_cache_stats(self) -> dict:
        return self._cache.get_cache_stats()

    def _up_target(self, option: TreeOption) -> Any:
        """Branch that ``option`` (an UP_BRANCH) leads to.

        The loading fallback lists the UP_BRANCH before its path is known,
        so in that case the parent is looked up instead of assuming the root.
        """
        if option.path or self._cache.peek(self._options_key(option.node)).data is not None:
            return option.path[0] if option.path else None

        try:
            parent = self._guarded.get_parent(option.node)
        except TreeSelectError as e:
            return self._parent_failed(e)
        if is_deferred(parent):
            return Deferred(self._await_parent, parent)
        return parent

    async def _await_parent(self, pending: Any) -> Any:
        try:
            return await pending
        except TreeSelectError as e:
            return self._parent_failed(e)

    def _parent_failed(self, error: TreeSelectError) -> Any:
        # Stay on the current branch unless the policy raises
        self._cache.error_policy.handle(error, 'branch')
        return UNSET

    def _branch_path(self, options: List[TreeOption]) -> tuple:
        branch = self.branch
        if branch is None:
            return ()
        if options and options[0].type is NodeType.UP_BRANCH:
            return (branch, *options[0].path)
        return (branch,)

    def _with_free_solo_option(self, options: List[TreeOption]) -> List[TreeOption]:
        text = self.input_value
        if not (self.config.free_solo and text):
            return options

        value = self.value
        if not self.config.multiple and value is not None and self.get_option_label(value) == text:
            return options

        created = TreeOption(FreeSoloNode(text, self.branch), NodeType.LEAF, self._branch_path(options))
        held = value if self.config.multiple else [value]
        if any(
            option is not None and option.free_solo and self.is_option_equal_to_value(created, option)
            for option in held
        ):
            return options
        return [*options, created]

    # === Projections ===

    def _node_label(self, node: Any) -> str:
        if self._get_option_label is not None:
            return self._get_option_label(node)
        if isinstance(node, FreeSoloNode):
            return str(node)
        return self._guarded.get_option_label(node)

    def get_option_label(self, option: Any) -> str:
        """Label of an option; raw free solo text is returned as is."""
        if isinstance(option, str):
            return option
        return self._node_label(option.node)

    def get_path_label(self, option: TreeOption, include_self: bool = False) -> str:
        return get_path_label(
            option,
            include_self,
            self._node_label,
            self.config.branch_delimiter,
            self._get_path_label,
        )

    def get_option_disabled(self, option: TreeOption) -> bool:
        if option.type is NodeType.UP_BRANCH or option.free_solo:
            return False
        if self._get_option_disabled is None:
            return False
        return bool(self._get_option_disabled(option.node))

    @property
    def group_by(self) -> Optional[Callable[[TreeOption], str]]:
        """Group name projection, or None when no grouping was requested."""
        if self._group_by is None:
            return None

        def group(option: TreeOption) -> str:
            if option.type is NodeType.UP_BRANCH:
                return ""
            return self._group_by(option.node)

        return group

    def is_option_equal_to_value(self, option: Any, value: TreeOption) -> bool:
        if self.config.multiple and self.config.free_solo:
            return is_option_equal(option, value, self._is_equivalent, free_solo_branch=self.branch)
        return is_option_equal(option, value, self._is_equivalent)

    # === Filtering ===

    def filter_options(
        self,
        options: Optional[Sequence[TreeOption]] = None,
        input_value: Optional[str] = None,
    ) -> List[TreeOption]:
        """Filter options against the input text.

        Args:
            options: Options to filter (defaults to ``self.options``)
            input_value: Query text (defaults to ``self.input_value``)
        """
        if options is None:
            options = self.options
        if input_value is None:
            input_value = self.input_value

        result = filtering.filter_options(
            options,
            filtering.FilterState(input_value, self._node_label),
            self._filter_predicate,
            value=None if self.config.multiple else self.value,
            multiple=self.config.multiple,
            is_equal=self.is_option_equal_to_value,
        )
        self._no_options = result.no_options
        return result.options

    @property
    def no_options(self) -> bool:
        """True when the last filtering left nothing but navigation."""
        if self._no_options is None:
            options = self.options
            return not options or (len(options) == 1 and options[0].type is NodeType.UP_BRANCH)
        return self._no_options

    # === Events ===

    @property
    def highlighted(self) -> Optional[TreeOption]:
        return self.navigation.highlighted

    def on_change(self, event: Any, new_value: Any, reason: Any, details: Optional[dict] = None) -> None:
        self.navigation.on_change(event, new_value, reason, details)

    def on_close(self, event: Any, reason: Any) -> None:
        self.navigation.on_close(event, reason)

    def on_open(self, event: Any) -> None:
        self.navigation.on_open(event)

    def on_input_change(self, event: Any, text: str, reason: Any) -> None:
        self.navigation.on_input_change(event, text, reason)

    def on_highlight_change(self, event: Any, option: Optional[TreeOption], reason: Any = None) -> None:
        self.navigation.on_highlight_change(event, option, reason)

    def on_key_down(self, event: KeyEvent) -> None:
        self.navigation.on_key_down(event)

    def handle_option_click(self, option: TreeOption) -> None:
        self.navigation.handle_option_click(option)
