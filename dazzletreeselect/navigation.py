"""Branch navigation state machine.

The select is either at the root or at some branch. Picking a DOWN_BRANCH
option descends into it, picking the UP_BRANCH option ascends to the
branch's parent, and anything else is a value commit that leaves the
branch alone. Keyboard arrows do the same for the highlighted option.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .config import ChangeReason, CloseReason, InputReason, NodeType, PathDirection
from .core.option import FreeSoloNode, TreeOption
from .core.trampoline import discard, is_deferred
from .errors import ConsistencyViolation
from .state import UNSET, ControlledValue


@dataclass
class TreeSelectHandlers:
    """Callbacks notified by the navigation controller.

    Attributes:
        on_branch_change: ``(event, branch_node_or_none, direction)``
        on_change: ``(event, value, reason, details)``; nodes are raw,
            never TreeOption wrappers
        on_close: ``(event, reason)``
        on_highlight_change: ``(event, node_or_none, reason)``
        on_input_change: ``(event, text, reason)``
        on_open: ``(event,)``
    """

    on_branch_change: Optional[Callable[..., Any]] = None
    on_change: Optional[Callable[..., Any]] = None
    on_close: Optional[Callable[..., Any]] = None
    on_highlight_change: Optional[Callable[..., Any]] = None
    on_input_change: Optional[Callable[..., Any]] = None
    on_open: Optional[Callable[..., Any]] = None


@dataclass
class KeyEvent:
    """Key press delivered to the select input.

    Attributes:
        key: Key name, e.g. "ArrowRight"
        is_composing: True while an input method editor is composing
        default_prevented: Set when the select consumed the key
    """

    key: str
    is_composing: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def _coerce(enum_class, reason):
    if isinstance(reason, enum_class):
        return reason
    return enum_class(reason)


def _raw_option(option: Any) -> Any:
    if isinstance(option, TreeOption):
        return option.node
    return option


def _listed_parent(option: TreeOption) -> Any:
    return option.path[0] if option.path else None


class NavigationController:
    """
    Maps selection and keyboard events to branch transitions and commits.

    The controller never writes state directly; it requests changes through
    the ControlledValue holders, so a caller controlling the branch or the
    value keeps the final say. An externally forced branch is accepted as
    is, without asking the tree whether it exists.

    Args:
        branch: Active branch holder (None means root)
        value: Selected value holder
        input_value: Input text holder
        open: Menu open flag holder
        handlers: Callbacks to notify
        multiple: Whether the select holds several values
        get_option_label: Label of a node, used when the input is reset
        get_value: Returns the current resolved value option(s)
        get_up_target: Returns the branch an UP_BRANCH option leads to, or
            an awaitable of it. An UNSET answer cancels the move. Defaults
            to the first node of the option's path.
    """

    def __init__(
        self,
        branch: ControlledValue,
        value: ControlledValue,
        input_value: ControlledValue,
        open: ControlledValue,
        handlers: Optional[TreeSelectHandlers] = None,
        multiple: bool = False,
        get_option_label: Callable[[Any], str] = str,
        get_value: Optional[Callable[[], Any]] = None,
        get_up_target: Optional[Callable[[TreeOption], Any]] = None,
    ):
        self.branch = branch
        self.value = value
        self.input_value = input_value
        self.open = open
        self.handlers = handlers or TreeSelectHandlers()
        self.multiple = multiple
        self._get_option_label = get_option_label
        self._get_value = get_value or (lambda: None)
        self._get_up_target = get_up_target or _listed_parent

        # Option under the pointer or keyboard focus
        self.highlighted: Optional[TreeOption] = None

        # Ascent waiting for a deferred parent lookup
        self.pending: Optional[asyncio.Task] = None

    @property
    def is_at_root(self) -> bool:
        return self.branch.value is None

    # === Highlight ===

    def on_highlight_change(self, event: Any, option: Optional[TreeOption], reason: Any = None) -> None:
        self.highlighted = option

        if self.handlers.on_highlight_change:
            self.handlers.on_highlight_change(event, None if option is None else option.node, reason)

    def handle_option_click(self, option: TreeOption) -> None:
        self.highlighted = option

    # === Input ===

    def on_input_change(self, event: Any, text: str, reason: Any) -> None:
        """Record new input text.

        A reset while a branch option is highlighted clears the text, or
        shows the selected value's label in single mode.
        """
        reason = _coerce(InputReason, reason)

        if (
            reason is InputReason.RESET
            and self.highlighted is not None
            and self.highlighted.is_branch
        ):
            current = self._get_value()
            if self.multiple or current is None:
                text = ""
            else:
                text = self._get_option_label(current.node)

        if self.handlers.on_input_change:
            self.handlers.on_input_change(event, text, reason)

        self.input_value.set(text)

    # === Keyboard ===

    def on_key_down(self, event: KeyEvent) -> None:
        option = self.highlighted
        if option is None or option.type is NodeType.LEAF or event.is_composing:
            return

        if event.key == "ArrowRight" and option.type is NodeType.DOWN_BRANCH:
            event.prevent_default()
            self._navigate(event, option.node, PathDirection.DOWN)
        elif event.key == "ArrowLeft" and option.type is NodeType.UP_BRANCH:
            event.prevent_default()
            self._ascend(event, option)

    # === Open / close ===

    def on_open(self, event: Any) -> None:
        if self.handlers.on_open:
            self.handlers.on_open(event)

        self.open.set(True)

    def on_close(self, event: Any, reason: Any) -> None:
        """Close the menu unless a branch option is being picked."""
        reason = _coerce(CloseReason, reason)

        if (
            reason is CloseReason.SELECT_OPTION
            and self.highlighted is not None
            and self.highlighted.is_branch
        ):
            return

        if self.handlers.on_close:
            self.handlers.on_close(event, reason)

        self.open.set(False)

    # === Value changes ===

    def on_change(self, event: Any, new_value: Any, reason: Any, details: Optional[dict] = None) -> None:
        """Handle a change requested by the select input.

        Args:
            event: Opaque event passed through to callbacks
            new_value: TreeOption (single) or list of TreeOption (multiple);
                a raw string stands for typed free solo text
            reason: ChangeReason or its string value
            details: Optional mapping with the affected ``option``

        Raises:
            ConsistencyViolation: If a selection is neither a TreeOption nor
                free solo text
        """
        self._handle_change(event, new_value, _coerce(ChangeReason, reason), details, False)

    def _handle_change(self, event, new_value, reason: ChangeReason, details, from_blur: bool) -> None:
        if reason is ChangeReason.BLUR:
            last = new_value[-1] if self.multiple else new_value
            redispatched = ChangeReason.CREATE_OPTION if isinstance(last, str) else ChangeReason.SELECT_OPTION
            self._handle_change(event, new_value, redispatched, details, True)
            return

        if reason is ChangeReason.SELECT_OPTION:
            selected = new_value[-1] if self.multiple else new_value
            if not isinstance(selected, TreeOption):
                raise ConsistencyViolation(f"Cannot select {selected!r}: not an option")
            if self._change_branch(event, selected):
                return
            if self.multiple:
                committed = [option.node for option in new_value]
            else:
                committed = selected.node
            self._commit(event, committed, reason, details, selected.node, from_blur)

        elif reason is ChangeReason.CREATE_OPTION:
            if self.multiple:
                *kept, text = new_value
                created = FreeSoloNode(text, self.branch.value)
                committed = [_raw_option(option) for option in kept] + [created]
            else:
                created = FreeSoloNode(new_value, self.branch.value)
                committed = created
            self._commit(event, committed, reason, details, created, from_blur)

        else:
            # Remove and clear
            option = _raw_option(details.get('option')) if details else None
            committed = [item.node for item in new_value] if self.multiple else None
            self._commit(event, committed, reason, details, option, from_blur)

    def _commit(self, event, committed, reason: ChangeReason, details, option, from_blur: bool) -> None:
        if self.handlers.on_change:
            reported = ChangeReason.BLUR if from_blur else reason
            if details is not None:
                details = {**details, 'option': option}
            self.handlers.on_change(event, committed, reported, details)

        self.value.set(committed)

    def _change_branch(self, event: Any, option: TreeOption) -> bool:
        if option.type is NodeType.UP_BRANCH:
            self.highlighted = option
            self._ascend(event, option)
            return True

        if option.type is NodeType.DOWN_BRANCH:
            self.highlighted = option
            self._navigate(event, option.node, PathDirection.DOWN)
            return True

        return False

    def _ascend(self, event: Any, option: TreeOption) -> None:
        target = self._get_up_target(option)
        if not is_deferred(target):
            if target is not UNSET:
                self._navigate(event, target, PathDirection.UP)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            discard(target)
            raise RuntimeError("Resolving the parent branch needs a running event loop") from None
        self.pending = loop.create_task(self._ascend_later(event, target))

    async def _ascend_later(self, event: Any, target: Any) -> None:
        parent = await target
        if parent is not UNSET:
            self._navigate(event, parent, PathDirection.UP)

    def _navigate(self, event: Any, node: Optional[Any], direction: PathDirection) -> None:
        self.on_input_change(event, "", InputReason.RESET)

        if self.handlers.on_branch_change:
            self.handlers.on_branch_change(event, node, direction)

        self.branch.set(node)
