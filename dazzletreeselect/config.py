"""Configuration system for DazzleTreeSelect.

This module defines the settings a tree select is built with, together with
the enumerations used across the engine to classify options and describe
navigation and change events.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeType(Enum):
    """How an option participates in the select menu."""
    LEAF = "leaf"                # Selectable value
    DOWN_BRANCH = "down_branch"  # Descend into the node's children
    UP_BRANCH = "up_branch"      # Ascend to the parent of the active branch


class PathDirection(Enum):
    """Direction of a branch change along the tree.

    UP moves toward the ancestors, DOWN toward the descendants.
    """
    UP = "up"
    DOWN = "down"


class ChangeReason(Enum):
    """Why the selected value changed."""
    SELECT_OPTION = "select"
    CREATE_OPTION = "create"
    BLUR = "blur"
    REMOVE_OPTION = "remove"
    CLEAR = "clear"


class InputReason(Enum):
    """Why the input text changed."""
    INPUT = "input"
    RESET = "reset"
    CLEAR = "clear"


class CloseReason(Enum):
    """Why the menu was asked to close."""
    SELECT_OPTION = "select"
    CREATE_OPTION = "create"
    REMOVE_OPTION = "remove"
    ESCAPE = "escape"
    BLUR = "blur"
    TOGGLE_INPUT = "toggle"


@dataclass
class TreeSelectConfig:
    """Settings for a TreeSelect instance.

    Attributes:
        multiple: Hold a list of values instead of a single value
        free_solo: Allow values typed by the user that are not tree nodes
        branch_delimiter: Separator used by the default path label
        max_path_depth: Maximum ancestor chain length before the walk is
            treated as a cycle. None trusts the parent lookup to terminate.
        cache_max_size: Maximum number of memoized resolutions
        cache_ttl: Time-to-live for memoized resolutions in seconds
    """

    multiple: bool = False
    free_solo: bool = False
    branch_delimiter: str = " > "
    max_path_depth: Optional[int] = None
    cache_max_size: int = 128
    cache_ttl: float = 300.0

    def validate(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.max_path_depth is not None and self.max_path_depth < 0:
            raise ValueError("max_path_depth cannot be negative")

        if self.cache_max_size <= 0:
            raise ValueError("cache_max_size must be positive")

        if self.cache_ttl <= 0:
            raise ValueError("cache_ttl must be positive")
