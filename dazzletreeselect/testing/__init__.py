"""Testing utilities for DazzleTreeSelect consumers."""

from .trees import AsyncDictTree, DictTree

__all__ = ['DictTree', 'AsyncDictTree']
