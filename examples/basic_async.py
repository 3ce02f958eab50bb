#!/usr/bin/env python3
"""
Basic async example: a folder picker over the local filesystem.

This example demonstrates:
- Writing an adapter whose lookups are coroutines
- Browsing branches with load_options()
- Selecting a file and rendering its path label
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from dazzletreeselect import NodeType, TreeSelect, TreeSelectAdapter, TreeSelectConfig


class AsyncFolderAdapter(TreeSelectAdapter):
    """Lists a directory tree without blocking the event loop.

    Options are compared by node identity, so every path is handed out
    as one Path object for the lifetime of the adapter.
    """

    def __init__(self, root: Path):
        self.root = root.resolve()
        self._nodes: Dict[str, Path] = {}

    def _node(self, path: Path) -> Path:
        return self._nodes.setdefault(str(path), path)

    async def get_children(self, node: Optional[Path]) -> Optional[List[Path]]:
        if node is None:
            return [self._node(self.root)]
        if not node.is_dir():
            return None

        loop = asyncio.get_running_loop()
        try:
            entries = await loop.run_in_executor(None, lambda: sorted(os.scandir(node), key=lambda e: e.name))
        except PermissionError:
            return []
        return [self._node(Path(entry.path)) for entry in entries if not entry.name.startswith('.')]

    def get_parent(self, node: Path) -> Optional[Path]:
        if node == self.root:
            return None
        return self._node(node.parent)

    def is_branch(self, node: Path) -> bool:
        return node.is_dir()

    def get_option_label(self, node: Path) -> str:
        return node.name or str(node)


async def main():
    """Walk into the first folders and pick the first file found."""
    root_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()

    select = TreeSelect(
        AsyncFolderAdapter(root_path),
        config=TreeSelectConfig(max_path_depth=64),
        on_branch_change=lambda event, node, direction: print(f"  {direction.value:>4} -> {node}"),
    )

    print(f"Browsing: {root_path}")
    print("-" * 50)

    for _ in range(4):
        options = await select.load_options()
        down = [option for option in options if option.type is NodeType.DOWN_BRANCH]
        leaves = [option for option in options if option.type is NodeType.LEAF]

        if leaves:
            select.on_change(None, leaves[0], 'select')
            break
        if not down:
            break
        select.on_change(None, down[0], 'select')

    value = await select.load_value()
    if value is None:
        print("\nNo file found")
        return

    print(f"\nSelected: {select.get_option_label(value)}")
    print(f"Location: {select.get_path_label(value)}")
    print(f"Cache:    {select.get_cache_stats()}")


if __name__ == "__main__":
    asyncio.run(main())
