#!/usr/bin/env python3
"""
Comparison between a synchronous and an asynchronous tree source.

This example demonstrates:
- The same TreeSelect code serving both kinds of source
- Identical options from both
- Concurrent classification of children when lookups are slow
"""

import asyncio
import sys
import time
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from dazzletreeselect import TreeSelect
from dazzletreeselect.testing import AsyncDictTree, DictTree

CATEGORIES = {
    None: ['Hardware', 'Software'],
    'Hardware': ['CPU', 'GPU', 'Memory', 'Storage', 'Network'],
    'Storage': ['SSD', 'HDD'],
    'Network': ['Ethernet', 'Wi-Fi'],
    'Software': ['Drivers', 'Firmware'],
}

LATENCY = 0.05


def show(select: TreeSelect, options) -> None:
    for option in options:
        print(f"    {option.type.name:<12} {select.get_option_label(option)}")


def sync_listing():
    """List the Hardware branch from an in-memory tree."""
    start_time = time.perf_counter()

    select = TreeSelect(DictTree(CATEGORIES), default_branch='Hardware')
    options = select.options

    return select, options, time.perf_counter() - start_time


async def async_listing():
    """List the Hardware branch from a tree where every lookup takes LATENCY seconds."""
    start_time = time.perf_counter()

    nodes = [node for kids in CATEGORIES.values() for node in kids]
    tree = AsyncDictTree(CATEGORIES, delays={node: LATENCY for node in nodes})
    select = TreeSelect(tree, default_branch='Hardware')

    # Placeholder while loading: just the way back up
    print(f"  While loading: {[str(option) for option in select.options]}")
    options = await select.load_options()

    return select, options, time.perf_counter() - start_time


async def main():
    print("Synchronous source:")
    select, sync_options, sync_elapsed = sync_listing()
    show(select, sync_options)
    print(f"  Took {sync_elapsed * 1000:.2f} ms")

    print("\nAsynchronous source:")
    select, async_options, async_elapsed = await async_listing()
    show(select, async_options)

    sequential = LATENCY * (len(CATEGORIES['Hardware']) + 2)
    print(f"  Took {async_elapsed * 1000:.0f} ms (one lookup after another would take ~{sequential * 1000:.0f} ms)")

    same = [(o.type, str(o.node)) for o in sync_options] == [(o.type, str(o.node)) for o in async_options]
    print(f"\nIdentical options: {same}")


if __name__ == "__main__":
    asyncio.run(main())
