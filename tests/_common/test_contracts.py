"""Contract tests ensuring sync and async sources give identical results.

These tests verify that a tree answered immediately and the same tree
answered through awaitables:
1. List the same options in the same order
2. Resolve the same value paths
3. Fail with the same error types
4. Filter options the same way
"""

import pytest

from dazzletreeselect import (
    ClassificationFailure,
    LookupFailure,
    TreeSelect,
    TreeSelectConfig,
    get_options,
    get_options_async,
    get_value,
    get_value_async,
)
from dazzletreeselect.testing import AsyncDictTree, DictTree

STANDARD_TREE = {
    None: ['docs', 'src', 'README'],
    'docs': ['guide', 'api'],
    'src': ['core', 'main.py'],
    'core': ['engine.py', 'cache.py'],
    'guide': [],
}


def describe(options):
    return [(option.type.name, str(option.node), [str(node) for node in option.path]) for option in options]


def trees(**kwargs):
    """The standard tree answered immediately, mixed, and fully deferred."""
    return [
        DictTree(STANDARD_TREE, **kwargs),
        DictTree(STANDARD_TREE, deferred=('get_children',), **kwargs),
        DictTree(STANDARD_TREE, deferred=('get_parent', 'is_branch_selectable'), **kwargs),
        AsyncDictTree(STANDARD_TREE, **kwargs),
    ]


class TestOptionsContract:

    @pytest.mark.asyncio
    @pytest.mark.parametrize('branch', [None, 'docs', 'src', 'core', 'guide'])
    async def test_same_options(self, branch):
        expected = describe(get_options(branch, DictTree(STANDARD_TREE, selectable=['src'])))

        for tree in trees(selectable=['src']):
            assert describe(await get_options_async(branch, tree)) == expected

    @pytest.mark.asyncio
    async def test_same_failures(self):
        for tree in trees(errors={('get_children', 'core'): OSError("offline")}):
            with pytest.raises(LookupFailure):
                await get_options_async('core', tree)
            with pytest.raises(ClassificationFailure):
                await get_options_async('src', tree)


class TestValueContract:

    @pytest.mark.asyncio
    async def test_same_paths(self):
        value = ['engine.py', 'api', 'README']
        expected = describe(get_value(value, DictTree(STANDARD_TREE), multiple=True))
        assert expected == [
            ('LEAF', 'engine.py', ['core', 'src']),
            ('LEAF', 'api', ['docs']),
            ('LEAF', 'README', []),
        ]

        for tree in trees():
            assert describe(await get_value_async(value, tree, multiple=True)) == expected


class TestFilterContract:

    @pytest.mark.asyncio
    async def test_same_filtered_options(self):
        config = TreeSelectConfig(free_solo=True)
        sync_select = TreeSelect(DictTree(STANDARD_TREE), config=config, default_branch='src')
        sync_select.input_value = 'co'
        expected = describe(sync_select.filter_options())
        assert expected == [
            ('UP_BRANCH', 'src', []),
            ('DOWN_BRANCH', 'core', ['src']),
            ('LEAF', 'co', ['src']),
        ]

        for tree in trees():
            select = TreeSelect(tree, config=config, default_branch='src')
            select.input_value = 'co'
            await select.load_options()
            assert describe(select.filter_options()) == expected
