"""Tests for the high-level function API."""

import inspect

import pytest

from dazzletreeselect import (
    NodeType,
    TreeSelectError,
    get_options,
    get_options_async,
    get_path,
    get_path_async,
    get_path_labels,
    get_value,
    get_value_async,
    make_adapter,
)
from dazzletreeselect.testing import AsyncDictTree, DictTree

CATALOG = {
    None: ['Books', 'Music'],
    'Books': ['Fiction', 'Poetry'],
    'Fiction': ['Novels'],
}
PARENTS = {'Books': None, 'Music': None, 'Fiction': 'Books', 'Poetry': 'Books', 'Novels': 'Fiction'}


class TrackedTree(AsyncDictTree):
    """AsyncDictTree remembering the lookup coroutines it hands out."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.started = []

    def _later(self, node, result, error):
        coroutine = super()._later(node, result, error)
        self.started.append(coroutine)
        return coroutine


class TestMakeAdapter:

    def test_defaults(self):
        adapter = make_adapter(CATALOG.get, PARENTS.get)
        assert adapter.is_branch('Books')
        assert not adapter.is_branch('Music')
        assert adapter.is_branch_selectable('Books') is False
        assert adapter.get_option_label('Books') == 'Books'

    def test_overrides(self):
        adapter = make_adapter(
            CATALOG.get,
            PARENTS.get,
            is_branch=lambda node: node == 'Music',
            is_branch_selectable=lambda node: True,
            get_option_label=str.lower,
        )
        assert adapter.is_branch('Music')
        assert adapter.is_branch_selectable('Books')
        assert adapter.get_option_label('Books') == 'books'

    def test_options_from_callables(self):
        options = get_options('Books', make_adapter(CATALOG.get, PARENTS.get))
        assert [(option.type, option.node) for option in options] == [
            (NodeType.UP_BRANCH, 'Books'),
            (NodeType.DOWN_BRANCH, 'Fiction'),
            (NodeType.LEAF, 'Poetry'),
        ]


class TestSyncApi:

    def test_get_path(self):
        tree = DictTree(CATALOG)
        assert get_path('Novels', tree) == ['Fiction', 'Books']
        assert get_path('Music', tree) == []

    def test_get_path_depth_guard(self):
        tree = DictTree(CATALOG)
        with pytest.raises(TreeSelectError):
            get_path('Novels', tree, max_depth=1)

    def test_get_value(self):
        tree = DictTree(CATALOG)
        assert get_value(None, tree) is None
        assert get_value(None, tree, multiple=True) == []

        option = get_value('Poetry', tree)
        assert option.type is NodeType.LEAF
        assert list(option.path) == ['Books']

    def test_deferred_source_rejected(self):
        tree = AsyncDictTree(CATALOG)
        with pytest.raises(TreeSelectError, match="get_options_async"):
            get_options(None, tree)
        with pytest.raises(TreeSelectError, match="get_path_async"):
            get_path('Novels', tree)
        with pytest.raises(TreeSelectError, match="get_value_async"):
            get_value('Novels', tree)

    @pytest.mark.parametrize("call", [
        lambda tree: get_options(None, tree),
        lambda tree: get_path("Novels", tree),
        lambda tree: get_value(["Novels", "Music"], tree, multiple=True),
    ], ids=["options", "path", "value"])
    def test_rejected_lookups_are_closed(self, call):
        tree = TrackedTree(CATALOG)
        with pytest.raises(TreeSelectError):
            call(tree)

        assert tree.started
        assert all(inspect.getcoroutinestate(coroutine) == inspect.CORO_CLOSED for coroutine in tree.started)

    def test_path_labels(self):
        tree = DictTree(CATALOG)
        options = get_value(['Novels', 'Music'], tree, multiple=True)
        assert get_path_labels(options) == ['Books > Fiction > Novels', 'Music']
        assert get_path_labels(options, str.upper, '/') == ['BOOKS/FICTION/NOVELS', 'MUSIC']


class TestAsyncApi:

    @pytest.mark.asyncio
    async def test_get_options_async(self):
        options = await get_options_async('Fiction', AsyncDictTree(CATALOG))
        assert [(option.type, option.node, list(option.path)) for option in options] == [
            (NodeType.UP_BRANCH, 'Fiction', ['Books']),
            (NodeType.LEAF, 'Novels', ['Fiction', 'Books']),
        ]

    @pytest.mark.asyncio
    async def test_async_variants_accept_sync_sources(self):
        tree = DictTree(CATALOG)
        assert await get_path_async('Novels', tree) == ['Fiction', 'Books']
        assert (await get_value_async('Poetry', tree)).path == ('Books',)

    @pytest.mark.asyncio
    async def test_get_path_async(self):
        assert await get_path_async('Novels', AsyncDictTree(CATALOG)) == ['Fiction', 'Books']

    @pytest.mark.asyncio
    async def test_get_value_async_keeps_order(self):
        tree = AsyncDictTree(CATALOG, delays={'Fiction': 0.02})
        options = await get_value_async(['Novels', 'Poetry'], tree, multiple=True)
        assert [option.node for option in options] == ['Novels', 'Poetry']
        assert [list(option.path) for option in options] == [['Fiction', 'Books'], ['Books']]
