"""Tests for the keyed single-flight resolution cache."""

import asyncio
import gc
import inspect
import weakref

import pytest

from dazzletreeselect import (
    CallbackPolicy,
    CollectErrorsPolicy,
    Resolution,
    ResolutionCache,
)
from dazzletreeselect.caching import IdentityKey


class TestImmediateResults:

    def test_immediate_result_is_stored(self):
        cache = ResolutionCache()
        calls = []

        def producer():
            calls.append(1)
            return ['a', 'b']

        first = cache.get('k', producer)
        second = cache.get('k', producer)

        assert first == Resolution(data=['a', 'b'])
        assert second.data is first.data
        assert len(calls) == 1
        assert cache.cache_hits == 1
        assert cache.cache_misses == 1

    def test_keys_are_independent(self):
        cache = ResolutionCache()
        assert cache.get(('options', 1), lambda: 'one').data == 'one'
        assert cache.get(('options', 2), lambda: 'two').data == 'two'

    def test_none_is_a_result(self):
        cache = ResolutionCache()
        cache.get('k', lambda: None)
        assert cache.get('k', lambda: 'other').data is None

    def test_invalidate_single_key(self):
        cache = ResolutionCache()
        cache.get('a', lambda: 1)
        cache.get('b', lambda: 2)
        cache.invalidate('a')

        assert cache.get('a', lambda: 10).data == 10
        assert cache.get('b', lambda: 20).data == 2

    def test_invalidate_everything(self):
        cache = ResolutionCache()
        cache.get('a', lambda: 1)
        cache.invalidate()
        assert cache.get('a', lambda: 10).data == 10

    def test_max_size_bounds_storage(self):
        cache = ResolutionCache(max_size=2)
        for key in range(5):
            cache.get(key, lambda key=key: key)
        assert cache.get_cache_stats()['cache_size'] == 2

    def test_deferred_without_loop_raises(self):
        cache = ResolutionCache()

        async def producer():
            return 1

        with pytest.raises(RuntimeError, match="running event loop"):
            cache.get('k', producer)
        assert not cache.is_loading('k')

    def test_deferred_without_loop_is_closed(self):
        cache = ResolutionCache()
        started = []

        async def lookup():
            return 1

        def producer():
            started.append(lookup())
            return started[-1]

        with pytest.raises(RuntimeError):
            cache.get('k', producer)
        assert inspect.getcoroutinestate(started[0]) == inspect.CORO_CLOSED


class TestImmediateFailures:

    def test_fail_fast_raises(self):
        cache = ResolutionCache()

        def producer():
            raise KeyError('boom')

        with pytest.raises(KeyError):
            cache.get('k', producer)

        # Remembered, not retried
        with pytest.raises(KeyError):
            cache.get('k', lambda: 'fine')
        assert isinstance(cache.error_for('k'), KeyError)

    def test_callback_policy_reports_once(self):
        seen = []
        cache = ResolutionCache(error_policy=CallbackPolicy(seen.append))
        error = ValueError('bad')

        def producer():
            raise error

        first = cache.get('k', producer)
        second = cache.get('k', producer)

        assert first == Resolution(error=error)
        assert second == Resolution(error=error)
        assert seen == [error]

    def test_invalidate_retries_failure(self):
        policy = CollectErrorsPolicy()
        cache = ResolutionCache(error_policy=policy)

        def producer():
            raise ValueError('bad')

        cache.get('k', producer)
        cache.invalidate('k')
        assert cache.get('k', lambda: 'ok').data == 'ok'
        assert len(policy.errors) == 1
        assert policy.errors[0]['operation'] == 'k'

    def test_status_read_reports_instead_of_raising(self):
        cache = ResolutionCache()
        error = KeyError('boom')

        def producer():
            raise error

        # Fresh failure
        assert cache.get('k', producer, raise_errors=False) == Resolution(error=error)
        # Stored failure
        assert cache.get('k', producer, raise_errors=False) == Resolution(error=error)
        with pytest.raises(KeyError):
            cache.get('k', producer)

    def test_status_read_still_notifies_callback(self):
        seen = []
        cache = ResolutionCache(error_policy=CallbackPolicy(seen.append))
        error = ValueError('bad')

        def producer():
            raise error

        assert cache.get('k', producer, raise_errors=False).error is error
        assert seen == [error]

    def test_peek_starts_nothing(self):
        cache = ResolutionCache()
        assert cache.peek('k') == Resolution()
        assert cache.get_cache_stats()['cache_misses'] == 0

        cache.get('k', lambda: 'v')
        assert cache.peek('k') == Resolution(data='v')

        def producer():
            raise KeyError('boom')

        with pytest.raises(KeyError):
            cache.get('bad', producer)
        assert isinstance(cache.peek('bad').error, KeyError)


class TestDeferredResults:

    @pytest.mark.asyncio
    async def test_single_flight(self):
        cache = ResolutionCache()
        release = asyncio.Event()
        calls = []

        async def producer():
            calls.append(1)
            await release.wait()
            return 'done'

        assert cache.get('k', producer) == Resolution(loading=True)
        assert cache.get('k', producer) == Resolution(loading=True)
        assert cache.is_loading('k')

        waiters = asyncio.gather(cache.wait('k'), cache.wait('k'))
        await asyncio.sleep(0)
        release.set()

        assert await waiters == ['done', 'done']
        assert calls == [1]
        assert cache.concurrent_waits == 1
        assert not cache.is_loading('k')
        assert cache.get('k', producer) == Resolution(data='done')

    @pytest.mark.asyncio
    async def test_resolve(self):
        cache = ResolutionCache()

        async def producer():
            await asyncio.sleep(0)
            return 42

        assert await cache.resolve('k', producer) == 42
        assert await cache.resolve('k', producer) == 42
        assert cache.cache_hits == 1

    @pytest.mark.asyncio
    async def test_plain_awaitable_is_accepted(self):
        cache = ResolutionCache()
        future = asyncio.get_running_loop().create_future()

        assert cache.get('k', lambda: future).loading
        future.set_result('value')
        assert await cache.wait('k') == 'value'

    @pytest.mark.asyncio
    async def test_fail_fast_propagates_from_wait(self):
        cache = ResolutionCache()

        async def producer():
            raise LookupError('gone')

        cache.get('k', producer)
        with pytest.raises(LookupError):
            await cache.wait('k')
        with pytest.raises(LookupError):
            cache.get('k', producer)

    @pytest.mark.asyncio
    async def test_collected_failure_resolves_to_none(self):
        policy = CollectErrorsPolicy()
        cache = ResolutionCache(error_policy=policy)

        async def producer():
            raise LookupError('gone')

        cache.get('k', producer)
        assert await cache.wait('k') is None

        resolution = cache.get('k', producer)
        assert isinstance(resolution.error, LookupError)
        assert not resolution.loading
        assert policy.get_statistics()['total_errors'] == 1

    @pytest.mark.asyncio
    async def test_wait_for_unknown_key(self):
        cache = ResolutionCache()
        assert await cache.wait('missing') is None

    @pytest.mark.asyncio
    async def test_stats(self):
        cache = ResolutionCache(max_size=10, ttl=60)
        await cache.resolve('a', lambda: 1)
        cache.get('a', lambda: 1)

        stats = cache.get_cache_stats()
        assert stats['cache_hits'] == 1
        assert stats['cache_misses'] == 1
        assert stats['hit_rate'] == 0.5
        assert stats['max_size'] == 10
        assert stats['ttl'] == 60
        assert stats['in_flight'] == 0

    @pytest.mark.asyncio
    async def test_peek_in_flight(self):
        cache = ResolutionCache()
        cache.get('k', lambda: asyncio.sleep(0, 'v'))

        assert cache.peek('k') == Resolution(loading=True)
        assert await cache.wait('k') == 'v'
        assert cache.peek('k') == Resolution(data='v')


class TestIdentityKey:

    def test_matches_by_identity(self):
        first, second = ['a'], ['a']
        assert IdentityKey(first) == IdentityKey(first)
        assert IdentityKey(first) != IdentityKey(second)
        assert IdentityKey(None) == IdentityKey(None)

    def test_unhashable_objects_are_separate_keys(self):
        cache = ResolutionCache()
        first, second = ['a'], ['a']

        assert cache.get(('options', IdentityKey(first)), lambda: 1).data == 1
        assert cache.get(('options', IdentityKey(second)), lambda: 2).data == 2
        assert cache.get(('options', IdentityKey(first)), lambda: 3).data == 1

    def test_stored_key_keeps_object_alive(self):
        class Node:
            pass

        cache = ResolutionCache()
        node = Node()
        ref = weakref.ref(node)
        cache.get(('options', IdentityKey(node)), lambda: 'stored')

        # The id of a live object cannot be taken by a new one
        del node
        gc.collect()
        assert ref() is not None

        cache.invalidate()
        gc.collect()
        assert ref() is None
