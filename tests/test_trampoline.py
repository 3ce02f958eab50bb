"""Tests for the sync/async trampoline."""

import asyncio
import inspect
import pytest

from dazzletreeselect.core.trampoline import Await, Deferred, Done, discard, gather, is_deferred, run, then


async def later(value, delay=0):
    await asyncio.sleep(delay)
    return value


async def fail_later(error):
    await asyncio.sleep(0)
    raise error


def countdown(start, lookup):
    """Step sequence collecting values until the lookup answers None."""
    seen = []

    def visit(value):
        if value is None:
            return Done(seen)
        seen.append(value)
        return Await(lookup(value), visit)

    return run(Await(lookup(start), visit))


def sync_lookup(value):
    return value - 1 if value > 1 else None


def async_lookup(value):
    return later(value - 1 if value > 1 else None)


def test_sync_sequence_returns_plain_value():
    result = countdown(4, sync_lookup)
    assert not is_deferred(result)
    assert result == [3, 2, 1]


def test_done_without_suspension():
    assert run(Done('ready')) == 'ready'


def test_deep_sync_sequence_does_not_recurse():
    """Synchronous steps unwind in a loop, not on the call stack."""
    result = countdown(5000, sync_lookup)
    assert len(result) == 4999


@pytest.mark.asyncio
async def test_async_sequence_returns_deferred():
    result = countdown(4, async_lookup)
    assert isinstance(result, Deferred)
    assert await result == [3, 2, 1]


@pytest.mark.asyncio
async def test_mixed_sequence_only_suspends_when_needed():
    def mixed(value):
        # Only the odd values are deferred
        answer = value - 1 if value > 1 else None
        return later(answer) if value % 2 else answer

    result = countdown(5, mixed)
    assert is_deferred(result)
    assert await result == [4, 3, 2, 1]


def test_sync_failure_raises_immediately():
    def broken(value):
        raise KeyError(value)

    with pytest.raises(KeyError):
        countdown(3, broken)


@pytest.mark.asyncio
async def test_async_failure_raises_on_await():
    result = run(Await(fail_later(LookupError("gone")), lambda value: Done(value)))
    with pytest.raises(LookupError, match="gone"):
        await result


def test_then_sync():
    assert then(20, lambda value: value + 1) == 21


@pytest.mark.asyncio
async def test_then_async():
    assert await then(later(20), lambda value: value + 1) == 21


def test_gather_all_immediate():
    result = gather([1, 2, 3])
    assert result == [1, 2, 3]
    assert not is_deferred(result)


@pytest.mark.asyncio
async def test_gather_preserves_input_order():
    # The first value finishes last
    result = gather([later('slow', 0.05), 'now', later('fast', 0)])
    assert is_deferred(result)
    assert await result == ['slow', 'now', 'fast']


@pytest.mark.asyncio
async def test_gather_runs_deferred_values_concurrently():
    second_started = asyncio.Event()

    async def first():
        await asyncio.wait_for(second_started.wait(), timeout=1)
        return 'first'

    async def second():
        second_started.set()
        return 'second'

    assert await gather([first(), second()]) == ['first', 'second']


@pytest.mark.asyncio
async def test_gather_propagates_failure():
    with pytest.raises(ValueError):
        await gather([later(1), fail_later(ValueError("bad"))])


def test_closing_unawaited_result_closes_pending_lookup():
    pending = later('never')
    result = run(Await(pending, lambda value: Done(value)))

    result.close()
    assert inspect.getcoroutinestate(pending) == inspect.CORO_CLOSED


def test_closing_gathered_result_closes_every_value():
    first, second = later(1), later(2)
    result = gather([first, 'now', second])

    discard(result)
    assert inspect.getcoroutinestate(first) == inspect.CORO_CLOSED
    assert inspect.getcoroutinestate(second) == inspect.CORO_CLOSED


def test_discard_ignores_plain_values():
    discard(['a', 'b'])
    discard(None)


@pytest.mark.asyncio
async def test_deferred_result_is_awaited_once():
    result = then(later(1), lambda value: value + 1)
    assert await result == 2
    with pytest.raises(RuntimeError, match="already awaited"):
        await result
