"""
Keyed single-flight cache for engine resolutions.

The engine's results are plain values for synchronous sources and
awaitables otherwise. This cache turns either into a stable
``Resolution(data, loading, error)`` per dependency key: immediate results
are stored at once, deferred results run as one task per key, and every
request for a key in flight observes that same task.
"""

import asyncio
import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

from cachetools import TTLCache

from ..core.trampoline import discard, is_deferred
from ..error_policies import ErrorPolicy, FailFastPolicy


@dataclass(frozen=True)
class Resolution:
    """Snapshot of a keyed resolution."""

    data: Any = None
    loading: bool = False
    error: Optional[Exception] = None


class ResolutionCache:
    """
    Single-flight memoization of resolutions keyed by their dependencies.

    Uses Future-based coordination so that one key never has two
    computations in flight. Results are kept in a TTLCache; failures are
    remembered per key and are not retried until the key is invalidated.

    Example:
        cache = ResolutionCache()
        key = ("options", IdentityKey(branch))
        resolution = cache.get(key, lambda: build_options(branch, adapter))
        if resolution.loading:
            options = await cache.wait(key)
    """

    def __init__(
        self,
        max_size: int = 128,
        ttl: float = 300.0,
        error_policy: Optional[ErrorPolicy] = None,
    ):
        """
        Initialize the resolution cache.

        Args:
            max_size: Maximum number of stored results
            ttl: Time-to-live for stored results in seconds
            error_policy: What to do with failures (defaults to FailFastPolicy)
        """
        self._cache = TTLCache(maxsize=max_size, ttl=ttl)
        self._errors = TTLCache(maxsize=max_size, ttl=ttl)
        self._in_flight: Dict[Hashable, asyncio.Task] = {}
        self._policy = error_policy or FailFastPolicy()

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0
        self.concurrent_waits = 0

    @property
    def error_policy(self) -> ErrorPolicy:
        return self._policy

    def get(self, key: Hashable, producer: Callable[[], Any], raise_errors: bool = True) -> Resolution:
        """
        Get the resolution for ``key``, starting ``producer`` if needed.

        Args:
            key: Hashable dependency key
            producer: Zero-argument callable returning a value or an awaitable
            raise_errors: When False, a failure is reported in the returned
                Resolution even if the policy propagates failures

        Returns:
            Resolution snapshot

        Raises:
            Exception: A failure of this key when the policy propagates
            RuntimeError: If the producer is deferred and no event loop is running
        """
        if key in self._cache:
            self.cache_hits += 1
            return Resolution(data=self._cache[key])

        if key in self._in_flight:
            self.concurrent_waits += 1
            return Resolution(loading=True)

        if key in self._errors:
            error = self._errors[key]
            if raise_errors and self._policy.propagate:
                raise error
            return Resolution(error=error)

        self.cache_misses += 1

        try:
            result = producer()
        except Exception as e:
            self._errors[key] = e
            if raise_errors or not self._policy.propagate:
                self._policy.handle(e, _operation(key))
            return Resolution(error=e)

        if not is_deferred(result):
            self._cache[key] = result
            return Resolution(data=result)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            discard(result)
            raise RuntimeError(
                "Deferred lookups need a running event loop; "
                "use the async API (e.g. await load_options()) from a coroutine"
            ) from None

        if not inspect.iscoroutine(result):
            result = _await(result)
        task = loop.create_task(result)
        self._in_flight[key] = task
        task.add_done_callback(functools.partial(self._settle, key))
        return Resolution(loading=True)

    async def wait(self, key: Hashable) -> Any:
        """
        Wait for the resolution of ``key``.

        Returns:
            The resolved data, or None if the key failed and the policy
            does not propagate failures.

        Raises:
            Exception: The failure of this key when the policy propagates
        """
        task = self._in_flight.get(key)
        if task is not None:
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                raise
            except Exception:
                if self._policy.propagate:
                    raise
                return None

        if key in self._cache:
            return self._cache[key]

        if key in self._errors and self._policy.propagate:
            raise self._errors[key]
        return None

    async def resolve(self, key: Hashable, producer: Callable[[], Any]) -> Any:
        """Get the data for ``key``, waiting for it if it is deferred."""
        resolution = self.get(key, producer)
        if resolution.loading:
            return await self.wait(key)
        return resolution.data

    def peek(self, key: Hashable) -> Resolution:
        """Current resolution of ``key`` without starting anything or raising."""
        if key in self._cache:
            return Resolution(data=self._cache[key])
        if key in self._in_flight:
            return Resolution(loading=True)
        return Resolution(error=self._errors.get(key))

    def is_loading(self, key: Hashable) -> bool:
        return key in self._in_flight

    def error_for(self, key: Hashable) -> Optional[Exception]:
        return self._errors.get(key)

    def _settle(self, key: Hashable, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

        if task.cancelled():
            return

        error = task.exception()
        if error is None:
            self._cache[key] = task.result()
            return

        self._errors[key] = error
        # Propagating policies surface the error through wait()
        if not self._policy.propagate:
            self._policy.handle(error, _operation(key))

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """
        Forget stored results and failures.

        Args:
            key: Key to forget, or None to forget everything. In-flight
                computations are left to finish.
        """
        if key is None:
            self._cache.clear()
            self._errors.clear()
            return
        self._cache.pop(key, None)
        self._errors.pop(key, None)

    def get_cache_stats(self) -> dict:
        """
        Get cache statistics for monitoring and debugging.
        """
        total_requests = self.cache_hits + self.cache_misses
        hit_rate = self.cache_hits / total_requests if total_requests > 0 else 0

        return {
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
            'hit_rate': hit_rate,
            'concurrent_waits': self.concurrent_waits,
            'in_flight': len(self._in_flight),
            'cache_size': len(self._cache),
            'max_size': self._cache.maxsize,
            'ttl': self._cache.ttl,
        }


class IdentityKey:
    """Cache key part that matches its object by identity.

    Holds a reference to the object, so the id it hashes on cannot be
    reused by another object while an entry keyed on it is stored.
    Unhashable nodes are supported.
    """

    __slots__ = ('obj',)

    def __init__(self, obj: Any):
        self.obj = obj

    def __hash__(self) -> int:
        return id(self.obj)

    def __eq__(self, other) -> bool:
        return isinstance(other, IdentityKey) and other.obj is self.obj

    def __repr__(self) -> str:
        return f"IdentityKey({self.obj!r})"


def _operation(key: Hashable) -> str:
    if isinstance(key, tuple) and key:
        return str(key[0])
    return str(key)


async def _await(awaitable):
    return await awaitable
