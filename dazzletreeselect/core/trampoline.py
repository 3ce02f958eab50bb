"""Sync/async trampoline.

Lookups supplied by the caller may answer immediately or return an
awaitable. Code that chains lookups is written once as a sequence of
``Step`` objects, and ``run`` drives it: immediate values are fed straight
back in, so an all-synchronous source yields a plain result, while the
first awaitable switches the driver into a coroutine that awaits only the
values that are actually deferred.

Example:
    def visit(parent):
        if parent is None:
            return Done(path)
        path.append(parent)
        return Await(get_parent(parent), visit)

    result = run(Await(get_parent(node), visit))
    if is_deferred(result):
        result = await result
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Iterable, List, TypeVar, Union

T = TypeVar('T')
U = TypeVar('U')

SyncOrAsync = Union[T, Awaitable[T]]


class Step:
    """One state of a step sequence."""

    __slots__ = ()


class Done(Step):
    """Final state carrying the sequence's result."""

    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"Done({self.value!r})"


class Await(Step):
    """Suspension point: resolve ``value`` then continue with ``resume``.

    Args:
        value: An immediate value or an awaitable
        resume: Called with the resolved value, returns the next Step
    """

    __slots__ = ('value', 'resume')

    def __init__(self, value: Any, resume: Callable[[Any], Step]):
        self.value = value
        self.resume = resume

    def __repr__(self) -> str:
        return f"Await({self.value!r})"


class Deferred:
    """Awaitable result of a sequence that suspended.

    Awaiting it calls ``fn(*values)`` and awaits the coroutine it returns.
    A Deferred that will never be awaited should be closed: ``close()``
    releases the deferred values it holds, so adapter coroutines started
    on its behalf are closed rather than left un-awaited.
    """

    __slots__ = ('_fn', '_values')

    def __init__(self, fn: Callable[..., Awaitable[Any]], *values: Any):
        self._fn = fn
        self._values = values

    def __await__(self):
        if self._values is None:
            raise RuntimeError("Deferred result was already awaited or closed")
        values, self._values = self._values, None
        return self._fn(*values).__await__()

    def close(self) -> None:
        values, self._values = self._values, None
        for value in values or ():
            discard(value)

    def __repr__(self) -> str:
        return f"Deferred({getattr(self._fn, '__name__', self._fn)!r})"


def is_deferred(value: Any) -> bool:
    """Check whether a value must be awaited before use."""
    return inspect.isawaitable(value)


def discard(value: Any) -> None:
    """Release a deferred value that will never be awaited.

    Coroutines and Deferred results are closed; other values are left alone.
    """
    if is_deferred(value) and callable(getattr(value, 'close', None)):
        value.close()


def run(step: Step) -> SyncOrAsync[Any]:
    """Drive a step sequence to completion.

    Returns the final value directly when every intermediate value is
    immediate. Otherwise returns a Deferred producing the final value.
    Exceptions raised by steps propagate from this call (sync path) or
    from awaiting the Deferred (async path).
    """
    while isinstance(step, Await):
        if is_deferred(step.value):
            return Deferred(_run_async, step.value, step.resume)
        step = step.resume(step.value)
    return step.value


async def _run_async(value: Any, resume: Callable[[Any], Step]) -> Any:
    step = Await(value, resume)
    while isinstance(step, Await):
        value = step.value
        if is_deferred(value):
            value = await value
        step = step.resume(value)
    return step.value


def then(value: SyncOrAsync[T], fn: Callable[[T], U]) -> SyncOrAsync[U]:
    """Apply ``fn`` to a deferred-or-immediate value."""
    return run(Await(value, lambda resolved: Done(fn(resolved))))


def gather(values: Iterable[SyncOrAsync[Any]]) -> SyncOrAsync[List[Any]]:
    """Combine deferred-or-immediate values into one, preserving order.

    Deferred values run concurrently. The result is a plain list when none
    of the values is deferred.
    """
    results = list(values)
    pending = [index for index, value in enumerate(results) if is_deferred(value)]
    if not pending:
        return results

    async def _gather(*deferred) -> List[Any]:
        resolved = await asyncio.gather(*deferred)
        for index, value in zip(pending, resolved):
            results[index] = value
        return results

    return Deferred(_gather, *(results[index] for index in pending))
