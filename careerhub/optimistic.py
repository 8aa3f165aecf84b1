"""Optimistic list updates as a pure reducer, plus a small store around it.

The reducer never talks to the network. Each mutation is applied under a
mutation id and later either committed (optionally swapping in the server's
copy of the item) or rolled back, which reverses only that mutation.
"""
from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from careerhub.errors import ApiError
from careerhub.log import get_logger

log = get_logger(__name__)

T = TypeVar("T")
KeyFn = Callable[[Any], str]


def item_id(item: Any) -> str:
    return item.id


# ── Operations ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Insert:
    item: Any
    at_start: bool = True


@dataclass(frozen=True)
class Replace:
    item: Any


@dataclass(frozen=True)
class Remove:
    key: str


Op = Union[Insert, Replace, Remove]


# ── Actions ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Loaded:
    items: tuple


@dataclass(frozen=True)
class Failed:
    error: str


@dataclass(frozen=True)
class Apply:
    mutation_id: str
    op: Op


@dataclass(frozen=True)
class Commit:
    mutation_id: str
    item: Any = None


@dataclass(frozen=True)
class Rollback:
    mutation_id: str
    error: str


Action = Union[Loaded, Failed, Apply, Commit, Rollback]


@dataclass(frozen=True)
class _Undo:
    op: Op
    key: str
    index: int
    previous: Any


@dataclass(frozen=True)
class ListState(Generic[T]):
    items: tuple = ()
    loaded: bool = False
    error: Optional[str] = None
    pending: dict = field(default_factory=dict)


def _index_of(items: tuple, key: str, key_fn: KeyFn) -> int:
    for i, it in enumerate(items):
        if key_fn(it) == key:
            return i
    return -1


def _apply(state: ListState, action: Apply, key_fn: KeyFn) -> ListState:
    op = action.op
    items = list(state.items)
    if isinstance(op, Insert):
        key = key_fn(op.item)
        index = 0 if op.at_start else len(items)
        items.insert(index, op.item)
        undo = _Undo(op, key, index, None)
    elif isinstance(op, Replace):
        key = key_fn(op.item)
        index = _index_of(state.items, key, key_fn)
        if index < 0:
            return state
        undo = _Undo(op, key, index, items[index])
        items[index] = op.item
    else:
        key = op.key
        index = _index_of(state.items, key, key_fn)
        if index < 0:
            return state
        undo = _Undo(op, key, index, items.pop(index))
    pending = dict(state.pending)
    pending[action.mutation_id] = undo
    return replace(state, items=tuple(items), pending=pending, error=None)


def _commit(state: ListState, action: Commit, key_fn: KeyFn) -> ListState:
    pending = dict(state.pending)
    undo = pending.pop(action.mutation_id, None)
    if undo is None:
        return state
    items = list(state.items)
    if action.item is not None and not isinstance(undo.op, Remove):
        # the server copy replaces the optimistic one (temp ids included)
        index = _index_of(state.items, undo.key, key_fn)
        if index >= 0:
            items[index] = action.item
    return replace(state, items=tuple(items), pending=pending)


def _rollback(state: ListState, action: Rollback, key_fn: KeyFn) -> ListState:
    pending = dict(state.pending)
    undo = pending.pop(action.mutation_id, None)
    if undo is None:
        return replace(state, error=action.error)
    items = list(state.items)
    index = _index_of(state.items, undo.key, key_fn)
    if isinstance(undo.op, Insert):
        if index >= 0:
            items.pop(index)
    elif isinstance(undo.op, Replace):
        if index >= 0:
            items[index] = undo.previous
    else:
        items.insert(min(undo.index, len(items)), undo.previous)
    return replace(state, items=tuple(items), pending=pending, error=action.error)


def reduce(state: ListState, action: Action, key: KeyFn = item_id) -> ListState:
    """(state, action) -> state. Pure; safe to unit-test without a network."""
    if isinstance(action, Loaded):
        return ListState(items=tuple(action.items), loaded=True)
    if isinstance(action, Failed):
        return replace(state, error=action.error)
    if isinstance(action, Apply):
        return _apply(state, action, key)
    if isinstance(action, Commit):
        return _commit(state, action, key)
    if isinstance(action, Rollback):
        return _rollback(state, action, key)
    raise TypeError(f"unknown action {action!r}")


# ── Store ────────────────────────────────────────────────────────────────


class OptimisticList(Generic[T]):
    """Holds a :class:`ListState` and runs mutations against a remote call.

    After :meth:`close` every dispatch is ignored, so a response arriving
    for a controller the caller has discarded cannot touch its state.
    """

    _ids = itertools.count(1)

    def __init__(self, key: KeyFn = item_id, name: str = "list") -> None:
        self.key = key
        self.name = name
        self._state: ListState = ListState()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def state(self) -> ListState:
        return self._state

    @property
    def items(self) -> list:
        return list(self._state.items)

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, key: str) -> Any:
        for it in self._state.items:
            if self.key(it) == key:
                return it
        return None

    def close(self) -> None:
        self._closed = True

    def dispatch(self, action: Action) -> ListState:
        with self._lock:
            if self._closed:
                log.debug("[%s] ignoring %s after close", self.name, type(action).__name__)
                return self._state
            self._state = reduce(self._state, action, self.key)
            return self._state

    def fail(self, error: str) -> None:
        """Record an error without touching the items."""
        self.dispatch(Failed(error))

    def next_mutation_id(self) -> str:
        return f"{self.name}-{next(self._ids)}"

    def load(self, fetch: Callable[[], list]) -> bool:
        try:
            items = fetch()
        except ApiError as exc:
            log.error("[%s] load failed: %s", self.name, exc)
            self.dispatch(Failed(str(exc)))
            return False
        except (TypeError, ValueError, KeyError, OverflowError) as exc:
            # response parsed as JSON but not into our models
            log.error("[%s] unreadable response: %r", self.name, exc)
            self.dispatch(Failed(f"Failed to load {self.name}"))
            return False
        self.dispatch(Loaded(tuple(items)))
        return True

    def mutate(self, op: Op, call: Callable[[], Any]) -> bool:
        """Apply *op* now, then confirm with *call*; roll back if it raises.

        *call* may return the server's copy of the item to commit in place of
        the optimistic one.
        """
        mutation_id = self.next_mutation_id()
        self.dispatch(Apply(mutation_id, op))
        try:
            result = call()
        except ApiError as exc:
            log.error("[%s] %s rolled back: %s", self.name, type(op).__name__.lower(), exc)
            self.dispatch(Rollback(mutation_id, str(exc)))
            return False
        self.dispatch(Commit(mutation_id, result))
        return True

    def confirm_then_remove(self, key: str, call: Callable[[], Any]) -> bool:
        """Remove *key* only once *call* succeeds; on failure leave the list as is."""
        try:
            call()
        except ApiError as exc:
            log.error("[%s] remove %s failed: %s", self.name, key, exc)
            self.dispatch(Failed(str(exc)))
            return False
        mutation_id = self.next_mutation_id()
        self.dispatch(Apply(mutation_id, Remove(key)))
        self.dispatch(Commit(mutation_id))
        return True
