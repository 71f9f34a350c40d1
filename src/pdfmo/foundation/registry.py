"""
Name tables shared by the harness: solver kinds, option shapes and problem
constructors all live in a `Registry`.

A registry is an ordered name -> item mapping that refuses silent overwrites
and can suggest near-miss names (case-insensitive) when a lookup fails.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from difflib import get_close_matches
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_MISSING: Any = object()


class Registry(Generic[T]):
    """
    Named items of one kind, e.g. ``Registry[SolverKind]("solver_kinds")``.

    ``register`` doubles as a decorator when the item is omitted.
    """

    def __init__(self, name: str = "registry") -> None:
        self._name = name
        self._items: dict[str, T] = {}

    @property
    def name(self) -> str:
        return self._name

    def register(self, key: str, item: T | None = None, *, override: bool = False) -> Callable[[T], T] | T:
        """
        Add `item` under `key`.

        Raises ValueError when `key` is taken, unless `override` is set.
        Without `item`, returns a decorator that registers its target.
        """

        def _add(obj: T) -> T:
            if not override and key in self._items:
                raise ValueError(f"'{key}' is already registered in {self._name}.")
            self._items[key] = obj
            return obj

        return _add if item is None else _add(item)

    def similar(self, key: str, *, n: int = 3, cutoff: float = 0.6) -> list[str]:
        """Registered names close to `key`, best match first."""
        if not key or not self._items:
            return []
        lookup = {name.lower(): name for name in self._items}
        return [lookup[match] for match in get_close_matches(key.lower(), lookup, n=n, cutoff=cutoff)]

    def get(self, key: str, default: Any = _MISSING) -> T:
        if key in self._items:
            return self._items[key]
        if default is not _MISSING:
            return default
        hint = self.similar(key)
        message = f"'{key}' is not registered in {self._name}."
        if hint:
            message += f" Did you mean: {', '.join(hint)}?"
        raise KeyError(message)

    def copy(self, name: str | None = None) -> "Registry[T]":
        """Independent registry with the same items; later registrations do not leak back."""
        clone: Registry[T] = Registry(name or self._name)
        clone._items = dict(self._items)
        return clone

    def list(self) -> list[str]:
        return sorted(self._items)

    def __getitem__(self, key: str) -> T:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["Registry"]
