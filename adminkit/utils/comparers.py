"""
Caller-supplied equality for grouping and deduplication.

``EqualityStrategy`` wraps an equivalence predicate and an optional hash
function so that sets, dicts and the helpers below compare domain objects
by the caller's logic instead of identity.

Equal elements must produce equal hashes. The strategy trusts the caller
on this: a pair that violates it may land in different hash buckets and
is then treated as distinct.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class EqualityStrategy(Generic[T]):
    """
    Pluggable equality/hash pair.

    Example:
        ```python
        by_email = EqualityStrategy(
            lambda a, b: a.email.lower() == b.email.lower(),
            lambda u: hash(u.email.lower()),
        )
        unique_users = by_email.distinct(users)
        ```
    """

    __slots__ = ("_equals", "_hash_fn")

    def __init__(
        self,
        equals: Callable[[T, T], bool],
        hash_fn: Optional[Callable[[T], int]] = None,
    ):
        self._equals = equals
        self._hash_fn = hash_fn

    def equals(self, a: T, b: T) -> bool:
        return bool(self._equals(a, b))

    def hash(self, obj: T) -> int:
        if self._hash_fn is None:
            return hash(obj)
        return self._hash_fn(obj)

    def key(self, obj: T) -> "EqualityKey[T]":
        """Wrap ``obj`` so hashing containers use this strategy."""
        return EqualityKey(obj, self)

    def distinct(self, items: Iterable[T]) -> List[T]:
        """First element of each equivalence class, in input order."""
        seen: set = set()
        result: List[T] = []
        for item in items:
            k = self.key(item)
            if k in seen:
                continue
            seen.add(k)
            result.append(item)
        return result

    def group(self, items: Iterable[T]) -> List[List[T]]:
        """Group equivalent elements; groups appear in first-seen order."""
        groups: dict = {}
        for item in items:
            groups.setdefault(self.key(item), []).append(item)
        return list(groups.values())

    def contains(self, items: Iterable[T], obj: T) -> bool:
        target = self.hash(obj)
        return any(
            self.hash(item) == target and self.equals(item, obj)
            for item in items
        )

    def __repr__(self) -> str:
        return f"EqualityStrategy(equals={self._equals!r}, hash_fn={self._hash_fn!r})"


class EqualityKey(Generic[T]):
    """Hashable wrapper delegating ``__eq__``/``__hash__`` to a strategy."""

    __slots__ = ("value", "_strategy", "_hash")

    def __init__(self, value: T, strategy: EqualityStrategy[T]):
        self.value = value
        self._strategy = strategy
        self._hash = strategy.hash(value)

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, EqualityKey) or other._strategy is not self._strategy:
            return NotImplemented
        return self._strategy.equals(self.value, other.value)

    def __repr__(self) -> str:
        return f"EqualityKey({self.value!r})"
