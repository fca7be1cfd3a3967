from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class HookCollection(Generic[T]):
    """Ordered container running callbacks as entities enter and leave it.

    ``on_attach`` runs after an entity has been appended; raising from it
    rejects the entity and undoes the append. ``on_detach`` runs before an
    entity is taken out, including once per entity on ``clear``.

    Membership is by identity. Adding an entity twice or removing one that is
    not there raises ``ValueError``.
    """

    def __init__(
        self,
        on_attach: Callable[[T], None],
        on_detach: Callable[[T], None],
    ):
        self._items: list[T] = []
        self._on_attach = on_attach
        self._on_detach = on_detach

    def _index(self, entity: T) -> int:
        for i, item in enumerate(self._items):
            if item is entity:
                return i
        return -1

    def add(self, entity: T):
        if self._index(entity) >= 0:
            raise ValueError(f"{entity!r} is already in this collection")

        self._items.append(entity)
        try:
            self._on_attach(entity)
        except Exception:
            self._items.pop()
            raise

    def extend(self, entities):
        for entity in entities:
            self.add(entity)

    def remove(self, entity: T):
        if self._index(entity) < 0:
            raise ValueError(f"{entity!r} is not in this collection")

        self._on_detach(entity)
        # the detach hook may have mutated the collection
        index = self._index(entity)
        if index >= 0:
            del self._items[index]

    def clear(self):
        for entity in list(self._items):
            self.remove(entity)

    def __contains__(self, entity) -> bool:
        return self._index(entity) >= 0

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._items!r})"


@dataclass
class Event:
    """Synchronous list of subscribers, called in subscription order."""

    handlers: list[Callable[..., None]] = field(default_factory=list)

    def subscribe(self, handler: Callable[..., None]):
        self.handlers.append(handler)
        return handler

    def unsubscribe(self, handler: Callable[..., None]):
        self.handlers.remove(handler)

    def fire(self, *args):
        for handler in list(self.handlers):
            handler(*args)

    __call__ = fire
