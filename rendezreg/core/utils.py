import functools
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, cast

from rendezreg._storage import MemoryStorage, StorageProtocol
from rendezreg._types import K, V

if TYPE_CHECKING:
    from rendezreg.core.coordinator import Coordinator


def locked_method(method: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to lock method calls for thread safety."""

    @functools.wraps(method)
    def wrapper(self: "Coordinator", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


def _make_default_store() -> StorageProtocol[K, V]:
    """Create a default StorageProtocol[K, V] instance.

    Localizes the cast from the concrete MemoryStorage to the generic
    protocol in one place.
    """
    return cast(StorageProtocol[K, V], MemoryStorage())


class OverwritePolicy(IntEnum):
    """What `wait_for_next` does when the tag already has a pending waiter."""

    FORBID = 0
    ALLOW = 1
    WARN = 2
