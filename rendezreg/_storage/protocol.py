from typing import Dict, Iterator, Optional, Protocol, runtime_checkable

from rendezreg._types import K, V


@runtime_checkable
class StorageProtocol(Protocol[K, V]):
    """Minimal protocol describing the storage interface expected by Coordinator.

    A coordinator owns three of these: pending cells by tag, cached values
    by tag and group members by group. Only the members the coordinator
    actually calls are listed so custom backends stay easy to write.
    """

    def set(self, key: K, value: V) -> None:  # pragma: no cover - interface
        ...

    def get(
        self, key: K, default: Optional[V] = None
    ) -> Optional[V]:  # pragma: no cover - interface
        ...

    def pop(
        self, key: K, default: Optional[V] = None
    ) -> Optional[V]:  # pragma: no cover - interface
        ...

    def delete(self, key: K) -> None:  # pragma: no cover - interface
        ...

    def clear(self) -> None:  # pragma: no cover - interface
        ...

    def to_dict(self) -> Dict[K, V]:  # pragma: no cover - interface
        ...

    def keys(self) -> Iterator[K]:  # pragma: no cover - interface
        ...

    def __len__(self) -> int:  # pragma: no cover - interface
        ...

    def __contains__(self, key: object) -> bool:  # pragma: no cover - interface
        ...
