import asyncio
import contextlib
import logging
from threading import RLock
from typing import (
    Any,
    Callable,
    ContextManager,
    Hashable,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
)

from rendezreg._storage import StorageProtocol
from rendezreg.core.cell import GroupMember, RendezvousCell
from rendezreg.core.snapshot import CoordinatorSnapshot
from rendezreg.core.utils import OverwritePolicy, _make_default_store, locked_method
from rendezreg.exceptions import AlreadyWaitingError

C = TypeVar("C", bound="Coordinator")

StorageFactory = Callable[[], StorageProtocol[Any, Any]]


class Coordinator:
    """
    Tag and group rendezvous point for asyncio tasks.

    A consumer waits on a tag (single waiter, single value) or joins a
    group (many waiters, one broadcast value) and gets back an
    `asyncio.Future`. A producer dispatches a value to the tag or group.
    A value dispatched to a tag nobody waits on is cached and handed to
    the next `wait_for_any` call for that tag.

    Arguments:
        lock: Optional lock object guarding the three mappings. If None,
            a new RLock is created so producers on other threads may
            dispatch safely.

    Raises:
        AlreadyWaitingError: If waiting twice on a tag while the overwrite
            policy is FORBID.

    Examples:
        >>> import asyncio
        >>> async def main():
        ...     c = Coordinator()
        ...     fut = c.wait_for_next("ready")
        ...     c.dispatch("ready", 42)
        ...     return await fut
        >>> asyncio.run(main())
        42
        >>> async def early():
        ...     c = Coordinator()
        ...     c.dispatch("ready", "cached")
        ...     return await c.wait_for_any("ready")
        >>> asyncio.run(early())
        'cached'
    """

    def __init__(
        self,
        *,
        lock: Optional[RLock] = None,
        log_level: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        overwrite_policy: int = OverwritePolicy.ALLOW,
        storage: Optional[StorageFactory] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        """
        Initialize the Coordinator.

        Args:
            lock: An optional threading.RLock or similar object for thread safety.
            log_level: Logging level for the coordinator logger. Left untouched
                when None.
            logger: Logger receiving diagnostics. Defaults to this module's logger.
            overwrite_policy: Policy for a second wait on a pending tag:
                0 - Forbid, raise AlreadyWaitingError
                1 - Allow, the earlier waiter is abandoned (default)
                2 - Warn, like allow but logs a warning
            storage: Optional zero-argument factory returning a StorageProtocol.
                It is called once for each of the three mappings.
            loop: Event loop that futures are created on. Defaults to the
                loop running when a wait method is called.

        Raises:
            TypeError: If the provided lock does not implement context manager methods.
            ValueError: If log_level is not a valid logging level, or
                overwrite_policy is not a valid policy.

        Example:
            coordinator = Coordinator(log_level=logging.DEBUG, overwrite_policy=2)
        """
        if lock is not None and not all(
            hasattr(lock, method)
            for method in ("__enter__", "__exit__", "acquire", "release")
        ):
            raise TypeError("lock must be a threading.RLock or similar object")

        if log_level is not None and not (50 >= log_level >= 0):
            raise ValueError("log_level must be a valid logging level between 0 and 50")

        self._lock: RLock = lock or RLock()
        self._overwrite_policy = OverwritePolicy(overwrite_policy)
        self._loop = loop
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        if log_level is not None:
            self._logger.setLevel(log_level)

        factory = storage if storage is not None else _make_default_store
        self._active: StorageProtocol[Hashable, RendezvousCell[Any]] = factory()
        self._values: StorageProtocol[Hashable, Any] = factory()
        self._pooled: StorageProtocol[Hashable, List[GroupMember[Any]]] = factory()

    @classmethod
    def instance(cls: Type[C], **kwargs: Any) -> C:
        """Return a new coordinator with its own, isolated mappings."""
        return cls(**kwargs)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def overwrite_policy(self) -> OverwritePolicy:
        return self._overwrite_policy

    @locked_method
    def wait_for_next(self, tag: Hashable) -> "asyncio.Future[Any]":
        """
        Wait for the next value dispatched to ``tag``.

        Cached values are ignored; only a `dispatch` made after this call
        resolves the returned future.

        Raises:
            AlreadyWaitingError: If ``tag`` already has a pending waiter and
                the overwrite policy is FORBID.
            TypeError: If ``tag`` is not hashable.
        """
        self._validate_key(tag)
        existing = self._active.get(tag)
        if existing is not None and existing.pending:
            self._replace_waiter(tag)

        cell: RendezvousCell[Any] = RendezvousCell(tag, self._new_future())
        self._active.set(tag, cell)
        self._logger.debug("Waiting for next value on tag %r", tag)
        return cell.future

    @locked_method
    def wait_for_any(self, tag: Hashable) -> "asyncio.Future[Any]":
        """
        Wait for a value on ``tag``, consuming a cached one if present.

        A cached value is removed and returned in an already-resolved
        future. Otherwise this behaves exactly like `wait_for_next`.
        """
        self._validate_key(tag)
        if tag in self._values:
            value = self._values.pop(tag)
            future = self._new_future()
            future.set_result(value)
            self._logger.debug("Consumed cached value for tag %r", tag)
            return future
        return self.wait_for_next(tag)

    @locked_method
    def dispatch(self, tag: Hashable, data: Any = None) -> None:
        """
        Resolve the waiter on ``tag`` with ``data``, or cache ``data``.

        A waiter whose future is already done (cancelled by its owner) or
        whose loop has closed is discarded and ``data`` is cached instead.
        This also holds when the waiter is cancelled after a dispatch from
        another thread but before its loop delivers the value.
        A cached value replaces any earlier one for the same tag.
        """
        self._validate_key(tag)
        cell = self._active.pop(tag)
        if (
            cell is not None
            and cell.pending
            and cell.resolve(data, lambda value: self._redeliver(tag, value))
        ):
            self._logger.debug("Dispatched to waiter on tag %r", tag)
            return

        if tag in self._values:
            self._logger.debug("Replacing cached value for tag %r", tag)
        self._values.set(tag, data)
        self._logger.debug("Cached value for tag %r", tag)

    @locked_method
    def wait_for_group(self, group: Hashable) -> "asyncio.Future[Any]":
        """
        Join ``group`` and wait for its next broadcast.

        Members are numbered from 1 in join order.
        """
        self._validate_key(group)
        members = self._pooled.get(group)
        if members is None:
            members = []
        member: GroupMember[Any] = GroupMember(
            group, len(members) + 1, self._new_future()
        )
        members.append(member)
        self._pooled.set(group, members)
        self._logger.debug("Member %d joined group %r", member.position, group)
        return member.future

    @locked_method
    def dispatch_group(self, group: Hashable, data: Any = None) -> None:
        """
        Resolve every member of ``group`` with ``data`` and drop the group.

        Members are resolved in join order. Dispatching to a group without
        members only logs a warning.
        """
        self._validate_key(group)
        members = self._pooled.pop(group)
        if not members:
            self._logger.warning("No dispatch group %r", group)
            return

        for member in members:
            member.resolve(data)
        self._logger.debug(
            "Dispatched to %d members of group %r", len(members), group
        )

    @locked_method
    def purge(self) -> None:
        """
        Drop every waiter, cached value and group.

        Futures handed out before the purge are abandoned and never resolve.
        """
        self._active.clear()
        self._values.clear()
        self._pooled.clear()
        self._logger.debug("Coordinator purged")

    @locked_method
    def remove(self, tag: Hashable) -> None:
        """Drop ``tag`` from the waiters, the cached values and the groups."""
        self._validate_key(tag)
        self._active.delete(tag)
        self._values.delete(tag)
        self._pooled.delete(tag)
        self._logger.debug("Removed %r", tag)

    @locked_method
    def snapshot(self) -> CoordinatorSnapshot:
        return CoordinatorSnapshot(
            active=self._active.to_dict(),
            values=self._values.to_dict(),
            pooled={g: list(m) for g, m in self._pooled.to_dict().items()},
        )

    def inspect(self, level: Optional[int] = None) -> CoordinatorSnapshot:
        """
        Log the current waiters, cached values and groups.

        Without ``level`` the dump is logged at INFO, raised to the
        logger's effective level so it is never filtered out.

        Returns:
            The snapshot that was logged.
        """
        if level is None:
            level = max(logging.INFO, self._logger.getEffectiveLevel())
        snap = self.snapshot()
        self._logger.log(level, "active: %r", snap.active)
        self._logger.log(level, "values: %r", snap.values)
        self._logger.log(level, "pooled: %r", snap.pooled)
        return snap

    @locked_method
    def is_waiting(self, tag: Hashable) -> bool:
        cell = self._active.get(tag)
        return cell is not None and cell.pending

    @locked_method
    def has_value(self, tag: Hashable) -> bool:
        return tag in self._values

    @locked_method
    def group_size(self, group: Hashable) -> int:
        return len(self._pooled.get(group) or [])

    def bulk(self) -> ContextManager["Coordinator"]:
        """
        Context manager holding the coordinator lock across several calls.

        Usage:
            with coordinator.bulk() as c:
                c.dispatch("a", 1)
                c.dispatch_group("b", 2)
        """

        @contextlib.contextmanager
        def _bulk_ctx() -> Iterator[Coordinator]:
            self._lock.acquire()
            try:
                yield self
            finally:
                self._lock.release()

        return _bulk_ctx()

    def _new_future(self) -> "asyncio.Future[Any]":
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.create_future()

    @locked_method
    def _redeliver(self, tag: Hashable, data: Any) -> None:
        # a later dispatch already cached a newer value for nobody waiting
        if tag in self._values and not self.is_waiting(tag):
            self._logger.debug("Dropping superseded value for tag %r", tag)
            return
        self._logger.debug("Waiter on tag %r finished before delivery", tag)
        self.dispatch(tag, data)

    def _replace_waiter(self, tag: Hashable) -> None:
        if self._overwrite_policy == OverwritePolicy.FORBID:
            raise AlreadyWaitingError(f"Tag {tag!r} already has a pending waiter")
        if self._overwrite_policy == OverwritePolicy.WARN:
            self._logger.warning("Abandoning pending waiter on tag %r", tag)
        else:
            self._logger.debug("Replacing pending waiter on tag %r", tag)

    def _validate_key(self, key: Any) -> None:
        if not isinstance(key, Hashable):
            raise TypeError(f"Tag must be hashable, got {type(key)}")

    @locked_method
    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"active={list(self._active.keys())!r}, "
            f"values={list(self._values.keys())!r}, "
            f"pooled={list(self._pooled.keys())!r})"
        )
