import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, Optional

from rendezreg._types import V

logger = logging.getLogger(__name__)

DroppedCallback = Callable[[Any], None]


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _set_result(
    future: "asyncio.Future[Any]",
    value: Any,
    on_dropped: Optional[DroppedCallback] = None,
) -> None:
    # a waiter may have cancelled its future (e.g. via asyncio.wait_for)
    if future.done():
        logger.debug("Skipping resolution of finished future %r", future)
        if on_dropped is not None:
            on_dropped(value)
        return
    future.set_result(value)


def resolve_future(
    future: "asyncio.Future[V]",
    value: V,
    on_dropped: Optional[DroppedCallback] = None,
) -> bool:
    """Set ``value`` as the result of ``future`` from any thread.

    The result is set directly when called on the future's own loop and
    scheduled with ``call_soon_threadsafe`` otherwise. If the future is
    already done by the time the result would be set, ``on_dropped`` is
    called with ``value``.

    Returns:
        False if the future's loop is closed, True otherwise.
    """
    loop = future.get_loop()
    if loop.is_closed():
        logger.debug("Dropping value for future bound to a closed loop")
        return False
    if _running_loop() is loop:
        _set_result(future, value, on_dropped)
        return True
    try:
        loop.call_soon_threadsafe(_set_result, future, value, on_dropped)
    except RuntimeError:
        # loop closed after the check above
        logger.debug("Dropping value for future bound to a closed loop")
        return False
    return True


@dataclass
class RendezvousCell(Generic[V]):
    """A single pending waiter bound to one tag."""

    tag: Hashable
    future: "asyncio.Future[V]" = field(repr=False)

    def resolve(self, value: V, on_dropped: Optional[DroppedCallback] = None) -> bool:
        return resolve_future(self.future, value, on_dropped)

    @property
    def pending(self) -> bool:
        return not self.future.done()


@dataclass
class GroupMember(Generic[V]):
    """One waiter in a broadcast group.

    ``position`` is the 1-based join order within the group. It only
    orders resolution and shows up in diagnostics; every member of a group
    receives the same value.
    """

    group: Hashable
    position: int
    future: "asyncio.Future[V]" = field(repr=False)

    def resolve(self, value: V) -> bool:
        return resolve_future(self.future, value)

    @property
    def pending(self) -> bool:
        return not self.future.done()
