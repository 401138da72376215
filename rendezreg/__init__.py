"""rendezreg: tag and group rendezvous for asyncio tasks.

Consumers wait on a tag or join a group and get an `asyncio.Future` back;
producers dispatch values to it, before or after the consumer arrives.
The module-level functions operate on a process-wide default
`coordinator`; `instance()` returns an isolated `Coordinator`.
"""
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path
from typing import Any, Optional

from rendezreg.core import (
    Coordinator,
    CoordinatorSnapshot,
    GroupMember,
    OverwritePolicy,
    RendezvousCell,
)
from rendezreg.exceptions import AlreadyWaitingError, RendezvousError


def _read_version_file() -> Optional[str]:
    try:
        return Path(__file__).with_name("VERSION").read_text(encoding="utf8").strip()
    except OSError:
        return None


def _get_version() -> str:
    # 1) Try to read installed distribution metadata
    try:
        return _pkg_version("rendezreg")
    except PackageNotFoundError:
        pass

    # 2) Try the VERSION file written at build time
    v = _read_version_file()
    if v:
        return v

    # 3) Fall back to a safe default
    return "0.0.0"


__version__ = _get_version()

# Shared by every caller in the process. Tests should prefer instance().
coordinator = Coordinator()

wait_for_next = coordinator.wait_for_next
wait_for_any = coordinator.wait_for_any
dispatch = coordinator.dispatch
wait_for_group = coordinator.wait_for_group
dispatch_group = coordinator.dispatch_group
purge = coordinator.purge
remove = coordinator.remove
inspect = coordinator.inspect


def instance(**kwargs: Any) -> Coordinator:
    """Return a new `Coordinator` that shares no state with `coordinator`."""
    return Coordinator.instance(**kwargs)


__all__ = [
    "Coordinator",
    "CoordinatorSnapshot",
    "GroupMember",
    "OverwritePolicy",
    "RendezvousCell",
    "AlreadyWaitingError",
    "RendezvousError",
    "coordinator",
    "instance",
    "wait_for_next",
    "wait_for_any",
    "dispatch",
    "wait_for_group",
    "dispatch_group",
    "purge",
    "remove",
    "inspect",
    "__version__",
]
