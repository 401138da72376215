class RendezvousError(Exception):
    """Base class for all rendezreg errors."""


class AlreadyWaitingError(RendezvousError):
    """A tag already has a pending waiter and the overwrite policy forbids replacing it."""


__all__ = ["RendezvousError", "AlreadyWaitingError"]
