from rendezreg.core.cell import GroupMember, RendezvousCell
from rendezreg.core.coordinator import Coordinator
from rendezreg.core.snapshot import CoordinatorSnapshot
from rendezreg.core.utils import OverwritePolicy

__all__ = [
    "Coordinator",
    "CoordinatorSnapshot",
    "GroupMember",
    "OverwritePolicy",
    "RendezvousCell",
]
