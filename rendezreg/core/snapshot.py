from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List

from rendezreg.core.cell import GroupMember, RendezvousCell


@dataclass(frozen=True)
class CoordinatorSnapshot:
    """Copied view of a coordinator's three mappings, returned by `snapshot()`.

    The dictionaries and member lists are copies, so mutating them has no
    effect on the coordinator. The cells, members and cached values
    themselves are the same objects the coordinator holds.
    """

    active: Dict[Hashable, RendezvousCell[Any]] = field(default_factory=dict)
    values: Dict[Hashable, Any] = field(default_factory=dict)
    pooled: Dict[Hashable, List[GroupMember[Any]]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.active or self.values or self.pooled)

    def to_dict(self) -> Dict[str, Dict[Hashable, Any]]:
        """Plain-data rendering: tags pending, cached values, member positions per group."""
        return {
            "active": {tag: cell.pending for tag, cell in self.active.items()},
            "values": dict(self.values),
            "pooled": {
                group: [m.position for m in members]
                for group, members in self.pooled.items()
            },
        }
