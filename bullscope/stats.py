from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

# Collection kind -> QueueStats attribute.
KIND_FIELDS: dict[str, str] = {
    "wait": "wait",
    "active": "active",
    "paused": "paused",
    "prioritized": "prioritized",
    "waiting-children": "waiting_children",
    "failed": "failed",
    "completed": "completed",
    "delayed": "delayed",
    "stalled": "stalled",
}


@dataclass
class QueueStats:
    """
    Job counts of one queue: one per state collection plus the job hashes
    no collection references. `total` is always the sum of all of them.
    """

    name: str
    wait: int = 0
    active: int = 0
    paused: int = 0
    prioritized: int = 0
    waiting_children: int = 0
    failed: int = 0
    completed: int = 0
    delayed: int = 0
    stalled: int = 0
    orphaned: int = 0

    @classmethod
    def from_counts(cls, name: str, counts: Mapping[str, int], orphaned: int = 0) -> QueueStats:
        """
        Builds the stats from a collection kind -> count mapping. Kinds the
        storage layout does not have stay at zero.
        """
        values = {KIND_FIELDS[kind]: count for kind, count in counts.items() if kind in KIND_FIELDS}
        return cls(name=name, orphaned=max(0, orphaned), **values)

    @property
    def counts(self) -> dict[str, int]:
        return {kind: getattr(self, attribute) for kind, attribute in KIND_FIELDS.items()}

    @property
    def total(self) -> int:
        return sum(self.counts.values()) + self.orphaned

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        data.update({attribute: getattr(self, attribute) for attribute in KIND_FIELDS.values()})
        data["orphaned"] = self.orphaned
        data["total"] = self.total
        return data
