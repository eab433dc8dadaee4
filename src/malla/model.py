# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple


CompletedSet = FrozenSet[str]


class Status(str, Enum):
    """Derived state of an item. Never stored, always recomputed."""
    COMPLETED = "completed"
    LOCKED = "locked"
    AVAILABLE = "available"


@dataclass(frozen=True)
class Item:
    """
    A single item (course / "ramo") in the prerequisite graph.

    `requires` keeps the declared order; it may reference ids that are not
    in the catalog, those requirements can never be satisfied.
    """
    id: str
    requires: Tuple[str, ...] = ()
    label: str | None = None

    @property
    def display_name(self) -> str:
        return self.label or self.id


class Catalog:
    """
    Immutable item catalog: ordered mapping of item id -> Item.

    Built once at startup. Duplicate ids are a configuration error.
    """

    def __init__(self, items: Iterable[Item]):
        by_id: Dict[str, Item] = {}
        for item in items:
            if item.id in by_id:
                raise ValueError(f"Duplicate item id found: {item.id!r}")
            by_id[item.id] = item
        self._items = by_id

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, item_id: str) -> Item:
        return self._items[item_id]

    def get(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

    @property
    def ids(self) -> List[str]:
        return list(self._items)

    def requirements(self) -> Dict[str, Tuple[str, ...]]:
        """The typed adjacency: item id -> ordered required ids."""
        return {i.id: i.requires for i in self._items.values()}

    def label_of(self, item_id: str) -> str | None:
        item = self._items.get(item_id)
        return item.label if item else None

    def __repr__(self) -> str:
        return f"Catalog({self.ids!r})"


@dataclass(frozen=True)
class MissingRequirement:
    id: str
    label: str


@dataclass(frozen=True)
class ToggleResult:
    """
    Outcome of a toggle request.

    accepted=False means the item was locked: `missing` carries the
    unsatisfied requirements and `completed` is the unchanged input set.
    """
    item_id: str
    accepted: bool
    completed: CompletedSet
    statuses: Dict[str, Status]
    action: str  # "completed" | "uncompleted" | "rejected"
    missing: List[MissingRequirement] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.accepted:
            return f"{self.item_id}: {self.action}"
        lines = ["Cannot complete this item.", "Pending requirements:"]
        lines.extend(f"- {m.label}" for m in self.missing)
        return "\n".join(lines)

    def raise_for_rejection(self) -> None:
        if not self.accepted:
            raise ToggleRejected(self.item_id, self.missing)


@dataclass
class ToggleRejected(Exception):
    """Raised on demand for a toggle on a locked item."""
    item_id: str
    missing: List[MissingRequirement]

    def __str__(self) -> str:
        names = ", ".join(m.label for m in self.missing)
        return f"{self.item_id} is locked; pending requirements: {names}"


class UnknownItemError(KeyError):
    """Toggle requested for an id that is not in the catalog."""

    def __init__(self, item_id: str):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"Unknown item: {self.item_id!r}"
