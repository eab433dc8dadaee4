# engine.py
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .model import (
    Catalog,
    CompletedSet,
    Item,
    MissingRequirement,
    Status,
    ToggleResult,
    UnknownItemError,
)
from .store import GraphStateStore

LabelLookup = Callable[[str], Optional[str]]


# ----------------------------------------------------------------------
# Pure evaluation
# ----------------------------------------------------------------------

def unmet_requirements(item: Item, completed: CompletedSet) -> List[str]:
    """Required ids not in `completed`, in declared order."""
    return [req for req in item.requires if req not in completed]


def status_of(item: Item, completed: CompletedSet) -> Status:
    if item.id in completed:
        return Status.COMPLETED
    if item.requires and unmet_requirements(item, completed):
        return Status.LOCKED
    return Status.AVAILABLE


def compute_statuses(catalog: Catalog, completed: CompletedSet) -> Dict[str, Status]:
    """
    Status of every catalog item, in catalog order.

    Pure: no caching, ids in `completed` that are not in the catalog are ignored.
    """
    return {item.id: status_of(item, completed) for item in catalog}


def _resolve_label(req_id: str, lookup: Optional[LabelLookup]) -> str:
    if lookup is None:
        return req_id
    try:
        label = lookup(req_id)
    except Exception:
        # lookup failures fall back to the raw id
        return req_id
    return label or req_id


def request_toggle(
    item_id: str,
    catalog: Catalog,
    completed: CompletedSet,
    *,
    lookup: Optional[LabelLookup] = None,
) -> ToggleResult:
    """
    Validate and apply a toggle on `item_id` against `completed`.

      - locked          -> rejected, `missing` lists unmet requirements
      - completed       -> removed (dependents are not touched)
      - available       -> added

    Never mutates its input; the new set is on the result.
    """
    item = catalog.get(item_id)
    if item is None:
        raise UnknownItemError(item_id)

    completed = frozenset(completed)
    status = status_of(item, completed)

    if status is Status.LOCKED:
        missing = [
            MissingRequirement(id=req, label=_resolve_label(req, lookup))
            for req in unmet_requirements(item, completed)
        ]
        return ToggleResult(
            item_id=item_id,
            accepted=False,
            completed=completed,
            statuses=compute_statuses(catalog, completed),
            action="rejected",
            missing=missing,
        )

    if status is Status.COMPLETED:
        new_completed = completed - {item_id}
        action = "uncompleted"
    else:
        new_completed = completed | {item_id}
        action = "completed"

    return ToggleResult(
        item_id=item_id,
        accepted=True,
        completed=new_completed,
        statuses=compute_statuses(catalog, new_completed),
        action=action,
    )


# ----------------------------------------------------------------------
# Stateful facade
# ----------------------------------------------------------------------

class PrerequisiteEngine:
    """
    Binds a catalog to a GraphStateStore.

    Every call re-reads the store; the completed set is never kept between calls.
    """

    def __init__(
        self,
        catalog: Catalog,
        store: GraphStateStore,
        lookup: Optional[LabelLookup] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.lookup = lookup if lookup is not None else catalog.label_of

    def statuses(self) -> Dict[str, Status]:
        return compute_statuses(self.catalog, self.store.load())

    def toggle(self, item_id: str) -> ToggleResult:
        result = request_toggle(
            item_id,
            self.catalog,
            self.store.load(),
            lookup=self.lookup,
        )
        if result.accepted:
            self.store.save(result.completed)
        return result

    def reset(self) -> None:
        self.store.save(frozenset())
