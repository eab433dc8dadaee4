from .dsl import ramo, catalog, build, ItemBuilder, load_catalog
from .engine import PrerequisiteEngine, compute_statuses, request_toggle
from .model import Catalog, Item, Status, ToggleResult
from .store import GraphStateStore

__all__ = [
    "ramo", "catalog", "build", "ItemBuilder", "load_catalog",
    "PrerequisiteEngine", "compute_statuses", "request_toggle",
    "Catalog", "Item", "Status", "ToggleResult", "GraphStateStore",
]
