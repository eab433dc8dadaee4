# dsl.py
from __future__ import annotations

import json
import runpy
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .model import Catalog, Item


class CatalogError(ValueError):
    """Catalog file could not be turned into a Catalog."""


# ---------------------------------------------------------------------
# Item helpers
# ---------------------------------------------------------------------

def parse_requirements(raw: Union[str, Sequence[str], None]) -> List[str]:
    """
    Normalize a requirement list.

    Accepts a comma-separated string ("MAT1,FIS1") or a list of ids.
    Blank entries are dropped, order is kept.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = raw.split(",")
    else:
        parts = list(raw)
    return [p.strip() for p in parts if p and p.strip()]


def ramo(item_id: str, *requires: str, label: str | None = None) -> Item:
    """Create an item: ramo("MAT2", "MAT1", label="Calculus II")."""
    if not item_id or not item_id.strip():
        raise ValueError("item id must be a non-empty string")
    return Item(id=item_id.strip(), requires=tuple(parse_requirements(requires)), label=label)


def catalog(*items: Item) -> Catalog:
    return Catalog(items)


class ItemBuilder:
    def __init__(self, item_id: str):
        self.item_id = item_id
        self._requires: list[str] = []
        self._label: Optional[str] = None

    def label(self, text: str):
        self._label = text
        return self

    def requires(self, *item_ids: str):
        self._requires.extend(item_ids)
        return self

    def build(self) -> Item:
        return ramo(self.item_id, *self._requires, label=self._label)


def build(item_id: str) -> ItemBuilder:
    """Convenience: build('MAT2').requires('MAT1').build()"""
    return ItemBuilder(item_id)


# ---------------------------------------------------------------------
# Catalog loading (.json / .py)
# ---------------------------------------------------------------------

def _item_from_dict(entry: Any, index: int) -> Item:
    if not isinstance(entry, dict):
        raise CatalogError(f"entry #{index} must be an object, got {type(entry).__name__}")

    item_id = entry.get("id")
    if not isinstance(item_id, str) or not item_id.strip():
        raise CatalogError(f"entry #{index} has no valid 'id'")

    label = entry.get("label")
    if label is not None and not isinstance(label, str):
        raise CatalogError(f"'{item_id}': label must be a string")

    requires = entry.get("requires", [])
    if not isinstance(requires, (str, list)) or (
        isinstance(requires, list) and not all(isinstance(r, str) for r in requires)
    ):
        raise CatalogError(f"'{item_id}': requires must be a list of ids or a comma-separated string")

    return ramo(item_id, *parse_requirements(requires), label=label)


def catalog_from_data(data: Any) -> Catalog:
    """
    Build a Catalog from decoded JSON.

    Either a list of {"id", "label"?, "requires"?} objects,
    or {"items": [...]} wrapping such a list.
    """
    if isinstance(data, dict) and "items" in data:
        data = data["items"]
    if not isinstance(data, list):
        raise CatalogError("catalog must be a list of items (or {\"items\": [...]})")

    items = [_item_from_dict(entry, i) for i, entry in enumerate(data)]
    try:
        return Catalog(items)
    except ValueError as e:
        raise CatalogError(str(e)) from e


def _catalog_from_python(path: Path) -> Catalog:
    module_name = f"malla_catalog_{path.stem}"
    globals_dict: Dict[str, Any] = runpy.run_path(str(path), run_name=module_name)

    found: Any = None
    if "catalog" in globals_dict and callable(globals_dict["catalog"]) and globals_dict["catalog"] is not catalog:
        found = globals_dict["catalog"]()
    elif "CATALOG" in globals_dict:
        found = globals_dict["CATALOG"]

    if isinstance(found, Catalog):
        return found
    if isinstance(found, (list, tuple)) and all(isinstance(i, Item) for i in found):
        try:
            return Catalog(found)
        except ValueError as e:
            raise CatalogError(str(e)) from e

    raise CatalogError(
        "Catalog module must define catalog() -> Catalog | List[Item] "
        "or CATALOG = Catalog | [Item, ...]."
    )


def load_catalog(path: str | Path) -> Catalog:
    """
    Load a catalog from a .json or .py file.

    Raises:
      FileNotFoundError if the file does not exist
      CatalogError for anything else wrong with it
    """
    cat_path = Path(path).expanduser().resolve()
    if not cat_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {cat_path}")

    if cat_path.suffix == ".json":
        try:
            data = json.loads(cat_path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise CatalogError(f"{cat_path.name}: invalid JSON: {e}") from e
        return catalog_from_data(data)

    if cat_path.suffix == ".py":
        return _catalog_from_python(cat_path)

    raise CatalogError(f"Catalog must be a .json or .py file, got: {cat_path.name}")
