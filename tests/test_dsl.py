"""Tests for malla.dsl: builders and catalog loading."""

import json

import pytest

from malla.dsl import CatalogError, build, catalog, catalog_from_data, load_catalog, parse_requirements, ramo
from malla.model import Catalog, Item


class TestParseRequirements:
    def test_comma_string(self):
        assert parse_requirements("MAT1, FIS1,,ALG1 ") == ["MAT1", "FIS1", "ALG1"]

    def test_empty_string(self):
        assert parse_requirements("") == []

    def test_none(self):
        assert parse_requirements(None) == []

    def test_list(self):
        assert parse_requirements(["B", " A"]) == ["B", "A"]


class TestBuilders:
    def test_ramo(self):
        assert ramo("MAT2", "MAT1", label="Calculus II") == Item("MAT2", ("MAT1",), "Calculus II")

    def test_ramo_requires_id(self):
        with pytest.raises(ValueError):
            ramo("  ")

    def test_builder(self):
        item = build("NUM").label("Numerical").requires("MAT2").requires("ALG1").build()
        assert item.requires == ("MAT2", "ALG1")
        assert item.display_name == "Numerical"

    def test_display_name_falls_back_to_id(self):
        assert ramo("X").display_name == "X"

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            catalog(ramo("A"), ramo("A"))

    def test_catalog_mapping(self):
        cat = catalog(ramo("A"), ramo("B", "A"))
        assert cat.ids == ["A", "B"]
        assert "B" in cat and "Z" not in cat
        assert cat.requirements() == {"A": (), "B": ("A",)}
        assert cat.get("Z") is None


class TestCatalogFromData:
    def test_items_wrapper(self):
        cat = catalog_from_data({"items": [{"id": "A"}, {"id": "B", "requires": "A"}]})
        assert cat["B"].requires == ("A",)

    @pytest.mark.parametrize("data", [
        {"nope": []},
        [{"label": "no id"}],
        ["A"],
        [{"id": "A", "requires": 3}],
        [{"id": "A", "requires": ["B", 1]}],
        [{"id": "A", "label": 5}],
        [{"id": "A"}, {"id": "A"}],
    ])
    def test_invalid(self, data):
        with pytest.raises(CatalogError):
            catalog_from_data(data)


class TestLoadCatalog:
    def test_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"id": "A", "label": "Alpha"}, {"id": "B", "requires": ["A"]}]))
        cat = load_catalog(path)
        assert isinstance(cat, Catalog)
        assert cat.label_of("A") == "Alpha"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("[{")
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_python_constant(self, tmp_path):
        path = tmp_path / "malla_catalog.py"
        path.write_text(
            "from malla.dsl import catalog, ramo\n"
            "CATALOG = catalog(ramo('A'), ramo('B', 'A'))\n"
        )
        assert load_catalog(path).ids == ["A", "B"]

    def test_python_function_returning_list(self, tmp_path):
        path = tmp_path / "malla_catalog.py"
        path.write_text(
            "from malla.dsl import ramo\n"
            "def catalog():\n"
            "    return [ramo('A'), ramo('B', 'A')]\n"
        )
        assert load_catalog(path)["B"].requires == ("A",)

    def test_python_without_catalog(self, tmp_path):
        path = tmp_path / "malla_catalog.py"
        path.write_text("X = 1\n")
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "nope.json")

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("")
        with pytest.raises(CatalogError):
            load_catalog(path)
