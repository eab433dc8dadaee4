"""Tests for malla.dag: catalog diagnostics."""

from malla.dag import build_dag, diagnose, topo_levels
from malla.dsl import catalog, ramo


class TestDiagnose:
    def test_levels(self, abc_catalog):
        report = diagnose(abc_catalog)
        assert report.levels == [["A"], ["B"], ["C"]]
        assert report.ok

    def test_parallel_level(self):
        cat = catalog(ramo("M1"), ramo("P1"), ramo("M2", "M1"), ramo("X", "M1", "P1"))
        assert diagnose(cat).levels == [["M1", "P1"], ["M2", "X"]]

    def test_unknown_requirements(self):
        cat = catalog(ramo("A"), ramo("B", "A", "GHOST"))
        report = diagnose(cat)
        assert report.unknown_requirements == {"B": ["GHOST"]}
        assert report.levels == [["A"], ["B"]]
        assert not report.ok

    def test_cycle_members(self):
        cat = catalog(ramo("A"), ramo("X", "Y"), ramo("Y", "X"), ramo("Z", "Y"))
        report = diagnose(cat)
        assert report.cycle_members == ["X", "Y", "Z"]
        assert report.levels == [["A"]]

    def test_duplicate_requirement_counted_once(self):
        adj, indeg = build_dag(catalog(ramo("A"), ramo("B", "A", "A")))
        assert indeg["B"] == 1
        levels, stuck = topo_levels(adj, indeg)
        assert levels == [["A"], ["B"]] and stuck == []

    def test_empty(self):
        assert diagnose(catalog()).levels == []
