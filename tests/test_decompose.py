"""
Tests for decompose module.
"""

import random

import pytest

from arrow_graph import GraphStateError, MultiArrowGraph
from data_model import Arrow
from debug_graph import check_decomposition, degree_vector, relocation_lower_bound
from decompose import (
    break_all_into_deep_unique_paths,
    decompose,
    extract_outbound_paths,
    find_any_deep_path,
    find_arrow_index_by_vertex_id,
    get_rolled_cycle,
    splice_cycles,
)


def _arrows(*pairs):
    return [Arrow(u, v, k) for k, (u, v) in enumerate(pairs)]


def _ids(paths):
    return [[a.id for a in p] for p in paths]


def _random_arrows(rnd, n_vertices, n_arrows):
    return _arrows(*[(rnd.randrange(n_vertices), rnd.randrange(n_vertices)) for _ in range(n_arrows)])


class TestScenarios:
    """Small hand-checked graphs."""

    def test_simple_path(self):
        """0 -> 1 -> 2 is a single path."""
        assert _ids(break_all_into_deep_unique_paths(_arrows((0, 1), (1, 2)))) == [[0, 1]]

    def test_simple_cycle_is_standalone(self):
        """A lone cycle has no path to join and is returned as is."""
        res = decompose(_arrows((0, 1), (1, 0)))
        assert _ids(res.paths) == [[0, 1]]
        assert (res.seed_paths, res.cycles, res.spliced, res.standalone) == (0, 1, 0, 1)

    def test_cycle_spliced_into_path(self):
        """Cycle 1 -> 3 -> 1 is inserted where the path leaves vertex 1."""
        arrows = _arrows((0, 1), (1, 2), (1, 3), (3, 1))
        res = decompose(arrows)
        assert _ids(res.paths) == [[0, 2, 3, 1]]
        assert (res.seed_paths, res.cycles, res.spliced, res.standalone) == (1, 1, 1, 0)

    def test_disconnected_paths(self):
        paths = break_all_into_deep_unique_paths(_arrows((0, 1), (1, 2), (5, 6), (6, 7)))
        assert sorted(_ids(paths)) == [[0, 1], [2, 3]]

    def test_empty_input(self):
        assert break_all_into_deep_unique_paths([]) == []

    def test_parallel_arrows(self):
        """Two bookings 0 -> 1 need two vehicles."""
        paths = break_all_into_deep_unique_paths(_arrows((0, 1), (0, 1)))
        assert sorted(_ids(paths)) == [[0], [1]]

    def test_verbose_prints_paths(self, capsys):
        decompose(_arrows((0, 1), (1, 2)), verbose=True)
        out = capsys.readouterr().out
        assert "Paths before merging with cycles: (n=1)" in out
        assert "Result list of paths: (n=1)" in out
        assert "[0-(0)->1] [1-(1)->2]" in out


class TestSpliceModes:
    """Single forward pass versus repeated passes."""

    # seed path 0 -> 1, cycle 0 -> 2 -> 0, cycle 2 -> 3 -> 2 (touches only the first cycle)
    CHAINED = ((0, 1), (0, 2), (2, 0), (2, 3), (3, 2))

    def test_single_pass_leaves_chained_cycle(self):
        res = decompose(_arrows(*self.CHAINED), splice_mode="single")
        assert _ids(res.paths) == [[1, 2, 0], [3, 4]]
        assert (res.spliced, res.standalone) == (1, 1)

    def test_fixpoint_merges_chained_cycle(self):
        arrows = _arrows(*self.CHAINED)
        res = decompose(arrows, splice_mode="fixpoint")
        assert _ids(res.paths) == [[1, 3, 4, 2, 0]]
        assert (res.spliced, res.standalone) == (2, 0)
        assert check_decomposition(arrows, res.paths) == []

    def test_eulerian_graph_single_circuit_in_fixpoint(self):
        """Balanced, connected graph -> one circuit."""
        arrows = _arrows((0, 1), (1, 2), (2, 0), (1, 3), (3, 1))
        single = decompose(arrows, splice_mode="single")
        assert len(single.paths) == 2
        fix = decompose(arrows, splice_mode="fixpoint")
        assert _ids(fix.paths) == [[0, 3, 4, 1, 2]]
        assert fix.standalone == 1

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            decompose(_arrows((0, 1)), splice_mode="twice")
        with pytest.raises(ValueError):
            splice_cycles([], [], splice_mode="twice")

    def test_splice_cycles_keeps_unrelated_cycle(self):
        paths = [[Arrow(0, 1, 0)]]
        cycles = [[Arrow(5, 6, 1), Arrow(6, 5, 2)]]
        assert splice_cycles(paths, cycles) == (0, 1)
        assert _ids(paths) == [[0], [1, 2]]


class TestHelpers:
    """Tests for the building blocks."""

    def test_rolled_cycle(self):
        cycle = _arrows((1, 3), (3, 4), (4, 1))
        assert _ids([get_rolled_cycle(cycle, cycle[1])]) == [[1, 2, 0]]
        assert get_rolled_cycle(cycle, cycle[0]) == cycle

    def test_rolled_cycle_rejects_non_cycle(self):
        with pytest.raises(GraphStateError):
            get_rolled_cycle(_arrows((0, 1), (1, 2)), Arrow(1, 2, 1))
        with pytest.raises(GraphStateError):
            get_rolled_cycle([], Arrow(0, 0, 0))

    def test_rolled_cycle_rejects_foreign_arrow(self):
        with pytest.raises(GraphStateError):
            get_rolled_cycle(_arrows((0, 1), (1, 0)), Arrow(1, 0, 9))

    def test_find_arrow_index(self):
        path = _arrows((0, 1), (1, 2), (2, 1), (1, 3))
        assert find_arrow_index_by_vertex_id(path, 1) == 1
        assert find_arrow_index_by_vertex_id(path, 3) == -1

    def test_deep_path_from_absent_or_sink_vertex_is_empty(self):
        g = MultiArrowGraph.from_arrows(_arrows((0, 1)))
        assert find_any_deep_path(g, 9, 1) == []
        assert find_any_deep_path(g, 1, 1) == []

    def test_deep_path_does_not_reuse_arrows(self):
        """The walk stops at 0 once its only outbound arrow is used."""
        g = MultiArrowGraph.from_arrows(_arrows((0, 1), (1, 0)))
        assert _ids([find_any_deep_path(g, 0, 2)]) == [[0, 1]]
        assert g.num_arrows == 2  # search alone does not reduce the graph

    def test_extract_outbound_paths_takes_degree_many(self):
        arrows = _arrows((0, 1), (0, 2))
        g = MultiArrowGraph.from_arrows(arrows)
        paths = extract_outbound_paths(g, [g.get_vertex(0)], len(arrows))
        assert sorted(_ids(paths)) == [[0], [1]]
        assert g.is_empty()

    def test_non_dense_ids_rejected(self):
        with pytest.raises(ValueError):
            decompose([Arrow(0, 1, 0), Arrow(1, 2, 5)])


class TestProperties:
    """Random multigraphs: coverage, connectivity and path counts."""

    @pytest.mark.parametrize("seed", range(25))
    def test_single_mode_invariants(self, seed):
        rnd = random.Random(seed)
        arrows = _random_arrows(rnd, rnd.randint(1, 7), rnd.randint(0, 30))
        res = decompose(arrows, splice_mode="single")

        assert check_decomposition(arrows, res.paths, max_report=0) == []
        _, deg = degree_vector(arrows)
        assert res.seed_paths == int(deg.clip(min=0).sum())
        assert len(res.paths) == res.seed_paths + res.standalone
        assert res.cycles == res.spliced + res.standalone
        assert len(res.paths) >= relocation_lower_bound(arrows)

    @pytest.mark.parametrize("seed", range(25))
    def test_fixpoint_reaches_lower_bound(self, seed):
        rnd = random.Random(1000 + seed)
        arrows = _random_arrows(rnd, rnd.randint(1, 7), rnd.randint(0, 30))
        res = decompose(arrows, splice_mode="fixpoint")

        assert check_decomposition(arrows, res.paths, max_report=0) == []
        assert len(res.paths) == relocation_lower_bound(arrows)

    @pytest.mark.parametrize("seed", range(10))
    def test_count_independent_of_input_order(self, seed):
        rnd = random.Random(2000 + seed)
        pairs = [(rnd.randrange(5), rnd.randrange(5)) for _ in range(20)]
        counts = set()
        for _ in range(5):
            rnd.shuffle(pairs)
            counts.add(len(decompose(_arrows(*pairs), splice_mode="fixpoint").paths))
        assert len(counts) == 1
