# decompose.py
# -----------------------------------------------------------------------------
# Breaks a directed multigraph into the shortest possible list of deepest,
# arrow-disjoint paths. Pure algorithm: no file I/O and no config parsing,
# everything is injected by the caller.
#
# Path in the graph:
#   V0 -[A0]-> V1 -[A1]-> V2 ... V(n-1) -[A(n-1)]-> Vn
#
# Steps:
#   1) extract paths starting at positive-degree vertices (out - in > 0),
#      highest degree first, removing each path from the graph right away;
#   2) the remaining graph is balanced, so every further deep path is a cycle;
#      extract cycles until the graph is empty;
#   3) splice every cycle into a path that visits one of its vertices;
#   4) cycles that cannot be spliced become independent paths.
# -----------------------------------------------------------------------------

from typing import Dict, List, Sequence, Tuple
import numpy as np

from arrow_graph import GraphStateError, MultiArrowGraph, Vertex
from data_model import Arrow, DecompositionResult, Path
from print import print_paths

SPLICE_MODES = ("single", "fixpoint")


# =============================== Path search ================================

def find_any_deep_path(g: MultiArrowGraph, v0: int, max_arrow_id: int) -> Path:
    """
    Walk from v0 along any unused outbound arrow until the current vertex has
    none left (or is no longer in the graph). Arrow ids index the visited
    marker directly, so they must be dense in 0..max_arrow_id-1.

    Returns the (possibly empty) list of arrows of the walk.
    """
    marked = np.zeros(max_arrow_id, dtype=bool)
    path: Path = []

    v = g.get_vertex(v0)
    while v is not None:
        nxt = next((a for a in v.get_out_arrows() if not marked[a.id]), None)
        if nxt is None:
            break
        path.append(nxt)
        marked[nxt.id] = True
        v = g.get_vertex(nxt.to)
    return path


def extract_outbound_paths(g: MultiArrowGraph, vertices: Sequence[Vertex], max_arrow_id: int) -> List[Path]:
    """
    For every start vertex take max(1, degree) deep paths, one at a time,
    removing each from the graph before the next search. The degree is read
    when the vertex comes up, i.e. after all earlier removals.
    """
    result: List[Path] = []
    for start in vertices:
        for _ in range(max(1, start.degree)):
            path = find_any_deep_path(g, start.id, max_arrow_id)
            if not path:
                # start vertex has nothing left to give
                break
            result.append(path)
            g.remove_sub_graph(path)
    return result


# =============================== Cycle helpers ================================

def get_rolled_cycle(cycle: Sequence[Arrow], arrow0: Arrow) -> Path:
    """
    Rotate a cycle so that arrow0 comes first and the arrows before it move to
    the tail.
    """
    if not cycle or cycle[0].from_ != cycle[-1].to:
        raise GraphStateError(f"arrow sequence is not a cycle: {[str(a) for a in cycle]}")
    for k, arrow in enumerate(cycle):
        if arrow == arrow0:
            return list(cycle[k:]) + list(cycle[:k])
    raise GraphStateError(f"arrow {arrow0} is not part of the cycle")


def find_arrow_index_by_vertex_id(path: Sequence[Arrow], vertex_id: int) -> int:
    """Index of the first arrow leaving vertex_id, or -1."""
    for k, arrow in enumerate(path):
        if arrow.from_ == vertex_id:
            return k
    return -1


def _vertex_to_path_map(paths: Sequence[Path]) -> Dict[int, Path]:
    # A path can be extended at any vertex it leaves, but not at its last one.
    out: Dict[int, Path] = {}
    for path in paths:
        for arrow in path:
            out.setdefault(arrow.from_, path)
    return out


def _splice_pass(paths: List[Path], pending: List[Path]) -> int:
    """
    One forward pass over the pending cycles. Spliced cycles are removed from
    `pending`. Vertices gained by a path during the pass are not looked up.
    """
    vertex_to_path = _vertex_to_path_map(paths)
    remaining: List[Path] = []
    spliced = 0
    for cycle in pending:
        entry = next((a for a in cycle if a.from_ in vertex_to_path), None)
        if entry is not None:
            path = vertex_to_path[entry.from_]
            # index is searched now: an earlier splice may have shifted it
            idx = find_arrow_index_by_vertex_id(path, entry.from_)
            if idx >= 0:
                path[idx:idx] = get_rolled_cycle(cycle, entry)
                spliced += 1
                continue
        remaining.append(cycle)
    pending[:] = remaining
    return spliced


def splice_cycles(paths: List[Path], cycles: List[Path], *, splice_mode: str = "single") -> Tuple[int, int]:
    """
    Merge cycles into the paths and append the rest as independent paths.

    splice_mode:
        "single"   - one pass; a cycle touching only vertices a path gained
                     in the same pass stays standalone.
        "fixpoint" - repeat passes until nothing is spliced, then promote the
                     first pending cycle to a path and continue.

    Returns (spliced, standalone).
    """
    if splice_mode not in SPLICE_MODES:
        raise ValueError(f"unknown splice_mode '{splice_mode}' (expected one of {SPLICE_MODES})")

    pending = list(cycles)
    spliced = 0
    promoted = 0
    if splice_mode == "single":
        spliced = _splice_pass(paths, pending)
    else:
        while pending:
            n = _splice_pass(paths, pending)
            spliced += n
            if n == 0 and pending:
                paths.append(pending.pop(0))
                promoted += 1

    standalone = promoted + len(pending)
    paths.extend(pending)
    return spliced, standalone


# =============================== Entry points ================================

def _check_dense_ids(arrows: Sequence[Arrow]) -> None:
    ids = sorted(a.id for a in arrows)
    if ids != list(range(len(arrows))):
        raise ValueError("arrow ids must be unique and dense (0..N-1)")


def decompose(arrows: Sequence[Arrow], *, splice_mode: str = "single", verbose: bool = False) -> DecompositionResult:
    """
    Group the arrows into the shortest possible list of deepest paths without
    repeating arrows.

    Args:
        arrows: arrows of the multigraph; ids dense 0..N-1.
        splice_mode: "single" or "fixpoint" (see splice_cycles).
        verbose: print intermediate paths and cycles.

    Returns:
        DecompositionResult with the paths and per-step counters.
    """
    if splice_mode not in SPLICE_MODES:
        raise ValueError(f"unknown splice_mode '{splice_mode}' (expected one of {SPLICE_MODES})")
    _check_dense_ids(arrows)
    n = len(arrows)
    g = MultiArrowGraph.from_arrows(arrows)

    # 1) positive-degree vertices, highest degree first
    pos_vertices = [v for v in g.get_sorted_vertices(key=lambda x: x.degree, reverse=True) if v.degree > 0]
    paths = extract_outbound_paths(g, pos_vertices, n)
    seed_paths = len(paths)

    # 2) balanced remainder: only cycles are left
    cycles: List[Path] = []
    while not g.is_empty():
        zero_vertex = next((v for v in g.get_vertices() if v.degree == 0), None)
        if zero_vertex is None:
            raise GraphStateError("residual graph is not balanced after extracting seed paths")
        found = extract_outbound_paths(g, [zero_vertex], n)
        if not found:
            raise GraphStateError(f"no cycle could be extracted from vertex {zero_vertex.id}")
        cycles.extend(found)
    num_cycles = len(cycles)

    if verbose:
        print_paths("Paths before merging with cycles:", paths)
        print_paths("Cycles before merging with paths:", cycles)

    # 3) + 4) splice, keep the rest standalone
    spliced, standalone = splice_cycles(paths, cycles, splice_mode=splice_mode)

    if verbose:
        print_paths("Result list of paths:", paths)

    return DecompositionResult(
        paths=paths,
        seed_paths=seed_paths,
        cycles=num_cycles,
        spliced=spliced,
        standalone=standalone,
    )


def break_all_into_deep_unique_paths(arrows: Sequence[Arrow], *, splice_mode: str = "single",
                                     verbose: bool = False) -> List[Path]:
    """Paths only; see decompose."""
    return decompose(arrows, splice_mode=splice_mode, verbose=verbose).paths
