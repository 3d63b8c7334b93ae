# debug_graph.py
from typing import List, Sequence, Tuple
import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from data_model import Arrow


def _incidence(arrows: Sequence[Arrow]):
    """Vertex index mapping and CSR incidence (V×A): +1 at tail, -1 at head."""
    vids = sorted({a.from_ for a in arrows} | {a.to for a in arrows})
    vid_to_idx = {v: i for i, v in enumerate(vids)}
    rows, cols, data = [], [], []
    for a in arrows:
        rows.append(vid_to_idx[a.from_]); cols.append(a.id); data.append(1)
        rows.append(vid_to_idx[a.to]);    cols.append(a.id); data.append(-1)
    # duplicate (row, col) entries are summed: a self loop nets to 0
    inc = csr_matrix((data, (rows, cols)), shape=(len(vids), len(arrows)), dtype=np.int64)
    return vids, vid_to_idx, inc

def degree_vector(arrows: Sequence[Arrow]) -> Tuple[List[int], np.ndarray]:
    """Vertex ids (sorted) and their degree out - in."""
    vids, _, inc = _incidence(arrows)
    deg = np.asarray(inc.sum(axis=1)).ravel().astype(int) if len(vids) else np.zeros(0, dtype=int)
    return vids, deg

def relocation_lower_bound(arrows: Sequence[Arrow]) -> int:
    """
    Fewest paths any decomposition can reach: per weakly connected component,
    max(1, sum of positive degrees).
    """
    if not arrows:
        return 0
    vids, vid_to_idx, _ = _incidence(arrows)
    _, deg = degree_vector(arrows)
    rows = [vid_to_idx[a.from_] for a in arrows]
    cols = [vid_to_idx[a.to] for a in arrows]
    adj = csr_matrix((np.ones(len(arrows)), (rows, cols)), shape=(len(vids), len(vids)))
    n_comp, labels = connected_components(adj, directed=True, connection="weak")
    pos = np.clip(deg, 0, None)
    per_comp = np.bincount(labels, weights=pos, minlength=n_comp)
    return int(np.maximum(per_comp, 1).sum())

def check_decomposition(arrows: Sequence[Arrow], paths: Sequence[Sequence[Arrow]], max_report: int = 20) -> List[str]:
    """
    Verify that paths cover every arrow exactly once and that consecutive
    arrows connect. Returns a list of problems (empty when all is fine).
    """
    problems: List[str] = []
    seen = {}
    for k, p in enumerate(paths):
        if not p:
            problems.append(f"path #{k} is empty")
        for a in p:
            if a.id in seen:
                problems.append(f"arrow {a} in path #{seen[a.id]} and path #{k}")
            seen[a.id] = k
        for a, b in zip(p[:-1], p[1:]):
            if a.to != b.from_:
                problems.append(f"path #{k} breaks between {a} and {b}")
    expected = {a.id: a for a in arrows}
    for aid in sorted(set(expected) - set(seen)):
        problems.append(f"arrow {expected[aid]} not covered")
    for aid in sorted(set(seen) - set(expected)):
        problems.append(f"unknown arrow id {aid} in path #{seen[aid]}")
    return problems[:max_report] if max_report > 0 else problems

def precheck_decomposition(arrows: Sequence[Arrow], paths: Sequence[Sequence[Arrow]], max_report: int = 20) -> bool:
    bad = check_decomposition(arrows, paths, max_report)
    if bad:
        print("[check] Decomposition problems (first hits):", bad)
    else:
        print(f"[check] All {len(arrows)} arrows covered exactly once by {len(paths)} connected paths.")
    return not bad
