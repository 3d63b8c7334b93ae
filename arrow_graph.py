# arrow_graph.py
# -*- coding: utf-8 -*-
"""
Mutable directed multigraph used by the booking decomposition.

Vertices keep arrow ids per neighbour (not Arrow objects), so the graph is a
plain mapping vertex id -> Vertex without reference cycles. The graph is
consumed destructively: arrows are removed as paths are extracted and a
vertex disappears as soon as it has neither inbound nor outbound arrows.

Consistency invariant:
    every id in u.out_arrows[v] has exactly one mirror entry in
    v.in_arrows[u], and the counters equal the number of stored ids.
Violations raise GraphStateError.
"""

from typing import Callable, Dict, Iterable, List, Optional, Set

from data_model import Arrow


class GraphStateError(RuntimeError):
    """Internal bookkeeping of the graph is inconsistent (a bug, not bad input)."""


class Vertex:
    """Graph vertex with all inbound and outbound arrow ids."""

    def __init__(self, vid: int):
        self.id = vid
        self.num_out_arrows = 0
        self.num_in_arrows = 0
        # neighbour id -> ids of arrows self -> neighbour
        self.out_arrows: Dict[int, Set[int]] = {}
        # neighbour id -> ids of arrows neighbour -> self
        self.in_arrows: Dict[int, Set[int]] = {}

    @property
    def degree(self) -> int:
        """Outbound minus inbound arrows (may be negative)."""
        return self.num_out_arrows - self.num_in_arrows

    @property
    def total_arrows(self) -> int:
        return self.num_out_arrows + self.num_in_arrows

    # ---------- insertion ----------

    def add_out_arrow(self, to: int, arrow_id: int) -> None:
        ids = self.out_arrows.setdefault(to, set())
        if arrow_id not in ids:
            ids.add(arrow_id)
            self.num_out_arrows += 1

    def add_in_arrow(self, from_: int, arrow_id: int) -> None:
        ids = self.in_arrows.setdefault(from_, set())
        if arrow_id not in ids:
            ids.add(arrow_id)
            self.num_in_arrows += 1

    # ---------- removal ----------

    def remove_out_arrow(self, to: int, arrow_id: int) -> None:
        _discard(self.out_arrows, to, arrow_id, f"vertex {self.id} has no outbound arrow {arrow_id} to {to}")
        self.num_out_arrows -= 1

    def remove_in_arrow(self, from_: int, arrow_id: int) -> None:
        _discard(self.in_arrows, from_, arrow_id, f"vertex {self.id} has no inbound arrow {arrow_id} from {from_}")
        self.num_in_arrows -= 1

    # ---------- views ----------

    def get_out_arrows(self) -> List[Arrow]:
        """Current outbound arrows as Arrow objects (one per arrow id)."""
        return [Arrow(self.id, to, aid) for to, ids in self.out_arrows.items() for aid in ids]

    def __repr__(self) -> str:
        return (f"Vertex(id={self.id}, out={self.num_out_arrows}, in={self.num_in_arrows}, "
                f"out_arrows={self.out_arrows}, in_arrows={self.in_arrows})")


def _discard(buckets: Dict[int, Set[int]], key: int, arrow_id: int, msg: str) -> None:
    """Remove arrow_id from buckets[key]; drop the bucket once it is empty."""
    ids = buckets.get(key)
    if ids is None or arrow_id not in ids:
        raise GraphStateError(msg)
    ids.remove(arrow_id)
    if not ids:
        del buckets[key]


class MultiArrowGraph:
    """Directed multigraph stored as vertex id -> Vertex."""

    def __init__(self, matrix: Optional[Dict[int, Vertex]] = None):
        self.matrix: Dict[int, Vertex] = matrix if matrix is not None else {}

    @classmethod
    def from_arrows(cls, arrows: Iterable[Arrow]) -> "MultiArrowGraph":
        """
        Build the graph from its arrows.

        Precondition: arrow ids are unique and dense (0..N-1); the path search
        sizes its visited marker by the number of arrows.
        """
        matrix: Dict[int, Vertex] = {}
        for arrow in arrows:
            v1 = matrix.get(arrow.from_)
            if v1 is None:
                v1 = matrix[arrow.from_] = Vertex(arrow.from_)
            v1.add_out_arrow(arrow.to, arrow.id)

            v2 = matrix.get(arrow.to)
            if v2 is None:
                v2 = matrix[arrow.to] = Vertex(arrow.to)
            v2.add_in_arrow(arrow.from_, arrow.id)
        return cls(matrix)

    # ---------- lookups ----------

    def get_vertex(self, vid: int) -> Optional[Vertex]:
        """Vertex by id, or None once it has left the graph."""
        return self.matrix.get(vid)

    def get_vertices(self) -> List[Vertex]:
        return list(self.matrix.values())

    def get_sorted_vertices(self, key: Callable[[Vertex], int], reverse: bool = False) -> List[Vertex]:
        return sorted(self.matrix.values(), key=key, reverse=reverse)

    def is_empty(self) -> bool:
        return not self.matrix

    @property
    def num_vertices(self) -> int:
        return len(self.matrix)

    @property
    def num_arrows(self) -> int:
        return sum(v.num_out_arrows for v in self.matrix.values())

    # ---------- mutation ----------

    def remove_sub_graph(self, arrows: Iterable[Arrow]) -> None:
        """Remove the given arrows and every vertex left without arrows."""
        for arrow in arrows:
            v1 = self._must_vertex(arrow.from_, arrow)
            v1.remove_out_arrow(arrow.to, arrow.id)
            if v1.total_arrows == 0:
                del self.matrix[v1.id]

            v2 = self._must_vertex(arrow.to, arrow)
            v2.remove_in_arrow(arrow.from_, arrow.id)
            if v2.total_arrows == 0:
                del self.matrix[v2.id]

    def _must_vertex(self, vid: int, arrow: Arrow) -> Vertex:
        v = self.matrix.get(vid)
        if v is None:
            raise GraphStateError(f"vertex {vid} of arrow {arrow} is not in the graph")
        return v
