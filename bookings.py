# bookings.py
"""
Booking <-> arrow glue around the decomposition.

Each booking becomes one arrow start -> end; the arrow id is the booking's
position in the input list (dense 0..N-1), independent of the booking's own
id. Paths of arrows are mapped back to bookings through that position.
"""

from typing import Dict, List, Sequence, Tuple

from data_model import Arrow, Booking, DecompositionResult
from decompose import decompose


def bookings_to_arrows(bookings: Sequence[Booking]) -> Tuple[List[Arrow], Dict[int, Booking]]:
    """Return (arrows, index_map) where index_map[arrow.id] is the source booking."""
    index_map = {k: b for k, b in enumerate(bookings)}
    arrows = [Arrow(b.start, b.end, k) for k, b in index_map.items()]
    return arrows, index_map


def paths_to_bookings(paths: Sequence[Sequence[Arrow]], index_map: Dict[int, Booking]) -> List[List[Booking]]:
    return [[index_map[a.id] for a in p] for p in paths]


def optimize_logistics(
    bookings: Sequence[Booking],
    *,
    splice_mode: str = "single",
    verbose: bool = False,
) -> Tuple[List[List[Booking]], DecompositionResult]:
    """
    Place the bookings into chains a single vehicle can serve back-to-back so
    that the number of relocations between chains is minimal.

    Returns:
        chains : one list of bookings per path (len(chains) = relocations)
        result : the underlying arrow decomposition with its counters
    """
    arrows, index_map = bookings_to_arrows(bookings)
    result = decompose(arrows, splice_mode=splice_mode, verbose=verbose)
    return paths_to_bookings(result.paths, index_map), result


def flatten_sequence(chains: Sequence[Sequence[Booking]]) -> List[Booking]:
    """Concatenate the chains into the final booking order."""
    return [b for chain in chains for b in chain]
