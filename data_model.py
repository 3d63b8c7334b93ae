# data_model.py
from dataclasses import dataclass, asdict, field
from typing import List, Dict, Optional, Literal
import pandas as pd


# -----------------------------------------------------------------------------
# Graph primitives
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Arrow:
    """Directed arrow of the booking multigraph.

    Attributes:
        from_: Start vertex id (pick-up location).
        to: End vertex id (drop-off location).
        id: Dense internal arrow id 0..N-1 (positional, not persisted).
    """
    from_: int
    to: int
    id: int

    def __str__(self) -> str:
        return f"[{self.from_}-({self.id})->{self.to}]"


# A path is an ordered list of arrows with path[i].to == path[i+1].from_.
Path = List[Arrow]


# -----------------------------------------------------------------------------
# Input-side booking record (human-friendly)
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Booking:
    """Single trip order coming from the input file.

    Attributes:
        id: External booking id (unique within one input file).
        start: Pick-up location id (small non-negative int).
        end: Drop-off location id (small non-negative int).
    """
    id: int
    start: int
    end: int

    def __str__(self) -> str:
        return f"[{self.start}-({self.id})->{self.end}]"


# -----------------------------------------------------------------------------
# Decomposition outcome (paths + bookkeeping for logging)
# -----------------------------------------------------------------------------
@dataclass
class DecompositionResult:
    """Paths produced by the decomposition plus counters for the run log.

    Attributes:
        paths: Arrow-disjoint paths covering every input arrow exactly once.
        seed_paths: Paths extracted from positive-degree vertices (step 1).
        cycles: Residual cycles extracted after step 1.
        spliced: Cycles merged into another path.
        standalone: Cycles returned as independent paths.
    """
    paths: List[Path] = field(default_factory=list)
    seed_paths: int = 0
    cycles: int = 0
    spliced: int = 0
    standalone: int = 0

    @property
    def num_relocations(self) -> int:
        return len(self.paths)

    def stats(self) -> dict:
        return {
            "num_relocations": len(self.paths),
            "seed_paths": self.seed_paths,
            "cycles": self.cycles,
            "spliced": self.spliced,
            "standalone": self.standalone,
        }


SpliceMode = Literal["single", "fixpoint"]


# -----------------------------------------------------------------------------
# Flat configuration (values from Data/config.csv or the command line)
# -----------------------------------------------------------------------------
@dataclass
class Config:
    """Run-time configuration parameters.

    Notes:
        - splice_mode "single" keeps the one forward pass over the cycles;
          "fixpoint" repeats passes until no cycle can be merged any more.
        - Relative file names are resolved against the data root.
    """

    # Required identifiers (used to locate data on disk)
    bookings_file: str

    # Output
    output_file: str = "output.json"
    write_logs: bool = True

    # Algorithm switches
    splice_mode: SpliceMode = "single"
    verbose: bool = False

    def to_dict(self) -> dict:
        """Return a plain dictionary (useful for logging/serialization)."""
        return asdict(self)


# -----------------------------------------------------------------------------
# All raw domain inputs bundled (before graph construction)
# -----------------------------------------------------------------------------
@dataclass
class DomainData:
    """Container holding the raw bookings table and configuration for a run.

    Attributes:
        bookings_df: Table of bookings (id, start, end) as parsed from disk.
        bookings: Typed bookings in input order.
        config: Raw config dict (values from config.csv).
    """
    bookings_df: pd.DataFrame
    bookings: List[Booking]
    config: dict
    props: Dict[str, Optional[str]] = field(default_factory=dict)
