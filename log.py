# log.py
# -*- coding: utf-8 -*-
"""
Logging utilities for booking-sequence runs.

Creates a timestamped Results/<YYYY_MM_DD_HH_MM>/ folder and manages:
- base_log.csv (one row per run; config.csv columns + KPIs)
- row_XXX/paths.csv (one row per vehicle chain)
- row_XXX/sequence.csv (one row per booking, in output order)

All CSVs use ';' as separator to match config.csv.
"""

from __future__ import annotations
import csv
import os
from datetime import datetime
from typing import Dict, Any, List, Sequence
import pandas as pd

from data_model import Booking


# ---------- Extra KPI columns that we append to base_log.csv ----------
BASE_EXTRA_COLS = [
    "status", "num_bookings", "num_vertices",
    "num_relocations", "lower_bound",
    "seed_paths", "cycles", "spliced", "standalone",
    "runtime_s",
]


# ---------- Small helpers (pure formatting) ----------

def _chain_to_nodes_and_ids(chain: Sequence[Booking]):
    """
    Convert a booking chain into:
      - nodes_str: "l0,l1,l2,..." (locations visited)
      - ids_str  : "b0;b1;..."     (booking ids)
      - start, end location (None for an empty chain)
    """
    if not chain:
        return "", "", None, None
    nodes = [chain[0].start] + [b.end for b in chain]
    nodes_str = ",".join(str(n) for n in nodes)
    ids_str = ";".join(str(b.id) for b in chain)
    return nodes_str, ids_str, nodes[0], nodes[-1]


# ---------- Main logger class ----------

class RunBatchLogger:
    """Creates run folders and writes all CSV logs for each config row."""

    def __init__(self, data_root: str, cfg_df: pd.DataFrame, *, stamp: str | None = None):
        self.data_root = data_root
        self.stamp = stamp or datetime.now().strftime("%Y_%m_%d_%H_%M")
        self.out_dir = os.path.join(self.data_root, "Results", self.stamp)
        os.makedirs(self.out_dir, exist_ok=True)

        # Base log schema = all config.csv columns + KPI columns
        self.base_columns = [c for c in cfg_df.columns if c not in BASE_EXTRA_COLS] + BASE_EXTRA_COLS
        self.base_log_path = os.path.join(self.out_dir, "base_log.csv")

        # Initialize base_log.csv header once
        if not os.path.exists(self.base_log_path):
            pd.DataFrame(columns=self.base_columns).to_csv(self.base_log_path, sep=';', index=False)

    # ---------- directory helpers ----------

    def run_dir(self, run_index: int, *, name: str | None = None) -> str:
        """
        Returns the folder for a specific config row.
        Default: Results/<stamp>/row_XXX/
        """
        dirname = f"row_{int(run_index):03d}" if not name else f"row_{int(run_index):03d}_{name}"
        path = os.path.join(self.out_dir, dirname)
        os.makedirs(path, exist_ok=True)
        return path

    # ---------- base_log.csv ----------

    def base_row_template(self, cfg_row: pd.Series | Dict[str, Any]) -> Dict[str, Any]:
        """Prepare a dict with config columns from cfg_row and KPI columns set to None."""
        base = {k: cfg_row.get(k, None) for k in self.base_columns if k not in BASE_EXTRA_COLS}
        for k in BASE_EXTRA_COLS:
            base[k] = None
        return base

    def append_base_row(self, row_dict: Dict[str, Any]) -> None:
        """Append a single line to base_log.csv (flush immediately)."""
        df = pd.DataFrame([row_dict], columns=self.base_columns)
        df.to_csv(self.base_log_path, sep=';', index=False, mode='a', header=False)

    def read_base_log(self) -> pd.DataFrame:
        return pd.read_csv(self.base_log_path, sep=';')

    # ---------- chains ----------

    def write_paths(self, run_index: int, chains: List[List[Booking]]) -> str:
        """
        One row per chain (= one vehicle):
        path;length;start;end;nodes;booking_ids
        """
        rows = []
        for k, chain in enumerate(chains):
            nodes_str, ids_str, u0, v1 = _chain_to_nodes_and_ids(chain)
            rows.append({
                "path": k, "length": len(chain),
                "start": u0, "end": v1,
                "nodes": nodes_str, "booking_ids": ids_str,
            })
        df = pd.DataFrame(rows, columns=["path", "length", "start", "end", "nodes", "booking_ids"])
        path = os.path.join(self.run_dir(run_index), "paths.csv")
        df.to_csv(path, sep=';', index=False)
        return path

    def write_sequence(self, run_index: int, chains: List[List[Booking]]) -> str:
        """
        Flattened booking order with the chain each booking belongs to.
        relocation = 1 on the first booking of every chain but the first.
        """
        out_csv = os.path.join(self.run_dir(run_index), "sequence.csv")
        with open(out_csv, "w", newline="", encoding="utf-8") as fh:
            wr = csv.writer(fh, delimiter=";")
            wr.writerow(["position", "path", "booking_id", "start", "end", "relocation"])
            pos = 0
            for k, chain in enumerate(chains):
                for j, b in enumerate(chain):
                    reloc = 1 if (j == 0 and k > 0) else 0
                    wr.writerow([pos, k, b.id, b.start, b.end, reloc])
                    pos += 1
        return out_csv
