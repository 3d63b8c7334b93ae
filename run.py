# run.py
# -*- coding: utf-8 -*-
"""
Run the booking sequence optimisation and log results.

Two ways to call it:
- batch: every row of <data-root>/Data/config.csv is one run; KPIs go to
  Results/<stamp>/base_log.csv, chains to Results/<stamp>/row_XXX/.
- single: `python run.py bookings.json output.json` reads one bookings file
  and writes the optimised booking id sequence as a JSON array.
"""

import argparse
import os
import time
import traceback
import pandas as pd

from bookings import bookings_to_arrows, flatten_sequence, optimize_logistics
from data_model import Config
from debug_graph import precheck_decomposition, relocation_lower_bound
from load_data import load_and_build, load_config_table, write_sequence
from log import RunBatchLogger
from print import print_bookings, print_bookings_summary, print_graph_summary

DEFAULT_BOOKINGS = os.path.join("Data", "bookings.json")
DEFAULT_OUTPUT = "output.json"

# ---------- Kernarbeit für eine Zeile ----------

def run_one_row(i, cfg_row_dict, data_root, logger=None, *, cfg=None):
    """
    Full run for one config row: load, decompose, check, write outputs.
    Returns the base_row dict (also appended to base_log.csv when a logger is given).
    """
    tag = cfg_row_dict.get("bookings_file") or (cfg.bookings_file if cfg else "?")
    print(f"\n\n##### RUN {i}: {tag} #####")
    t0 = time.time()

    base_row = logger.base_row_template(cfg_row_dict) if logger else dict(cfg_row_dict)

    try:
        # ----- 1) Load bookings -----
        domain, cfg = load_and_build(data_root, cfg_row_dict, cfg=cfg)
        print_bookings_summary(domain)
        print_bookings(f"Bookings before sorting: (n={len(domain.bookings)})", domain.bookings)

        # ----- 2) Optimise -----
        arrows, _ = bookings_to_arrows(domain.bookings)
        if cfg.verbose:
            print_graph_summary(arrows)
        chains, result = optimize_logistics(domain.bookings, splice_mode=cfg.splice_mode, verbose=cfg.verbose)
        precheck_decomposition(arrows, result.paths)
        lower = relocation_lower_bound(arrows)
        if result.num_relocations > lower:
            print(f"[WARN] {result.num_relocations} relocations, lower bound is {lower} "
                  f"({result.standalone} standalone cycles; try splice_mode=fixpoint)")

        # ----- 3) Outputs -----
        seq = flatten_sequence(chains)
        print(f"Number of relocations: {result.num_relocations}")
        print_bookings(f"Result bookings: (n={len(seq)})", seq)
        out_path = write_sequence(domain.props["output"], seq)
        print(f"Out file name: {out_path}")

        if logger and cfg.write_logs:
            logger.write_paths(i, chains)
            logger.write_sequence(i, chains)

        # ----- 4) KPIs -----
        base_row.update({
            "status": "OK",
            "num_bookings": len(domain.bookings),
            "num_vertices": len({a.from_ for a in arrows} | {a.to for a in arrows}),
            "lower_bound": lower,
            "runtime_s": round(time.time() - t0, 3),
        })
        base_row.update(result.stats())

    except Exception as e:
        traceback.print_exc()
        base_row.update({
            "status": "ERROR",
            "num_relocations": None,
            "runtime_s": round(time.time() - t0, 3),
        })
        print(f"[ERROR] run {i} ({tag}): {e}")

    if logger:
        logger.append_base_row(base_row)
    return base_row

# ---------- main ----------

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Order vehicle bookings into chains with minimal relocations")
    ap.add_argument("bookings", nargs="?", default=None,
                    help=f"Bookings file (JSON or ;-CSV) for a single run. Default: {DEFAULT_BOOKINGS}")
    ap.add_argument("output", nargs="?", default=None,
                    help=f"Output JSON with the ordered booking ids. Default: {DEFAULT_OUTPUT}")
    ap.add_argument("--data-root", type=str, default=None,
                    help="Wurzelverzeichnis (enthält Data/config.csv und Results/) für Batch-Läufe")
    ap.add_argument("--splice-mode", choices=["single", "fixpoint"], default="single",
                    help="Cycle splicing for single runs. Standard: single")
    ap.add_argument("--verbose", action="store_true", help="Print intermediate paths and cycles")
    return ap.parse_args(argv)

def run_batch(data_root):
    cfg_df = load_config_table(data_root)

    # Zentraler Logger (legt einmal den Lauf-Ordner an)
    logger = RunBatchLogger(data_root=data_root, cfg_df=cfg_df)
    print(f"Logging to: {logger.out_dir}")

    for i, cfg_row in cfg_df.iterrows():
        run_one_row(i, cfg_row.to_dict(), data_root, logger)

    print(f"\nBase log: {logger.base_log_path}")
    return logger

def run_single(bookings, output, *, splice_mode="single", verbose=False):
    cfg = Config(
        bookings_file=bookings or DEFAULT_BOOKINGS,
        output_file=output or DEFAULT_OUTPUT,
        write_logs=False,
        splice_mode=splice_mode,
        verbose=verbose,
    )
    print(f"Input file name: {cfg.bookings_file}")
    return run_one_row(0, cfg.to_dict(), ".", cfg=cfg)

def main(argv=None):
    args = parse_args(argv)
    if args.data_root is not None and args.bookings is None:
        run_batch(args.data_root)
        return 0
    row = run_single(args.bookings, args.output, splice_mode=args.splice_mode, verbose=args.verbose)
    return 0 if row.get("status") == "OK" else 1

if __name__ == "__main__":
    raise SystemExit(main())
