# load_data.py
# -*- coding: utf-8 -*-
"""
Reads run configuration and booking files and builds typed structures for
the decomposition.

Public API:
    load_config_table(data_root: str) -> pd.DataFrame
    parse_config_row(cfg_row: dict) -> Config
    read_bookings(path: str) -> pd.DataFrame
    load_and_build(data_root: str, cfg_row: dict) -> (DomainData, Config)
    write_sequence(path: str, bookings) -> str

Notes / conventions:
- Bookings are JSON arrays of {"id", "start", "end"} objects, or ';'-separated
  CSV files with the same columns (header required).
- Locations are small non-negative ints; booking ids must be unique.
  Anything else is rejected here, before a graph is built.
"""

from typing import Any, List, Optional, Sequence, Tuple
import json
import os
import pandas as pd

from data_model import Booking, Config, DomainData
from decompose import SPLICE_MODES

BOOKING_COLUMNS = ['id', 'start', 'end']

# ============================================================================
# Small parsing helpers
# ============================================================================

def _is_missing(x) -> bool:
    if x is None:
        return True
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False

def _as_bool(x, default=False) -> bool:
    """Loose boolean parsing with sensible defaults for CSV strings."""
    if _is_missing(x):
        return default
    s = str(x).strip().lower()
    if s in ("1", "true", "yes", "y"): return True
    if s in ("0", "false", "no", "n"): return False
    return default

def _as_str(x, default: str = "") -> str:
    if _is_missing(x):
        return default
    s = str(x).strip()
    return s or default

def _must(path: str) -> str:
    """Fail fast if a required file/dir does not exist."""
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    return path

def _cfg_key(d: dict, name: str) -> str:
    """Case-insensitive lookup of a column name in the config row dict."""
    for k in d.keys():
        if str(k).strip().lower() == name.lower():
            return k
    raise KeyError(f"Missing '{name}' in config row")

def _cfg_get(d: dict, name: str, default: Any = None) -> Any:
    try:
        return d[_cfg_key(d, name)]
    except KeyError:
        return default

def _norm_splice_mode(x) -> str:
    s = _as_str(x, "single").lower()
    if s not in SPLICE_MODES:
        print(f"[WARN] unknown splice_mode '{s}', falling back to 'single'")
        return "single"
    return s

def _resolve(data_root: str, path: str) -> str:
    return path if os.path.isabs(path) else os.path.join(data_root, path)

# ============================================================================
# Config parsing
# ============================================================================

def parse_config_row(cfg_row: dict) -> Config:
    """Parse a raw config.csv row (dict) into a typed Config instance."""
    bookings_file = _as_str(cfg_row[_cfg_key(cfg_row, 'bookings_file')])
    if not bookings_file:
        raise ValueError("Empty 'bookings_file' in config row")

    return Config(
        bookings_file=bookings_file,
        output_file=_as_str(_cfg_get(cfg_row, 'output_file'), "output.json"),
        write_logs=_as_bool(_cfg_get(cfg_row, 'write_logs'), True),
        splice_mode=_norm_splice_mode(_cfg_get(cfg_row, 'splice_mode')),
        verbose=_as_bool(_cfg_get(cfg_row, 'verbose'), False),
    )

def load_config_table(data_root: str) -> pd.DataFrame:
    """Data/config.csv: one run per row."""
    return pd.read_csv(_must(os.path.join(data_root, "Data", "config.csv")), sep=';')

# ============================================================================
# Booking readers
# ============================================================================

def validate_bookings_df(df: pd.DataFrame) -> pd.DataFrame:
    """
    Keep id/start/end as ints and reject what the graph cannot take:
    missing columns, non-integer values, negative locations, duplicate ids.
    """
    df = df.rename(columns=lambda c: str(c).strip().lower())
    missing = [c for c in BOOKING_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Bookings table misses column(s) {missing}")

    out = df[BOOKING_COLUMNS].copy()
    for col in BOOKING_COLUMNS:
        num = pd.to_numeric(out[col], errors='coerce').astype(float)
        if num.isna().any() or (num != num.round()).any():
            bad = out[col][num.isna() | (num != num.round())].tolist()[:5]
            raise ValueError(f"Bookings column '{col}' must hold integers (bad values: {bad})")
        out[col] = num.astype(int)

    neg = out[(out['start'] < 0) | (out['end'] < 0)]
    if len(neg):
        raise ValueError(f"Negative location in bookings {neg['id'].tolist()[:5]}")

    dup = out['id'][out['id'].duplicated()]
    if len(dup):
        raise ValueError(f"Duplicate booking id(s) {sorted(set(dup.tolist()))[:5]}")
    return out.reset_index(drop=True)

def read_bookings_json(path: str) -> pd.DataFrame:
    """JSON array: [{"id": 1, "start": 0, "end": 3}, ...]"""
    df = pd.read_json(_must(path), orient='records', dtype=False, convert_dates=False)
    if df.empty and not len(df.columns):
        df = pd.DataFrame(columns=BOOKING_COLUMNS)
    return validate_bookings_df(df)

def read_bookings_csv(path: str) -> pd.DataFrame:
    """bookings.csv: id;start;end (header row required)."""
    df = pd.read_csv(_must(path), sep=';', comment='#')
    return validate_bookings_df(df)

def read_bookings(path: str) -> pd.DataFrame:
    """Dispatch on file extension (.csv -> CSV, anything else -> JSON)."""
    if os.path.splitext(path)[1].lower() == '.csv':
        return read_bookings_csv(path)
    return read_bookings_json(path)

def bookings_from_df(df: pd.DataFrame) -> List[Booking]:
    return [Booking(int(r.id), int(r.start), int(r.end)) for r in df.itertuples(index=False)]

# ============================================================================
# Writers
# ============================================================================

def write_sequence(path: str, bookings: Sequence[Booking]) -> str:
    """Write the booking ids in order as a JSON array: [id, id, ...]."""
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump([int(b.id) for b in bookings], fh)
    return path

# ============================================================================
# Top-level loader
# ============================================================================

def load_and_build(data_root: str, cfg_row: dict, *, cfg: Optional[Config] = None) -> Tuple[DomainData, Config]:
    """
    Parse the config row, read the bookings it points to and bundle both.

    Steps:
      1) Parse typed Config (unless one is given).
      2) Resolve and read the bookings file.
      3) Wrap raw table + typed bookings + config dict as DomainData.

    Returns:
        (DomainData, Config)
    """
    cfg = cfg or parse_config_row(cfg_row)
    src = _resolve(data_root, cfg.bookings_file)
    df = read_bookings(src)

    domain = DomainData(
        bookings_df=df,
        bookings=bookings_from_df(df),
        config=cfg.to_dict(),
        props={"source": src, "output": _resolve(data_root, cfg.output_file)},
    )
    return domain, cfg
