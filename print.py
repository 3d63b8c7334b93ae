from typing import Sequence

from data_model import Arrow, Booking, DomainData


# ---------- inspection / debug prints (compact, readable) ----------

def _fmt_seq(items: Sequence, max_items: int = 0) -> str:
    """Render arrows/bookings as ' [from-(id)->to] ...'; max_items=0 prints all."""
    shown = items if max_items <= 0 else items[:max_items]
    out = "".join(f" {x}" for x in shown)
    if 0 < max_items < len(items):
        out += " …"
    return out

def print_paths(message: str, paths: Sequence[Sequence[Arrow]], max_items: int = 0):
    """Print one line per path: '#k:\t [from-(id)->to] ...'."""
    print(f"{message} (n={len(paths)})")
    for k, p in enumerate(paths):
        print(f"#{k}:\t{_fmt_seq(p, max_items)}")
    print()

def print_bookings(message: str, bookings: Sequence[Booking], max_items: int = 0):
    """Print a booking sequence on a single line (nothing for an empty list)."""
    if bookings:
        print(message)
        print(_fmt_seq(bookings, max_items))
    print()

def print_bookings_summary(domain: DomainData, max_rows: int = 5):
    """Print compact checks for the loaded bookings."""
    df = domain.bookings_df
    print("\n=== Bookings ===")
    print(f"Source: {domain.props.get('source', '-')}")
    print(f"Bookings: {len(df)}")
    if len(df):
        print(df.head(max_rows).to_string(index=False))
        locations = set(df['start'].tolist()) | set(df['end'].tolist())
        print(f"Locations: {len(locations)}  round trips (start == end): {int((df['start'] == df['end']).sum())}")

    print("\nConfig row (selected):")
    for k, v in domain.config.items():
        print(f"  {k}: {v}")

def print_graph_summary(arrows: Sequence[Arrow]):
    """Degree statistics of the booking graph (out - in per location)."""
    import numpy as np
    from debug_graph import degree_vector

    print("\n=== Graph ===")
    vids, deg = degree_vector(arrows)
    print(f"Vertices: {len(vids)}  Arrows: {len(arrows)}")
    if len(vids):
        print(f"Degree (out-in): min={deg.min()} max={deg.max()} "
              f"positive={int((deg > 0).sum())} balanced={int((deg == 0).sum())} negative={int((deg < 0).sum())}")
        print(f"Relocation lower bound (sum of positive degrees): {int(np.clip(deg, 0, None).sum())}")
