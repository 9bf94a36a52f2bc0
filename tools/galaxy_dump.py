#!/usr/bin/env python3
"""
Dump procedural galaxy listings and systems to disk.

Listings (structure / nearby) are written as NPZ (same columns as
ColumnarStars) or CSV, chosen by the output suffix. A system is written as
the nested JSON record produced by project_system.

Output NPZ:
  positions:    float32 [N,3]   # ly
  ids:          int64   [N]
  luminosities: float32 [N]
  temperatures: float32 [N]
  masses:       float32 [N]
  star_types:   str     [N]
  estimated_total_stars: int64  # structure listings only

Usage examples:
  # 50k brightest structure samples for seed 42
  python tools/galaxy_dump.py --seed 42 structure --max-stars 50000 --output data/structure_42.npz

  # stars around the solar position, as CSV (radius is clamped by the config)
  python tools/galaxy_dump.py --seed 42 nearby --center 26000 0 0 --radius 16 --output data/nearby.csv

  # one system as JSON on stdout (ids come from a listing); status lines go to stderr
  python tools/galaxy_dump.py --seed 42 system --star-id <id>
"""
from __future__ import annotations

import argparse
import contextlib
import json
import sys
from pathlib import Path
from typing import List, Optional

from galaxy import ColumnarStars, GalaxyError, GalaxySession


def _write_listing(listing: ColumnarStars, output: str) -> Path:
    out = Path(output)
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.suffix.lower() == ".csv":
        listing.to_dataframe().to_csv(out, index=False)
        return out
    return listing.save_npz(out)


def _session(args: argparse.Namespace) -> GalaxySession:
    session = GalaxySession(seed=args.seed)
    if args.config:
        session.load_config(args.config)
    else:
        session.bind()
    return session


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Dump procedural galaxy data")
    ap.add_argument("--seed", type=int, default=0, help="Galaxy seed (signed 64-bit)")
    ap.add_argument("--config", default=None, help="Generator config (.toml or .json)")
    sub = ap.add_subparsers(dest="command", required=True)

    s = sub.add_parser("structure", help="Representative stars across the galaxy")
    s.add_argument("--max-stars", type=int, default=100_000)
    s.add_argument("--output", default="data/galaxy_structure.npz", help="Output .npz or .csv")

    n = sub.add_parser("nearby", help="Stars around a point")
    n.add_argument("--center", type=float, nargs=3, metavar=("X", "Y", "Z"), default=[26000.0, 0.0, 0.0])
    n.add_argument("--radius", type=float, default=16.0, help="Search radius (ly)")
    n.add_argument("--max-stars", type=int, default=10_000)
    n.add_argument("--output", default="data/galaxy_nearby.npz", help="Output .npz or .csv")

    y = sub.add_parser("system", help="Full hierarchy of one star system")
    y.add_argument("--star-id", type=int, required=True)
    y.add_argument("--output", default=None, help="JSON output path (default: stdout)")
    return ap


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    to_stdout = args.command == "system" and not args.output
    try:
        with contextlib.redirect_stdout(sys.stderr) if to_stdout else contextlib.nullcontext():
            session = _session(args)
            record = session.get_star_system(args.star_id) if args.command == "system" else None
        if args.command == "structure":
            listing = _write_listing(session.get_structure(args.max_stars), args.output)
            print(f"Wrote {listing}")
        elif args.command == "nearby":
            x, y, z = args.center
            result = session.get_nearby_stars(x, y, z, args.radius, args.max_stars)
            out = _write_listing(result, args.output)
            print(f"Wrote {out} | stars={result.count:,} | radius={result.metadata['radius']:g} ly "
                  f"| cap={result.metadata['max_stars']:,}")
        else:
            text = json.dumps(record, indent=2)
            if args.output:
                out = Path(args.output)
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_text(text, encoding="utf-8")
                print(f"Wrote {out}")
            else:
                print(text)
    except GalaxyError as exc:
        raise SystemExit(f"Error: {exc}")


if __name__ == "__main__":
    main()
