#!/usr/bin/env python3
"""Terrain Sweeps - render the six standard height fields as pitch-sweep GIFs.

Each job draws one surface inside a fixed 3-D box while the camera tilts from
a level view up towards top-down and back. All jobs run concurrently.

Usage:
    # All six animations into ./out
    python examples/terrain_sweeps.py

    # Only the noise surfaces, using threads instead of processes
    python examples/terrain_sweeps.py --only perlin perlin_long --executor thread

    # Quick low-resolution preview
    python examples/terrain_sweeps.py --size 200 --density 2
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from terrainsweep import (
    DEFAULT_AMPLITUDE_DIVISOR,
    DEFAULT_PERLIN_SEED,
    DEFAULT_SURFACE_LEVEL,
    AnimationConfig,
    AnimationJob,
    FlatField,
    PerlinField,
    SineField,
    StochasticFlatField,
    run_jobs,
    summarize,
)


def standard_fields(seed: int | None = None) -> dict:
    """The six standard surfaces keyed by output name."""
    level = DEFAULT_SURFACE_LEVEL
    damp = DEFAULT_AMPLITUDE_DIVISOR
    return {
        "flat": FlatField(level),
        "flat_random": StochasticFlatField(level, seed=seed),
        "sine_curve": SineField(level, wavelength=1.0, amplitude_divisor=damp),
        "sine_curve_long": SineField(level, wavelength=4.0, amplitude_divisor=damp),
        "perlin": PerlinField(level, wavelength=1.0, amplitude_divisor=damp, seed=DEFAULT_PERLIN_SEED),
        "perlin_long": PerlinField(level, wavelength=4.0, amplitude_divisor=damp, seed=DEFAULT_PERLIN_SEED),
    }


def build_jobs(out_dir: Path, config: AnimationConfig, only=None, seed=None) -> list:
    fields = standard_fields(seed)
    names = only or list(fields)
    unknown = [n for n in names if n not in fields]
    if unknown:
        raise SystemExit(f"Unknown job(s): {', '.join(unknown)}; choose from {', '.join(fields)}")
    return [AnimationJob(fields[n], config, out_dir / f"{n}.gif", name=n) for n in names]


def main() -> int:
    parser = argparse.ArgumentParser(description="Render terrain pitch-sweep animations")
    parser.add_argument("--out", type=Path, default=Path("out"), help="Output directory")
    parser.add_argument("--only", nargs="+", help="Subset of jobs to render")
    parser.add_argument("--executor", choices=["process", "thread"], default="process")
    parser.add_argument("--size", type=int, help="Square canvas size in pixels (default 500)")
    parser.add_argument("--density", type=float, help="Grid samples per unit (default 5)")
    parser.add_argument("--seed", type=int, help="Seed for the random flat surface")
    parser.add_argument("-v", "--verbose", action="store_true", help="Per-frame debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(processName)s %(name)s %(levelname)s: %(message)s",
    )

    overrides = {}
    if args.size:
        overrides.update(width=args.size, height=args.size)
    if args.density:
        overrides["step_density"] = args.density
    config = AnimationConfig().replace(**overrides)

    args.out.mkdir(parents=True, exist_ok=True)
    jobs = build_jobs(args.out, config, only=args.only, seed=args.seed)
    results = run_jobs(jobs, executor=args.executor)

    succeeded, failed = summarize(results)
    for result in results:
        status = "OK" if result.ok else "FAILED"
        print(f"  {status:6s} {result.name:16s} {result.elapsed_s:6.1f}s  {result.output_path}")
    print(f"{len(succeeded)} succeeded, {len(failed)} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
