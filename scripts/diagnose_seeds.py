#!/usr/bin/env python3
"""World structural diagnostics for specific seeds.

Usage:
  python scripts/diagnose_seeds.py 292372 730727

Builds every world twice and checks that both builds agree, and that on each
depth the stairs are reachable from each other over open terrain. If no
seeds are provided as CLI args, a default list is used. Exits with non-zero
status if structural issues are detected.
"""

from __future__ import annotations

import json
import os
import sys
from typing import List

# Ensure project root on path if executed directly
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hexdelve.config import WorldConfig  # noqa: E402 import after path fix
from hexdelve.mapgen import MapgenError, flood_fill  # noqa: E402 import after path fix
from hexdelve.world.worldgen import Worldgen  # noqa: E402 import after path fix

DEFAULT_SEEDS = [292372, 730727]


def disconnected_stairs(world: Worldgen, depth: int) -> int:
    """Number of stairs on ``depth`` not reachable from the first one."""
    open_cells = {(loc.x, loc.y) for loc, t in world.terrain.items() if loc.z == depth and t.is_open()}
    stairs = sorted((loc.x, loc.y) for loc in world.portals if loc.z == depth)
    if not stairs:
        return 0
    reached = flood_fill(open_cells, stairs[0])
    return sum(1 for s in stairs if s not in reached)


def run_for_seed(seed: int, config: WorldConfig) -> dict:
    try:
        first = Worldgen(seed, config)
        second = Worldgen(seed, config)
    except MapgenError as e:
        return {"seed": seed, "error": str(e), "ok": False}
    issues = {
        "nondeterministic": int(first != second or first.spawns() != second.spawns()),
        "disconnected_stairs": sum(disconnected_stairs(first, z) for z in range(1, config.depth_count + 1)),
    }
    return {"seed": seed, "issues": issues, "ok": all(v == 0 for v in issues.values())}


def main(argv: List[str]) -> int:
    seeds = [int(a) for a in argv] if argv else DEFAULT_SEEDS
    config = WorldConfig.from_env()
    results = [run_for_seed(s, config) for s in seeds]
    print(json.dumps({"results": results}, indent=2))
    # Non-zero exit if any failure
    if not all(r["ok"] for r in results):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
