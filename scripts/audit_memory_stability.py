#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
import tracemalloc
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import conslist as cl


def _build_shared_fan(arena, length: int, branches: int):
    """One spine of `length` nodes plus `branches` lists prepended onto its tail."""
    spine = cl.List.from_iterable(range(length), arena=arena)
    base = spine.tail()
    fan = [base.prepend(("branch", b)) for b in range(branches)]
    return spine, base, fan


def _run_workload(arena, iterations: int, length: int, branches: int, validate: bool):
    for _ in range(iterations):
        spine, base, fan = _build_shared_fan(arena, length, branches)
        if validate:
            cl.require_audit_ok(arena, [spine, base, *fan], context="audit_memory")
        spine.drop()
        for lst in fan:
            lst.drop()
        base.drop()


def _serialize_stat(stat: tracemalloc.StatisticDiff) -> dict[str, Any]:
    return {
        "traceback": [str(line) for line in stat.traceback.format()],
        "size_diff_bytes": int(stat.size_diff),
        "count_diff": int(stat.count_diff),
    }


def _run_memory_audit(
    iterations: int, warmup: int, length: int, branches: int, validate: bool, top: int
):
    arena = cl.NodeArena(cl.ArenaConfig(initial_capacity=max(length + branches + 1, 2)))
    tracemalloc.start()
    if warmup:
        _run_workload(arena, warmup, length, branches, validate)
    snapshot_start = tracemalloc.take_snapshot()
    _run_workload(arena, iterations, length, branches, validate)
    snapshot_end = tracemalloc.take_snapshot()
    tracemalloc.stop()

    stats = snapshot_end.compare_to(snapshot_start, "lineno")
    total_growth = sum(stat.size_diff for stat in stats)
    arena_stats = arena.stats()
    report = {
        "iterations": iterations,
        "warmup": warmup,
        "length": length,
        "branches": branches,
        "validate": bool(validate),
        "live_count": int(arena_stats.live_count),
        "capacity": int(arena_stats.capacity),
        "total_allocs": int(arena_stats.total_allocs),
        "total_frees": int(arena_stats.total_frees),
        "growth_bytes": int(total_growth),
        "growth_mb": float(total_growth) / (1024 * 1024),
        "top_deltas": [_serialize_stat(stat) for stat in stats[:top]],
    }
    return report


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Capture tracemalloc growth for shared-list build/drop workloads."
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=10,
        help="Build/drop rounds to measure (default: 10).",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=1,
        help="Rounds before sampling (default: 1).",
    )
    parser.add_argument(
        "--length",
        type=int,
        default=10000,
        help="Spine length per round (default: 10000).",
    )
    parser.add_argument(
        "--branches",
        type=int,
        default=8,
        help="Lists sharing the spine's tail per round (default: 8).",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Top allocation deltas to report (default: 10).",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Audit arena counts before each drop.",
    )
    parser.add_argument(
        "--max-growth-mb",
        type=float,
        default=None,
        help="Fail when growth exceeds this MB (default: no threshold).",
    )
    parser.add_argument(
        "--json-out",
        type=Path,
        help="Write JSON report to this path (default: stdout).",
    )
    args = parser.parse_args()

    if args.iterations < 0 or args.warmup < 0 or args.length < 0 or args.branches < 0:
        print("iterations, warmup, length and branches must be non-negative", file=sys.stderr)
        return 2
    if args.max_growth_mb is not None and args.max_growth_mb < 0:
        print("max-growth-mb must be non-negative", file=sys.stderr)
        return 2

    report = _run_memory_audit(
        args.iterations, args.warmup, args.length, args.branches, args.validate, args.top
    )
    payload = json.dumps(report, indent=2, sort_keys=True)
    if args.json_out is None:
        print(payload)
    else:
        args.json_out.parent.mkdir(parents=True, exist_ok=True)
        args.json_out.write_text(payload, encoding="utf-8")
        print(f"audit_memory_stability: wrote {args.json_out}")

    if report["live_count"] != 0:
        print("audit_memory_stability: FAIL (nodes leaked)")
        return 1
    if args.max_growth_mb is not None:
        if report["growth_mb"] > args.max_growth_mb:
            print("audit_memory_stability: FAIL (growth exceeded)")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
