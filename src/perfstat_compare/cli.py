"""Command line entry for perfstat-compare.

Subcommands:
- clean-perf-stat-json - repair a raw ``perf stat -j`` export into a JSON array
- box-plot-branch-vs-branchless - bar chart of core instructions of two runs
- line-over-x - charts over a sweep of x values (one file per x and variant)
"""
from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from . import charts
from .clean import repair_file
from .config import as_dict, load_config
from .errors import PerfStatError
from .logs import make_logger
from .records import load_run, load_runs, sweep_files
from .render import save_charts


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="perfstat-compare", description="Compare perf stat counters of branching vs branchless runs")
    ap.add_argument("--config", default=None, help="YAML config (styles, chart, logging)")
    ap.add_argument("--no-log", action="store_true", help="disable the NDJSON run log")
    sub = ap.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("clean-perf-stat-json", help="repair a perf stat JSON export")
    c.add_argument("-i", "--input-file", required=True)
    c.add_argument("-o", "--output-file", default=None, help="existing file to overwrite; prints to stdout if omitted")

    b = sub.add_parser("box-plot-branch-vs-branchless", help="compare core instructions of two runs")
    b.add_argument("-b", "--in-branching-json", required=True)
    b.add_argument("-l", "--in-branchless-json", required=True)
    b.add_argument("--save-to", default="bchar.svg")

    x = sub.add_parser("line-over-x", help="plot counters over a sweep of x values")
    x.add_argument("x_vals", nargs="+", type=int)
    x.add_argument("--json-dir", required=True)
    x.add_argument("--branching-prefix", required=True)
    x.add_argument("--branchless-prefix", required=True)
    x.add_argument("--save-to", required=True)
    x.add_argument("--plot-type", required=True, choices=[p.value for p in charts.PlotType])
    return ap


def _clean(args, cfg, logger):
    fixed = repair_file(args.input_file, args.output_file, logger)
    if args.output_file is None:
        print(fixed)


def _bar(args, cfg, logger):
    br = load_run(args.in_branching_json)
    bl = load_run(args.in_branchless_json)
    chart = charts.instructions_bar_chart(br, bl, cfg, logger)
    print(f"Branching instructions = {int(chart.bars[0].value)}", file=sys.stderr)
    print(f"Branchless instructions = {int(chart.bars[1].value)}", file=sys.stderr)
    save_charts([chart], args.save_to, cfg.chart, logger)


def _line_over_x(args, cfg, logger):
    print(f"Producing function over {args.x_vals}")
    br_files = sweep_files(args.json_dir, args.branching_prefix, args.x_vals)
    bl_files = sweep_files(args.json_dir, args.branchless_prefix, args.x_vals)
    br_runs = load_runs(br_files)
    bl_runs = load_runs(bl_files)
    logger.write({"type": "info", "msg": "runs_loaded", "data": {
        "x_vals": args.x_vals, "branching": [str(f) for f in br_files], "branchless": [str(f) for f in bl_files],
    }})
    built = charts.build_line_charts(args.plot_type, args.x_vals, br_runs, bl_runs, cfg, logger)
    save_charts(built, args.save_to, cfg.chart, logger)


_COMMANDS = {
    "clean-perf-stat-json": _clean,
    "box-plot-branch-vs-branchless": _bar,
    "line-over-x": _line_over_x,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
        if args.no_log:
            cfg.logging.enabled = False
        logger = make_logger(cfg.logging)
    except PerfStatError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    with logger:
        logger.write({"type": "debug", "msg": "config", "data": as_dict(cfg)})
        try:
            _COMMANDS[args.cmd](args, cfg, logger)
        except PerfStatError as e:
            logger.write({"type": "error", "msg": "pipeline_error", "data": {"kind": type(e).__name__, "error": str(e)}})
            print(f"error: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
