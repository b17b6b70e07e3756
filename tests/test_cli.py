import json
from pathlib import Path

import pytest

from perfstat_compare.charts import Bar, BarChart, Line, LineChart
from perfstat_compare.cli import main
from perfstat_compare.config import ChartCfg
from perfstat_compare.errors import EmptyAggregationError, PerfStatIOError
from perfstat_compare.render import save_charts


def raw_export(core, atom, misses="10,00", duration="2000000000,00"):
    lines = [
        {"counter-value": core, "unit": "", "event": "cpu_core/instructions:u/", "event-runtime": 1, "pcnt-running": 100.0, "metric-value": "1,10", "metric-unit": "insn per cycle"},
        {"counter-value": atom, "unit": "", "event": "cpu_atom/instructions:u/", "event-runtime": 1, "pcnt-running": 100.0, "metric-value": "0,00", "metric-unit": ""},
        {"counter-value": "1000,00", "unit": "", "event": "cpu_core/branch-misses:u/", "event-runtime": 1, "pcnt-running": 100.0, "metric-value": misses, "metric-unit": "of all branches"},
        {"counter-value": duration, "unit": "ns", "event": "duration_time:u", "event-runtime": 0, "pcnt-running": 100.0, "metric-value": "0,00", "metric-unit": ""},
    ]
    return "".join(json.dumps(l) + "\n" for l in lines)


def write_sweep(tmp_path: Path, prefix: str, x_vals, core, atom):
    """Write raw exports and repair them through the CLI, one file per x."""
    d = tmp_path / "json"
    d.mkdir(exist_ok=True)
    for x in x_vals:
        raw = tmp_path / f"raw_{prefix}{x}.txt"
        raw.write_text(raw_export(core, atom), encoding="utf-8")
        out = d / f"{prefix}{x}.json"
        out.write_text("", encoding="utf-8")
        assert main(["--no-log", "clean-perf-stat-json", "-i", str(raw), "-o", str(out)]) == 0
    return d


def test_clean_prints_to_stdout(tmp_path, capsys):
    raw = tmp_path / "raw.txt"
    raw.write_text(raw_export("12,5", "<not counted>"), encoding="utf-8")
    assert main(["--no-log", "clean-perf-stat-json", "-i", str(raw)]) == 0
    recs = json.loads(capsys.readouterr().out)
    assert recs[0]["counter-value"] == "12.5"
    assert len(recs) == 4


def test_clean_missing_destination_is_reported(tmp_path, capsys):
    raw = tmp_path / "raw.txt"
    raw.write_text(raw_export("1", "1"), encoding="utf-8")
    rc = main(["--no-log", "clean-perf-stat-json", "-i", str(raw), "-o", str(tmp_path / "nope.json")])
    assert rc == 1
    assert "does not exist" in capsys.readouterr().err


def test_line_over_x_renders_and_logs(tmp_path):
    d = write_sweep(tmp_path, "branch", [0, 50], "2000000,00", "1000000,00")
    write_sweep(tmp_path, "branchless", [0, 50], "3000000,00", "<not counted>")
    logs = tmp_path / "logs"
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(f"logging:\n  dir: {logs}\n  mode: verbose\n", encoding="utf-8")
    out = tmp_path / "cpu.png"
    rc = main(["--config", str(cfg), "line-over-x", "0", "50", "--json-dir", str(d),
               "--branching-prefix", "branch", "--branchless-prefix", "branchless",
               "--save-to", str(out), "--plot-type", "merged"])
    assert rc == 0
    assert out.stat().st_size > 0
    msgs = []
    for f in logs.glob("*.ndjson"):
        msgs += [json.loads(l)["msg"] for l in f.read_text(encoding="utf-8").splitlines() if l.strip()]
    assert "runs_loaded" in msgs and "chart_saved" in msgs and "aggregate" in msgs


def test_line_over_x_missing_file(tmp_path, capsys):
    d = write_sweep(tmp_path, "branch", [0], "1", "1")
    rc = main(["--no-log", "line-over-x", "0", "--json-dir", str(d), "--branching-prefix", "branch",
               "--branchless-prefix", "branchless", "--save-to", str(tmp_path / "o.png"),
               "--plot-type", "cpu-instructions"])
    assert rc == 1
    assert "branchless0.json" in capsys.readouterr().err


def test_bar_chart(tmp_path, capsys):
    d = write_sweep(tmp_path, "b", [1], "2000000,00", "0")
    write_sweep(tmp_path, "l", [1], "1000000,00", "0")
    out = tmp_path / "bar.svg"
    rc = main(["--no-log", "box-plot-branch-vs-branchless", "-b", str(d / "b1.json"),
               "-l", str(d / "l1.json"), "--save-to", str(out)])
    assert rc == 0
    assert out.stat().st_size > 0
    err = capsys.readouterr().err
    assert "Branching instructions = 2000000" in err


def test_save_charts_directly(tmp_path):
    line = LineChart([Line([(0.0, 1.0), (1.0, 2.0)], "a", "#000000", 1.0, 2.0)], "x", "y", (0.0, 3.0), 5)
    bar = BarChart([Bar("b", 1.0, "#ff0000")], "Instructions")
    out = save_charts([line, bar], tmp_path / "both.png", ChartCfg(dpi=50))
    assert out.stat().st_size > 0
    with pytest.raises(EmptyAggregationError):
        save_charts([], tmp_path / "none.png", ChartCfg())


def test_non_utf8_input_is_reported(tmp_path, capsys):
    raw = tmp_path / "raw.txt"
    raw.write_bytes(b'{"counter-value" : "1\xff"}\n')
    assert main(["--no-log", "clean-perf-stat-json", "-i", str(raw)]) == 1
    assert "not valid UTF-8" in capsys.readouterr().err


def test_bad_config_section_is_reported(tmp_path, capsys):
    raw = tmp_path / "raw.txt"
    raw.write_text(raw_export("1", "1"), encoding="utf-8")
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("chart: 5\n", encoding="utf-8")
    assert main(["--config", str(cfg), "clean-perf-stat-json", "-i", str(raw)]) == 1
    assert "chart" in capsys.readouterr().err


def test_unwritable_log_dir_is_reported(tmp_path, capsys):
    raw = tmp_path / "raw.txt"
    raw.write_text(raw_export("1", "1"), encoding="utf-8")
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(f"logging:\n  dir: {blocker / 'logs'}\n", encoding="utf-8")
    assert main(["--config", str(cfg), "clean-perf-stat-json", "-i", str(raw)]) == 1
    assert "run log" in capsys.readouterr().err


def test_unsupported_image_format_is_reported(tmp_path, capsys):
    d = write_sweep(tmp_path, "b", [1], "2000000,00", "0")
    write_sweep(tmp_path, "l", [1], "1000000,00", "0")
    rc = main(["--no-log", "box-plot-branch-vs-branchless", "-b", str(d / "b1.json"),
               "-l", str(d / "l1.json"), "--save-to", str(tmp_path / "bar.xyz")])
    assert rc == 1
    assert "cannot write" in capsys.readouterr().err
    bar = BarChart([Bar("b", 1.0, "#ff0000")], "Instructions")
    with pytest.raises(PerfStatIOError):
        save_charts([bar], tmp_path / "bar.xyz", ChartCfg(dpi=50))
