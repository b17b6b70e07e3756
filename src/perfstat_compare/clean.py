"""Repair ``perf stat -j`` exports into a JSON array.

The tool writes one object per line, without an enclosing array, and uses a
locale decimal comma inside numbers (``"counter-value" : "1234,56"``).
"""
from __future__ import annotations
import pathlib
import re
from typing import Optional

from .errors import PerfStatIOError
from .records import read_text

# digits,digits -> digits.digits. Thousands groups ("1,234") are rewritten too.
_DECIMAL_COMMA = re.compile(r"(\d+),(\d+)")


def repair_perf_stat_json(raw: str) -> str:
    s = _DECIMAL_COMMA.sub(r"\1.\2", raw)
    s = s.replace("\n", ",")
    if s.endswith(","):
        s = s[:-1]
    return f"[{s}]"


def repair_file(in_file, out_file=None, logger=None) -> str:
    """Repair ``in_file`` and, when ``out_file`` is given, write the result there.

    The destination must already exist. Returns the repaired text either way.
    """
    src = pathlib.Path(in_file)
    if not src.exists():
        raise PerfStatIOError(f"{src} does not exist")
    fixed = repair_perf_stat_json(read_text(src))
    dest: Optional[pathlib.Path] = pathlib.Path(out_file) if out_file is not None else None
    if dest is not None:
        if not dest.exists():
            raise PerfStatIOError(f"destination {dest} does not exist")
        try:
            dest.write_text(fixed, encoding="utf-8")
        except OSError as e:
            raise PerfStatIOError(f"cannot write {dest}: {e}") from e
    if logger is not None:
        logger.write({"type": "info", "msg": "repair_done", "data": {
            "input": str(src), "output": str(dest) if dest else None, "chars": len(fixed),
        }})
    return fixed
