from __future__ import annotations
import os, json, time, pathlib, uuid
from typing import Optional, IO

from .errors import PerfStatIOError

class NdjsonLogger:
    """Structured run log: one JSON object per line.

    Records are plain dicts with at least ``type`` and ``msg``; the logger
    stamps ``hms``, ``seq``, ``schema``, ``session_id`` and ``pid``.
    """
    def __init__(self, directory: str, file_prefix: str, *, dual_file: bool = False, debug_subdir: Optional[str] = None):
        self.dir = pathlib.Path(directory)
        self.dir.mkdir(parents=True, exist_ok=True)
        self.prefix = file_prefix
        self.dual_file = bool(dual_file)
        self.debug_subdir = debug_subdir or "debug"
        self.seq = 0
        self._fh: Optional[IO[str]] = None
        self._debug_fh: Optional[IO[str]] = None
        self.path: Optional[pathlib.Path] = None
        self.debug_path: Optional[pathlib.Path] = None
        # 'regular' drops debug records unless their msg is whitelisted
        self.mode: str = os.getenv("LOG_MODE", "regular")
        wl = os.getenv("LOG_VERBOSE_WHITELIST", "")
        self.verbose_whitelist = set([s.strip() for s in wl.split(",") if s.strip()])
        self.session_id: str = os.getenv("SESSION_ID") or uuid.uuid4().hex[:12]
        self.pid: int = os.getpid()
        self.open()

    def open(self):
        self.close()
        stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime())
        self.path = self.dir / f"{self.prefix}_{stamp}.ndjson"
        self._fh = open(self.path, "a", buffering=1, encoding="utf-8")
        if self.dual_file:
            debug_dir = self.dir / self.debug_subdir
            debug_dir.mkdir(parents=True, exist_ok=True)
            self.debug_path = debug_dir / f"{self.prefix}_debug_{stamp}.ndjson"
            self._debug_fh = open(self.debug_path, "a", buffering=1, encoding="utf-8")

    def close(self):
        for fh in (self._fh, self._debug_fh):
            if fh:
                fh.close()
        self._fh = None
        self._debug_fh = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def _keep_in_main(self, obj: dict) -> bool:
        if self.mode != "regular":
            return True
        if obj.get("type") != "debug":
            return True
        return obj.get("msg") in self.verbose_whitelist

    def write(self, obj: dict):
        self.seq += 1
        now = time.time()
        msec = int((now % 1.0) * 1000)
        obj.setdefault("hms", time.strftime("%H:%M:%S", time.localtime(now)) + f".{msec:03d}")
        obj.setdefault("seq", self.seq)
        obj.setdefault("schema", "v1")
        obj.setdefault("session_id", self.session_id)
        obj.setdefault("pid", self.pid)
        line = json.dumps(obj) + "\n"
        # debug file always gets the full record
        if self.dual_file and self._debug_fh:
            self._debug_fh.write(line)
        if self._fh and self._keep_in_main(obj):
            self._fh.write(line)


class NullLogger:
    """Drop-in for NdjsonLogger when run logging is disabled."""
    def write(self, obj: dict):
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def make_logger(cfg):
    """Build the run logger described by a LoggingCfg."""
    if not cfg.enabled:
        return NullLogger()
    try:
        lg = NdjsonLogger(cfg.dir, cfg.file_prefix, dual_file=cfg.dual_file, debug_subdir=cfg.debug_subdir)
    except OSError as e:
        raise PerfStatIOError(f"cannot open run log in {cfg.dir}: {e}") from e
    lg.mode = os.getenv("LOG_MODE", cfg.mode)
    if cfg.verbose_whitelist:
        lg.verbose_whitelist |= set(cfg.verbose_whitelist)
    return lg
