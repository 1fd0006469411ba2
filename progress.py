from __future__ import annotations

import json
import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _state_file_path() -> Path:
    configured = os.environ.get("PACK_PROGRESS_STATE_FILE") or CFG.PROGRESS_STATE_FILE
    if configured:
        return Path(configured)
    return Path(CFG.LOG_DIR) / "progress_state.json"


STATE_FILE = _state_file_path()
STATE_FILE_TMP = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
_LAST_STATE_MTIME: float = 0.0


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("packing.run_log")
    if logger.handlers:
        return logger

    log_path = Path(CFG.LOG_DIR) / "packing_runs.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        # No writable log directory: run without the run log.
        return logger
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


RUN_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(RUN_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    return f"{float(seconds):.2f}s"


def _emit_log(event: str, **fields: Any) -> None:
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        RUN_LOGGER.info("%s | %s", event, " ".join(extras))
    else:
        RUN_LOGGER.info("%s", event)


def _persist_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        with STATE_FILE_TMP.open("w", encoding="utf-8") as fh:
            json.dump(PROGRESS, fh, ensure_ascii=False, separators=(",", ":"))
        STATE_FILE_TMP.replace(STATE_FILE)
    except OSError:
        # A read-only state file only disables cross-process snapshots.
        return
    try:
        _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
    except OSError:
        _LAST_STATE_MTIME = time.time()


def _load_persisted_locked(force: bool = False) -> None:
    global _LAST_STATE_MTIME
    try:
        stat = STATE_FILE.stat()
    except OSError:
        return
    if not force and stat.st_mtime <= _LAST_STATE_MTIME:
        return
    try:
        with STATE_FILE.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError):
        return
    if not isinstance(data, dict):
        return
    for key in PROGRESS.keys():
        if key in data:
            PROGRESS[key] = data[key]
    _LAST_STATE_MTIME = stat.st_mtime


# Single source of truth for progress readers
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "nodes": 0,                # search nodes visited
    "solutions": 0,            # packings reported so far
    "depth": 0,                # pieces on the board at the last tick
    "elapsed_start": None,     # t0 (float) when solving started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",             # optional note
    "done": False,             # run completed
    "ok": None,                # success flag if known
    "run_id": 0,               # monotonically increasing identifier
}

_RUN_START: Optional[float] = None

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"

def _as_count(n: Any) -> int:
    try:
        return max(0, int(n))
    except (TypeError, ValueError):
        return 0

def reset() -> None:
    global _RUN_START
    with PROGRESS_LOCK:
        current_run_id = _as_count(PROGRESS.get("run_id", 0))
        PROGRESS.update({
            "status": "Idle",
            "nodes": 0,
            "solutions": 0,
            "depth": 0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "run_id": current_run_id + 1,
        })
        _RUN_START = None
        _emit_log("Progress reset", run=current_run_id + 1)
        _persist_locked()

def start_timer() -> None:
    global _RUN_START
    with PROGRESS_LOCK:
        now = _now()
        PROGRESS["elapsed_start"] = now
        PROGRESS["elapsed"] = 0.0
        _RUN_START = now
        _emit_log("Run timer started", run=PROGRESS.get("run_id"))
        _persist_locked()

def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)

# ------------------------------
# Setters (tolerant)
# ------------------------------

def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = str(v)
        _persist_locked()

def set_nodes(n: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["nodes"] = _as_count(n)
        _touch_elapsed_locked()
        _persist_locked()

def set_solutions(n: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["solutions"] = _as_count(n)
        _persist_locked()

def set_depth(n: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["depth"] = _as_count(n)
        _persist_locked()

def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)
        _persist_locked()

def set_done(ok: Any = None, *, reason: Any = None, message: Any = None) -> None:
    """Mark the run complete.

    ``ok`` picks the final status (``"Solved"`` or ``"Error"``); without it the
    status becomes ``"Solved"`` unless something else was already set.  A
    ``reason`` or ``message`` lands in the ``message`` field.
    """
    global _RUN_START
    final_message = message if message is not None else reason

    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        now = _now()
        if ok is not None:
            ok_flag = bool(ok)
            PROGRESS["status"] = "Solved" if ok_flag else "Error"
            PROGRESS["ok"] = ok_flag
        elif PROGRESS.get("status") in ("", "Idle", "Solving", None):
            PROGRESS["status"] = "Solved"
            PROGRESS["ok"] = True
        if final_message is not None:
            PROGRESS["message"] = str(final_message)
        PROGRESS["done"] = True
        total = None if _RUN_START is None else max(0.0, now - _RUN_START)
        _RUN_START = None
        _emit_log(
            "Run finished",
            run=PROGRESS.get("run_id"),
            status=PROGRESS.get("status"),
            ok=PROGRESS.get("ok"),
            duration=_fmt_seconds(total),
            nodes=PROGRESS.get("nodes"),
            solutions=PROGRESS.get("solutions"),
            message=PROGRESS.get("message"),
        )
        _persist_locked()

# ------------------------------
# Snapshots for readers
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _load_persisted_locked()
        _touch_elapsed_locked()
        return {
            "status": PROGRESS["status"],
            "nodes": PROGRESS["nodes"],
            "solutions": PROGRESS["solutions"],
            "depth": PROGRESS["depth"],
            "elapsed": PROGRESS["elapsed"],
            "elapsed_str": _fmt_elapsed(PROGRESS["elapsed"]),
            "message": PROGRESS["message"],
            "done": PROGRESS["done"],
            "ok": PROGRESS["ok"],
            "run_id": PROGRESS["run_id"],
        }


with PROGRESS_LOCK:
    _load_persisted_locked(force=True)
