# stress_vision/utils/logging_utils.py
# ======================================================================================
# Stress Vision (SVN)
# Logging setup driven by the `logging:` config section
# --------------------------------------------------------------------------------------
#   level     root level (default INFO)
#   to_file   also write plain text to <dir>/svn_<run>.log
#   to_json   also write one JSON object per record to <dir>/svn_<run>.jsonl
#   dir       log directory (default "logs")
#
# The console handler writes to stderr so CLI JSON on stdout stays parseable.
# ======================================================================================

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _JSONFormatter(logging.Formatter):
    """One JSON line per record (engine events are easy to grep / load into pandas)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    h = logging.FileHandler(path, encoding="utf-8")
    h.setLevel(level)
    h.setFormatter(formatter)
    return h


def init_logging(cfg: Dict[str, Any], run_id: Optional[str] = None) -> None:
    """
    (Re)configure the root logger from ``cfg["logging"]``.

    ``run_id`` names the log files; a UTC timestamp is used when omitted.
    Calling this again replaces the previously installed handlers.
    """
    log_cfg = (cfg or {}).get("logging", {}) or {}
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root.addHandler(console)

    tag = run_id or datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_dir = Path(log_cfg.get("dir", "logs"))
    if log_cfg.get("to_file", False):
        root.addHandler(_file_handler(log_dir / f"svn_{tag}.log", level, logging.Formatter(_TEXT_FORMAT)))
    if log_cfg.get("to_json", False):
        root.addHandler(_file_handler(log_dir / f"svn_{tag}.jsonl", level, _JSONFormatter()))

    root.debug("Logging initialized (run=%s, level=%s)", tag, logging.getLevelName(level))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
