"""
Log setup for processes hosting the signal engine.

Signals land in a rotating file next to the stdout stream so a day of
BET/PREPARE lines can be replayed against the warehouse. The odds
resolver logs every dropped value at DEBUG; it gets its own level so a
DEBUG engine run is not buried under bookmaker noise.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from football_signal.config import LOG_DIR, LOG_FILE, LOG_LEVEL, ODDS_LOG_LEVEL

SIGNAL_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(name)-28s | %(message)s"

_HANDLER_TAG = "_football_signal_handler"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    odds_level: Optional[str] = None,
) -> logging.Logger:
    """Attach file + console handlers to the root logger.

    Arguments override the env-driven config. Calling again replaces the
    handlers installed by the previous call instead of stacking them.
    """
    log_dir = Path(log_dir) if log_dir is not None else LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(SIGNAL_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # ── Rotating file handler (50 MB x 5 backups) ────────────────────
    fh = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE,
        maxBytes=50 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )

    # ── Console handler ──────────────────────────────────────────────
    ch = logging.StreamHandler(sys.stdout)

    root = logging.getLogger()
    for old in [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]:
        root.removeHandler(old)
        old.close()

    for handler in (fh, ch):
        handler.setFormatter(fmt)
        setattr(handler, _HANDLER_TAG, True)
        root.addHandler(handler)

    root.setLevel(_level(level or LOG_LEVEL))
    logging.getLogger("football_signal.odds_lines").setLevel(_level(odds_level or ODDS_LOG_LEVEL))

    return root
