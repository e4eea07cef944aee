# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

Levels, handlers and rotation live in etc/logging.conf.  The file refers to
the log file as ``%(log_file)s``; this module substitutes the real path and
applies the result with the standard-library fileConfig loader.

The log directory defaults to <project root>/log and can be moved with the
``LOG_DIR`` environment variable (containers mount a volume there).

Import the ready-made logger anywhere:
    from core.logger import logger
"""

import configparser
import logging
import logging.config
import os
from pathlib import Path

# project root: backend/core/logger.py  →  ../../
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"


def _log_file() -> Path:
    log_dir = Path(os.environ.get("LOG_DIR") or _PROJECT_ROOT / "log")
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "app.log"


def configure_logging(conf_path: Path = _LOGGING_CONF) -> None:
    """Apply *conf_path*.  Falls back to basicConfig when the file is absent."""
    if not conf_path.is_file():
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
        return

    raw = conf_path.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", _log_file().as_posix())

    # RawConfigParser: the format strings contain %(asctime)s etc. which
    # ConfigParser would try to interpolate.
    parser = configparser.RawConfigParser()
    parser.read_string(raw)
    logging.config.fileConfig(parser, disable_existing_loggers=False)


configure_logging()

logger = logging.getLogger("smartvillage")
