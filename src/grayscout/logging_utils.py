"""Log setup shared by the grayscout command line tools.

Each run writes ``<log dir>/<name>.log`` and, optionally, mirrors records to
stderr. The log directory is ``$GRAYSCOUT_LOG_DIR`` when set, otherwise
``logs/`` under the working directory, next to the ``images/`` and
``gs-images/`` folders the fetcher creates.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

__all__ = ["LOG_DIR_ENV", "configure_logging"]

LOG_DIR_ENV = "GRAYSCOUT_LOG_DIR"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handlers installed here carry this attribute so a later call can replace them
# without touching handlers added by pytest or an embedding application.
_OWNED = "_grayscout_owned"


def resolve_log_dir(log_dir: Optional[Path] = None) -> Path:
    if log_dir is not None:
        return Path(log_dir).expanduser()
    from_env = os.environ.get(LOG_DIR_ENV)
    if from_env:
        return Path(from_env).expanduser()
    return Path.cwd() / "logs"


def _install(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    setattr(handler, _OWNED, True)
    root.addHandler(handler)


def configure_logging(
    log_name: str,
    *,
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    include_console: bool = True,
) -> Path:
    """Route root logging to ``<log_name>.log`` and return that path.

    Calling it again closes the handlers from the previous call first, so a
    second run never appends to the first run's file.
    """
    directory = resolve_log_dir(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / f"{log_name}.log"

    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    _install(root, logging.FileHandler(log_path, encoding="utf-8"), level)
    if include_console:
        # stdout is reserved for the summary table
        _install(root, logging.StreamHandler(sys.stderr), level)

    return log_path
