"""
Session-level logging utility

A session (one CLI render, one reporting run) can mirror the root logger into
{log_root}/{session_id}/tidepool.log, so it can be reviewed after the fact
without attaching a console.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
SESSION_LOG_NAME = "tidepool.log"
_RULE = "=" * 80


def configure_logging(level: int = logging.INFO) -> None:
    """Configure console logging with the standard tidepool format."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    # basicConfig is a no-op once handlers exist; the level still applies
    logging.getLogger().setLevel(level)


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


class SessionLogHandler:
    """
    Context manager attaching a per-session file handler to the root logger.

    Setup failures are logged and otherwise ignored: the session still runs,
    only without its log file.

    Args:
        session_id: Directory name for this session under log_root
        log_root: Parent directory for all session logs
    """

    def __init__(self, session_id: str, log_root: Path):
        self.session_id = session_id
        self.path = Path(log_root) / session_id / SESSION_LOG_NAME
        self.handler: Optional[logging.Handler] = None
        self._root = logging.getLogger()

    def _banner(self, *lines: str, level: int = logging.INFO) -> None:
        self._root.info(_RULE)
        for line in lines:
            self._root.log(level, line)
        self._root.info(_RULE)

    def __enter__(self) -> "SessionLogHandler":
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.path, mode='w', encoding='utf-8')
        except OSError as e:
            logger.warning(f"Session log unavailable for {self.session_id}: {e}")
            return self

        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handler.setLevel(self._root.level or logging.INFO)
        self._root.addHandler(handler)
        self.handler = handler
        self._banner(f"Session started: {self.session_id}", f"Start time: {_utc_stamp()}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        handler, self.handler = self.handler, None
        if handler is None:
            return
        try:
            if exc_type is None:
                self._banner(f"Session completed: {self.session_id}", f"End time: {_utc_stamp()}")
            else:
                self._banner(
                    f"Session failed: {self.session_id} - {exc_type.__name__}: {exc_val}",
                    f"End time: {_utc_stamp()}",
                    level=logging.ERROR,
                )
        finally:
            self._root.removeHandler(handler)
            handler.close()

    def log_path(self) -> Optional[Path]:
        """Path of the session log, or None if nothing was written."""
        return self.path if self.path.exists() else None
