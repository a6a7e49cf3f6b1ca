"""Logging module for schoolpath."""

import json
from collections import Counter
from datetime import datetime
from typing import Optional, Callable

from .config import CONFIG

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class Logger:
    """Structured log lines for searches and dataset loading.

    Lines go to stdout (unless echo is off) and to an append-only log file.
    Every message is also handed to the callback, whatever its level, so
    tests and tools can inspect what happened.
    """

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Callable] = None,
                 echo: bool = True, level: Optional[str] = None):
        self.log_path = log_path
        self.callback = callback
        self.echo = echo
        self.threshold = LEVELS[level or CONFIG["log_level"]]
        self.counts = Counter()
        self.file = None
        if log_path:
            self.file = open(log_path, "a")
            self._write_header()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write_header(self):
        self.file.write(f"\n{'='*60}\n")
        self.file.write(f"schoolpath log - {datetime.now().isoformat()}\n")
        self.file.write(f"{'='*60}\n\n")
        self.file.flush()

    def log(self, message: str, data: Optional[dict] = None, level: str = "INFO"):
        """Log a message with optional structured data"""
        self.counts[level] += 1
        if self.callback:
            self.callback(message, data)
        if LEVELS.get(level, 0) < self.threshold:
            return

        line = f"[{datetime.now().isoformat()}] {level:<7} {message}"
        if data:
            line += f" | {json.dumps(data, default=str)}"
        if self.echo:
            print(line)
        if self.file:
            self.file.write(line + "\n")
            self.file.flush()

    def debug(self, message: str, data: Optional[dict] = None):
        self.log(message, data, level="DEBUG")

    def warn(self, message: str, data: Optional[dict] = None):
        self.log(message, data, level="WARNING")

    def error(self, message: str, data: Optional[dict] = None):
        self.log(message, data, level="ERROR")

    def close(self):
        if self.file:
            self.file.close()
            self.file = None
