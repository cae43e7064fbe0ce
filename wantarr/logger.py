"""
Minimal logging context for Wantarr.
Single place to control all output: screen + file, with flush.
"""
from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Optional

from rich.console import Console
from rich.text import Text

_PREFIX_STYLES = {
    "[WARNING]": "yellow",
    "[ERROR]": "red",
}


class WantarrLogger:
    """Minimal logger: print to screen + file, always flush"""

    def __init__(
        self,
        log_file: Optional[Path] = None,
        debug: bool = False,
        name: str = "wantarr",
        *,
        console: Optional[Console] = None,
        file_handle: Optional[IO[str]] = None,
    ):
        self.name = name
        self.log_file = log_file
        self.debug_mode = debug
        self._console = console or Console(highlight=False)
        self._file_handle = file_handle
        self._owns_file = False

        if file_handle is None and log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_file, "a", buffering=1, encoding="utf-8")  # Line buffered, UTF-8
            self._owns_file = True

    def child(self, name: str) -> "WantarrLogger":
        """Logger for a component, sharing this logger's sinks."""
        return WantarrLogger(
            log_file=self.log_file,
            debug=self.debug_mode,
            name=name,
            console=self._console,
            file_handle=self._file_handle,
        )

    def log(self, msg: str, prefix: str = ""):
        """Log to screen and file"""
        output = f"{prefix}[{self.name}] {msg}" if self.name else f"{prefix}{msg}"

        self._console.print(self._screen_text(output))

        if self._file_handle and not self._file_handle.closed:
            self._file_handle.write(output + "\n")
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())

    def _screen_text(self, line: str) -> Text:
        text = Text(line)
        for marker, style in _PREFIX_STYLES.items():
            if line.startswith(marker):
                text.stylize(style, 0, len(marker))
                return text
        if "[DEBUG]" in line:
            text.stylize("grey50")
        return text

    def info(self, msg: str):
        """Info message"""
        self.log(msg)

    def warning(self, msg: str):
        """Warning message"""
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        """Error message"""
        self.log(msg, "[ERROR] ")

    def debug(self, msg: str):
        """Debug message (only shown in debug mode)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
            self.log(msg, f"[{timestamp}] [DEBUG] ")

    def api_request(self, method: str, url: str, params: Optional[dict[str, Any]] = None):
        """Log API request (debug mode only)"""
        if not self.debug_mode:
            return
        self.debug(f"API Request: {method} {url}")
        if params:
            self.debug(f"  Params: {json.dumps(params, sort_keys=True)}")

    def api_response(self, status: int, elapsed_ms: float):
        """Log API response (debug mode only)"""
        self.debug(f"API Response ({elapsed_ms:.0f}ms): Status {status}")

    def close(self):
        """Close the log file if this logger opened it"""
        if self._owns_file and self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
