"""Append-only capture files for replaying device traffic.

Two files may be kept per session:

- dev_<name>_<ms>.log   bytes received from the device
- talk_<name>_<ms>.log  bytes in both directions, in the order seen
"""
from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import BinaryIO, Optional

from .models import LoggerOptions

logger = logging.getLogger(__name__)


class CaptureFile:
    """Thread-safe append-only binary file."""

    def __init__(self, path: Path):
        self._path = path
        self._file: Optional[BinaryIO] = open(path, "ab")
        self._lock = threading.Lock()
        logger.info(f"Capturing device traffic to {path}")

    @property
    def path(self) -> Path:
        return self._path

    def write(self, data: bytes) -> None:
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.write(data)
                self._file.flush()
            except OSError as e:
                logger.error(f"Cannot write capture file {self._path}: {e}")

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


class SessionCapture:
    """The dev/talk capture files of one session, per LoggerOptions."""

    def __init__(self, name: str, options: LoggerOptions):
        directory = Path(options.directory)
        stamp = int(time.time() * 1000)
        self.dev: Optional[CaptureFile] = None
        self.talk: Optional[CaptureFile] = None
        if options.devlog:
            self.dev = CaptureFile(directory / f"dev_{name}_{stamp}.log")
        if options.talklog:
            self.talk = CaptureFile(directory / f"talk_{name}_{stamp}.log")

    def incoming(self, data: bytes) -> None:
        if self.dev:
            self.dev.write(data)
        if self.talk:
            self.talk.write(data)

    def outgoing(self, data: bytes) -> None:
        if self.talk:
            self.talk.write(data)

    def close(self) -> None:
        for capture in (self.dev, self.talk):
            if capture:
                capture.close()
