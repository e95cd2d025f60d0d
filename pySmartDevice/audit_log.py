"""Timestamped audit log for smart devices.

Every state change of a device is recorded as one line of the form::

    [2026-10-18 14:03:07] Kitchen Light: Device toggled to: ON

An :class:`AuditLog` formats the line once and hands it to each of its
registered writers in registration order.  A device normally owns two
writers: a :class:`FileLogWriter` (the append-only sink) followed by a
:class:`StreamLogWriter` on standard output.  Tests swap in a
:class:`MemoryLogWriter` instead.

Audit lines have a fixed format and do not go through the
:mod:`logging` module.  Library diagnostics (sink opened, sink
unavailable, …) use the module-level ``logger`` as usual.

Usage::

    sink = FileLogWriter("device_log.txt")
    log = AuditLog([sink, StreamLogWriter()])
    log.log("Kitchen Light", "Device toggled to: ON")
    log.detach(sink)   # console only from here on
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TextIO, Union

logger = logging.getLogger(__name__)

#: ``strftime`` format of the timestamp prefix (second granularity).
TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"

#: Callable returning the current local time.
Clock = Callable[[], datetime]

#: Callback invoked with a writer that failed and the error it raised.
WriteErrorCallback = Callable[["LogWriter", OSError], None]


def format_entry(timestamp: datetime, device_name: str, message: str) -> str:
    """Build one audit line (without trailing newline)."""
    return (
        f"[{timestamp.strftime(TIMESTAMP_FORMAT)}] "
        f"{device_name}: {message}"
    )


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


class LogWriter:
    """Base class for audit log destinations."""

    def write(self, line: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release the destination.  Default: nothing to release."""


class FileLogWriter(LogWriter):
    """Append-only file destination.

    The file is opened (in append mode, so earlier history is kept) in
    the constructor.  Callers must be prepared for :class:`OSError`
    when the file cannot be opened.

    Parameters
    ----------
    path:
        Path of the log file.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._fh: Optional[TextIO] = open(
            self._path, "a", encoding="utf-8"
        )
        logger.debug("Opened audit log %s", self._path)

    @property
    def path(self) -> Path:
        """Path of the log file."""
        return self._path

    @property
    def is_closed(self) -> bool:
        """``True`` once :meth:`close` has run."""
        return self._fh is None

    def write(self, line: str) -> None:
        if self._fh is None:
            raise ValueError(f"Audit log {self._path} is closed")
        self._fh.write(line + "\n")
        self._fh.flush()

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.close()
        finally:
            self._fh = None
            logger.debug("Closed audit log %s", self._path)

    def __repr__(self) -> str:
        return f"FileLogWriter({str(self._path)!r})"


class StreamLogWriter(LogWriter):
    """Text-stream destination (the interactive console by default).

    When *stream* is omitted the current ``sys.stdout`` is looked up on
    every write, so redirection (and pytest's ``capsys``) is honoured.
    The stream is never closed by this writer.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write(self, line: str) -> None:
        stream = self.stream
        stream.write(line + "\n")
        stream.flush()


class MemoryLogWriter(LogWriter):
    """In-memory destination collecting lines in :attr:`lines`."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def write(self, line: str) -> None:
        self.lines.append(line)


# ---------------------------------------------------------------------------
# AuditLog
# ---------------------------------------------------------------------------


class AuditLog:
    """Fan-out of timestamped audit entries to a list of writers.

    A writer that fails with :class:`OSError` is detached (closed on a
    best-effort basis) and the remaining writers still receive the
    entry, so a broken sink never aborts the operation being logged.

    Parameters
    ----------
    writers:
        Destinations, written to in the given order.
    clock:
        Time source.  Defaults to :meth:`datetime.now` (local time).
    on_write_error:
        Called as ``on_write_error(writer, exc)`` after a failing
        writer has been detached.
    """

    def __init__(
        self,
        writers: Iterable[LogWriter] = (),
        clock: Optional[Clock] = None,
        on_write_error: Optional[WriteErrorCallback] = None,
    ) -> None:
        self._writers: List[LogWriter] = list(writers)
        self._clock: Clock = clock or datetime.now
        self._on_write_error = on_write_error

    @property
    def writers(self) -> List[LogWriter]:
        """Registered writers (copy)."""
        return list(self._writers)

    def detach(self, writer: LogWriter) -> None:
        """Unregister and close *writer* (no-op if absent).

        The writer is unregistered first, so later entries skip it even
        when closing fails.  A failing close is logged, not raised.
        """
        if writer not in self._writers:
            return
        self._writers.remove(writer)
        try:
            writer.close()
        except OSError as exc:
            logger.warning("Failed to close %r: %s", writer, exc)

    def log(self, device_name: str, message: str) -> str:
        """Write one entry to every writer and return the line."""
        line = format_entry(self._clock(), device_name, message)
        for writer in list(self._writers):
            try:
                writer.write(line)
            except OSError as exc:
                logger.warning(
                    "Write to %r failed (%s), detaching it", writer, exc
                )
                self.detach(writer)
                if self._on_write_error is not None:
                    self._on_write_error(writer, exc)
        return line

    def __repr__(self) -> str:
        return f"AuditLog(writers={self._writers!r})"
