# log.py
"""
Per-run progress log.

Each Logger owns a private stdlib logger (no propagation to the root logger)
and at most one append-mode FileHandler. Until redirect() is called nothing is
written. logging.Handler serialises emit() with its own lock; the extra lock
here only guards swapping the handler while other threads are logging.
"""
import itertools
import logging
import threading

from .errors import LoggerError

_ids = itertools.count()


class Logger:
    def __init__(self):
        self._log = logging.getLogger(f"olfsysm.run.{next(_ids)}")
        self._log.setLevel(logging.INFO)
        self._log.propagate = False
        self._handler = None
        self._lock = threading.Lock()

    def __copy__(self):
        raise LoggerError("a Logger cannot be copied; share the instance instead")

    def __deepcopy__(self, memo):
        raise LoggerError("a Logger cannot be copied; share the instance instead")

    def __reduce__(self):
        raise LoggerError("a Logger cannot be pickled")

    @property
    def enabled(self):
        return self._handler is not None

    @property
    def path(self):
        h = self._handler
        return None if h is None else h.baseFilename

    def __call__(self, msg=""):
        """Log one line; no-op while disabled."""
        with self._lock:
            if self._handler is None:
                return
            self._log.info(msg)

    def redirect(self, path):
        """Begin appending output to the given file."""
        handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        with self._lock:
            self._close_locked()
            self._handler = handler
            self._log.addHandler(handler)

    def disable(self):
        """Stop writing; the file is closed but kept."""
        with self._lock:
            self._close_locked()

    def _close_locked(self):
        if self._handler is not None:
            self._log.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
