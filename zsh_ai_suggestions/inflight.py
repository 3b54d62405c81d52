"""Acceptance gate and in-flight request registry.

File write notifications can fire several times for one logical write.
The gate lets exactly one processor own a request path until that
processor releases it.
"""

import logging
import os
import threading
from typing import Set

from .protocol import PathLike, is_eligible

logger = logging.getLogger(__name__)


class InFlightSet:
    """Registry of request paths currently owned by a processor.

    Entries are only removed by ``release``; there is no expiry. Request
    paths are unique per request, so a stuck processor only blocks its
    own path.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._paths: Set[str] = set()

    def accept(self, path: PathLike) -> bool:
        """Claim a path for processing.

        Returns:
            True if the caller now owns the path and must release it,
            False if the path is not a request or is already owned
        """
        name = os.fspath(path)
        if not is_eligible(name):
            return False

        with self._lock:
            if name in self._paths:
                owned = False
            else:
                self._paths.add(name)
                owned = True

        if not owned:
            logger.debug("already processing: %s", os.path.basename(name))
        return owned

    def release(self, path: PathLike) -> None:
        """Give up ownership of a path. Unknown paths are ignored."""
        with self._lock:
            self._paths.discard(os.fspath(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        with self._lock:
            return os.fspath(path) in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)
