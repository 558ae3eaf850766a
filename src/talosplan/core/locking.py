# src/talosplan/core/locking.py
"""
Advisory lock held for the whole read-aggregate-write sequence of a site.

`flock` is taken on the artifact itself, so no lock file is created and a
missing artifact is still reported before anything on disk changes. The
plan writer rewrites the artifact in place, which keeps the locked inode.
"""

import fcntl
import logging
import random
import time
from contextlib import contextmanager
from pathlib import Path

from .exceptions import ArtifactLocked, MissingArtifact

logger = logging.getLogger(__name__)


def try_lock_exclusively(fileno: int) -> bool:
    try:
        fcntl.flock(fileno, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


@contextmanager
def wait_locked_exclusively(path: Path, timeout_sec: float):
    path = Path(path)
    if not path.is_file():
        raise MissingArtifact(path)

    end_at = time.monotonic() + timeout_sec
    max_delay_msec = 250
    min_delay_msec = 100
    with path.open("rb") as fd:
        while not try_lock_exclusively(fd.fileno()):
            sec_left = end_at - time.monotonic()
            if sec_left <= 0:
                raise ArtifactLocked(path, timeout_sec)
            logger.debug(f"{path} is locked by another run, retrying")
            factor = sec_left / timeout_sec
            delay_msec = random.randint(0, int(max_delay_msec * factor)) + min_delay_msec
            time.sleep(delay_msec / 1000)
        logger.debug(f"{path} locked exclusively")
        try:
            yield
        finally:
            fcntl.flock(fd.fileno(), fcntl.LOCK_UN)
            logger.debug(f"{path} is released")
