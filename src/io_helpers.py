import os
import sys
import logging
import tempfile
from threading import Lock

from configs import ARTIFACT_DELIMITER


def render_artifact(result) -> bytes:
    header = (
        f"URL: {result.url}\n"
        f"Status: {result.status}\n"
        f"Content-Type: {result.content_type}\n"
        f"Content-Length: {len(result.body)}\n"
        f"Date: {result.fetched_at.isoformat(timespec='seconds')}\n"
        f"{ARTIFACT_DELIMITER}\n\n"
    )
    return header.encode("utf-8") + result.body


def save_binary(path, data):
    """
    Write `data` to `path` via a temp file in the same directory and
    os.replace(), so readers only ever see a complete artifact.
    """
    directory = os.path.dirname(path) or "."
    tmp = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=directory)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except OSError:
        if tmp and os.path.exists(tmp):
            try:
                os.remove(tmp)
            except OSError:
                logging.debug("Could not remove temp file %s", tmp)
        raise


class ProgressWriter:
    """One `<path> <status> <url>` line per artifact; lines never interleave."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.lock = Lock()

    def emit(self, path, status, url):
        with self.lock:
            self.stream.write(f"{path} {status} {url}\n")
            self.stream.flush()
