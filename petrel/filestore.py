"""
petrel/filestore.py — Reading and writing files for the file routes.
Failures never raise out of this module; every operation returns a
FileResult whose outcome tells the dispatcher which status to send.
"""

import os
import logging
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional

FILES_PREFIX = "files/"
DIRECTORY_MODE = 0o777

log = logging.getLogger("petrel")


class FileOutcome(Enum):
    OK = "ok"
    NOT_FOUND = "not found"
    FORBIDDEN = "forbidden"
    IO_ERROR = "i/o error"


class FileResult(NamedTuple):
    """
    Result of a file operation.
    *data* holds the file contents for a successful fetch, *path* the
    filesystem location the operation resolved to, *error* the failure detail.
    """
    outcome: FileOutcome
    path: str = ""
    data: bytes = b""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is FileOutcome.OK


def strip_prefix(path: str, prefix: str = FILES_PREFIX) -> str:
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def join_root(directory: str, name: str) -> str:
    """`directory/name`, or *name* alone when no directory is configured."""
    if not directory:
        return name
    return directory.rstrip("/") + "/" + name


def is_contained(path: str, root: str) -> bool:
    """True if *path* canonicalizes to somewhere inside *root*."""
    try:
        resolved = Path(os.path.realpath(path))
        base = Path(os.path.realpath(root or os.curdir))
    except (OSError, ValueError):
        return False
    return resolved == base or base in resolved.parents


def is_servable(path: str) -> bool:
    """
    The only path check the server makes by default: the path must contain
    a separator and name a file that can be opened for reading.
    ".." segments are not rejected.
    """
    if "/" not in path or not os.path.isfile(path):
        return False
    return os.access(path, os.R_OK)


class FileStore:
    """
    File access rooted at the configured directory.
    Attributes:
        directory: Root for the /files/ routes ("" means the working directory)
        contain_paths: Reject paths that resolve outside their root
    """

    def __init__(self, directory: str = "", contain_paths: bool = False):
        self.directory = directory
        self.contain_paths = contain_paths

    def resolve(self, path: str) -> str:
        """Filesystem path for a /files/ request path."""
        return join_root(self.directory, strip_prefix(path))

    def _escapes(self, path: str, root: str) -> bool:
        return self.contain_paths and not is_contained(path, root)

    def exists(self, path: str, root: Optional[str] = None) -> bool:
        """True if *path* may be served: inside its root (when enforced) and servable."""
        if self._escapes(path, root if root is not None else os.curdir):
            return False
        return is_servable(path)

    def fetch(self, path: str, root: Optional[str] = None) -> FileResult:
        """
        Load the whole file at *path*.  *root* is the containment root used
        when contain_paths is set; it defaults to the working directory.
        """
        if self._escapes(path, root if root is not None else os.curdir):
            return FileResult(FileOutcome.FORBIDDEN, path, error="outside root")
        if not is_servable(path):
            return FileResult(FileOutcome.NOT_FOUND, path)
        try:
            with open(path, "rb") as f:
                data = f.read()
        except (OSError, ValueError) as exc:
            return FileResult(FileOutcome.IO_ERROR, path, error=str(exc))
        return FileResult(FileOutcome.OK, path, data=data)

    def fetch_stored(self, path: str) -> FileResult:
        """Fetch a /files/<name> request path from the configured directory."""
        return self.fetch(self.resolve(path), self.directory)

    def store(self, path: str, body: bytes) -> FileResult:
        """
        Write *body* to the file named by a /files/<name> request path,
        creating the configured directory if needed.  Existing files are
        truncated.  Concurrent stores to one name are not serialized.
        """
        target = self.resolve(path)
        if self._escapes(target, self.directory):
            return FileResult(FileOutcome.FORBIDDEN, target, error="outside root")
        try:
            if self.directory:
                os.makedirs(self.directory, mode=DIRECTORY_MODE, exist_ok=True)
            with open(target, "wb") as f:
                f.write(body)
        except (OSError, ValueError) as exc:
            return FileResult(FileOutcome.IO_ERROR, target, error=str(exc))
        log.debug("Wrote %d byte(s) to %s", len(body), target)
        return FileResult(FileOutcome.OK, target)
