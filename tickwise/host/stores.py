"""State stores: in-memory and file-backed persistence for kernel snapshots."""

import os
import tempfile
from pathlib import Path


class MemoryStateStore:
    """Keeps the last snapshot in memory. Useful for tests and simulations."""

    def __init__(self, initial: bytes = b""):
        self.data = initial
        self.saves = 0

    def load(self) -> bytes:
        return self.data

    def save(self, data: bytes) -> None:
        self.data = data
        self.saves += 1


class FileStateStore:
    """Persists snapshots to a file, replacing it atomically on each save."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> bytes:
        if not self.path.exists():
            return b""
        return self.path.read_bytes()

    def save(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
