import re
from pathlib import Path, PurePath

from ledgerlens.records.validation import Clock, utc_now
from ledgerlens.storage.exceptions import FileStoreError

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._ -]")


def sanitize_file_name(file_name: str) -> str:
    """Strip directories and characters that are unsafe in a file name."""
    base = PurePath(file_name.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip(" .")
    return cleaned or "upload"


class FileStore:
    """Keeps raw uploads on local disk under ``files_root``."""

    def __init__(self, files_root: Path, clock: Clock = utc_now) -> None:
        self._files_root = files_root
        self._clock = clock

    def save(self, data: bytes, file_name: str) -> Path:
        """Write ``data`` and return the path it was stored at.

        An existing file is never overwritten: a timestamp suffix is added to
        the stem, and a counter after that if the timestamped name is taken too.

        Raises:
            FileStoreError: if the file cannot be written.
        """
        path = self._available_path(sanitize_file_name(file_name))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise FileStoreError(f"Failed to store upload {file_name}: {exc}") from exc
        return path

    def load(self, path: Path) -> bytes:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileStoreError(f"Failed to read upload {path}: {exc}") from exc

    def _available_path(self, safe_name: str) -> Path:
        candidate = self._files_root / safe_name
        if not candidate.exists():
            return candidate
        stem, suffix = candidate.stem, candidate.suffix
        stamp = self._clock().strftime("%Y%m%d%H%M%S")
        candidate = self._files_root / f"{stem}_{stamp}{suffix}"
        counter = 1
        while candidate.exists():
            candidate = self._files_root / f"{stem}_{stamp}_{counter}{suffix}"
            counter += 1
        return candidate
