from typing import BinaryIO

from ledgerlens.config.settings import IngestionConfig
from ledgerlens.ingestion.exceptions import (
    DisallowedExtensionError,
    EmptyUploadError,
    InvalidSignatureError,
    UploadTooLargeError,
)
from ledgerlens.ingestion.format_detector import detect_format, file_extension
from ledgerlens.logging.logger import Log
from ledgerlens.records.models import FileFormat

_SIGNATURE_LENGTH = 8

FILE_SIGNATURES: dict[FileFormat, tuple[bytes, ...]] = {
    FileFormat.SPREADSHEET: (
        b"PK\x03\x04",
        bytes.fromhex("D0CF11E0A1B11AE1"),
    ),
    FileFormat.PORTABLE_DOCUMENT: (b"%PDF",),
}


class UploadValidator:
    """Checks size, extension and leading bytes of an upload and reads it fully."""

    def __init__(self, config: IngestionConfig) -> None:
        self._config = config

    def validate(self, stream: bytes | BinaryIO, filename: str) -> bytes:
        """Return the upload content once it passes every check.

        The signature check needs to peek at the first bytes and rewind, so it
        runs only on seekable streams.

        Raises:
            UploadValidationError: subclass describing the first failed check.
        """
        extension = file_extension(filename)
        if extension not in self._config.allowed_extensions:
            allowed = ", ".join(self._config.allowed_extensions)
            raise DisallowedExtensionError(
                f"File type '{extension or filename}' is not allowed. Allowed types: {allowed}"
            )

        if isinstance(stream, (bytes, bytearray)):
            data = bytes(stream)
            self._check_size(len(data), filename)
            self._check_signature(data[:_SIGNATURE_LENGTH], filename)
            return data

        if stream.seekable():
            start = stream.tell()
            header = stream.read(_SIGNATURE_LENGTH)
            stream.seek(start)
            self._check_signature(header, filename)
        else:
            Log.info(f"Upload stream for {filename} is not seekable, skipping signature check")

        data = _read_at_most(stream, self._config.max_upload_size_bytes + 1)
        self._check_size(len(data), filename)
        return data

    def _check_size(self, size: int, filename: str) -> None:
        if size == 0:
            raise EmptyUploadError(f"File {filename} is empty")
        if size > self._config.max_upload_size_bytes:
            limit_mb = self._config.max_upload_size_bytes / (1024 * 1024)
            raise UploadTooLargeError(
                f"File {filename} exceeds maximum size of {limit_mb:.0f} MB"
            )

    def _check_signature(self, header: bytes, filename: str) -> None:
        signatures = FILE_SIGNATURES.get(detect_format(filename))
        if not signatures or not header:
            return
        if not any(header.startswith(signature) for signature in signatures):
            raise InvalidSignatureError(
                f"File content of {filename} does not match its extension"
            )


def _read_at_most(stream: BinaryIO, limit: int) -> bytes:
    chunks: list[bytes] = []
    remaining = limit
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
