from pathlib import PurePath

from ledgerlens.records.models import FileFormat

EXTENSION_FORMATS: dict[str, FileFormat] = {
    ".xlsx": FileFormat.SPREADSHEET,
    ".xls": FileFormat.SPREADSHEET,
    ".csv": FileFormat.DELIMITED_TEXT,
    ".pdf": FileFormat.PORTABLE_DOCUMENT,
}

_FORMAT_WORDS: dict[str, FileFormat] = {
    "excel": FileFormat.SPREADSHEET,
    "spreadsheet": FileFormat.SPREADSHEET,
    "xlsx": FileFormat.SPREADSHEET,
    "xls": FileFormat.SPREADSHEET,
    "csv": FileFormat.DELIMITED_TEXT,
    "delimited_text": FileFormat.DELIMITED_TEXT,
    "text/csv": FileFormat.DELIMITED_TEXT,
    "pdf": FileFormat.PORTABLE_DOCUMENT,
    "portable_document": FileFormat.PORTABLE_DOCUMENT,
    "application/pdf": FileFormat.PORTABLE_DOCUMENT,
}


def file_extension(filename: str) -> str:
    return PurePath(filename.replace("\\", "/")).suffix.lower()


def detect_format(filename: str) -> FileFormat:
    """Map a file name to its format by extension, case-insensitively."""
    return EXTENSION_FORMATS.get(file_extension(filename), FileFormat.UNKNOWN)


def resolve_declared_format(value: FileFormat | str | None) -> FileFormat:
    """Interpret a caller-supplied format hint such as ``"excel"`` or ``".csv"``."""
    if value is None:
        return FileFormat.UNKNOWN
    if isinstance(value, FileFormat):
        return value
    key = value.strip().lower()
    if key.startswith("."):
        return EXTENSION_FORMATS.get(key, FileFormat.UNKNOWN)
    return _FORMAT_WORDS.get(key, FileFormat.UNKNOWN)
