import io
from collections.abc import Sequence

import openpyxl

from ledgerlens.ingestion import column_aliases as cols
from ledgerlens.ingestion.exceptions import ExtractionError
from ledgerlens.ingestion.extractors.base import BaseExtractor, is_blank_row, record_from_row
from ledgerlens.logging.logger import Log
from ledgerlens.records.models import Record
from ledgerlens.records.validation import Clock, is_valid_record, utc_now


class SpreadsheetExtractor(BaseExtractor):
    """Reads records from the first worksheet of an Excel workbook."""

    def __init__(self, header_scan_rows: int = 10, clock: Clock = utc_now) -> None:
        self._header_scan_rows = header_scan_rows
        self._clock = clock

    def extract(self, data: bytes) -> list[Record]:
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        except Exception as exc:
            raise ExtractionError(f"Failed to open spreadsheet: {exc}") from exc

        try:
            if not workbook.worksheets:
                Log.warning("Spreadsheet has no worksheets")
                return []
            rows = [tuple(row) for row in workbook.worksheets[0].iter_rows(values_only=True)]
        finally:
            workbook.close()

        return self.extract_rows(rows)

    def extract_rows(self, rows: Sequence[Sequence[object]]) -> list[Record]:
        header_index = self._find_header(rows)
        if header_index is None:
            Log.warning(
                f"No header row found in the first {self._header_scan_rows} rows of worksheet"
            )
            return []

        bound = cols.bind_columns(rows[header_index])
        missing = cols.missing_required(bound)
        if missing:
            Log.warning(f"Spreadsheet header is missing columns: {', '.join(missing)}")

        records: list[Record] = []
        for row_number, cells in enumerate(rows[header_index + 1 :], start=header_index + 2):
            if is_blank_row(cells):
                continue
            record = record_from_row(cells, bound, self._clock)
            if not is_valid_record(record):
                Log.warning(f"Skipping invalid spreadsheet row {row_number}")
                continue
            records.append(record)

        Log.info(f"Extracted {len(records)} records from spreadsheet")
        return records

    def _find_header(self, rows: Sequence[Sequence[object]]) -> int | None:
        for index, cells in enumerate(rows[: self._header_scan_rows]):
            if cols.looks_like_header(cells):
                return index
        return None
