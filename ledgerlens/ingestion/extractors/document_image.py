import re
from dataclasses import dataclass, field
from datetime import datetime

from ledgerlens.ingestion.extractors.base import BaseExtractor
from ledgerlens.logging.logger import Log
from ledgerlens.pdf.base import BasePdfExtractor
from ledgerlens.pdf.exceptions import PdfExtractionError, PdfRasterizationError
from ledgerlens.pdf.rasterizer import PyMuPdfRasterizer
from ledgerlens.records.models import DEFAULT_CURRENCY, UNKNOWN_CATEGORY, Record
from ledgerlens.records.validation import Clock, current_period, parse_amount, utc_now
from ledgerlens.vision.client_base import BaseVisionClient
from ledgerlens.vision.exceptions import VisionError
from ledgerlens.vision.response_parser import parse_vision_response

_AMOUNT_PATTERN = re.compile(r"\$?([\d,]+\.?\d*)")
_MIN_NAME_LENGTH = 3


@dataclass(frozen=True)
class TextResult:
    """Records read from the PDF text layer."""

    records: list[Record]
    warnings: list[str] = field(default_factory=list)
    vision_attempted: bool = False


@dataclass(frozen=True)
class VisionResult:
    """Records read by the vision model from rendered pages."""

    records: list[Record]
    warnings: list[str] = field(default_factory=list)
    failed_pages: list[int] = field(default_factory=list)


StagedResult = TextResult | VisionResult


def parse_text_layer(text: str, *, period: str, recorded_at: datetime) -> list[Record]:
    """Pick ``<name> <amount>`` lines out of raw PDF text.

    Only the first number on a line is considered. The amount must be
    positive and the text before it, trimmed, must be longer than three
    characters.
    """
    records: list[Record] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        match = _AMOUNT_PATTERN.search(line)
        if match is None:
            continue
        amount = parse_amount(match.group(1))
        if amount <= 0:
            continue
        name = line[: match.start()].strip()
        if len(name) <= _MIN_NAME_LENGTH:
            continue
        records.append(
            Record(
                account_name=name,
                period=period,
                amount=amount,
                currency=DEFAULT_CURRENCY,
                category=UNKNOWN_CATEGORY,
                recorded_at=recorded_at,
            )
        )
    return records


class DocumentImageExtractor(BaseExtractor):
    """Two-stage PDF extraction.

    Stage A parses the text layer. When it yields fewer than
    ``fallback_min_records`` records, every page is rendered and sent to the
    vision model (stage B). Vision records replace the text-layer records
    only if the model produced at least one.
    """

    def __init__(
        self,
        text_extractor: BasePdfExtractor,
        rasterizer: PyMuPdfRasterizer,
        vision_client: BaseVisionClient,
        prompt: str,
        *,
        fallback_min_records: int = 3,
        vision_timeout_seconds: float = 120,
        clock: Clock = utc_now,
    ) -> None:
        self._text_extractor = text_extractor
        self._rasterizer = rasterizer
        self._vision_client = vision_client
        self._prompt = prompt
        self._fallback_min_records = fallback_min_records
        self._vision_timeout_seconds = vision_timeout_seconds
        self._clock = clock

    def extract(self, data: bytes) -> list[Record]:
        return self.extract_staged(data).records

    def extract_staged(self, data: bytes) -> StagedResult:
        warnings: list[str] = []
        period = current_period(self._clock)
        recorded_at = self._clock()

        try:
            text = self._text_extractor.extract(data)
        except PdfExtractionError as exc:
            Log.warning(f"PDF text layer unreadable: {exc}")
            warnings.append(f"PDF text extraction failed: {exc}")
            text = ""

        text_records = parse_text_layer(text, period=period, recorded_at=recorded_at)
        Log.info(f"Text layer yielded {len(text_records)} records")
        if len(text_records) >= self._fallback_min_records:
            return TextResult(records=text_records, warnings=warnings)

        Log.info(
            f"Fewer than {self._fallback_min_records} records in text layer, "
            "falling back to vision model"
        )
        vision_records, failed_pages = self._read_pages(
            data, warnings, period=period, recorded_at=recorded_at
        )
        if vision_records:
            return VisionResult(
                records=vision_records, warnings=warnings, failed_pages=failed_pages
            )
        return TextResult(records=text_records, warnings=warnings, vision_attempted=True)

    def _read_pages(
        self,
        data: bytes,
        warnings: list[str],
        *,
        period: str,
        recorded_at: datetime,
    ) -> tuple[list[Record], list[int]]:
        try:
            pages = self._rasterizer.render(data)
        except PdfRasterizationError as exc:
            Log.warning(f"PDF pages could not be rendered: {exc}")
            warnings.append(f"PDF page rendering failed: {exc}")
            return [], []

        records: list[Record] = []
        failed_pages: list[int] = []
        for page in pages:
            try:
                reply = self._vision_client.analyze_image(
                    image_bytes=page.png_bytes,
                    prompt=self._prompt,
                    timeout_seconds=self._vision_timeout_seconds,
                )
            except VisionError as exc:
                Log.warning(f"Vision analysis failed for page {page.page_number}: {exc}")
                warnings.append(f"Vision analysis failed for page {page.page_number}: {exc}")
                failed_pages.append(page.page_number)
                continue
            page_records = parse_vision_response(
                reply,
                page.page_number,
                default_period=period,
                recorded_at=recorded_at,
            )
            Log.info(f"Vision model yielded {len(page_records)} records on page {page.page_number}")
            records.extend(page_records)
        return records, failed_pages
