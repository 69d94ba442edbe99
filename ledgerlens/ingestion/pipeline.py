from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO

from ledgerlens.records.models import ExtractionResult, FileFormat, Record


@dataclass(slots=True)
class IngestionContext:
    filename: str
    stream: bytes | BinaryIO
    result: ExtractionResult
    declared_format: FileFormat | str | None = None
    file_format: FileFormat = FileFormat.UNKNOWN
    data: bytes = b""
    storage_path: str = ""
    document_id: int | None = None
    records: list[Record] = field(default_factory=list)
    vision_used: bool = False
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: IngestionContext) -> IngestionContext:
        raise NotImplementedError
