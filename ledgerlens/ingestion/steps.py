import dataclasses

from ledgerlens.database.exceptions import RepositoryError
from ledgerlens.database.repositories.documents_repository import DocumentsRepository
from ledgerlens.ingestion.exceptions import ExtractionEmptyError, UnsupportedFormatError
from ledgerlens.ingestion.extractors.base import BaseExtractor
from ledgerlens.ingestion.extractors.document_image import DocumentImageExtractor, VisionResult
from ledgerlens.ingestion.format_detector import detect_format, resolve_declared_format
from ledgerlens.ingestion.pipeline import IngestionContext, PipelineStep
from ledgerlens.ingestion.upload_validator import UploadValidator
from ledgerlens.logging.logger import Log
from ledgerlens.records.models import Document, DocumentStatus, FileFormat
from ledgerlens.records.validation import Clock, utc_now
from ledgerlens.storage.file_store import FileStore

VISION_FALLBACK_WARNING = "Used AI vision fallback for PDF analysis - may be slower but more accurate"

FORMAT_LABELS: dict[FileFormat, str] = {
    FileFormat.SPREADSHEET: "Excel",
    FileFormat.DELIMITED_TEXT: "CSV",
    FileFormat.PORTABLE_DOCUMENT: "PDF",
}


class ValidateUploadStep(PipelineStep):
    def __init__(self, validator: UploadValidator) -> None:
        self._validator = validator

    def run(self, context: IngestionContext) -> IngestionContext:
        context.data = self._validator.validate(context.stream, context.filename)
        file_format = (
            resolve_declared_format(context.declared_format)
            if context.declared_format is not None
            else detect_format(context.filename)
        )
        if file_format is FileFormat.UNKNOWN:
            raise UnsupportedFormatError(f"Unsupported file format for {context.filename}")
        context.file_format = file_format
        Log.info(f"Validated {context.filename}: {len(context.data)} bytes, {file_format.value}")
        return context


class StoreFileStep(PipelineStep):
    def __init__(self, file_store: FileStore) -> None:
        self._file_store = file_store

    def run(self, context: IngestionContext) -> IngestionContext:
        path = self._file_store.save(context.data, context.filename)
        context.storage_path = str(path)
        Log.info(f"Stored {context.filename} at {path}")
        return context


class CreateDocumentStep(PipelineStep):
    def __init__(
        self,
        repo: DocumentsRepository,
        owner_tag: str = "System",
        clock: Clock = utc_now,
    ) -> None:
        self._repo = repo
        self._owner_tag = owner_tag
        self._clock = clock

    def run(self, context: IngestionContext) -> IngestionContext:
        document = Document(
            file_name=context.filename,
            file_format=context.file_format,
            uploaded_at=self._clock(),
            file_size=len(context.data),
            storage_path=context.storage_path,
            status=DocumentStatus.PROCESSING,
            owner=self._owner_tag,
        )
        context.document_id = self._repo.create_document(document)
        context.result.document_id = context.document_id
        Log.info(f"Created document {context.document_id} for {context.filename}")
        return context


class ExtractRecordsStep(PipelineStep):
    def __init__(
        self,
        spreadsheet: BaseExtractor,
        delimited_text: BaseExtractor,
        document_image: DocumentImageExtractor,
    ) -> None:
        self._spreadsheet = spreadsheet
        self._delimited_text = delimited_text
        self._document_image = document_image

    def run(self, context: IngestionContext) -> IngestionContext:
        match context.file_format:
            case FileFormat.SPREADSHEET:
                records = self._spreadsheet.extract(context.data)
            case FileFormat.DELIMITED_TEXT:
                records = self._delimited_text.extract(context.data)
            case FileFormat.PORTABLE_DOCUMENT:
                staged = self._document_image.extract_staged(context.data)
                records = staged.records
                for warning in staged.warnings:
                    context.result.add_warning(warning)
                if isinstance(staged, VisionResult) or staged.vision_attempted:
                    context.vision_used = True
                    context.result.add_warning(VISION_FALLBACK_WARNING)
            case _:
                raise UnsupportedFormatError(
                    f"Unsupported file format for {context.filename}"
                )

        if not records:
            label = FORMAT_LABELS.get(context.file_format, context.file_format.value)
            raise ExtractionEmptyError(f"No financial data found in {label} file")
        context.records = records
        Log.info(f"Extracted {len(records)} records from document {context.document_id}")
        return context


class PersistRecordsStep(PipelineStep):
    def __init__(self, repo: DocumentsRepository) -> None:
        self._repo = repo

    def run(self, context: IngestionContext) -> IngestionContext:
        if context.document_id is None:
            raise ValueError("IngestionContext.document_id must be set before persisting records")
        bound = [
            dataclasses.replace(record, document_id=context.document_id)
            for record in context.records
        ]
        self._repo.bulk_insert_records(bound)
        context.records = bound
        context.result.records_imported = len(bound)
        Log.info(f"Persisted {len(bound)} records for document {context.document_id}")
        return context


class MarkAnalyzedStep(PipelineStep):
    def __init__(self, repo: DocumentsRepository) -> None:
        self._repo = repo

    def run(self, context: IngestionContext) -> IngestionContext:
        if context.document_id is None:
            raise ValueError("IngestionContext.document_id must be set before completion")
        self._repo.update_document_status(context.document_id, DocumentStatus.ANALYZED)
        context.result.success = True
        Log.info(f"Document {context.document_id} analyzed")
        return context


class MarkErrorStep(PipelineStep):
    """Failure handler: moves a created document to Error.

    Any failure here is logged rather than raised so the caller still
    receives the original error.
    """

    def __init__(self, repo: DocumentsRepository) -> None:
        self._repo = repo

    def run(self, context: IngestionContext) -> IngestionContext:
        if context.document_id is None:
            return context
        try:
            self._repo.update_document_status(context.document_id, DocumentStatus.ERROR)
        except RepositoryError as exc:
            Log.error(f"Could not mark document {context.document_id} as failed: {exc}")
            return context
        except Exception as exc:
            Log.exception(f"Could not mark document {context.document_id} as failed: {exc}")
            return context
        Log.error(f"Document {context.document_id} marked as failed: {context.error_message}")
        return context
