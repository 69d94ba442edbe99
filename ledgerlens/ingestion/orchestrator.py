import time
from pathlib import Path
from typing import BinaryIO

from ledgerlens.config.settings import IngestionConfig, Settings
from ledgerlens.database.repositories.documents_repository import DocumentsRepository
from ledgerlens.ingestion.exceptions import ExtractionEmptyError, UploadValidationError
from ledgerlens.ingestion.extractors.delimited_text import DelimitedTextExtractor
from ledgerlens.ingestion.extractors.document_image import DocumentImageExtractor
from ledgerlens.ingestion.extractors.spreadsheet import SpreadsheetExtractor
from ledgerlens.ingestion.pipeline import IngestionContext, PipelineStep
from ledgerlens.ingestion.steps import (
    CreateDocumentStep,
    ExtractRecordsStep,
    MarkAnalyzedStep,
    MarkErrorStep,
    PersistRecordsStep,
    StoreFileStep,
    ValidateUploadStep,
)
from ledgerlens.ingestion.upload_validator import UploadValidator
from ledgerlens.logging.logger import Log
from ledgerlens.pdf.factory import PdfExtractorFactory
from ledgerlens.records.models import ExtractionResult, FileFormat
from ledgerlens.records.validation import Clock, utc_now
from ledgerlens.storage.file_store import FileStore
from ledgerlens.vision.client_base import BaseVisionClient
from ledgerlens.vision.factory import VisionClientFactory
from ledgerlens.vision.prompt_loader import load_prompt_template


class IngestionOrchestrator:
    """Runs one upload through validation, storage, extraction and persistence.

    Pipeline: validate -> store -> create document -> extract -> persist -> mark analyzed.
    Any failure after the document exists moves it to Error through ``failed_step``.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def ingest(
        self,
        stream: bytes | BinaryIO,
        filename: str,
        declared_format: FileFormat | str | None = None,
    ) -> ExtractionResult:
        started = time.perf_counter()
        result = ExtractionResult(file_name=filename)
        context = IngestionContext(
            filename=filename,
            stream=stream,
            result=result,
            declared_format=declared_format,
        )
        Log.info(f"Ingesting {filename}")

        try:
            for step in self._steps:
                context = step.run(context)
        except UploadValidationError as exc:
            Log.warning(f"Rejected upload {filename}: {exc}")
            context.error_message = str(exc)
            result.add_error(str(exc))
            self._failed_step.run(context)
        except ExtractionEmptyError as exc:
            Log.warning(f"No records extracted from {filename}: {exc}")
            context.error_message = str(exc)
            result.add_error(str(exc))
            self._failed_step.run(context)
        except Exception as exc:
            Log.exception(f"Ingestion of {filename} failed: {exc}")
            context.error_message = f"Processing failed: {exc}"
            result.add_error(context.error_message)
            self._failed_step.run(context)
        except BaseException:
            context.error_message = "Processing cancelled"
            self._failed_step.run(context)
            raise
        finally:
            result.processing_time_ms = int((time.perf_counter() - started) * 1000)

        Log.info(
            f"Finished {filename}: success={result.success}, "
            f"records={result.records_imported}, {result.processing_time_ms} ms"
        )
        return result


def build_orchestrator(
    settings: Settings,
    repo: DocumentsRepository | None = None,
    vision_client: BaseVisionClient | None = None,
    clock: Clock = utc_now,
) -> IngestionOrchestrator:
    """Wire an orchestrator with the adapters selected in settings."""
    config = IngestionConfig.from_settings(settings)
    repo = repo if repo is not None else DocumentsRepository()
    vision_client = (
        vision_client if vision_client is not None else VisionClientFactory.create(settings)
    )

    document_image = DocumentImageExtractor(
        text_extractor=PdfExtractorFactory.create(settings),
        rasterizer=PdfExtractorFactory.create_rasterizer(settings),
        vision_client=vision_client,
        prompt=load_prompt_template(),
        fallback_min_records=config.vision_fallback_min_records,
        vision_timeout_seconds=config.vision_timeout_seconds,
        clock=clock,
    )
    steps: list[PipelineStep] = [
        ValidateUploadStep(UploadValidator(config)),
        StoreFileStep(FileStore(Path(settings.files_root), clock=clock)),
        CreateDocumentStep(repo, owner_tag=config.owner_tag, clock=clock),
        ExtractRecordsStep(
            spreadsheet=SpreadsheetExtractor(config.header_scan_rows, clock=clock),
            delimited_text=DelimitedTextExtractor(config.csv_delimiter, clock=clock),
            document_image=document_image,
        ),
        PersistRecordsStep(repo),
        MarkAnalyzedStep(repo),
    ]
    return IngestionOrchestrator(steps=steps, failed_step=MarkErrorStep(repo))
