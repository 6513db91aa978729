import logging
import os
import uuid
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional

from escalator.core.config import settings
from escalator.crud import crud_record
from escalator.schema.upload import ParseResult, UploadResponse
from escalator.services.filters.errors import DataUnavailable
from escalator.services.filters.notifications import RECORDS_TOPIC, ChangeNotifier, change_notifier
from escalator.services.filters.store import FilterConfigStore
from escalator.services.spreadsheet_parser import (
    CSV_EXTENSIONS,
    EXCEL_EXTENSIONS,
    ParseErrorReason,
    SpreadsheetParseError,
    filter_pending,
    parse_workbook,
    to_record_payloads,
)
from escalator.exceptions.record_exceptions import StorageUnavailableException
from escalator.exceptions.upload_exceptions import (
    FileTooLargeException,
    InvalidFileTypeException,
    NoFileProvidedException,
    SpreadsheetParseException,
    SpreadsheetValidationException,
)

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
    "application/vnd.ms-excel",  # .xls
    "text/csv",  # .csv
}

# Client-side rejections: the sheet is readable but its content is wrong
VALIDATION_REASONS = {
    ParseErrorReason.MISSING_COLUMNS,
    ParseErrorReason.INVALID_ROW,
    ParseErrorReason.NO_DATA_ROWS,
}


class UploadService:

    def __init__(self, max_upload_size_mb: int = settings.MAX_UPLOAD_SIZE_MB, notifier: ChangeNotifier = change_notifier):
        self.max_upload_size_mb = max_upload_size_mb
        self.notifier = notifier

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def _check_file(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:

        if not filename:
            raise NoFileProvidedException()

        extension = os.path.splitext(filename)[1].lower()
        if content_type not in ALLOWED_CONTENT_TYPES and extension not in EXCEL_EXTENSIONS + CSV_EXTENSIONS:
            raise InvalidFileTypeException()

        if size > self.max_upload_bytes:
            raise FileTooLargeException(f"File too large. Maximum size is {self.max_upload_size_mb}MB.")

    def parse(self, content: bytes, filename: Optional[str], content_type: Optional[str]) -> ParseResult:
        """Validate and parse an upload without storing anything"""
        self._check_file(filename, content_type, len(content))

        is_csv = content_type == "text/csv" or filename.lower().endswith(CSV_EXTENSIONS)

        try:
            rows = parse_workbook(content, filename, is_csv=is_csv)
        except SpreadsheetParseError as e:
            logger.error(f"Parse error for {filename}: {e.message}")
            if e.reason in VALIDATION_REASONS:
                raise SpreadsheetValidationException(e.message, reason=e.reason.value)
            raise SpreadsheetParseException(reason=e.reason.value)

        pending = filter_pending(rows)

        return ParseResult(
            upload_id=str(uuid.uuid4()),
            filename=filename,
            total_rows=len(rows),
            pending_count=len(pending),
            pending=pending
        )

    def store_upload(
        self,
        db: Session,
        store: FilterConfigStore,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str]
    ) -> UploadResponse:
        """Parse the file and replace every stored record with its pending rows"""
        parsed = self.parse(content, filename, content_type)

        try:
            # one transaction: the old set survives unless the new one is fully written
            crud_record.clear_all(db, commit=False)
            upload = crud_record.save_upload(db, parsed.filename, commit=False)
            stored = crud_record.save_records(db, to_record_payloads(parsed.pending, upload.id), commit=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store upload {filename}: {e}")
            raise StorageUnavailableException()

        logger.info(f"Stored {stored} pending records out of {parsed.total_rows} rows from {filename}")
        self.notifier.publish(RECORDS_TOPIC)

        try:
            store.ensure_default()
        except DataUnavailable:
            raise StorageUnavailableException()

        return UploadResponse(
            upload_id=upload.id,
            filename=parsed.filename,
            total_rows=parsed.total_rows,
            pending_count=parsed.pending_count,
            stored_count=stored
        )


upload_service = UploadService()
