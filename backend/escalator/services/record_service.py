import logging
from enum import Enum
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional

from escalator.crud import crud_record
from escalator.schema.filters import ColumnType
from escalator.schema.record import EmailDraft, FilteredRecords, RecordResponse, RecordStats
from escalator.services.filters import columns
from escalator.services.filters.errors import DataUnavailable
from escalator.services.filters.notifications import RECORDS_TOPIC, ChangeNotifier, change_notifier
from escalator.services.filters.provider import FilteredDatasetProvider
from escalator.services.filters.store import FilterConfigStore
from escalator.exceptions.record_exceptions import (
    InvalidRecordQueryException,
    RecordNotFoundException,
    StorageUnavailableException,
)

logger = logging.getLogger(__name__)


class MailStatusFilter(str, Enum):
    ALL = "all"
    SENT = "sent"
    PENDING = "pending"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


SORTABLE_COLUMNS = ["department", "fileActivity", "pendingSince", "tatDays", "escalationEmail"]

# Columns the free-text search looks into
SEARCH_COLUMNS = ["department", "fileActivity", "currentLevel", "nextLevel", "escalationEmail", "remarks"]


def search_records(
    records: List[RecordResponse],
    search: Optional[str] = None,
    department: Optional[str] = None,
    mail_status: MailStatusFilter = MailStatusFilter.ALL
) -> List[RecordResponse]:

    needle = (search or "").lower()
    readers = [columns.accessor_for(key) for key in SEARCH_COLUMNS]

    def keep(record: RecordResponse) -> bool:
        if needle and not any(needle in str(read(record) or "").lower() for read in readers):
            return False
        if department and department != "all" and record.department != department:
            return False
        if mail_status == MailStatusFilter.SENT and not record.mail_sent:
            return False
        if mail_status == MailStatusFilter.PENDING and record.mail_sent:
            return False
        return True

    return [record for record in records if keep(record)]


def sort_records(
    records: List[RecordResponse],
    sort_by: str = "pendingSince",
    direction: SortDirection = SortDirection.DESC
) -> List[RecordResponse]:

    if sort_by not in SORTABLE_COLUMNS:
        raise InvalidRecordQueryException(f"Cannot sort by {sort_by}. Choose one of: {', '.join(SORTABLE_COLUMNS)}")

    column = columns.get_column(sort_by)

    def key(record):
        value = column.read(record)
        if column.type == ColumnType.NUMBER:
            return value or 0
        return str(value or "").lower()

    return sorted(records, key=key, reverse=direction == SortDirection.DESC)


def build_email_draft(record) -> EmailDraft:

    subject = f"Escalation Required: {record.file_activity} - {record.department}"
    body = f"""Dear {record.next_level},

This is to bring to your attention that the following file/activity requires immediate escalation:

File/Activity: {record.file_activity}
Department: {record.department}
Current Level: {record.current_level}
Pending Since: {record.pending_since} days
TAT: {record.tat_days} days
Next Level: {record.next_level}
Remarks: {record.remarks}

The file has been pending for {record.pending_since} days, which exceeds the TAT of {record.tat_days} days.

Please take necessary action at the earliest.

Best regards,
System"""

    return EmailDraft(record_id=record.id, to=record.escalation_email, subject=subject, body=body)


class RecordService:

    def __init__(self, notifier: ChangeNotifier = change_notifier):
        self.notifier = notifier

    def list_records(
        self,
        provider: FilteredDatasetProvider,
        search: Optional[str] = None,
        department: Optional[str] = None,
        mail_status: MailStatusFilter = MailStatusFilter.ALL,
        sort_by: str = "pendingSince",
        sort_dir: SortDirection = SortDirection.DESC,
        refresh: bool = False
    ) -> FilteredRecords:
        """Filtered view narrowed by the table controls.

        Counts describe the filter configuration only; search, department
        and mail status narrow the returned rows.
        """
        try:
            view = provider.refresh() if refresh else provider.get_view()
        except DataUnavailable:
            raise StorageUnavailableException()

        rows = search_records(view.records, search, department, mail_status)
        rows = sort_records(rows, sort_by, sort_dir)

        return FilteredRecords(
            records=rows,
            total_count=view.total_count,
            filtered_count=view.filtered_count,
            applied_filters=view.applied_config,
            departments=view.departments
        )

    def get_departments(self, db: Session) -> List[str]:

        return crud_record.get_departments(db)

    def get_stats(self, db: Session) -> RecordStats:

        records = crud_record.get_all_records(db)
        upload = crud_record.get_latest_upload(db)
        sent = sum(1 for record in records if record.mail_sent)

        return RecordStats(
            total_count=len(records),
            pending_count=len(records) - sent,
            sent_count=sent,
            last_upload_filename=upload.filename if upload else None,
            last_uploaded_at=upload.uploaded_at if upload else None
        )

    def get_email_draft(self, db: Session, record_id: int) -> EmailDraft:

        record = crud_record.get_record(db, record_id)

        if record is None:
            raise RecordNotFoundException()

        return build_email_draft(record)

    def clear_all(self, db: Session, store: FilterConfigStore) -> None:
        """Remove records, uploads and the filter configuration"""
        try:
            crud_record.clear_all(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to clear records: {e}")
            raise StorageUnavailableException()

        logger.info("Cleared all stored records and uploads")
        self.notifier.publish(RECORDS_TOPIC)

        try:
            store.clear()
        except DataUnavailable:
            raise StorageUnavailableException()


record_service = RecordService()
