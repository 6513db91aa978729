from typing import List, Optional
from datetime import datetime

from escalator.schema.base import CamelModel
from escalator.schema.filters import FilterGroup


class ParsedRow(CamelModel):
    # One typed row read from the uploaded sheet
    department: str
    file_activity: str
    current_level: str = ""
    pending_since: int
    tat_days: int
    next_level: str = ""
    escalation_email: str
    remarks: str = ""
    mail_sent: bool = False


class RecordCreate(ParsedRow):
    upload_id: str


class RecordResponse(ParsedRow):
    id: int
    upload_id: Optional[str] = None


class FilteredRecords(CamelModel):
    records: List[RecordResponse]
    total_count: int
    filtered_count: int
    applied_filters: Optional[List[FilterGroup]] = None
    departments: List[str]


class RecordStats(CamelModel):
    total_count: int
    pending_count: int
    sent_count: int
    last_upload_filename: Optional[str] = None
    last_uploaded_at: Optional[datetime] = None


class EmailDraft(CamelModel):
    record_id: int
    to: str
    subject: str
    body: str
