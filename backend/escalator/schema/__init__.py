"""
Schemas Package

Exports all Pydantic schemas for the escalation tracker.
"""

from .filters import (
    ColumnType,
    Operator,
    GroupLogic,
    FilterCondition,
    FilterGroup,
    FilterConfigRequest,
    FilterConfiguration,
    FilterPromptRequest,
    GeneratedFilters,
    FilterPreview,
    OperatorOption,
    ColumnResponse,
)
from .record import (
    ParsedRow,
    RecordCreate,
    RecordResponse,
    FilteredRecords,
    RecordStats,
    EmailDraft,
)
from .upload import ParseResult, UploadResponse
from .mail import SendMailRequest, SendMailResponse, MailStatus
