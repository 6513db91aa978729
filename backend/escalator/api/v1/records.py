from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from escalator.api.deps import get_dataset_provider, get_db, get_filter_store
from escalator.schema.record import EmailDraft, FilteredRecords, RecordStats
from escalator.services.filters import FilterConfigStore, FilteredDatasetProvider
from escalator.services.record_service import MailStatusFilter, SortDirection, record_service

router = APIRouter(prefix="/records", tags=["records"])


@router.get("", response_model=FilteredRecords)
def get_records(
    search: Optional[str] = None,
    department: Optional[str] = None,
    mail_status: MailStatusFilter = MailStatusFilter.ALL,
    sort_by: str = "pendingSince",
    sort_dir: SortDirection = SortDirection.DESC,
    refresh: bool = Query(False, description="Re-read stored records and filters before answering"),
    provider: FilteredDatasetProvider = Depends(get_dataset_provider)
):

    return record_service.list_records(provider, search, department, mail_status, sort_by, sort_dir, refresh)


@router.get("/departments", response_model=List[str])
def get_departments(db: Session = Depends(get_db)):

    return record_service.get_departments(db)


@router.get("/stats", response_model=RecordStats)
def get_stats(db: Session = Depends(get_db)):

    return record_service.get_stats(db)


@router.get("/{record_id}/email-draft", response_model=EmailDraft)
def get_email_draft(record_id: int, db: Session = Depends(get_db)):

    return record_service.get_email_draft(db, record_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_data(
    db: Session = Depends(get_db),
    store: FilterConfigStore = Depends(get_filter_store)
):

    record_service.clear_all(db, store)
