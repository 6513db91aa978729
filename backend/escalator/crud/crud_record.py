"""
Escalation Record CRUD Operations

Database operations for Upload and EscalationRecord models. Only one upload
and its pending records are kept at any time.

Writers take ``commit=False`` when the caller stages several of them in one
transaction; they then only flush.
"""

from sqlalchemy.orm import Session
from typing import List, Optional

from escalator.models import Upload, EscalationRecord
from escalator.schema.record import RecordCreate


def _finish(db: Session, commit: bool) -> None:
    if commit:
        db.commit()
    else:
        db.flush()


def save_upload(db: Session, filename: str, commit: bool = True) -> Upload:
    """Clear previous uploads so exactly one upload row exists"""
    db.query(Upload).delete()

    upload = Upload(filename=filename)

    db.add(upload)
    _finish(db, commit)
    db.refresh(upload)

    return upload


def get_latest_upload(db: Session) -> Optional[Upload]:

    return db.query(Upload).order_by(Upload.uploaded_at.desc()).first()


def save_records(db: Session, records: List[RecordCreate], commit: bool = True) -> int:

    db.add_all([
        EscalationRecord(
            upload_id=record.upload_id,
            department=record.department,
            file_activity=record.file_activity,
            current_level=record.current_level,
            pending_since=record.pending_since,
            tat_days=record.tat_days,
            next_level=record.next_level,
            escalation_email=record.escalation_email,
            remarks=record.remarks,
            mail_sent=record.mail_sent
        )
        for record in records
    ])
    _finish(db, commit)

    return len(records)


def get_all_records(db: Session) -> List[EscalationRecord]:

    return db.query(EscalationRecord).order_by(EscalationRecord.id).all()


def get_record(db: Session, record_id: int) -> Optional[EscalationRecord]:

    return db.get(EscalationRecord, record_id)


def update_mail_sent(db: Session, record_id: int, mail_sent: bool) -> Optional[EscalationRecord]:

    record = get_record(db, record_id)

    if record is None:
        return None

    record.mail_sent = mail_sent
    db.commit()
    db.refresh(record)

    return record


def clear_records(db: Session, commit: bool = True) -> int:

    deleted = db.query(EscalationRecord).delete()
    _finish(db, commit)

    return deleted


def clear_all(db: Session, commit: bool = True) -> None:
    """Drop records and uploads; used before storing a new upload"""
    clear_records(db, commit=False)
    db.query(Upload).delete()
    _finish(db, commit)


def get_departments(db: Session) -> List[str]:

    rows = db.query(EscalationRecord.department).distinct().all()

    return sorted(row[0] for row in rows)
