from sqlalchemy.orm import Session
from typing import Any, List, Optional
from datetime import datetime
from escalator.models import FilterConfigurationRow


def get_filter_config(db: Session) -> Optional[FilterConfigurationRow]:

    return db.get(FilterConfigurationRow, FilterConfigurationRow.SLOT_ID)


def upsert_filter_config(db: Session, groups: List[Any]) -> FilterConfigurationRow:
    """Replace the stored groups wholesale and stamp a new modification time"""
    row = get_filter_config(db)

    if row is None:
        row = FilterConfigurationRow(id=FilterConfigurationRow.SLOT_ID)
        db.add(row)

    row.groups = groups
    row.updated_at = datetime.now()

    db.commit()
    db.refresh(row)

    return row


def delete_filter_config(db: Session) -> bool:

    deleted = db.query(FilterConfigurationRow).delete()
    db.commit()

    return deleted > 0
