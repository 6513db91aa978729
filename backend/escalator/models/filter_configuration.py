from sqlalchemy import Column, Integer, JSON, DateTime
from datetime import datetime
from escalator.database import Base

# Single slot table: row id 1 holds the applied filter groups.
# No row means the configuration is unset.
class FilterConfigurationRow(Base):
    __tablename__ = "filter_configurations"

    SLOT_ID = 1

    id = Column(Integer, primary_key=True, default=SLOT_ID)
    groups = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)
