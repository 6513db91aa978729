from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from escalator.database import Base

# Only the latest upload is kept; saving a new one clears the table first
class Upload(Base):
    __tablename__ = "uploads"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    filename = Column(String, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.now)

    records = relationship("EscalationRecord", back_populates="upload")
