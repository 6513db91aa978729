# EscalationRecord

# One row per file/activity whose Pending Since has crossed its TAT.
# Only actionable rows are stored, never the full sheet.

from sqlalchemy import Column, String, Integer, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from escalator.database import Base

class EscalationRecord(Base):
    __tablename__ = "escalation_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    upload_id = Column(String, ForeignKey("uploads.id"), index=True)

    department = Column(String, nullable=False, index=True)
    file_activity = Column(String, nullable=False)
    current_level = Column(String, default="")
    pending_since = Column(Integer, nullable=False)
    tat_days = Column(Integer, nullable=False)
    next_level = Column(String, default="")
    escalation_email = Column(String, nullable=False)
    remarks = Column(Text, default="")

    # The only field mutated after creation, flipped once a mail goes out
    mail_sent = Column(Boolean, default=False, nullable=False)

    upload = relationship("Upload", back_populates="records")
