from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from exam_portal.database import Base
import enum


class AlertReason(str, enum.Enum):
    TAB_SWITCH = "Tab switching detected"


class AlertRecord(Base):
    """Append-only log of proctoring incidents"""
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    student = Column(String, nullable=False)
    exam = Column(String, nullable=False)
    reason = Column(
        SQLEnum(AlertReason, values_callable=lambda reasons: [r.value for r in reasons]),
        nullable=False,
    )
    timestamp = Column(DateTime, nullable=False, index=True)  # Naive UTC

    def __repr__(self):
        return f"<AlertRecord {self.student} {self.exam} ({self.reason})>"
