from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.sql import func
from exam_portal.database import Base


class Exam(Base):
    """Exams created by teachers"""
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    subject = Column(String, nullable=True)
    duration = Column(Integer, nullable=True)  # Minutes
    total_questions = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    questions = Column(JSON, nullable=False, default=list)  # [{"question", "options", "correct_answer", "points"}]
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    scheduled_for = Column(DateTime(timezone=True), nullable=True)
