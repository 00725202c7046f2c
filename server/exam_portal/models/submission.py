from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Float
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from exam_portal.database import Base


class Submission(Base):
    """A student's answers to an exam"""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False)
    student = Column(String, nullable=False)
    answers = Column(JSON, default=dict)  # {question_index: answer}
    score = Column(Float, nullable=True)  # As reported by the client, not graded here
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())

    exam = relationship("Exam")
