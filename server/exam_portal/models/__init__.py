"""
Models package initialization
Import all models here to ensure they are registered with SQLAlchemy
"""

from exam_portal.models.alert import AlertRecord, AlertReason
from exam_portal.models.content import Exam
from exam_portal.models.submission import Submission

__all__ = [
    "AlertRecord",
    "AlertReason",
    "Exam",
    "Submission",
]
