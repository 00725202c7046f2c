"""
Exam and submission storage.
"""
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from exam_portal.errors import RepositoryError
from exam_portal.models.content import Exam
from exam_portal.models.submission import Submission
from exam_portal.schemas import ExamCreate, ExamResponse, SubmissionCreate, SubmissionResponse

logger = logging.getLogger(__name__)


class ExamRepository:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def create_exam(self, request: ExamCreate) -> ExamResponse:
        data = request.model_dump()
        if data["total_questions"] is None:
            data["total_questions"] = len(data["questions"])
        try:
            with self.session_factory() as session:
                exam = Exam(**data)
                session.add(exam)
                session.commit()
                session.refresh(exam)
                logger.info(f"📝 Exam created: {exam.id} {exam.title!r}")
                return ExamResponse.model_validate(exam)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to create exam: {e}") from e

    def get_exam(self, exam_id: int) -> Optional[ExamResponse]:
        try:
            with self.session_factory() as session:
                exam = session.get(Exam, exam_id)
                return ExamResponse.model_validate(exam) if exam else None
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to load exam {exam_id}: {e}") from e

    def list_exams(self) -> List[ExamResponse]:
        try:
            with self.session_factory() as session:
                exams = session.scalars(select(Exam).order_by(Exam.id))
                return [ExamResponse.model_validate(e) for e in exams]
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list exams: {e}") from e

    def count_exams(self) -> int:
        try:
            with self.session_factory() as session:
                return session.scalar(select(func.count(Exam.id))) or 0
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to count exams: {e}") from e

    def create_submission(self, request: SubmissionCreate) -> Optional[SubmissionResponse]:
        """Store a submission as sent. Returns None when the exam does not exist."""
        try:
            with self.session_factory() as session:
                if session.get(Exam, request.exam_id) is None:
                    return None
                submission = Submission(**request.model_dump())
                session.add(submission)
                session.commit()
                session.refresh(submission)
                return SubmissionResponse.model_validate(submission)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to save submission: {e}") from e

    def list_submissions(self, student: Optional[str] = None) -> List[SubmissionResponse]:
        query = select(Submission).order_by(Submission.id)
        if student:
            query = query.where(Submission.student == student)
        try:
            with self.session_factory() as session:
                return [SubmissionResponse.model_validate(s) for s in session.scalars(query)]
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list submissions: {e}") from e

    def count_students(self) -> int:
        """Distinct students that have submitted at least once."""
        try:
            with self.session_factory() as session:
                return session.scalar(select(func.count(func.distinct(Submission.student)))) or 0
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to count students: {e}") from e

    def average_score(self) -> float:
        """Mean of the scored submissions, 0 when there are none."""
        try:
            with self.session_factory() as session:
                avg = session.scalar(select(func.avg(Submission.score)))
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to average scores: {e}") from e
        return round(float(avg), 1) if avg is not None else 0.0
