from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from typing import List, Optional

from exam_portal.errors import RepositoryError
from exam_portal.schemas import SubmissionCreate, SubmissionResponse

router = APIRouter(tags=["Submission"])


@router.post("", response_model=SubmissionResponse, status_code=201)
async def submit_exam(submission: SubmissionCreate, request: Request):
    """Store a student's answers. The score is kept as the client reports it."""
    try:
        saved = await run_in_threadpool(request.app.state.exams.create_submission, submission)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if saved is None:
        raise HTTPException(status_code=404, detail="Exam not found")
    return saved


@router.get("", response_model=List[SubmissionResponse])
async def list_submissions(request: Request, student: Optional[str] = None):
    try:
        return await run_in_threadpool(request.app.state.exams.list_submissions, student)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))
