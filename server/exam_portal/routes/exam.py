from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from typing import List

from exam_portal.errors import RepositoryError
from exam_portal.schemas import ExamCreate, ExamResponse

router = APIRouter(tags=["Exam"])


@router.get("", response_model=List[ExamResponse])
async def list_exams(request: Request):
    try:
        return await run_in_threadpool(request.app.state.exams.list_exams)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", response_model=ExamResponse, status_code=201)
async def create_exam(exam: ExamCreate, request: Request):
    """
    Teacher creates an exam. Every connected client is told via `new-exam`.
    """
    try:
        created = await run_in_threadpool(request.app.state.exams.create_exam, exam)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))

    await request.app.state.connections.broadcast(
        "new-exam", created.model_dump(mode="json", by_alias=True)
    )
    return created


@router.get("/{exam_id}", response_model=ExamResponse)
async def get_exam(exam_id: int, request: Request):
    try:
        exam = await run_in_threadpool(request.app.state.exams.get_exam, exam_id)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if exam is None:
        raise HTTPException(status_code=404, detail="Exam not found")
    return exam
