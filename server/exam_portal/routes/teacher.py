from fastapi import APIRouter, HTTPException, Request

from exam_portal.errors import AggregationFailed
from exam_portal.schemas import DashboardResponse

router = APIRouter(tags=["Teacher"])


@router.get("/dashboard", response_model=DashboardResponse)
async def teacher_dashboard(request: Request):
    """
    Initial dashboard render: stats, the latest alerts (newest first) and exams.
    Live alerts arrive afterwards over the WebSocket.
    """
    try:
        snapshot = await request.app.state.dashboard.snapshot()
    except AggregationFailed as e:
        raise HTTPException(status_code=500, detail=str(e))
    return snapshot.to_response()
