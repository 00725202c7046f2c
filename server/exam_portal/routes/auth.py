import logging

from fastapi import APIRouter

from exam_portal.schemas import LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

DEMO_TOKEN = "demo-token"


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """
    Demo login with no credentials check.
    Any username containing "teacher" gets the TEACHER role.
    """
    username = request.username or ""
    role = "TEACHER" if "teacher" in username.lower() else "STUDENT"
    logger.info(f"🔐 Login: {username} -> {role}")
    return LoginResponse(token=DEMO_TOKEN, role=role, username=request.username)
