from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from exam_portal.models.alert import AlertReason


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase, serializes camelCase for the web client."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Alert Schemas
class Alert(BaseModel):
    """A persisted proctoring incident. Immutable once created."""
    id: int
    student: str
    exam: str
    reason: AlertReason
    timestamp: datetime

    class Config:
        frozen = True
        from_attributes = True


class TabSwitchEvent(BaseModel):
    """Raw `exam_tab_switch` message from a student client. Fields may be missing."""
    student: Optional[str] = None
    exam_id: Optional[str] = Field(default=None, alias="examId")
    detected_at: Optional[datetime] = Field(default=None, alias="detectedAt")

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True


class TeacherAlert(BaseModel):
    """`teacher_alert` payload pushed to teacher connections."""
    type: Literal["TAB_SWITCH"] = "TAB_SWITCH"
    student: str
    exam_id: str = Field(alias="examId")
    timestamp: str  # ISO-8601

    class Config:
        populate_by_name = True


class RegisterRoleMessage(BaseModel):
    role: Optional[str] = None


class SocketEnvelope(BaseModel):
    """Every WebSocket frame is `{"event": ..., "data": {...}}`. `data` is not trusted to be an object."""
    event: str
    data: Any = None

    @property
    def payload(self) -> Dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}


# Exam Schemas
class ExamQuestion(CamelModel):
    question: str
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[str] = None
    points: int = 1


class ExamCreate(CamelModel):
    title: str = Field(min_length=1)
    subject: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    total_questions: Optional[int] = None
    description: Optional[str] = None
    questions: List[ExamQuestion] = Field(default_factory=list)
    created_by: Optional[str] = None
    scheduled_for: Optional[datetime] = None


class ExamResponse(ExamCreate):
    id: int
    created_at: Optional[datetime] = None


# Submission Schemas
class SubmissionCreate(CamelModel):
    exam_id: int
    student: str = Field(min_length=1)
    answers: Dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = None


class SubmissionResponse(SubmissionCreate):
    id: int
    submitted_at: Optional[datetime] = None


# Auth Schemas
class LoginRequest(BaseModel):
    username: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    role: Literal["TEACHER", "STUDENT"]
    username: Optional[str] = None


# Dashboard Schemas
class DashboardStats(CamelModel):
    total_students: int
    active_exams: int
    alerts_today: int
    avg_score: float


class DashboardAlert(BaseModel):
    id: int
    student: str
    exam: str
    reason: str
    time: str  # ISO-8601


class DashboardResponse(BaseModel):
    stats: DashboardStats
    alerts: List[DashboardAlert]
    exams: List[ExamResponse]
