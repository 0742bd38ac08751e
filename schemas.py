from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from models import ApplicantStatus, UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- 응답 모델 ---

class ClubSummary(CamelModel):
    id: str
    name: str


class ClubInfo(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class UserInfo(CamelModel):
    id: str
    name: Optional[str] = None
    email: str
    role: UserRole
    clubs: List[ClubSummary] = []


class EventInfo(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    club: Optional[ClubInfo] = None
    date: Optional[datetime] = None
    location: Optional[str] = None
    max_attendees: int
    attendees: List[str] = []
    created_by: Optional[str] = None


class RecruitmentInfo(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    club: ClubInfo
    positions: int
    open: bool
    applicant_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class ApplicantInfo(CamelModel):
    id: str
    user_id: Optional[str] = None
    name: str
    email: str
    statement: Optional[str] = None
    status: ApplicantStatus
    created_at: datetime


class AdminInfo(CamelModel):
    type: str
    user_id: str
    email: str


class Message(CamelModel):
    message: str


class RegisterResponse(Message):
    user: UserInfo


class LoginResponse(Message):
    token: str
    user: UserInfo


class ClubCreated(Message):
    club: ClubInfo
    admin_info: Optional[AdminInfo] = None


class ClubJoined(Message):
    club: ClubInfo


class EventCreated(Message):
    event: EventInfo


class EventRegistered(Message):
    event_id: str


class RecruitmentCreated(Message):
    recruitment: RecruitmentInfo


class ApplicationSubmitted(Message):
    applicant_id: str


class ApplicantReviewed(Message):
    applicant: ApplicantInfo


# --- 요청 모델 ---

class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: EmailStr
    password: str = Field(min_length=1)
    role: UserRole = UserRole.student
    club_name: Optional[str] = None
    club_description: Optional[str] = None
    join_club_id: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str
    club_id: Optional[str] = None


class ClubCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    admin_email: Optional[EmailStr] = None


class EventCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    location: Optional[str] = None
    max_attendees: int = 0
    club: Optional[str] = None


class RecruitmentCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    positions: int = 1
    club: Optional[str] = None
    open: bool = True


class ApplicationCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    statement: Optional[str] = None


class ReviewRequest(CamelModel):
    status: Optional[str] = None
