import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from database import Base


def new_id():
    return uuid.uuid4().hex


def utcnow():
    return datetime.now(timezone.utc)


def ref_id(value):
    """
    모델 객체든 ID 문자열이든 같은 식별자 문자열로 변환.
    멤버십/소유 비교는 항상 이 함수를 거친다.
    """
    if value is None:
        return None
    if isinstance(value, Base):
        return value.id
    return str(value)


class UserRole(str, enum.Enum):
    student = "student"
    club_admin = "club_admin"


class ApplicantStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class Membership(Base):
    __tablename__ = "memberships"

    user_id = Column(String(32), ForeignKey("users.id"), primary_key=True)
    club_id = Column(String(32), ForeignKey("clubs.id"), primary_key=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.student, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # 가입 순서대로 정렬 -> clubs[0]이 "첫 번째 동아리"
    clubs = relationship(
        "Club",
        secondary="memberships",
        order_by=Membership.joined_at,
        viewonly=True,
    )

    @property
    def club_ids(self):
        return [ref_id(c) for c in self.clubs]


class Club(Base):
    __tablename__ = "clubs"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), default=utcnow)


class EventAttendee(Base):
    __tablename__ = "event_attendees"

    event_id = Column(String(32), ForeignKey("events.id"), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), primary_key=True)
    registered_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Event(Base):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    club_id = Column(String(32), ForeignKey("clubs.id"), nullable=True, index=True)
    date = Column(DateTime(timezone=True), nullable=True)
    location = Column(String, nullable=True)
    max_attendees = Column(Integer, default=0, nullable=False)
    created_by = Column(String(32), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    club = relationship("Club")
    attendee_links = relationship("EventAttendee", order_by=EventAttendee.registered_at)

    @property
    def attendees(self):
        return [link.user_id for link in self.attendee_links]


class Applicant(Base):
    __tablename__ = "applicants"

    id = Column(String(32), primary_key=True, default=new_id)
    recruitment_id = Column(String(32), ForeignKey("recruitments.id"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    statement = Column(Text, default="")
    status = Column(Enum(ApplicantStatus), default=ApplicantStatus.pending, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Recruitment(Base):
    __tablename__ = "recruitments"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    club_id = Column(String(32), ForeignKey("clubs.id"), nullable=False, index=True)
    positions = Column(Integer, default=1, nullable=False)
    open = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(32), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    club = relationship("Club")
    # 지원자 목록은 추가만 가능 (append-only), 생성 순서 유지
    applicants = relationship("Applicant", order_by=Applicant.created_at)

    @property
    def applicant_count(self):
        return len(self.applicants)
