import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ConflictError, NotFoundError, ValidationError
from membership import resolve_club
from models import Club, Event, EventAttendee, User, UserRole, ref_id

logger = logging.getLogger(__name__)


def create_event(
    db_session: Session,
    acting_user: User,
    title: Optional[str],
    description: Optional[str] = None,
    date: Optional[datetime] = None,
    location: Optional[str] = None,
    max_attendees: int = 0,
    explicit_club: Optional[str] = None,
) -> Event:
    if not title:
        raise ValidationError("Title required")
    if max_attendees is None:
        max_attendees = 0
    if max_attendees < 0:
        raise ValidationError("maxAttendees must be zero or positive")

    club_id = ref_id(explicit_club) if explicit_club else None
    if acting_user.role == UserRole.club_admin:
        if not acting_user.club_ids:
            raise ValidationError("Club admin has no club assigned.")
        club_id = resolve_club(acting_user, explicit_club)
    # 일반 학생이 club을 지정하는 경우는 막지 않음 (DESIGN.md 참고)

    if club_id is not None and db_session.get(Club, club_id) is None:
        raise NotFoundError("Club not found")

    event = Event(
        title=title,
        description=description or "",
        date=date,
        location=location,
        max_attendees=max_attendees,
        club_id=club_id,
        created_by=acting_user.id,
    )
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    logger.info("User %s created event %s (club %s)", acting_user.id, event.id, club_id)
    return event


def register_attendee(db_session: Session, event_id: str, user: User) -> Event:
    # 정원 확인과 추가 사이에 다른 등록이 끼어들지 않도록 행 잠금
    event = (
        db_session.query(Event)
        .filter(Event.id == event_id)
        .with_for_update()
        .first()
    )
    if event is None:
        raise NotFoundError("Event not found")

    user_id = ref_id(user)
    if user_id in event.attendees:
        raise ConflictError("Already registered")

    if event.max_attendees and len(event.attendees) >= event.max_attendees:
        raise ConflictError("Event is full")

    db_session.add(EventAttendee(event_id=event.id, user_id=user_id))
    try:
        db_session.commit()
    except IntegrityError:
        db_session.rollback()
        raise ConflictError("Already registered")

    logger.info("User %s registered for event %s", user_id, event_id)
    return event


def list_events(db_session: Session):
    return db_session.query(Event).order_by(Event.date.asc(), Event.created_at.asc()).all()


def list_my_club_events(db_session: Session, user: User):
    club_ids = user.club_ids
    if not club_ids:
        return []
    return (
        db_session.query(Event)
        .filter(Event.club_id.in_(club_ids))
        .order_by(Event.date.asc(), Event.created_at.asc())
        .all()
    )
