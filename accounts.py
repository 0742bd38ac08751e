import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import Settings
from errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from membership import add_membership, is_member
from models import Club, User, UserRole
from security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def find_user_by_email(db_session: Session, email: str) -> Optional[User]:
    return db_session.query(User).filter(User.email == email).first()


def find_or_create_club(db_session: Session, name: str, description: str = "") -> Club:
    club = db_session.query(Club).filter(Club.name == name).first()
    if club is None:
        club = Club(name=name, description=description or "")
        db_session.add(club)
        db_session.flush()
        logger.info("Created club %r during registration", name)
    return club


def register(
    db_session: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: UserRole = UserRole.student,
    club_name: Optional[str] = None,
    club_description: Optional[str] = None,
    join_club_id: Optional[str] = None,
) -> User:
    if find_user_by_email(db_session, email) is not None:
        raise ConflictError("User already exists")

    club_name = (club_name or "").strip()
    if role == UserRole.club_admin and not club_name:
        raise ValidationError("clubName required for club_admin")

    user = User(name=name, email=email, password_hash=get_password_hash(password), role=role)
    db_session.add(user)
    try:
        db_session.flush()

        if role == UserRole.club_admin:
            add_membership(db_session, user, find_or_create_club(db_session, club_name, club_description))

        if join_club_id:
            # 존재하지 않는 동아리 ID는 무시
            club = db_session.get(Club, join_club_id)
            if club is not None:
                add_membership(db_session, user, club)

        db_session.commit()
    except IntegrityError:
        db_session.rollback()
        raise ConflictError("User already exists")

    db_session.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role.value)
    return user


def login(db_session: Session, settings: Settings, email: str, password: str, club_id: Optional[str] = None):
    """
    이메일/비밀번호 확인 후 (user, token) 반환.
    club_id가 주어지면 해당 동아리 회원인지도 확인.
    """
    user = find_user_by_email(db_session, email)
    if user is None:
        raise NotFoundError("User not found")

    if not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise AuthenticationError("Invalid password")

    if club_id and not is_member(user, club_id):
        raise AuthorizationError("Not a member of this club")

    token = create_access_token(settings, data={"sub": user.id, "email": user.email})
    return user, token
