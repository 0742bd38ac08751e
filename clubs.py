import logging
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ConflictError, ValidationError
from membership import add_membership
from models import Club, Recruitment, User, UserRole
from security import get_password_hash

logger = logging.getLogger(__name__)


def _attach_admin(db_session: Session, club: Club, admin_email: str) -> dict:
    user = db_session.query(User).filter(User.email == admin_email).first()
    if user is not None:
        # 기존 사용자: 동아리 추가 + 관리자 권한으로 변경
        add_membership(db_session, user, club)
        user.role = UserRole.club_admin
        return {"type": "attached_existing_user", "user_id": user.id, "email": user.email}

    # 신규 사용자: 임의 비밀번호로 생성하며 응답에는 절대 포함하지 않음.
    # 별도의 비밀번호 재설정 절차 전까지는 로그인 불가.
    user = User(
        name=None,
        email=admin_email,
        password_hash=get_password_hash(secrets.token_hex(10)),
        role=UserRole.club_admin,
    )
    db_session.add(user)
    db_session.flush()
    add_membership(db_session, user, club)
    return {"type": "created_new_user", "user_id": user.id, "email": user.email}


def create_club(db_session: Session, name: Optional[str], description: Optional[str] = None, admin_email: Optional[str] = None):
    """동아리 생성. (club, admin_info) 반환, admin_email이 없으면 admin_info는 None."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Club name required")
    if db_session.query(Club).filter(Club.name == name).first() is not None:
        raise ConflictError("Club already exists")

    club = Club(name=name, description=description or "")
    db_session.add(club)
    admin_info = None
    try:
        db_session.flush()
        if admin_email:
            admin_info = _attach_admin(db_session, club, admin_email)
        db_session.commit()
    except IntegrityError:
        db_session.rollback()
        raise ConflictError("Club already exists")

    db_session.refresh(club)
    logger.info("Created club %s (%r), admin: %s", club.id, club.name, admin_info and admin_info["type"])
    return club, admin_info


def list_clubs(db_session: Session):
    return db_session.query(Club).order_by(Club.created_at, Club.name).all()


def list_recruiting_clubs(db_session: Session):
    open_club_ids = select(Recruitment.club_id).where(Recruitment.open.is_(True)).distinct()
    return (
        db_session.query(Club)
        .filter(Club.id.in_(open_club_ids))
        .order_by(Club.created_at, Club.name)
        .all()
    )
