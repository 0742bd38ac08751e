"""Club membership and the role checks built on top of it."""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import AuthorizationError, ConflictError, NotFoundError
from models import Club, Membership, User, UserRole, ref_id

logger = logging.getLogger(__name__)


def is_member(user: User, club) -> bool:
    club_id = ref_id(club)
    return club_id is not None and club_id in user.club_ids


def require_member(user: User, club, message: str) -> None:
    if not is_member(user, club):
        raise AuthorizationError(message)


def require_club_admin(user: User, club, message: str, role_message: str) -> None:
    """멤버십 확인 후 역할 확인 (순서대로 다른 메시지)"""
    require_member(user, club, message)
    if user.role != UserRole.club_admin:
        raise AuthorizationError(role_message)


def resolve_club(user: User, explicit_club=None):
    """
    명시된 동아리가 있으면 그것을, 없으면 사용자가 가장 먼저 가입한 동아리를 사용.
    둘 다 없으면 None.
    """
    if explicit_club:
        return ref_id(explicit_club)
    club_ids = user.club_ids
    return club_ids[0] if club_ids else None


def add_membership(db_session: Session, user: User, club) -> bool:
    """
    동아리를 사용자에게 추가 (이미 있으면 아무것도 하지 않음).
    커밋은 호출한 쪽에서 수행. 새로 추가했으면 True.
    """
    club_id = ref_id(club)
    user_id = ref_id(user)
    if db_session.get(Membership, (user_id, club_id)) is not None:
        return False
    db_session.add(Membership(user_id=user_id, club_id=club_id))
    db_session.flush()
    return True


def join(db_session: Session, user: User, club_id: str) -> Club:
    club = db_session.get(Club, club_id)
    if club is None:
        raise NotFoundError("Club not found")
    if db_session.get(User, ref_id(user)) is None:
        raise NotFoundError("User not found")

    if is_member(user, club):
        raise ConflictError("Already a member of this club")

    db_session.add(Membership(user_id=ref_id(user), club_id=ref_id(club)))
    try:
        db_session.commit()
    except IntegrityError:
        # 동시에 들어온 가입 요청이 먼저 저장된 경우
        db_session.rollback()
        raise ConflictError("Already a member of this club")

    logger.info("User %s joined club %s", ref_id(user), ref_id(club))
    return club
