# 지원자 상태: pending -> accepted | rejected (최종 상태)
# 계정이 있는 지원자를 승인하면 해당 동아리에 자동 가입
import logging
from typing import Optional

from sqlalchemy.orm import Session

from errors import ConflictError, NotFoundError, ValidationError
from membership import add_membership, require_club_admin, require_member, resolve_club
from models import Applicant, ApplicantStatus, Club, Recruitment, User, ref_id

logger = logging.getLogger(__name__)

REVIEW_STATUSES = (ApplicantStatus.accepted.value, ApplicantStatus.rejected.value)


def get_recruitment(db_session: Session, recruitment_id: str) -> Recruitment:
    recruitment = db_session.get(Recruitment, recruitment_id)
    if recruitment is None:
        raise NotFoundError("Recruitment not found")
    return recruitment


def create_recruitment(
    db_session: Session,
    acting_user: User,
    title: Optional[str],
    description: Optional[str] = None,
    positions: Optional[int] = 1,
    explicit_club: Optional[str] = None,
    open: bool = True,
) -> Recruitment:
    if not title:
        raise ValidationError("Title required")
    if positions is None:
        positions = 1
    if positions < 1:
        raise ValidationError("positions must be at least 1")

    club_id = resolve_club(acting_user, explicit_club)
    if not club_id:
        raise ValidationError("Club required")

    require_club_admin(
        acting_user,
        club_id,
        "You are not a member of this club",
        "Only club admins can create recruitments",
    )
    if db_session.get(Club, club_id) is None:
        raise NotFoundError("Club not found")

    recruitment = Recruitment(
        title=title,
        description=description or "",
        positions=positions,
        club_id=club_id,
        open=open,
        created_by=acting_user.id,
    )
    db_session.add(recruitment)
    db_session.commit()
    db_session.refresh(recruitment)
    logger.info("User %s opened recruitment %s for club %s", acting_user.id, recruitment.id, club_id)
    return recruitment


def list_recruitments(db_session: Session, open_only: bool = False):
    query = db_session.query(Recruitment)
    if open_only:
        query = query.filter(Recruitment.open.is_(True))
    return query.order_by(Recruitment.created_at.desc()).all()


def apply(
    db_session: Session,
    recruitment_id: str,
    name: Optional[str],
    email: Optional[str],
    statement: Optional[str] = None,
    user: Optional[User] = None,
) -> Applicant:
    """user가 None이면 익명 지원"""
    recruitment = get_recruitment(db_session, recruitment_id)
    if not recruitment.open:
        raise ValidationError("Recruitment is closed")
    if not name or not email:
        raise ValidationError("Name and email required")

    applicant = Applicant(
        recruitment_id=recruitment.id,
        user_id=ref_id(user),
        name=name,
        email=email,
        statement=statement or "",
        status=ApplicantStatus.pending,
    )
    db_session.add(applicant)
    db_session.commit()
    db_session.refresh(applicant)
    logger.info("New applicant %s for recruitment %s (user %s)", applicant.id, recruitment.id, applicant.user_id)
    return applicant


def list_applicants(db_session: Session, recruitment_id: str, acting_user: User):
    recruitment = get_recruitment(db_session, recruitment_id)
    # 조회는 동아리 회원이면 가능 (관리자 권한 불필요)
    require_member(acting_user, recruitment.club_id, "Not authorized to view applicants")
    return recruitment.applicants


def review(
    db_session: Session,
    recruitment_id: str,
    applicant_id: str,
    status: Optional[str],
    acting_user: User,
) -> Applicant:
    if status not in REVIEW_STATUSES:
        raise ValidationError("Bad status")

    recruitment = get_recruitment(db_session, recruitment_id)
    require_club_admin(
        acting_user,
        recruitment.club_id,
        "Not authorized to review applicants",
        "Only club admins can review applicants",
    )

    applicant = db_session.get(Applicant, applicant_id)
    if applicant is None or applicant.recruitment_id != recruitment.id:
        raise ValidationError("Invalid applicant")

    # pending 상태일 때만 변경 (accepted/rejected는 최종 상태)
    updated = (
        db_session.query(Applicant)
        .filter(
            Applicant.id == applicant.id,
            Applicant.status == ApplicantStatus.pending,
        )
        .update({Applicant.status: ApplicantStatus(status)}, synchronize_session=False)
    )
    if not updated:
        db_session.rollback()
        raise ConflictError("Applicant already reviewed")

    if status == ApplicantStatus.accepted.value and applicant.user_id:
        applicant_user = db_session.get(User, applicant.user_id)
        if applicant_user is not None and add_membership(db_session, applicant_user, recruitment.club_id):
            logger.info("User %s joined club %s through recruitment %s",
                        applicant_user.id, recruitment.club_id, recruitment.id)

    db_session.commit()
    db_session.refresh(applicant)
    logger.info("Applicant %s of recruitment %s marked %s by %s",
                applicant.id, recruitment.id, status, acting_user.id)
    return applicant
