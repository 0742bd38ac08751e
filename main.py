import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

# 내부 모듈 임포트
import accounts
import clubs
import events
import membership
import recruitments
from config import Settings
from database import Base, get_db, make_engine, make_session_factory
from errors import install_error_handlers
from models import User
from schemas import (
    ApplicantInfo,
    ApplicantReviewed,
    ApplicationCreate,
    ApplicationSubmitted,
    ClubCreate,
    ClubCreated,
    ClubInfo,
    ClubJoined,
    EventCreate,
    EventCreated,
    EventInfo,
    EventRegistered,
    LoginRequest,
    LoginResponse,
    RecruitmentCreate,
    RecruitmentCreated,
    RecruitmentInfo,
    RegisterRequest,
    RegisterResponse,
    ReviewRequest,
    UserInfo,
)
from security import get_current_user, get_optional_user, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """설정 객체로 엔진/세션/앱을 구성"""
    if settings is None:
        settings = Settings.from_env()
    configure_logging(settings.log_level)

    engine = make_engine(settings.database_url)
    # 테이블 생성 (운영 환경에서는 Alembic 같은 마이그레이션 도구 사용 권장)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="CampusConnect API")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    register_routes(app)
    logger.info("CampusConnect API configured (database: %s)", engine.url.render_as_string(hide_password=True))
    return app


def register_routes(app: FastAPI) -> None:

    @app.get("/")
    def read_root():
        return {"message": "CampusConnect backend running"}

    # --- 인증 ---

    @app.post("/api/register", response_model=RegisterResponse)
    def register(body: RegisterRequest, db_session: Session = Depends(get_db)):
        """
        회원가입. club_admin은 clubName 필수 (없으면 새 동아리 생성)
        """
        user = accounts.register(
            db_session,
            email=body.email,
            password=body.password,
            name=body.name,
            role=body.role,
            club_name=body.club_name,
            club_description=body.club_description,
            join_club_id=body.join_club_id,
        )
        return {"message": "User created", "user": user}

    @app.post("/api/login", response_model=LoginResponse)
    def login(
        body: LoginRequest,
        db_session: Session = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        """
        이메일/비밀번호로 로그인하여 JWT 토큰 발급
        """
        user, token = accounts.login(db_session, settings, body.email, body.password, body.club_id)
        return {"message": "Login successful", "token": token, "user": user}

    @app.get("/api/me", response_model=UserInfo)
    def read_me(current_user: User = Depends(get_current_user)):
        return current_user

    # --- 동아리 ---

    @app.get("/api/clubs", response_model=List[ClubInfo])
    def list_clubs(db_session: Session = Depends(get_db)):
        return clubs.list_clubs(db_session)

    @app.post("/api/clubs", response_model=ClubCreated)
    def create_club(body: ClubCreate, db_session: Session = Depends(get_db)):
        """
        동아리 생성 + (선택) adminEmail로 관리자 지정. 비밀번호는 받지 않음
        """
        club, admin_info = clubs.create_club(db_session, body.name, body.description, body.admin_email)
        return {"message": "Club created", "club": club, "admin_info": admin_info}

    @app.get("/api/clubs/recruiting", response_model=List[ClubInfo])
    def list_recruiting_clubs(db_session: Session = Depends(get_db)):
        return clubs.list_recruiting_clubs(db_session)

    @app.post("/api/clubs/{club_id}/join", response_model=ClubJoined)
    def join_club(
        club_id: str,
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        club = membership.join(db_session, current_user, club_id)
        return {"message": "Joined club", "club": club}

    # --- 행사 ---

    @app.get("/api/events", response_model=List[EventInfo])
    def list_events(db_session: Session = Depends(get_db)):
        return events.list_events(db_session)

    @app.post("/api/events", response_model=EventCreated)
    def create_event(
        body: EventCreate,
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        event = events.create_event(
            db_session,
            current_user,
            title=body.title,
            description=body.description,
            date=body.date,
            location=body.location,
            max_attendees=body.max_attendees,
            explicit_club=body.club,
        )
        return {"message": "Event created", "event": event}

    @app.post("/api/events/{event_id}/register", response_model=EventRegistered)
    def register_for_event(
        event_id: str,
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        event = events.register_attendee(db_session, event_id, current_user)
        return {"message": "Registration successful", "event_id": event.id}

    @app.get("/api/myclubs/events", response_model=List[EventInfo])
    def list_my_club_events(
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """
        내가 속한 동아리들의 행사 목록
        """
        return events.list_my_club_events(db_session, current_user)

    # --- 모집 ---

    @app.post("/api/recruitments", response_model=RecruitmentCreated)
    def create_recruitment(
        body: RecruitmentCreate,
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """
        [동아리 관리자] 모집 공고 생성
        """
        recruitment = recruitments.create_recruitment(
            db_session,
            current_user,
            title=body.title,
            description=body.description,
            positions=body.positions,
            explicit_club=body.club,
            open=body.open,
        )
        return {"message": "Recruitment created", "recruitment": recruitment}

    @app.get("/api/recruitments", response_model=List[RecruitmentInfo])
    def list_recruitments(
        open: Optional[str] = Query(None),
        db_session: Session = Depends(get_db),
    ):
        return recruitments.list_recruitments(db_session, open_only=open == "true")

    @app.post("/api/recruitments/{recruitment_id}/apply", response_model=ApplicationSubmitted)
    def apply_to_recruitment(
        recruitment_id: str,
        body: Optional[ApplicationCreate] = None,
        db_session: Session = Depends(get_db),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        """
        모집 지원. 로그인하지 않아도 지원 가능 (토큰이 있으면 사용자와 연결)
        """
        body = body or ApplicationCreate()
        applicant = recruitments.apply(
            db_session,
            recruitment_id,
            name=body.name,
            email=body.email,
            statement=body.statement,
            user=current_user,
        )
        return {"message": "Application submitted", "applicant_id": applicant.id}

    @app.get("/api/recruitments/{recruitment_id}/applicants", response_model=List[ApplicantInfo])
    def list_applicants(
        recruitment_id: str,
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        return recruitments.list_applicants(db_session, recruitment_id, current_user)

    @app.post(
        "/api/recruitments/{recruitment_id}/applicants/{applicant_id}/review",
        response_model=ApplicantReviewed,
    )
    def review_applicant(
        recruitment_id: str,
        applicant_id: str,
        body: Optional[ReviewRequest] = None,
        db_session: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """
        [동아리 관리자] 지원자 승인/거절. 승인 시 계정이 있는 지원자는 동아리에 자동 가입
        """
        status = body.status if body else None
        applicant = recruitments.review(db_session, recruitment_id, applicant_id, status, current_user)
        return {"message": "Applicant reviewed", "applicant": applicant}


app = create_app()
