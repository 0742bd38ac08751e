from config import Settings
from database import Base, make_engine, make_session_factory
from membership import add_membership
from models import Club, User, UserRole
from security import get_password_hash

DEMO_CLUB = "Chess"


def init_db_data(settings=None):
    settings = settings or Settings.from_env()
    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    db = make_session_factory(engine)()

    print("--- 데이터베이스 계정 초기화 시작 ---")

    club = db.query(Club).filter(Club.name == DEMO_CLUB).first()
    if club is None:
        club = Club(name=DEMO_CLUB, description="Demo club")
        db.add(club)
        db.flush()
        print(f"✅ 동아리 생성됨 ({DEMO_CLUB})")
    else:
        print("ℹ️ 데모 동아리가 이미 존재합니다.")

    # 1. 동아리 관리자 계정 (admin@campus.edu / admin1234)
    admin_user = db.query(User).filter(User.email == "admin@campus.edu").first()
    if admin_user is None:
        admin_user = User(
            name="Club Admin",
            email="admin@campus.edu",
            password_hash=get_password_hash("admin1234"),
            role=UserRole.club_admin,
        )
        db.add(admin_user)
        db.flush()
        print("✅ 관리자 계정 생성됨 (admin@campus.edu)")
    else:
        print("ℹ️ 관리자 계정이 이미 존재합니다.")
    add_membership(db, admin_user, club)

    # 2. 테스트 계정 (student@campus.edu / 1234)
    if db.query(User).filter(User.email == "student@campus.edu").first() is None:
        db.add(User(
            name="Test Student",
            email="student@campus.edu",
            password_hash=get_password_hash("1234"),
            role=UserRole.student,
        ))
        print("✅ 테스트 계정 생성됨 (student@campus.edu)")
    else:
        print("ℹ️ 테스트 계정이 이미 존재합니다.")

    db.commit()
    db.close()
    print("--- 초기화 완료 ---")


if __name__ == "__main__":
    init_db_data()
