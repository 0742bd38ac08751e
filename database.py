from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str):
    # SQLite는 요청마다 다른 스레드에서 접근하므로 check_same_thread 해제
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # 메모리 DB는 커넥션 하나를 공유해야 테이블이 유지됨
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
