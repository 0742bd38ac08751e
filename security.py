import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from config import Settings
from database import get_db
from errors import AuthenticationError
from models import User

logger = logging.getLogger(__name__)

# 비밀번호 해싱 설정
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(settings: Settings, data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(settings: Settings, token: str) -> str:
    """토큰을 검증하고 사용자 ID(sub)를 반환. 실패 시 AuthenticationError."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise AuthenticationError("Invalid token")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")
    return user_id


def parse_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("No Authorization header")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthenticationError("Bad auth header")
    return parts[1]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def resolve_user(settings: Settings, db_session: Session, authorization: Optional[str]) -> User:
    token = parse_bearer(authorization)
    user_id = decode_access_token(settings, token)
    user = db_session.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid token")
    return user


# --- 인증 관련 의존성 함수 ---

def get_current_user(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    db_session: Session = Depends(get_db),
) -> User:
    try:
        return resolve_user(settings, db_session, authorization)
    except AuthenticationError as exc:
        logger.warning("Rejected credentials: %s", exc.message)
        raise


def get_optional_user(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    db_session: Session = Depends(get_db),
) -> Optional[User]:
    """토큰이 없거나 잘못된 경우 익명(None)으로 처리"""
    if not authorization:
        return None
    try:
        return resolve_user(settings, db_session, authorization)
    except AuthenticationError:
        return None
