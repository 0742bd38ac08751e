import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    database_url: str = "sqlite:///./campusconnect.db"
    secret_key: str = "a-very-secret-key-for-local-development"
    algorithm: str = "HS256"
    access_token_expire_days: int = 7
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        환경 변수(.env 포함)에서 설정을 읽어 Settings 생성
        """
        load_dotenv()

        database_url = os.getenv("DATABASE_URL", cls.model_fields["database_url"].default)
        # Render의 Postgres 주소 호환성 처리 (postgres:// -> postgresql://)
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            database_url=database_url,
            secret_key=os.getenv("SECRET_KEY", cls.model_fields["secret_key"].default),
            algorithm=os.getenv("ALGORITHM", "HS256"),
            access_token_expire_days=int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
