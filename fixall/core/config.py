import os
import warnings
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

INSECURE_DEV_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - dev fallback only


class Settings(BaseModel):
    """Runtime configuration, built once at startup and handed to create_app()."""

    database_url: str = "sqlite:///./fixall.db"
    jwt_secret: str = INSECURE_DEV_SECRET
    jwt_algorithm: str = "HS256"
    token_expire_days: int = Field(7, ge=1)
    admin_secret: str = "admin123"
    port: int = 3001
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    bcrypt_rounds: int = Field(12, ge=4, le=31)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            warnings.warn(
                "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
                RuntimeWarning,
                stacklevel=2,
            )
            jwt_secret = INSECURE_DEV_SECRET

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./fixall.db"),
            jwt_secret=jwt_secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_expire_days=os.getenv("TOKEN_EXPIRE_DAYS", "7"),
            admin_secret=os.getenv("ADMIN_SECRET", "admin123"),
            port=os.getenv("PORT", "3001"),
            cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
            bcrypt_rounds=os.getenv("BCRYPT_ROUNDS", "12"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
