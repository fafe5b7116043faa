# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, List
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./guard_app.db"

    # JWT
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_SECRET: str = "dev-access-secret-change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_SECRET: str = "dev-refresh-secret-change-me"
    REFRESH_TOKEN_EXPIRE_DAYS: int = 10

    # Cookies
    COOKIE_SECURE: bool = True
    COOKIE_SAMESITE: str = "none"
    REFRESH_COOKIE_MAX_AGE_DAYS: int = 230

    # Public registration may pick role=admin; turn off once the first admin exists
    ALLOW_ADMIN_SIGNUP: bool = True

    # Comma-separated list of frontend origins
    CORS_ORIGIN: str = "http://localhost:5173"

    # Cloudinary media host
    CLOUDINARY_API_URL: str = "https://api.cloudinary.com"
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    UPLOAD_TEMP_DIR: str = "public/temp"
    STATIC_DIR: str = "public"
    MAX_JSON_BODY_BYTES: int = 20 * 1024

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGIN.split(",") if o.strip()]

    @property
    def refresh_cookie_max_age(self) -> int:
        # seconds
        return self.REFRESH_COOKIE_MAX_AGE_DAYS * 24 * 60 * 60

settings = Settings()
