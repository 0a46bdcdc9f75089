"""Application settings and validation."""

import os
from pathlib import Path

DEV_JWT_SECRET = (
    "change_me_for_prod_change_me_for_prod_change_me_for_prod_change_me_for_prod"
)
DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'myhome.db'}"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    ENV: str
    DATABASE_URL: str
    LOG_LEVEL: str
    JWT_SECRET: str
    JWT_CODEC: str
    TOKEN_EXPIRATION_SECONDS: int
    AUTH_HEADER_NAME: str
    AUTH_HEADER_PREFIX: str
    TOKENS_RESET_EXPIRATION_DAYS: int
    TOKENS_EMAIL_EXPIRATION_DAYS: int
    FILES_COMPRESSION_BORDER_KB: int
    FILES_MAX_SIZE_KB: int
    FILES_COMPRESSED_IMAGE_QUALITY: float
    MAIL_DEV_MODE: bool
    MAIL_HOST: str
    MAIL_PORT: int
    MAIL_USERNAME: str
    MAIL_PASSWORD: str
    MAIL_USE_TLS: bool
    PUBLIC_BASE_URL: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DB_URL)
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.JWT_SECRET = os.getenv("JWT_SECRET", DEV_JWT_SECRET)
        self.JWT_CODEC = os.getenv("JWT_CODEC", "secret").lower()
        self.TOKEN_EXPIRATION_SECONDS = int(os.getenv("TOKEN_EXPIRATION_SECONDS", str(10 * 24 * 3600)))  # 10 days
        self.AUTH_HEADER_NAME = os.getenv("AUTH_HEADER_NAME", "Authorization")
        self.AUTH_HEADER_PREFIX = os.getenv("AUTH_HEADER_PREFIX", "Bearer ")
        self.TOKENS_RESET_EXPIRATION_DAYS = int(os.getenv("TOKENS_RESET_EXPIRATION_DAYS", "1"))
        self.TOKENS_EMAIL_EXPIRATION_DAYS = int(os.getenv("TOKENS_EMAIL_EXPIRATION_DAYS", "1"))
        self.FILES_COMPRESSION_BORDER_KB = int(os.getenv("FILES_COMPRESSION_BORDER_KB", "99"))
        self.FILES_MAX_SIZE_KB = int(os.getenv("FILES_MAX_SIZE_KB", "1024"))
        self.FILES_COMPRESSED_IMAGE_QUALITY = float(os.getenv("FILES_COMPRESSED_IMAGE_QUALITY", "0.9"))
        self.MAIL_DEV_MODE = _env_bool("MAIL_DEV_MODE", "true")
        self.MAIL_HOST = os.getenv("MAIL_HOST", "localhost")
        self.MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
        self.MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
        self.MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
        self.MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", "true")
        self.PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/")
        self.ALLOW_INSECURE_JWT = _env_bool("ALLOW_INSECURE_JWT", "false")
        self.ALLOW_DEV_CORS = _env_bool("ALLOW_DEV_CORS", "true")
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == DEV_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if self.JWT_CODEC not in ("secret", "plain"):
            raise RuntimeError(f"unsupported JWT_CODEC: {self.JWT_CODEC}")
        if self.JWT_CODEC == "plain" and self.ENV not in ("dev", "test"):
            raise RuntimeError("JWT_CODEC=plain is only allowed in dev/test environments")
        if not 0.0 < self.FILES_COMPRESSED_IMAGE_QUALITY <= 1.0:
            raise RuntimeError("FILES_COMPRESSED_IMAGE_QUALITY must be in (0, 1]")


settings = Settings()
