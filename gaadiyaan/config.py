# gaadiyaan/config.py
"""Application settings.

All recognized options live on one `Settings` object that is read from the
environment (and an optional `.env` file) once, when the process starts.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_static_roots(value: str) -> Dict[str, str]:
    # "/assets=./public/assets,/docs=./public/docs"
    roots = {}
    for entry in _split(value):
        prefix, sep, directory = entry.partition("=")
        if not sep or not prefix.startswith("/") or not directory:
            raise ValueError(f"Invalid STATIC_ROOTS entry: {entry!r}")
        roots[prefix.rstrip("/") or "/"] = directory
    return roots


def normalize_database_url(url: str) -> str:
    # SQLAlchemy 2.x doesn't accept 'postgres://'
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


@dataclass
class Settings:
    """Recognized configuration options."""

    api_title: str = "Gaadiyaan API"
    api_version: str = "1.0.0"

    database_url: str = "sqlite:///./gaadiyaan.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10

    cors_origins: List[str] = field(
        default_factory=lambda: ["https://gaadiyaan.com", "http://localhost:5500"]
    )
    static_roots: Dict[str, str] = field(default_factory=dict)
    upload_root: str = "./uploads/vehicles"
    upload_url_path: str = "/uploads/vehicles"
    public_base_url: str = "http://localhost:8000"
    max_upload_bytes: int = 5 * 1024 * 1024
    max_upload_files: int = 10

    default_page_size: int = 10
    max_page_size: int = 100

    secret_key: str = "gaadiyaan-development-secret-change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    log_level: str = "INFO"
    expose_errors: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        database_url = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL") or defaults.database_url
        cors = os.getenv("CORS_ORIGINS")
        return cls(
            database_url=normalize_database_url(database_url),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", defaults.db_pool_size)),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", defaults.db_max_overflow)),
            cors_origins=_split(cors) if cors is not None else defaults.cors_origins,
            static_roots=_parse_static_roots(os.getenv("STATIC_ROOTS", "")),
            upload_root=os.getenv("UPLOAD_ROOT", defaults.upload_root),
            upload_url_path=os.getenv("UPLOAD_URL_PATH", defaults.upload_url_path).rstrip("/"),
            public_base_url=os.getenv("PUBLIC_BASE_URL", defaults.public_base_url).rstrip("/"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", defaults.max_upload_bytes)),
            max_upload_files=int(os.getenv("MAX_UPLOAD_FILES", defaults.max_upload_files)),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", defaults.default_page_size)),
            max_page_size=int(os.getenv("MAX_PAGE_SIZE", defaults.max_page_size)),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            algorithm=os.getenv("ALGORITHM", defaults.algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            expose_errors=os.getenv("EXPOSE_ERRORS", "0").lower() in ("1", "true", "yes"),
        )

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == Settings.secret_key


settings = Settings.from_env()
