from pathlib import Path
from typing import List, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Event Registration Service'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security (identity provider shares the signing key)
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    AUTH_COOKIE_NAME: str = 'registration_auth'

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL (primary)
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'event_registration'
    POSTGRES_PORT: int = 5432

    # PostgreSQL read replica (optional, falls back to primary)
    POSTGRES_REPLICA_SERVER: Optional[str] = None
    POSTGRES_REPLICA_PORT: Optional[int] = None

    # Any SQLAlchemy async URL, overrides the POSTGRES_* fields (e.g. sqlite+aiosqlite:///./dev.db)
    DATABASE_URL: Optional[str] = None

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if self.DATABASE_URL or not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        password = self.POSTGRES_PASSWORD.get_secret_value()
        port = self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}'
            f'@{self.POSTGRES_REPLICA_SERVER}:{port}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_URL_SYNC(self) -> str:
        return self.DATABASE_URL_ASYNC.replace('+asyncpg', '').replace('+aiosqlite', '')

    # SQLAlchemy connection pool
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    DB_POOL_PRE_PING: bool = True

    # Store retry policy (bounded exponential backoff for transient failures)
    STORE_RETRY_ATTEMPTS: int = 3
    STORE_RETRY_BASE_DELAY: float = 0.05
    STORE_RETRY_MAX_DELAY: float = 1.0

    # Registration workflow
    WAITLIST_AUTO_PROMOTE: bool = True
    DEFAULT_TICKET_TYPE_NAME: str = 'Standard'


settings = Settings()  # type: ignore
