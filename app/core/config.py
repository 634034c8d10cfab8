"""
StockEasy - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Carrega .env com override para sobrescrever variáveis do sistema
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "StockEasy"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Database (accepts DATABASE_URL or STOCKEASY_DATABASE_URL)
    DATABASE_URL: Optional[str] = None
    STOCKEASY_DATABASE_URL: str = "sqlite+aiosqlite:///./stockeasy.db"

    @property
    def db_url(self) -> str:
        """Returns DATABASE_URL if set, otherwise STOCKEASY_DATABASE_URL"""
        return self.DATABASE_URL or self.STOCKEASY_DATABASE_URL

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Usuarios MASTER (sem empresa) criados na primeira sincronizacao
    MASTER_EMAILS: list = []

    # Empresas
    DEFAULT_MAX_USERS: int = 10

    # Estoque / checklists
    RESTOCK_MULTIPLIER: int = 3
    MOVEMENTS_DEFAULT_LIMIT: int = 50
    EXECUTIONS_DEFAULT_LIMIT: int = 20

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "10/minute"

    # CORS
    CORS_ORIGINS: list = ["*"]

    class Config:
        extra = "ignore"
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
