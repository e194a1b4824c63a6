from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import secrets


class Settings(BaseSettings):
    """Configurações da aplicação."""

    # Aplicação
    APP_NAME: str = "GymSync"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./gymsync.db"

    # JWT (bearer token stateless)
    JWT_SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 horas

    # Sessão (cookie)
    SESSION_SECRET: str = secrets.token_urlsafe(32)
    SESSION_COOKIE_NAME: str = "gymsync.sid"
    SESSION_MAX_AGE_SECONDS: int = 24 * 60 * 60
    SESSION_STORE: str = "memory"  # memory | database

    # Senha
    PASSWORD_MIN_LENGTH: int = 8
    PASSWORD_REQUIRE_UPPERCASE: bool = False
    PASSWORD_REQUIRE_LOWERCASE: bool = False
    PASSWORD_REQUIRE_DIGIT: bool = False
    PASSWORD_REQUIRE_SPECIAL: bool = False
    PASSWORD_REJECT_PERSONAL_INFO: bool = True
    BCRYPT_ROUNDS: int = 12

    # Tokens de definição/reset de senha
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    WELCOME_TOKEN_EXPIRE_DAYS: int = 7

    # Admin break-glass (segredo compartilhado, não é conta de usuário)
    BREAK_GLASS_USERNAME: str = "admin"
    BREAK_GLASS_PASSWORD: str = "admin123"

    # Google OAuth
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_METADATA_URL: str = "https://accounts.google.com/.well-known/openid-configuration"

    # OIDC da plataforma (Replit)
    OIDC_CLIENT_ID: Optional[str] = None
    OIDC_CLIENT_SECRET: Optional[str] = None
    OIDC_ISSUER_URL: str = "https://replit.com/oidc"

    # Email SMTP
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_NAME: str = "GymSync"
    SMTP_FROM_EMAIL: str = "noreply@gymsync.com"
    SMTP_USE_TLS: bool = True
    EMAIL_ENABLED: bool = True

    # URLs
    FRONTEND_URL: str = "http://localhost:5000"

    # Rate Limiting (janelas fixas por IP)
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_WINDOW_MINUTES: int = 15
    REGISTER_MAX_ATTEMPTS: int = 3
    REGISTER_WINDOW_MINUTES: int = 60
    PASSWORD_RESET_MAX_ATTEMPTS: int = 3
    PASSWORD_RESET_WINDOW_MINUTES: int = 15

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5000", "http://localhost:5173"]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Retorna instância cacheada das configurações."""
    return Settings()


settings = get_settings()
