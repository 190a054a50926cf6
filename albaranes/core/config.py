from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    PROJECT_NAME: str = "Gestión de Albaranes"
    API_PREFIX: str = "/api"

    # ========================
    # DATABASE
    # ========================
    DATABASE_URL: str = "sqlite:///./albaranes.db"

    # ========================
    # SECURITY / JWT
    # ========================
    SECRET_KEY: str = "dev-secret-key-cambia-esto"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120
    RECOVERY_TOKEN_EXPIRE_MINUTES: int = 15

    # ========================
    # PASSWORD / ALTA
    # ========================
    PWD_SCHEME: str = "argon2"
    MAX_ATTEMPTS: int = 3

    # ========================
    # SUBIDAS (firma, logo)
    # ========================
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # ========================
    # PINATA / IPFS
    # ========================
    PINATA_JWT: str | None = None
    PINATA_API_URL: str = "https://api.pinata.cloud"
    PINATA_GATEWAY_URL: str = "gateway.pinata.cloud"
    HTTP_TIMEOUT: float = 10.0

    # ========================
    # LOG DE ERRORES (webhook tipo Slack)
    # ========================
    ERROR_WEBHOOK_URL: str | None = None

    # ========================
    # APP MODE
    # ========================
    ENV: str = "development"

    # ========================
    # EMAIL
    # ========================
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_SSL: bool = False
    EMAIL_FROM: str = "no-reply@localhost"
    EMAIL_TLS: bool = True

    class Config:
        env_file = ".env.dev" if os.getenv("RENDER") is None else None


settings = Settings()
