import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:8080,http://127.0.0.1:8000")

    JWT_SECRET: str | None = os.getenv("JWT_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", 1440))

    # Database
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT", "5432")
    DB_NAME: str | None = os.getenv("DB_NAME")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", 5))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", 30))

    # Object storage (Supabase)
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
    RECEIPTS_BUCKET: str = os.getenv("RECEIPTS_BUCKET", "receipts")
    CONTRACTS_BUCKET: str = os.getenv("CONTRACTS_BUCKET", "contracts")
    DOCUMENTS_BUCKET: str = os.getenv("DOCUMENTS_BUCKET", "documents")
    TICKETS_BUCKET: str = os.getenv("TICKETS_BUCKET", "maintenance-tickets")
    SIGNED_URL_TTL: int = int(os.getenv("SIGNED_URL_TTL", 3600))

    # Receipts
    HASH_SECRET: str = os.getenv("HASH_SECRET", "change-me")
    VERIFICATION_URL: str = os.getenv(
        "VERIFICATION_URL", "http://localhost:8000/api")
    SIGNATURE_PATH: str | None = os.getenv("SIGNATURE_PATH")
    SIGNATURE_PASSWORD: str | None = os.getenv("SIGNATURE_PASSWORD")

    # Owner block printed on every receipt
    OWNER_NAME: str = os.getenv("OWNER_NAME", "")
    OWNER_COMPANY: str = os.getenv("OWNER_COMPANY", "")
    OWNER_ADDRESS: str = os.getenv("OWNER_ADDRESS", "")
    OWNER_POSTAL_CODE: str = os.getenv("OWNER_POSTAL_CODE", "")
    OWNER_CITY: str = os.getenv("OWNER_CITY", "")
    OWNER_SIRET: str = os.getenv("OWNER_SIRET", "")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
)
