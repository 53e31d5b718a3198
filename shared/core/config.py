import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    DB_USER: str = os.getenv("DB_USER", "postgres")
    DB_PASS: str = os.getenv("DB_PASS", "postgres")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    # assets, asset history and contracts
    ASSET_DB_NAME: str = os.getenv("ASSET_DB_NAME", "bme_assets")
    # complaints, work orders and preventive maintenance
    MAINTENANCE_DB_NAME: str = os.getenv("MAINTENANCE_DB_NAME", "bme_maintenance")

    # Full URLs win over the DB_* parts when set
    ASSET_DATABASE_URL: str | None = os.getenv("ASSET_DATABASE_URL")
    MAINTENANCE_DATABASE_URL: str | None = os.getenv("MAINTENANCE_DATABASE_URL")

    APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:3000")
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:8002")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def _postgres_url(db_name: str) -> str:
    return (
        f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{db_name}"
    )


ASSET_DATABASE_URL = settings.ASSET_DATABASE_URL or _postgres_url(
    settings.ASSET_DB_NAME)

MAINTENANCE_DATABASE_URL = settings.MAINTENANCE_DATABASE_URL or _postgres_url(
    settings.MAINTENANCE_DB_NAME)
