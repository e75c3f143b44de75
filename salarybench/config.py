import os
from dotenv import load_dotenv
load_dotenv()


def _flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _database_url():
    url = os.getenv("DATABASE_URL", "sqlite:///salarybench.db")
    # Heroku style URLs are rejected by SQLAlchemy 1.4+
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Settings:
    """Base configuration class"""
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-key")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 64 * 1024 * 1024))
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Ingestion
    INGEST_BATCH_SIZE = int(os.getenv("INGEST_BATCH_SIZE", 50))
    INGEST_PER_RECORD_FALLBACK = _flag("INGEST_PER_RECORD_FALLBACK")
    INGEST_ERROR_LIMIT = int(os.getenv("INGEST_ERROR_LIMIT", 10))


class DevelopmentConfig(Settings):
    DEBUG = True
    TESTING = False


class ProductionConfig(Settings):
    DEBUG = False
    TESTING = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_timeout": 20,
        "pool_pre_ping": True,
    }


class TestingConfig(Settings):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
