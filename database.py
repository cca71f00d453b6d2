from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker

# Values in .env fill in whatever the process environment leaves unset
load_dotenv()


class Settings(BaseSettings):
    """Application settings, each overridable by an environment variable of the same name."""

    DATABASE_URL: str = "sqlite:///./personal_scheduler.db"
    SECRET_KEY: str = "your-super-secret-jwt-key-change-this-in-production"
    ENVIRONMENT: str = "development"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    LOG_LEVEL: str = "INFO"
    POST_LIST_LIMIT: int = 20


settings = Settings()


def engine_options(url: str) -> dict:
    """Keyword arguments for create_engine, depending on the backend."""
    if url.startswith("sqlite"):
        # SQLite connections are shared with the threadpool FastAPI runs sync dependencies in
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 300,
        "pool_pre_ping": True,
    }


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped session; closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
