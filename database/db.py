# File: database/db.py
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from urllib.parse import quote_plus


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_user = os.getenv("POSTGRES_USER")
    db_pass = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST", "localhost")
    db_port = os.getenv("POSTGRES_PORT", "5432")
    db_name = os.getenv("POSTGRES_DB")
    if not all([db_user, db_pass, db_name]):
        raise ValueError("Database credentials must be provided via DATABASE_URL or POSTGRES_* environment variables")

    return f"postgresql://{quote_plus(db_user)}:{quote_plus(db_pass)}@{db_host}:{db_port}/{quote_plus(db_name)}"


DATABASE_URL = _build_database_url()

if DATABASE_URL.startswith("sqlite"):
    # Local runs and tests
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_pre_ping=True,
        connect_args={"connect_timeout": 10}
    )
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def import_models():
    """Register every model module on Base.metadata."""
    from database.models import user_model, paper_model, profile_models, square_models  # noqa: F401


def init_db(bind=None):
    import_models()
    Base.metadata.create_all(bind=bind or engine)
