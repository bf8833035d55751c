# File: api/dependencies/db.py
from database.db import SessionLocal
from services.llm_service import CompletionClient, get_completion_client as _shared_completion_client


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_completion_client() -> CompletionClient:
    return _shared_completion_client()
