# api/routers/chatbot.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_completion_client, get_db
from api.models.profile_models import ChatbotRequest
from services.chatbot_service import answer
from services.errors import CourseAppError
from services.llm_service import CompletionClient, LLMGenerationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
def chat(
    payload: ChatbotRequest,
    db: Session = Depends(get_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> dict:
    try:
        reply = answer(db, completion_client, payload.user_id, payload.message)
    except (CourseAppError, LLMGenerationError):
        raise
    except Exception:
        logger.error("Chatbot request failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "message": reply, "timestamp": datetime.now(timezone.utc).isoformat()}
