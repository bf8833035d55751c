# api/routers/persona_interactions.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_completion_client, get_db
from api.models.profile_models import InteractionRequest
from services import persona_interaction_service as interactions
from services.errors import CourseAppError, InvalidRequestError
from services.interaction_log_service import list_interaction_logs
from services.llm_service import CompletionClient, LLMGenerationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/persona-interactions")
def read_interactions(
    persona_user_id: Optional[int] = Query(default=None, alias="personaUserId"),
    db: Session = Depends(get_db),
) -> dict:
    data = interactions.get_interactions(db, persona_user_id)
    return {"success": True, "data": data}


@router.post("/persona-interactions")
def post_interaction(
    payload: InteractionRequest,
    db: Session = Depends(get_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> dict:
    if not payload.type or not payload.persona_user_id or not payload.user_id:
        raise InvalidRequestError("Type, persona user ID, and user ID are required")

    try:
        if payload.type == "reaction":
            action = interactions.toggle_reaction(db, payload.persona_user_id, payload.user_id, payload.emoji)
            return {"success": True, "action": action, "message": f"Reaction {action} successfully"}

        if payload.type == "comment":
            row = interactions.add_comment(db, completion_client, payload.persona_user_id, payload.user_id, payload.comment)
            return {
                "success": True,
                "message": "Comment added successfully",
                "data": {"id": row.id, "comment": row.comment, "aiReply": row.ai_reply, "createdAt": row.created_at},
            }
    except (CourseAppError, LLMGenerationError):
        raise
    except Exception:
        logger.error(f"Persona interaction '{payload.type}' failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    raise InvalidRequestError("Invalid interaction type")


@router.get("/persona-logs")
def read_interaction_logs(
    persona_user_id: Optional[int] = Query(default=None, alias="personaUserId"),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> dict:
    if not persona_user_id:
        raise InvalidRequestError("Persona user ID is required")

    logs = list_interaction_logs(db, persona_user_id, limit=limit)
    return {"success": True, "data": logs, "count": len(logs)}
