# api/routers/interview_bot.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_completion_client, get_db
from api.models.profile_models import InterviewRequest
from services import interview_service
from services.errors import CourseAppError, InvalidRequestError
from services.interview_service import InterviewAction
from services.llm_service import CompletionClient, LLMGenerationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def read_interview(user_id: Optional[int] = Query(default=None, alias="userId"), db: Session = Depends(get_db)) -> dict:
    chat = interview_service.get_chat(db, user_id)
    return {"success": True, "chatExists": chat is not None, "data": chat}


@router.post("")
def interview_action(
    payload: InterviewRequest,
    db: Session = Depends(get_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> dict:
    if not payload.user_id:
        raise InvalidRequestError("User ID is required")

    try:
        if payload.action == InterviewAction.START:
            greeting = interview_service.start_interview(db, payload.user_id)
            return {"success": True, "message": greeting, "action": "started"}

        if payload.action == InterviewAction.SEND:
            reply = interview_service.send_message(db, completion_client, payload.user_id, payload.message)
            return {"success": True, "message": reply, "action": "message_sent"}

        if payload.action == InterviewAction.COMPLETE:
            result = interview_service.complete_interview(db, completion_client, payload.user_id)
            return {"success": True, "action": "completed", **result}
    except (CourseAppError, LLMGenerationError):
        raise
    except Exception:
        logger.error(f"Interview action '{payload.action}' failed for user {payload.user_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    raise InvalidRequestError("Invalid action")
