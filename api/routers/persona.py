# api/routers/persona.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_completion_client, get_db
from api.models.profile_models import AvatarColorRequest, PersonaSummaryRequest, PersonaSummaryUpdateRequest, PersonaUpdateRequest
from services import persona_service, persona_summary_service
from services.errors import CourseAppError, InvalidRequestError
from services.llm_service import CompletionClient, LLMGenerationError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/persona")
def read_persona(user_id: Optional[int] = Query(default=None, alias="userId"), db: Session = Depends(get_db)) -> dict:
    try:
        persona, created = persona_service.get_or_create_persona(db, user_id)
    except CourseAppError:
        raise
    except Exception:
        logger.error("Error loading persona card", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    response = {"success": True, "data": persona}
    if created:
        response["message"] = "Persona card created from survey responses"
    return response


@router.put("/persona")
def edit_persona(payload: PersonaUpdateRequest, db: Session = Depends(get_db)) -> dict:
    card = persona_service.update_persona(db, payload.user_id, payload.persona_data)
    return {"success": True, "message": "Persona card updated successfully", "data": persona_service.persona_to_dict(card)}


@router.get("/persona/avatar-colors")
def list_avatar_colors() -> dict:
    return {
        "success": True,
        "colors": persona_service.AVATAR_COLOR_PALETTE,
        "default": persona_service.DEFAULT_AVATAR_COLOR,
    }


@router.put("/persona/avatar-color")
def edit_avatar_color(payload: AvatarColorRequest, db: Session = Depends(get_db)) -> dict:
    card = persona_service.update_avatar_color(db, payload.user_id, payload.avatar_color)
    return {"success": True, "message": "Avatar color updated successfully", "avatarColor": card.avatar_color}


@router.get("/persona-summary")
def read_persona_summary(user_id: Optional[int] = Query(default=None, alias="userId"), db: Session = Depends(get_db)) -> dict:
    if not user_id:
        raise InvalidRequestError("User ID is required")

    row = persona_summary_service.get_summary(db, user_id)
    if row is None:
        return {"success": False, "message": "No presentable persona found"}
    return {"success": True, "data": persona_summary_service.summary_to_dict(row)}


@router.post("/persona-summary")
def create_persona_summary(
    payload: PersonaSummaryRequest,
    db: Session = Depends(get_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> dict:
    try:
        summary = persona_summary_service.generate_summary(db, completion_client, payload.user_id, payload.force_regenerate)
    except (CourseAppError, LLMGenerationError):
        raise
    except Exception:
        logger.error("Error generating persona summary", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "data": summary}


@router.put("/persona-summary")
def edit_persona_summary(payload: PersonaSummaryUpdateRequest, db: Session = Depends(get_db)) -> dict:
    persona_summary_service.update_summary_field(db, payload.user_id, payload.field, payload.value)
    return {"success": True, "message": "Field updated successfully"}
