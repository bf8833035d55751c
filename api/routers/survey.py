# api/routers/survey.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_db
from api.models.profile_models import SurveyRequest
from services.errors import CourseAppError, InvalidRequestError
from services.survey_service import get_survey, save_survey, survey_to_dict

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("")
def submit_survey(payload: SurveyRequest, db: Session = Depends(get_db)) -> dict:
    try:
        survey = save_survey(db, payload.user_id, payload.responses)
    except CourseAppError:
        raise
    except Exception:
        logger.error("Error saving survey responses", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(f"📝 Survey saved for user {survey.user_id}")
    return {"success": True, "message": "Survey responses saved successfully", "data": survey_to_dict(survey)}


@router.get("")
def read_survey(user_id: Optional[int] = Query(default=None, alias="userId"), db: Session = Depends(get_db)) -> dict:
    if not user_id:
        raise InvalidRequestError("User ID is required")

    survey = get_survey(db, user_id)
    if survey is None:
        return {"success": True, "data": None, "message": "No survey responses found"}
    return {"success": True, "data": survey_to_dict(survey)}
