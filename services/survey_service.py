# services/survey_service.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from database.models.profile_models import StudentSurveyResponse
from services.errors import InvalidRequestError
from utils.sanitization import clean_optional

logger = logging.getLogger(__name__)

# wire name -> column
SURVEY_FIELDS = {
    "preferredName": "preferred_name",
    "lastName": "last_name",
    "gender": "gender",
    "age": "age",
    "academicBackground": "academic_background",
    "researchInterests": "research_interests",
    "recentReadings": "recent_readings",
    "classGoals": "class_goals",
    "discussionStyle": "discussion_style",
}


def survey_to_dict(survey: StudentSurveyResponse) -> Dict[str, Any]:
    data = {"id": survey.id, "userId": survey.user_id}
    for wire_name, column in SURVEY_FIELDS.items():
        data[wire_name] = getattr(survey, column)
    data["createdAt"] = survey.created_at
    data["updatedAt"] = survey.updated_at
    return data


def get_survey(db: Session, user_id: int) -> Optional[StudentSurveyResponse]:
    return db.query(StudentSurveyResponse).filter(StudentSurveyResponse.user_id == user_id).first()


def save_survey(db: Session, user_id: Optional[int], responses: Any) -> StudentSurveyResponse:
    """Insert or overwrite the user's survey answers (one row per user)."""
    if not user_id:
        raise InvalidRequestError("User ID is required")
    if not isinstance(responses, dict):
        raise InvalidRequestError("Survey responses are required")

    values = {column: clean_optional(responses.get(wire_name)) for wire_name, column in SURVEY_FIELDS.items()}

    survey = get_survey(db, user_id)
    try:
        if survey is None:
            survey = StudentSurveyResponse(user_id=user_id, **values)
            db.add(survey)
        else:
            for column, value in values.items():
                setattr(survey, column, value)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Failed to save survey responses for user {user_id}")
        raise

    db.refresh(survey)
    return survey
