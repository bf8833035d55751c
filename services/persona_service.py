# services/persona_service.py
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from database.models.profile_models import InterviewChat, PersonaCard
from services.errors import InvalidRequestError, NotFoundError
from services.survey_service import get_survey
from utils.sanitization import clean_optional, is_hex_color

logger = logging.getLogger(__name__)

DEFAULT_AVATAR_COLOR = "#262D59"

AVATAR_COLOR_PALETTE = [
    "#262D59",
    "#8B4513",
    "#228B22",
    "#DC143C",
    "#4B0082",
    "#FF8C00",
    "#2F4F4F",
    "#800080",
    "#008B8B",
    "#B22222",
    "#9932CC",
    "#8B008B",
]

# wire name -> column, for fields the student edits
PERSONA_FIELDS = {
    "name": "name",
    "academicBackground": "academic_background",
    "researchInterest": "research_interest",
    "recentReading": "recent_reading",
    "learningGoal": "learning_goal",
    "discussionStyle": "discussion_style",
}


def get_persona_card(db: Session, user_id: int) -> Optional[PersonaCard]:
    return db.query(PersonaCard).filter(PersonaCard.user_id == user_id).first()


def get_interview(db: Session, user_id: int) -> Optional[InterviewChat]:
    return db.query(InterviewChat).filter(InterviewChat.user_id == user_id).first()


def persona_to_dict(card: PersonaCard) -> Dict[str, Any]:
    data = {"id": card.id, "userId": card.user_id}
    for wire_name, column in PERSONA_FIELDS.items():
        data[wire_name] = getattr(card, column)
    data.update({
        "avatarColor": card.avatar_color,
        "introMessage": card.intro_message,
        "createdAt": card.created_at,
        "updatedAt": card.updated_at,
    })
    return data


def _survey_excerpt(survey) -> Optional[Dict[str, Any]]:
    if survey is None:
        return None
    return {
        "academicBackground": survey.academic_background,
        "researchInterests": survey.research_interests,
        "recentReadings": survey.recent_readings,
        "classGoals": survey.class_goals,
        "discussionStyle": survey.discussion_style,
    }


def _interview_excerpt(interview: Optional[InterviewChat]) -> Optional[Dict[str, Any]]:
    if interview is None or not interview.is_completed:
        return None
    return {
        "academicBackground": interview.extracted_academic_background,
        "researchInterest": interview.extracted_research_interest,
        "recentReading": interview.extracted_recent_reading,
        "learningGoal": interview.extracted_learning_goal,
        "discussionStyle": interview.extracted_discussion_style,
    }


def get_or_create_persona(db: Session, user_id: Optional[int]) -> Tuple[Dict[str, Any], bool]:
    """
    Returns (persona payload, created). A missing card is seeded from the
    survey; without either, NotFoundError.
    """
    if not user_id:
        raise InvalidRequestError("User ID is required")

    card = get_persona_card(db, user_id)
    survey = get_survey(db, user_id)
    interview = get_interview(db, user_id)
    created = False

    if card is None:
        if survey is None:
            raise NotFoundError("No survey responses found. Please complete the survey first.")

        card = PersonaCard(
            user_id=user_id,
            name=survey.preferred_name or "Student",
            academic_background=survey.academic_background or "",
            research_interest=survey.research_interests or "",
            recent_reading=survey.recent_readings or "",
            learning_goal=survey.class_goals or "",
            discussion_style=survey.discussion_style or "",
        )
        try:
            db.add(card)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Failed to create persona card for user {user_id}")
            raise
        db.refresh(card)
        created = True
        logger.info(f"Persona card created from survey responses for user {user_id}")

    payload = persona_to_dict(card)
    payload["surveyData"] = _survey_excerpt(survey)
    payload["interviewData"] = _interview_excerpt(interview)
    return payload, created


def update_persona(db: Session, user_id: Optional[int], persona_data: Any) -> PersonaCard:
    if not user_id:
        raise InvalidRequestError("User ID is required")
    if not isinstance(persona_data, dict):
        raise InvalidRequestError("Persona data is required")

    card = get_persona_card(db, user_id)
    if card is None:
        raise NotFoundError("Persona card not found")

    for wire_name, column in PERSONA_FIELDS.items():
        setattr(card, column, clean_optional(persona_data.get(wire_name)))
    db.commit()
    db.refresh(card)
    return card


def update_avatar_color(db: Session, user_id: Optional[int], color: Optional[str]) -> PersonaCard:
    if not user_id:
        raise InvalidRequestError("User ID is required")
    if not is_hex_color(color):
        raise InvalidRequestError("Avatar color must be a hex color like #262D59")

    card = get_persona_card(db, user_id)
    if card is None:
        raise NotFoundError("Persona card not found")

    card.avatar_color = color.upper()
    db.commit()
    db.refresh(card)
    return card
