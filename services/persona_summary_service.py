# services/persona_summary_service.py
import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from database.models.profile_models import PresentablePersona
from services.errors import InvalidRequestError, NotFoundError, UpstreamParseError
from services.llm_service import CompletionClient, LLMJSONParseError, parse_json_text
from services.persona_service import get_interview, get_persona_card
from services.survey_service import get_survey

logger = logging.getLogger(__name__)

SUMMARY_MODEL = "gpt-5-mini"

# dotted wire field -> column
EDITABLE_FIELDS = {
    "header.name": "name",
    "header.affiliation": "affiliation",
    "leftColumn.background": "background",
    "leftColumn.discussionStyle": "discussion_style",
    "rightColumn.guidingQuestion": "guiding_question",
    "rightColumn.learningGoals": "learning_goals",
    "rightColumn.recentInterests": "recent_interests",
}

SYSTEM_PROMPT = """You are an expert at creating concise, engaging academic persona summaries for university students. Your task is to create a presentable persona card that helps classmates get to know each other.

Guidelines:
- Be concise but informative - each bullet point should be 1-2 sentences or one long sentence
- Use bullet points (max 3 per section)
- Use **bold** and *italics* appropriately for emphasis
- ENSURE ALL FIELDS HAVE CONTENT - never leave any section empty
- Left column content should be focused and practical
- Right column content should be engaging and personal
- Extract the most relevant information from available data
- If information is limited, create plausible content based on context
- Make it relatable and interesting for classmates

Respond with ONLY a JSON object in this exact format:
{
  "header": {
    "name": "First name only",
    "affiliation": "Academic status, program, department, or lab affiliation"
  },
  "leftColumn": {
    "background": "• Previous education and relevant experience.\\n• Key skills or methods.\\n• Notable coursework or projects.",
    "discussionStyle": "• Communication preferences.\\n• Collaboration style.\\n• Learning preferences."
  },
  "rightColumn": {
    "guidingQuestion": "• Current research question or curiosity.\\n• What drives their work.\\n• Frameworks they want to apply.",
    "learningGoals": "• What they want to learn in this class.\\n• Skills they hope to develop.\\n• How the class connects to their goals.",
    "recentInterests": "• Recent readings or ideas.\\n• Current fascinations.\\n• Evolving perspectives."
  }
}"""


class _Header(BaseModel):
    name: str
    affiliation: str = ""


class _LeftColumn(BaseModel):
    background: str = ""
    discussionStyle: str = ""


class _RightColumn(BaseModel):
    guidingQuestion: str = ""
    learningGoals: str = ""
    recentInterests: str = ""


class PersonaSummary(BaseModel):
    header: _Header
    leftColumn: _LeftColumn
    rightColumn: _RightColumn


def summary_to_dict(row: PresentablePersona) -> Dict[str, Any]:
    return {
        "header": {"name": row.name, "affiliation": row.affiliation or ""},
        "leftColumn": {
            "background": row.background or "",
            "discussionStyle": row.discussion_style or "",
        },
        "rightColumn": {
            "guidingQuestion": row.guiding_question or "",
            "learningGoals": row.learning_goals or "",
            "recentInterests": row.recent_interests or "",
        },
    }


def get_summary(db: Session, user_id: int) -> Optional[PresentablePersona]:
    return db.query(PresentablePersona).filter(PresentablePersona.user_id == user_id).first()


def _merge(*values) -> str:
    return "\n\n".join(v for v in values if v)


def _build_user_prompt(card, survey, interview) -> str:
    completed = interview if interview is not None and interview.is_completed else None
    name = card.name or (survey.preferred_name if survey else None) or "Student"
    sections = {
        "Academic Background": _merge(card.academic_background, survey and survey.academic_background,
                                      completed and completed.extracted_academic_background),
        "Research Interests": _merge(card.research_interest, survey and survey.research_interests,
                                     completed and completed.extracted_research_interest),
        "Recent Reading/Thoughts": _merge(card.recent_reading, survey and survey.recent_readings,
                                          completed and completed.extracted_recent_reading),
        "Learning Goals": _merge(card.learning_goal, survey and survey.class_goals,
                                 completed and completed.extracted_learning_goal),
        "Discussion Style": _merge(card.discussion_style, survey and survey.discussion_style,
                                   completed and completed.extracted_discussion_style),
    }
    demographics = {
        "gender": survey.gender if survey else None,
        "age": survey.age if survey else None,
        "lastName": survey.last_name if survey else None,
    }

    body = "\n\n".join(f"{title}:\n{text or 'Not provided'}" for title, text in sections.items())
    return (
        f"Student Information:\nName: {name}\n\n{body}\n\n"
        f"Demographics: {json.dumps(demographics)}\n\n"
        "Please create a concise, engaging persona summary that will help classmates get to know this student."
    )


def generate_summary(db: Session, completion_client: CompletionClient, user_id: Optional[int],
                     force_regenerate: bool = False) -> Dict[str, Any]:
    if not user_id:
        raise InvalidRequestError("User ID is required")

    existing = get_summary(db, user_id)
    if existing is not None and not force_regenerate:
        return summary_to_dict(existing)

    card = get_persona_card(db, user_id)
    if card is None:
        raise NotFoundError("No persona card found. Please complete your persona first.")

    text = completion_client.complete(
        _build_user_prompt(card, get_survey(db, user_id), get_interview(db, user_id)),
        system_prompt=SYSTEM_PROMPT,
        model=SUMMARY_MODEL,
        temperature=1.0,
    )
    try:
        summary = PersonaSummary.model_validate(parse_json_text(text))
    except (LLMJSONParseError, ValidationError) as e:
        logger.error(f"Persona summary response rejected for user {user_id}: {e}")
        raise UpstreamParseError("Failed to process AI summary") from e

    values = {
        "name": summary.header.name,
        "affiliation": summary.header.affiliation,
        "background": summary.leftColumn.background,
        "discussion_style": summary.leftColumn.discussionStyle,
        "guiding_question": summary.rightColumn.guidingQuestion,
        "learning_goals": summary.rightColumn.learningGoals,
        "recent_interests": summary.rightColumn.recentInterests,
    }
    try:
        if existing is None:
            existing = PresentablePersona(user_id=user_id, **values)
            db.add(existing)
        else:
            for column, value in values.items():
                setattr(existing, column, value)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Failed to store persona summary for user {user_id}")
        raise

    return summary.model_dump()


def update_summary_field(db: Session, user_id: Optional[int], field: Optional[str], value: Any) -> None:
    if not user_id or not field or value is None:
        raise InvalidRequestError("User ID, field, and value are required")

    column = EDITABLE_FIELDS.get(field)
    if column is None:
        raise InvalidRequestError("Invalid field name")

    row = get_summary(db, user_id)
    if row is None:
        raise NotFoundError("No presentable persona found")

    setattr(row, column, str(value))
    db.commit()
