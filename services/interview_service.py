# services/interview_service.py
"""
Onboarding interview bot. The chat history, including the hidden system
prompt, lives in one JSON column per user.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from database.models.profile_models import InterviewChat
from services.errors import InvalidRequestError, NotFoundError
from services.llm_service import CompletionClient, LLMJSONParseError, parse_json_text
from services.persona_service import get_interview
from services.survey_service import get_survey
from utils.sanitization import clean_text

logger = logging.getLogger(__name__)

INTERVIEW_MODEL = "gpt-5-mini"

EXTRACTED_FIELDS = {
    "academicBackground": "extracted_academic_background",
    "researchInterest": "extracted_research_interest",
    "recentReading": "extracted_recent_reading",
    "learningGoal": "extracted_learning_goal",
    "discussionStyle": "extracted_discussion_style",
}


class InterviewAction:
    START = "start"
    SEND = "send"
    COMPLETE = "complete"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _message(role: str, content: str) -> Dict[str, str]:
    return {"role": role, "content": content, "timestamp": _now().isoformat()}


def _visible(history: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [m for m in history if m.get("role") != "system"]


def get_chat(db: Session, user_id: Optional[int]) -> Optional[Dict[str, Any]]:
    if not user_id:
        raise InvalidRequestError("User ID is required")

    chat = get_interview(db, user_id)
    if chat is None:
        return None
    return {
        "id": chat.id,
        "chatHistory": _visible(chat.chat_history or []),
        "isCompleted": chat.is_completed,
        "totalMessages": chat.total_messages,
        "createdAt": chat.created_at,
        "updatedAt": chat.updated_at,
    }


def _system_prompt(survey) -> str:
    return f"""You are a friendly academic interviewer helping a student elaborate on their survey responses for a Communication and AI course. Your goal is to have a natural conversation that helps them reflect deeper on their academic journey, research interests, and goals.

Survey Data Summary:
- Name: {survey.preferred_name or 'Student'}
- Academic Background: {survey.academic_background or 'Not provided'}
- Research Interests: {survey.research_interests or 'Not provided'}
- Recent Readings: {survey.recent_readings or 'Not provided'}
- Class Goals: {survey.class_goals or 'Not provided'}
- Discussion Style: {survey.discussion_style or 'Not provided'}

Guidelines:
1. Ask follow-up questions that encourage elaboration and reflection
2. Be conversational and supportive, not interrogative
3. Focus on one topic at a time before moving to the next
4. Help them articulate their thoughts more clearly
5. Ask about specific examples, experiences, or motivations
6. Keep responses concise (2-3 sentences max)
7. End when they indicate they're ready to finish

Start by greeting them warmly and asking an open-ended follow-up question about one aspect of their survey responses."""


def _greeting(survey) -> str:
    interests = (survey.research_interests or "")[:100]
    return (
        f"Hi {survey.preferred_name or 'there'}! 👋\n\n"
        "I'd love to chat a bit more about your survey responses to help you reflect on your academic journey. "
        f"I noticed you mentioned \"{interests}...\" as your research interests.\n\n"
        "What initially drew you to this area? Was there a particular moment, class, or experience that sparked this curiosity?"
    )


def start_interview(db: Session, user_id: int) -> str:
    survey = get_survey(db, user_id)
    if survey is None:
        raise NotFoundError("No survey data found. Please complete the survey first.")

    greeting = _greeting(survey)
    history = [_message("system", _system_prompt(survey)), _message("assistant", greeting)]

    chat = get_interview(db, user_id)
    if chat is None:
        chat = InterviewChat(user_id=user_id)
        db.add(chat)
    chat.chat_history = history
    chat.is_completed = False
    chat.completed_at = None
    chat.total_messages = 1
    db.commit()

    return greeting


def send_message(db: Session, completion_client: CompletionClient, user_id: int, message: Optional[str]) -> str:
    message = clean_text(message)
    if not message:
        raise InvalidRequestError("Message is required")

    chat = get_interview(db, user_id)
    if chat is None:
        raise NotFoundError("No active interview found. Please start a new interview.")

    history = list(chat.chat_history or [])
    history.append(_message("user", message))

    reply = completion_client.chat(
        [{"role": m["role"], "content": m["content"]} for m in history],
        model=INTERVIEW_MODEL,
        temperature=1.0,
    )
    history.append(_message("assistant", reply))

    # Reassign so the JSON column is flagged dirty
    chat.chat_history = history
    chat.total_messages = len(_visible(history))
    db.commit()

    return reply


def _extraction_prompt(history: List[Dict[str, Any]]) -> str:
    transcript = "\n\n".join(f"{m['role'].upper()}: {m['content']}" for m in _visible(history))
    return f"""Based on the following interview conversation, extract and summarize information for each of these five persona card categories. Be concise but comprehensive:

1. Academic Background
2. Research Interest
3. Recent Reading/Thoughts
4. Learning Goal for the Class
5. Discussion Style

Chat History:
{transcript}

Respond with ONLY a JSON object in this exact format:
{{
  "academicBackground": "extracted information...",
  "researchInterest": "extracted information...",
  "recentReading": "extracted information...",
  "learningGoal": "extracted information...",
  "discussionStyle": "extracted information..."
}}"""


def _elapsed_minutes(started: Optional[datetime], ended: datetime) -> int:
    if started is None:
        return 0
    if started.tzinfo is None:
        # SQLite drops the offset; timestamps are written in UTC
        started = started.replace(tzinfo=timezone.utc)
    return max(0, int((ended - started).total_seconds() // 60))


def complete_interview(db: Session, completion_client: CompletionClient, user_id: int) -> Dict[str, Any]:
    chat = get_interview(db, user_id)
    if chat is None:
        raise NotFoundError("No active interview found")

    text = completion_client.complete(
        _extraction_prompt(chat.chat_history or []),
        model=INTERVIEW_MODEL,
        temperature=1.0,
    )
    try:
        parsed = parse_json_text(text)
    except LLMJSONParseError:
        parsed = None
    if not isinstance(parsed, dict):
        logger.warning(f"Interview extraction for user {user_id} was not a JSON object; storing empty fields")
        parsed = {}
    extracted = {key: str(parsed.get(key) or "") for key in EXTRACTED_FIELDS}

    finished = _now()
    duration = _elapsed_minutes(chat.created_at, finished)

    chat.is_completed = True
    chat.completed_at = finished
    chat.session_duration = duration
    for key, column in EXTRACTED_FIELDS.items():
        setattr(chat, column, extracted[key])
    db.commit()

    return {"extractedData": extracted, "sessionDuration": duration}
