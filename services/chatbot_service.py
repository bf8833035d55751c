# services/chatbot_service.py
from typing import Optional

from sqlalchemy.orm import Session

from services.course_info import COURSE_INFO, CONTENT_WEEKS, get_week_topic
from services.errors import InvalidRequestError, NotFoundError
from services.llm_service import CompletionClient
from services.paper_pool_service import get_student_profile
from utils.sanitization import clean_text

CHATBOT_MODEL = "gpt-4o-mini"


def _profile_context(persona, survey) -> str:
    context = ""
    if persona is not None:
        context += f"""
Student Profile:
- Name: {persona.name or 'Not specified'}
- Academic Background: {persona.academic_background or 'Not specified'}
- Research Interests: {persona.research_interest or 'Not specified'}
- Recent Reading/Thoughts: {persona.recent_reading or 'Not specified'}
- Learning Goals: {persona.learning_goal or 'Not specified'}
- Discussion Style: {persona.discussion_style or 'Not specified'}
"""
    if survey is not None:
        context += f"""
Additional Survey Data:
- Preferred Name: {survey.preferred_name or 'Not specified'}
- Academic Background: {survey.academic_background or 'Not specified'}
- Research Interests: {survey.research_interests or 'Not specified'}
- Recent Readings: {survey.recent_readings or 'Not specified'}
- Class Goals: {survey.class_goals or 'Not specified'}
- Discussion Style: {survey.discussion_style or 'Not specified'}
"""
    return context


def answer(db: Session, completion_client: CompletionClient, user_id: Optional[int], message: Optional[str]) -> str:
    """Answers a student's question about their own profile and the course."""
    message = clean_text(message)
    if not message:
        raise InvalidRequestError("Message is required")
    if not user_id:
        raise InvalidRequestError("User ID is required")

    persona, survey = get_student_profile(db, user_id)
    if persona is None and survey is None:
        raise NotFoundError("No persona or survey data found. Please complete your profile first.")

    topics = "\n".join(f"- {get_week_topic(week)}" for week in CONTENT_WEEKS)
    system_prompt = f"""You are a helpful academic assistant for {COURSE_INFO["title"]}, a course about Large Language Models and AI communication.

You have access to this student's profile and interests:
{_profile_context(persona, survey)}

Your role is to:
1. Answer questions about what this student likes based on their profile
2. Help them understand how course topics relate to their interests
3. Suggest connections between their research interests and course materials
4. Be conversational and encouraging
5. Keep responses concise but informative (2-3 sentences usually)

The course covers topics like:
{topics}

Please respond in a friendly, academic tone that shows you understand their specific interests and background."""

    return completion_client.complete(
        message,
        system_prompt=system_prompt,
        model=CHATBOT_MODEL,
        temperature=0.7,
        max_tokens=300,
    )
