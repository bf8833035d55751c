# services/course_info.py
"""
Static course description used to ground AI prompts and the syllabus page,
plus the helper that turns a student's profile into prompt text.
"""
import re
from typing import Any, Dict, List, Optional

UNKNOWN_TOPIC = "Unknown"

COURSE_INFO: Dict[str, Any] = {
    "title": "COMM 324: Language and Technology",

    "course_overview": """
In this course, we integrate models of language use from psychology and communication with emerging technologies, with this year having a focus on generative AI, in particular Large Language Models (LLMs). We will read and discuss a selection of recent papers at the intersection of communication and computer science.

We will aim to understand:
- How will AI systems influence human communication?
- How human-like in behavior are current AI systems?
- Where can AI be better informed by (recent) advances in cognitive and communication sciences?
- Which ideas from modern AI inspire new approaches to human intelligence and communication?
- What principles of intelligence and communication emerge from comparing humans to modern AI?
""",

    "course_goals": """
The overall goal for the course is to introduce students to thinking about how new language analysis tools like large language models can be examined to understand human language and social dynamics, but also how they can be used to advance social science research, and to develop a research project for the student.

Multiple objectives intended for a wide variety of student backgrounds and goals including:
- Systematically examining the literature on large language models.
- Evaluating these models, with an emphasis on how examining these models can inform our understanding of human behavior and language and how they can be used to analyze psychological and social dynamics.
- Applying concepts from class and large language models to conduct a project.
""",

    "weekly_topics": {
        "1": {"topic": "Intro", "description": "Course introduction and overview"},
        "2": {"topic": "AI-Mediated Communication", "description": "How AI systems mediate human communication"},
        "3": {"topic": "LLMs and role play", "description": "Large language models in role-playing scenarios and theory of mind"},
        "4": {"topic": "Social Bots", "description": "Social bots and their impact on perception and regulation"},
        "5": {"topic": "Models interacting with each other", "description": "AI consciousness, generative agents, and model-to-model interactions"},
        "6": {"topic": "Deception and Truth", "description": "Truth bias in AI, conspiracy beliefs, and deception detection"},
        "7": {"topic": "LLMs reflecting human diversity of thought and opinion", "description": "AI's ability to understand and replicate human diversity in thinking"},
        "8": {"topic": "LLMs as content analysts", "description": "Using LLMs for content analysis and democratic value embedding"},
        "9": {"topic": "Reflections on human cognition", "description": "How LLMs help us understand human cognitive processes"},
        "10": {"topic": "Final project presentations", "description": "Student presentations of final projects"},
    },

    "course_essence": """
This course sits at the intersection of communication science, psychology, and artificial intelligence.
It focuses on understanding how Large Language Models work as communication tools and psychological research instruments.
The emphasis is on bidirectional learning: using psychology and communication science to understand AI,
and using AI to advance our understanding of human communication and cognition.
Key themes include human-AI interaction, computational approaches to psychology,
and the social implications of AI communication technologies.
""",
}

# Weeks with readings; 1 and 10 are intro and presentations
CONTENT_WEEKS = ["2", "3", "4", "5", "6", "7", "8", "9"]

# Phrasings that describe taste rather than research, dropped before prompting
_PREFERENCE_PATTERN = re.compile(r"\b(I like|I enjoy|I prefer|personally|my favorite)\b", re.IGNORECASE)
_FILLER_PATTERN = re.compile(r"\b(fun|exciting|interesting)\b", re.IGNORECASE)


def get_week_info(week_number: str) -> Optional[Dict[str, str]]:
    return COURSE_INFO["weekly_topics"].get(str(week_number).strip())


def get_week_topic(week_number: str) -> str:
    info = get_week_info(week_number)
    return info["topic"] if info else UNKNOWN_TOPIC


def list_weeks() -> List[Dict[str, str]]:
    return [
        {"weekNumber": number, "topic": info["topic"], "description": info["description"]}
        for number, info in sorted(COURSE_INFO["weekly_topics"].items(), key=lambda item: int(item[0]))
    ]


def get_context_for_week(week_number: str) -> str:
    """
    Course context block for one week. Unknown weeks are not an error:
    the block is still produced with an "Unknown" topic.
    """
    info = get_week_info(week_number)
    topic = info["topic"] if info else UNKNOWN_TOPIC
    description = info["description"] if info else "No description available"

    return f"""
Course: {COURSE_INFO["title"]}

Course Overview: {COURSE_INFO["course_overview"]}

Course Goals: {COURSE_INFO["course_goals"]}

Course Essence: {COURSE_INFO["course_essence"]}

Week {week_number} Focus:
Topic: {topic}
Description: {description}
"""


def _field(source: Any, name: str) -> str:
    if source is None:
        return ""
    if isinstance(source, dict):
        value = source.get(name)
    else:
        value = getattr(source, name, None)
    return value or ""


def _clean_interest_text(text: str) -> str:
    if not text:
        return ""
    text = _PREFERENCE_PATTERN.sub("", text)
    text = _FILLER_PATTERN.sub("", text)
    return text.strip()


def extract_relevant_interests(persona: Any, survey: Any) -> str:
    """
    Merge persona card and survey answers into the student profile block.
    Persona card values win; survey values fill the gaps. Either input may
    be None, an ORM row, or a dict keyed by column name.
    """
    relevant = {
        "research_interests": _field(persona, "research_interest") or _field(survey, "research_interests"),
        "academic_background": _field(persona, "academic_background") or _field(survey, "academic_background"),
        "learning_goals": _field(persona, "learning_goal") or _field(survey, "class_goals"),
        "recent_readings": _field(persona, "recent_reading") or _field(survey, "recent_readings"),
    }

    return f"""
Research Interests: {_clean_interest_text(relevant["research_interests"])}
Academic Background: {_clean_interest_text(relevant["academic_background"])}
Learning Goals for This Class: {_clean_interest_text(relevant["learning_goals"])}
Recent Academic Readings/Thoughts: {_clean_interest_text(relevant["recent_readings"])}
""".strip()
