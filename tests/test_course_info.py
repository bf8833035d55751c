from services.course_info import (
    COURSE_INFO,
    extract_relevant_interests,
    get_context_for_week,
    get_week_topic,
    list_weeks,
)


def test_week_topics():
    assert get_week_topic("3") == "LLMs and role play"
    assert get_week_topic(" 4 ") == "Social Bots"
    assert get_week_topic("42") == "Unknown"


def test_weeks_sorted_numerically():
    numbers = [w["weekNumber"] for w in list_weeks()]
    assert numbers == [str(n) for n in range(1, 11)]


def test_context_for_known_week():
    context = get_context_for_week("6")
    assert COURSE_INFO["title"] in context
    assert "Week 6 Focus:" in context
    assert "Topic: Deception and Truth" in context


def test_context_for_unknown_week():
    context = get_context_for_week("42")
    assert "Topic: Unknown" in context
    assert "Description: No description available" in context


def test_interests_prefer_persona_over_survey():
    persona = {"research_interest": "Persona interest", "academic_background": ""}
    survey = {
        "research_interests": "Survey interest",
        "academic_background": "Survey background",
        "class_goals": "Survey goals",
        "recent_readings": "Survey readings",
    }

    text = extract_relevant_interests(persona, survey)

    assert "Research Interests: Persona interest" in text
    assert "Academic Background: Survey background" in text
    assert "Learning Goals for This Class: Survey goals" in text
    assert "Recent Academic Readings/Thoughts: Survey readings" in text


def test_interests_drop_preference_phrasing():
    text = extract_relevant_interests({"research_interest": "I enjoy exciting work on bots"}, None)
    assert "I enjoy" not in text
    assert "exciting" not in text
    assert "work on bots" in text


def test_interests_without_profile():
    text = extract_relevant_interests(None, None)
    assert text.startswith("Research Interests:")
    assert text.splitlines()[-1] == "Recent Academic Readings/Thoughts:"
