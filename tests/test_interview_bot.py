# tests/test_interview_bot.py
import json

from database.models.profile_models import InterviewChat


def start(client, user_id):
    return client.post("/interview-bot", json={"userId": user_id, "action": "start"})


def test_start_requires_survey(client, make_user):
    user = make_user()
    r = start(client, user.id)
    assert r.status_code == 404
    assert r.json() == {"error": "No survey data found. Please complete the survey first."}


def test_start_greets_with_interests(client, student):
    r = start(client, student.id)

    assert r.status_code == 200
    assert "Social bots and persuasion" in r.json()["message"]

    chat = client.get("/interview-bot", params={"userId": student.id}).json()
    assert chat["chatExists"] is True
    history = chat["data"]["chatHistory"]
    assert [m["role"] for m in history] == ["assistant"]


def test_send_appends_turns(client, db, llm, student):
    start(client, student.id)
    llm.push("What sparked that?")

    r = client.post("/interview-bot", json={"userId": student.id, "action": "send", "message": "Bots fascinate me"})

    assert r.json()["message"] == "What sparked that?"
    sent = llm.requests[0]["messages"]
    assert sent[0]["role"] == "system"
    assert sent[-1] == {"role": "user", "content": "Bots fascinate me"}

    chat = db.query(InterviewChat).filter_by(user_id=student.id).one()
    db.refresh(chat)
    assert chat.total_messages == 3
    assert [m["role"] for m in chat.chat_history] == ["system", "assistant", "user", "assistant"]


def test_send_validation(client, student):
    r = client.post("/interview-bot", json={"userId": student.id, "action": "send", "message": "hello"})
    assert r.status_code == 404

    start(client, student.id)
    r = client.post("/interview-bot", json={"userId": student.id, "action": "send", "message": "   "})
    assert r.status_code == 400


def test_complete_extracts_fields(client, db, llm, student):
    start(client, student.id)
    extracted = {
        "academicBackground": "Psychology",
        "researchInterest": "Bots",
        "recentReading": "Deception papers",
        "learningGoal": "Evaluate LLMs",
        "discussionStyle": "Socratic",
    }
    llm.push(json.dumps(extracted))

    r = client.post("/interview-bot", json={"userId": student.id, "action": "complete"})

    body = r.json()
    assert body["extractedData"] == extracted
    assert body["sessionDuration"] >= 0
    chat = db.query(InterviewChat).filter_by(user_id=student.id).one()
    db.refresh(chat)
    assert chat.is_completed is True
    assert chat.extracted_research_interest == "Bots"

    persona = client.get("/persona", params={"userId": student.id}).json()["data"]
    assert persona["interviewData"]["learningGoal"] == "Evaluate LLMs"


def test_complete_with_unparseable_answer_stores_blanks(client, llm, student):
    start(client, student.id)
    llm.push("Sorry, I cannot summarize that.")

    r = client.post("/interview-bot", json={"userId": student.id, "action": "complete"})

    assert r.status_code == 200
    assert set(r.json()["extractedData"].values()) == {""}


def test_unknown_action(client, student):
    r = client.post("/interview-bot", json={"userId": student.id, "action": "dance"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid action"}


def test_chatbot_answers_from_profile(client, llm, student):
    llm.push("You would enjoy week 4 on social bots.")

    r = client.post("/chatbot", json={"userId": student.id, "message": "What should I read?"})

    assert r.status_code == 200
    assert r.json()["message"] == "You would enjoy week 4 on social bots."
    request = llm.requests[0]
    assert request["max_tokens"] == 300
    assert "Trust in AI-mediated messages" in request["messages"][0]["content"]


def test_chatbot_validation(client, make_user):
    user = make_user()
    assert client.post("/chatbot", json={"userId": user.id}).status_code == 400
    assert client.post("/chatbot", json={"message": "hi"}).status_code == 400
    r = client.post("/chatbot", json={"userId": user.id, "message": "hi"})
    assert r.status_code == 404
