# tests/test_profile_api.py
import json

from database.models.profile_models import PersonaCard, StudentSurveyResponse
from services.persona_service import AVATAR_COLOR_PALETTE


SURVEY = {
    "preferredName": "Ada",
    "lastName": "Lovelace",
    "gender": "",
    "age": "28",
    "academicBackground": "Mathematics\x07",
    "researchInterests": "Machine reasoning",
    "recentReadings": "Notes on the Analytical Engine",
    "classGoals": "Build a persona study",
    "discussionStyle": "Direct",
}


def test_survey_round_trip(client, db, make_user):
    user = make_user()

    r = client.post("/survey", json={"userId": user.id, "responses": SURVEY})
    assert r.status_code == 200
    assert r.json()["success"] is True

    row = db.query(StudentSurveyResponse).filter_by(user_id=user.id).one()
    assert row.gender is None
    assert row.academic_background == "Mathematics"

    r = client.get("/survey", params={"userId": user.id})
    assert r.json()["data"]["preferredName"] == "Ada"


def test_survey_upserts_one_row_per_user(client, db, make_user):
    user = make_user()
    client.post("/survey", json={"userId": user.id, "responses": SURVEY})
    client.post("/survey", json={"userId": user.id, "responses": dict(SURVEY, discussionStyle="Quiet")})

    rows = db.query(StudentSurveyResponse).filter_by(user_id=user.id).all()
    assert len(rows) == 1
    assert rows[0].discussion_style == "Quiet"


def test_survey_validation(client, make_user):
    user = make_user()
    assert client.post("/survey", json={"responses": SURVEY}).status_code == 400
    r = client.post("/survey", json={"userId": user.id, "responses": "everything"})
    assert r.status_code == 400
    assert r.json() == {"error": "Survey responses are required"}


def test_survey_missing_returns_null(client, make_user):
    user = make_user()
    r = client.get("/survey", params={"userId": user.id})
    assert r.status_code == 200
    assert r.json()["data"] is None


def test_persona_created_from_survey(client, db, make_user, make_survey):
    user = make_user("Grace Hopper")
    make_survey(user, preferred_name="Grace")

    r = client.get("/persona", params={"userId": user.id})

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Grace"
    assert data["researchInterest"] == "Social bots and persuasion"
    assert data["surveyData"]["classGoals"] == "Learn to evaluate LLMs"
    assert data["interviewData"] is None
    assert db.query(PersonaCard).filter_by(user_id=user.id).count() == 1


def test_persona_without_survey_is_404(client, make_user):
    user = make_user()
    r = client.get("/persona", params={"userId": user.id})
    assert r.status_code == 404
    assert r.json() == {"error": "No survey responses found. Please complete the survey first."}


def test_persona_update(client, student):
    payload = {
        "userId": student.id,
        "personaData": {
            "name": "Ada L.",
            "academicBackground": "Math",
            "researchInterest": "Machines",
            "recentReading": "",
            "learningGoal": "Write",
            "discussionStyle": "Direct",
        },
    }

    r = client.put("/persona", json=payload)

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Ada L."
    assert data["recentReading"] is None


def test_persona_update_without_card_is_404(client, make_user):
    user = make_user()
    r = client.put("/persona", json={"userId": user.id, "personaData": {"name": "X"}})
    assert r.status_code == 404


def test_avatar_color(client, db, student):
    r = client.put("/persona/avatar-color", json={"userId": student.id, "avatarColor": "#ff8c00"})
    assert r.status_code == 200
    assert r.json()["avatarColor"] == "#FF8C00"

    r = client.put("/persona/avatar-color", json={"userId": student.id, "avatarColor": "orange"})
    assert r.status_code == 400


def test_avatar_palette(client):
    r = client.get("/persona/avatar-colors")
    assert r.json()["colors"] == AVATAR_COLOR_PALETTE
    assert len(r.json()["colors"]) == 12


SUMMARY = {
    "header": {"name": "Ada", "affiliation": "PhD student, Communication"},
    "leftColumn": {"background": "• Math", "discussionStyle": "• Direct"},
    "rightColumn": {"guidingQuestion": "• Can machines reason?", "learningGoals": "• LLM methods", "recentInterests": "• Engines"},
}


def test_persona_summary_generation(client, llm, student):
    llm.push("```json\n" + json.dumps(SUMMARY) + "\n```")

    r = client.post("/persona-summary", json={"userId": student.id})
    assert r.status_code == 200
    assert r.json()["data"]["header"]["affiliation"] == "PhD student, Communication"

    # stored summary is reused unless forced
    r = client.post("/persona-summary", json={"userId": student.id})
    assert r.status_code == 200
    assert len(llm.requests) == 1

    r = client.get("/persona-summary", params={"userId": student.id})
    assert r.json()["data"]["rightColumn"]["guidingQuestion"] == "• Can machines reason?"


def test_persona_summary_requires_card(client, make_user):
    user = make_user()
    r = client.post("/persona-summary", json={"userId": user.id})
    assert r.status_code == 404


def test_persona_summary_bad_answer(client, llm, student):
    llm.push(json.dumps({"header": {"affiliation": "no name"}}))
    r = client.post("/persona-summary", json={"userId": student.id})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to process AI summary"}


def test_persona_summary_field_edit(client, llm, student):
    llm.push(json.dumps(SUMMARY))
    client.post("/persona-summary", json={"userId": student.id})

    r = client.put("/persona-summary", json={"userId": student.id, "field": "leftColumn.background", "value": "• Physics"})
    assert r.status_code == 200

    r = client.put("/persona-summary", json={"userId": student.id, "field": "footer.note", "value": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid field name"}

    summary = client.get("/persona-summary", params={"userId": student.id}).json()["data"]
    assert summary["leftColumn"]["background"] == "• Physics"


def test_persona_summary_missing(client, make_user):
    user = make_user()
    r = client.get("/persona-summary", params={"userId": user.id})
    assert r.json()["success"] is False

    r = client.put("/persona-summary", json={"userId": user.id, "field": "header.name", "value": "X"})
    assert r.status_code == 404
