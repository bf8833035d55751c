# tests/conftest.py
import os
from types import SimpleNamespace

# Must be set before database.db is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("APP_ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.dependencies.db import get_completion_client, get_db
from api.main import app
from database.db import init_db
from database.models.paper_model import Paper, RequiredPaper
from database.models.profile_models import PersonaCard, StudentSurveyResponse
from database.models.user_model import User
from services.llm_service import CompletionClient


class ScriptedLLM:
    """
    OpenAI-shaped client that answers from a queue of scripted contents.
    An Exception in the queue is raised instead of answered.
    """

    def __init__(self, *contents):
        self.contents = list(contents)
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def push(self, *contents):
        self.contents.extend(contents)

    def _create(self, **params):
        self.requests.append(params)
        if not self.contents:
            raise RuntimeError("no scripted response left")
        content = self.contents.pop(0)
        if isinstance(content, Exception):
            raise content
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def completion_client(llm):
    return CompletionClient(llm, "test-model")


@pytest.fixture
def client(db, completion_client):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_completion_client] = lambda: completion_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(name="Ada Lovelace", is_guest=False):
        user = User(name=name, is_guest=is_guest)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_paper(db):
    def _make(paper_id, **fields):
        values = {
            "title": f"Paper {paper_id}",
            "authors": "Hancock, J.",
            "abstract": f"Abstract of {paper_id}",
            "topics": "AI-Mediated Communication",
            "keywords": "llm, communication",
            "category": "communication",
        }
        values.update(fields)
        paper = Paper(paper_id=paper_id, **values)
        db.add(paper)
        db.commit()
        db.refresh(paper)
        return paper
    return _make


@pytest.fixture
def make_required_paper(db):
    def _make(paper_id, week_number, **fields):
        values = {
            "title": f"Required {paper_id}",
            "category": "required",
            "week_topic": f"Week {week_number}",
        }
        values.update(fields)
        paper = RequiredPaper(paper_id=paper_id, week_number=week_number, **values)
        db.add(paper)
        db.commit()
        return paper
    return _make


@pytest.fixture
def make_persona(db):
    def _make(user, **fields):
        values = {
            "name": user.name.split()[0],
            "academic_background": "MA in Communication",
            "research_interest": "Trust in AI-mediated messages",
            "recent_reading": "Hancock et al. on AI-MC",
            "learning_goal": "Design an LLM experiment",
            "discussion_style": "Listens first",
        }
        values.update(fields)
        card = PersonaCard(user_id=user.id, **values)
        db.add(card)
        db.commit()
        db.refresh(card)
        return card
    return _make


@pytest.fixture
def make_survey(db):
    def _make(user, **fields):
        values = {
            "preferred_name": user.name.split()[0],
            "academic_background": "BA in Psychology",
            "research_interests": "Social bots and persuasion",
            "recent_readings": "Papers on deception detection",
            "class_goals": "Learn to evaluate LLMs",
            "discussion_style": "Socratic",
        }
        values.update(fields)
        survey = StudentSurveyResponse(user_id=user.id, **values)
        db.add(survey)
        db.commit()
        db.refresh(survey)
        return survey
    return _make


@pytest.fixture
def student(make_user, make_persona, make_survey):
    user = make_user()
    make_persona(user)
    make_survey(user)
    return user


@pytest.fixture
def pool(make_paper):
    return [make_paper(f"P{i}") for i in range(1, 6)]
