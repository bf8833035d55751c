from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, JSON, func
from database.db import Base


class StudentSurveyResponse(Base):
    __tablename__ = "student_survey_responses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    # Basics
    preferred_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    gender = Column(String(64), nullable=True)
    age = Column(String(32), nullable=True)

    # Open questions
    academic_background = Column(Text, nullable=True)
    research_interests = Column(Text, nullable=True)
    recent_readings = Column(Text, nullable=True)
    class_goals = Column(Text, nullable=True)
    discussion_style = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class PersonaCard(Base):
    __tablename__ = "persona_cards"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    name = Column(String(255), nullable=True)
    academic_background = Column(Text, nullable=True)
    research_interest = Column(Text, nullable=True)
    recent_reading = Column(Text, nullable=True)
    learning_goal = Column(Text, nullable=True)
    discussion_style = Column(Text, nullable=True)
    avatar_color = Column(String(16), nullable=True)
    intro_message = Column(Text, nullable=True)

    # "show more" bullets on the square, lists of strings
    academic_background_sub_bullets = Column(JSON, nullable=True)
    research_interest_sub_bullets = Column(JSON, nullable=True)
    recent_reading_sub_bullets = Column(JSON, nullable=True)
    learning_goal_sub_bullets = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class PresentablePersona(Base):
    """AI-written summary card shown to classmates."""
    __tablename__ = "presentable_personas"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    name = Column(String(255), nullable=False)
    affiliation = Column(Text, nullable=True)
    background = Column(Text, nullable=True)
    discussion_style = Column(Text, nullable=True)
    guiding_question = Column(Text, nullable=True)
    learning_goals = Column(Text, nullable=True)
    recent_interests = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class InterviewChat(Base):
    __tablename__ = "interview_chats"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    # [{"role": ..., "content": ..., "timestamp": ...}]
    chat_history = Column(JSON, nullable=False, default=list)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    extracted_academic_background = Column(Text, nullable=True)
    extracted_research_interest = Column(Text, nullable=True)
    extracted_recent_reading = Column(Text, nullable=True)
    extracted_learning_goal = Column(Text, nullable=True)
    extracted_discussion_style = Column(Text, nullable=True)

    total_messages = Column(Integer, default=0, nullable=False)
    session_duration = Column(Integer, nullable=True)  # minutes

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class StudentProject(Base):
    __tablename__ = "student_projects"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    project_type = Column(String(255), nullable=False)
    project_description = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)
    is_latest = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
