# database/models/paper_model.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from database.db import Base


class Paper(Base):
    """Candidate paper in the recommendation pool. Written by ingestion only."""
    __tablename__ = "papers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Semantic Scholar style external id
    paper_id = Column(String(255), unique=True, index=True, nullable=False)

    title = Column(Text, nullable=False)
    authors = Column(Text, nullable=True)
    abstract = Column(Text, nullable=True)
    tldr = Column(Text, nullable=True)
    topics = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    category = Column(String(255), nullable=False)
    url = Column(Text, nullable=True)
    doi = Column(String(255), nullable=True)
    open_access_pdf = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class RequiredPaper(Base):
    __tablename__ = "required_papers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    paper_id = Column(String(255), unique=True, nullable=False)

    title = Column(Text, nullable=False)
    authors = Column(Text, nullable=True)
    abstract = Column(Text, nullable=True)
    tldr = Column(Text, nullable=True)
    topics = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    category = Column(String(255), nullable=False)
    url = Column(Text, nullable=True)
    doi = Column(String(255), nullable=True)
    open_access_pdf = Column(Text, nullable=True)

    week_number = Column(String(16), nullable=False, index=True)
    week_topic = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class PersonalizedPaper(Base):
    """
    Snapshot of a pool paper selected for one student and one week.
    Rows for a (user_id, week_number) key are only ever replaced as a batch.
    """
    __tablename__ = "personalized_papers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    paper_id = Column(String(255), nullable=False)
    title = Column(Text, nullable=False)
    authors = Column(Text, nullable=True)
    abstract = Column(Text, nullable=True)
    tldr = Column(Text, nullable=True)
    topics = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)
    category = Column(String(255), nullable=False)
    url = Column(Text, nullable=True)
    doi = Column(String(255), nullable=True)
    open_access_pdf = Column(Text, nullable=True)

    week_number = Column(String(16), nullable=False, index=True)
    week_topic = Column(String(255), nullable=False)
    relevance_ranking = Column(Integer, nullable=False)
    matching_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "week_number", "relevance_ranking", name="uq_personalized_user_week_rank"),
        UniqueConstraint("user_id", "week_number", "paper_id", name="uq_personalized_user_week_paper"),
    )
