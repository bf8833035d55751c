from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint, func
from database.db import Base


class SquareCardPosition(Base):
    __tablename__ = "square_card_positions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    x_position = Column(Integer, nullable=False)
    y_position = Column(Integer, nullable=False)
    rotation = Column(Integer, default=0, nullable=False)
    z_index = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PersonaReaction(Base):
    __tablename__ = "persona_reactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    persona_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    reactor_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    emoji = Column(String(32), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("persona_user_id", "reactor_user_id", "emoji", name="uq_reaction_once_per_emoji"),
    )


class PersonaComment(Base):
    __tablename__ = "persona_comments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    persona_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    commenter_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    comment = Column(Text, nullable=False)
    ai_reply = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PersonaInteractionLog(Base):
    """Append-only record of activity on a persona card."""
    __tablename__ = "persona_interaction_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    persona_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    actor_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    interaction_type = Column(String(64), nullable=False)  # e.g. "reaction_added"
    target_id = Column(Integer, nullable=True)
    details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
