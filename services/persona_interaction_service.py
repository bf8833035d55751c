# services/persona_interaction_service.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from database.models.profile_models import PersonaCard
from database.models.square_models import PersonaComment, PersonaReaction
from database.models.user_model import User
from services.errors import InvalidRequestError, NotFoundError
from services.interaction_log_service import InteractionType, log_interaction
from services.llm_service import CompletionClient
from utils.sanitization import clean_text

logger = logging.getLogger(__name__)

REPLY_FALLBACK = "Thanks for the comment! 😊"
REPLY_MODEL = "gpt-4o-mini"


def get_interactions(db: Session, persona_user_id: Optional[int]) -> Dict[str, Any]:
    """Reactions grouped by emoji and comments in posting order."""
    if not persona_user_id:
        raise InvalidRequestError("Persona user ID is required")

    reactions = (
        db.query(PersonaReaction, User.name, PersonaCard.name)
        .outerjoin(User, PersonaReaction.reactor_user_id == User.id)
        .outerjoin(PersonaCard, PersonaReaction.reactor_user_id == PersonaCard.user_id)
        .filter(PersonaReaction.persona_user_id == persona_user_id)
        .order_by(PersonaReaction.created_at, PersonaReaction.id)
        .all()
    )

    summary: Dict[str, Dict[str, Any]] = {}
    for reaction, user_name, persona_name in reactions:
        bucket = summary.setdefault(reaction.emoji, {"count": 0, "users": []})
        bucket["count"] += 1
        display_name = persona_name or user_name
        if display_name:
            bucket["users"].append(display_name)

    comments = (
        db.query(PersonaComment, User.name, PersonaCard.name)
        .outerjoin(User, PersonaComment.commenter_user_id == User.id)
        .outerjoin(PersonaCard, PersonaComment.commenter_user_id == PersonaCard.user_id)
        .filter(PersonaComment.persona_user_id == persona_user_id)
        .order_by(PersonaComment.created_at, PersonaComment.id)
        .all()
    )

    return {
        "reactions": summary,
        "comments": [
            {
                "id": comment.id,
                "comment": comment.comment,
                "aiReply": comment.ai_reply,
                "commenterUserId": comment.commenter_user_id,
                "commenterName": persona_name or user_name,
                "commenterUserName": user_name,
                "createdAt": comment.created_at,
            }
            for comment, user_name, persona_name in comments
        ],
    }


def toggle_reaction(db: Session, persona_user_id: int, user_id: int, emoji: Optional[str]) -> str:
    """Adds the reaction, or removes it if this user already left it. Returns "added" or "removed"."""
    if not emoji:
        raise InvalidRequestError("Emoji is required for reactions")

    existing = (
        db.query(PersonaReaction)
        .filter(PersonaReaction.persona_user_id == persona_user_id)
        .filter(PersonaReaction.reactor_user_id == user_id)
        .filter(PersonaReaction.emoji == emoji)
        .first()
    )

    try:
        if existing is not None:
            reaction_id = existing.id
            db.delete(existing)
            log_interaction(db, persona_user_id, user_id, InteractionType.REACTION_REMOVED, reaction_id, {"emoji": emoji})
            action = "removed"
        else:
            reaction = PersonaReaction(persona_user_id=persona_user_id, reactor_user_id=user_id, emoji=emoji)
            db.add(reaction)
            db.flush()
            log_interaction(db, persona_user_id, user_id, InteractionType.REACTION_ADDED, reaction.id, {"emoji": emoji})
            action = "added"
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Failed to toggle reaction {emoji} on persona {persona_user_id}")
        raise

    return action


def _reply_prompt(card: PersonaCard, comment: str) -> str:
    return f"""You are {card.name}, responding to a comment on your persona card.

Your persona characteristics:
- Academic Background: {card.academic_background}
- Research Interest: {card.research_interest}
- Recent Reading/Thoughts: {card.recent_reading}
- Learning Goal: {card.learning_goal}
- Discussion Style: {card.discussion_style}
- Intro Message: {card.intro_message}

Someone commented on your persona card: "{comment}"

Respond as {card.name} in ONE concise sentence that reflects your personality and academic interests. Be warm, authentic, and engaging. Keep it under 100 characters."""


def add_comment(db: Session, completion_client: CompletionClient, persona_user_id: int,
                user_id: int, comment: Optional[str]) -> PersonaComment:
    """Stores the comment together with an in-character reply from the card owner's persona."""
    comment = clean_text(comment)
    if not comment:
        raise InvalidRequestError("Comment text is required")

    card = db.query(PersonaCard).filter(PersonaCard.user_id == persona_user_id).first()
    if card is None:
        raise NotFoundError("Persona not found")

    reply = completion_client.complete(
        _reply_prompt(card, comment),
        system_prompt="You are responding as an academic persona. Be concise, authentic, and engaging.",
        model=REPLY_MODEL,
        temperature=0.7,
        max_tokens=50,
        allow_empty=True,
    ).strip() or REPLY_FALLBACK

    row = PersonaComment(
        persona_user_id=persona_user_id,
        commenter_user_id=user_id,
        comment=comment,
        ai_reply=reply,
    )
    try:
        db.add(row)
        db.flush()
        log_interaction(db, persona_user_id, user_id, InteractionType.COMMENT_POSTED, row.id, {"comment": comment})
        log_interaction(db, persona_user_id, persona_user_id, InteractionType.AI_REPLY_GENERATED, row.id, {"aiReply": reply})
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Failed to save comment on persona {persona_user_id}")
        raise

    db.refresh(row)
    return row
