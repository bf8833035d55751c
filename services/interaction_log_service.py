from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from database.models.profile_models import PersonaCard
from database.models.square_models import PersonaInteractionLog
from database.models.user_model import User


class InteractionType:
    REACTION_ADDED = "reaction_added"
    REACTION_REMOVED = "reaction_removed"
    COMMENT_POSTED = "comment_posted"
    AI_REPLY_GENERATED = "ai_reply_generated"


def log_interaction(db: Session, persona_user_id: int, actor_user_id: int, interaction_type: str,
                    target_id: int = None, details: dict = None) -> PersonaInteractionLog:
    """
    Adds an immutable interaction log entry to the current transaction.
    The caller commits it together with the interaction itself.
    """
    entry = PersonaInteractionLog(
        persona_user_id=persona_user_id,
        actor_user_id=actor_user_id,
        interaction_type=interaction_type,
        target_id=target_id,
        details=details or None,
    )
    db.add(entry)
    return entry


def list_interaction_logs(db: Session, persona_user_id: int, limit: int = 50) -> List[Dict[str, Any]]:
    rows = (
        db.query(PersonaInteractionLog, User.name, PersonaCard.name)
        .outerjoin(User, PersonaInteractionLog.actor_user_id == User.id)
        .outerjoin(PersonaCard, PersonaInteractionLog.actor_user_id == PersonaCard.user_id)
        .filter(PersonaInteractionLog.persona_user_id == persona_user_id)
        .order_by(PersonaInteractionLog.created_at.desc(), PersonaInteractionLog.id.desc())
        .limit(limit)
        .all()
    )

    logs = []
    for log, user_name, persona_name in rows:
        logs.append({
            "id": log.id,
            "interactionType": log.interaction_type,
            "targetId": log.target_id,
            "details": log.details,
            "createdAt": log.created_at,
            "actor": {
                "userId": log.actor_user_id,
                "name": persona_name or user_name,
                "userName": user_name,
            },
        })
    return logs
