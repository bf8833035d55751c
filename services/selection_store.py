# services/selection_store.py
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models.paper_model import PersonalizedPaper
from services.errors import StorageError

logger = logging.getLogger(__name__)


def replace_selections(
    db: Session,
    user_id: int,
    week_number: str,
    entries: List[Dict[str, Any]],
) -> List[PersonalizedPaper]:
    """
    Replace every selection stored for (user_id, week_number) with `entries`.

    Delete and insert share one transaction: on failure the previous rows
    survive and StorageError is raised. The delete runs even when `entries`
    is empty. Each entry holds PersonalizedPaper column values other than
    user_id and week_number.
    """
    rows = [
        PersonalizedPaper(user_id=user_id, week_number=week_number, **entry)
        for entry in entries
    ]

    try:
        deleted = (
            db.query(PersonalizedPaper)
            .filter(PersonalizedPaper.user_id == user_id)
            .filter(PersonalizedPaper.week_number == week_number)
            .delete(synchronize_session=False)
        )
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to replace personalized papers for user {user_id}, week {week_number}: {e}", exc_info=True)
        raise StorageError("Failed to save personalized papers") from e

    for row in rows:
        db.refresh(row)

    logger.info(f"Replaced {deleted} personalized papers with {len(rows)} for user {user_id}, week {week_number}")
    return sorted(rows, key=lambda r: (r.relevance_ranking, r.id))
