# services/square_service.py
"""
The Square: every student's persona card laid out on a fixed grid.
"""
import math
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from database.models.profile_models import PersonaCard, PresentablePersona
from database.models.square_models import SquareCardPosition
from database.models.user_model import User
from services.persona_service import DEFAULT_AVATAR_COLOR

logger = logging.getLogger(__name__)

CONTAINER_WIDTH = 1400
CARD_WIDTH = 364
CARD_HEIGHT = 240
PADDING_X = 40
PADDING_Y = 40
MARGIN_LEFT = 40
MARGIN_TOP = 40
MARGIN_RIGHT = 40
MARGIN_BOTTOM = 40


def grid_columns() -> int:
    # cols * CARD_WIDTH + (cols - 1) * PADDING_X must fit the usable width
    available_width = CONTAINER_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
    return max(1, (available_width + PADDING_X) // (CARD_WIDTH + PADDING_X))


def generate_grid_positions(count: int, start: int = 0) -> List[Dict[str, int]]:
    """Positions for `count` cards, filling grid slots from index `start`."""
    cols = grid_columns()
    positions = []
    for i in range(start, start + count):
        row, col = divmod(i, cols)
        positions.append({
            "x": MARGIN_LEFT + col * (CARD_WIDTH + PADDING_X),
            "y": MARGIN_TOP + row * (CARD_HEIGHT + PADDING_Y),
            "rotation": 0,
        })
    return positions


def calculate_grid_height(user_count: int) -> int:
    rows = math.ceil(user_count / grid_columns())
    return MARGIN_TOP + rows * (CARD_HEIGHT + PADDING_Y) + MARGIN_BOTTOM


def _card_holders(db: Session):
    """Non-guest users with a named persona card, in user id order."""
    return (
        db.query(User, PersonaCard)
        .join(PersonaCard, PersonaCard.user_id == User.id)
        .filter(User.is_guest.is_(False))
        .filter(PersonaCard.name.isnot(None))
        .filter(PersonaCard.name != "")
        .order_by(User.id)
        .all()
    )


def get_square(db: Session) -> Dict[str, Any]:
    affiliations = {p.user_id: p.affiliation for p in db.query(PresentablePersona).all()}
    positions = {p.user_id: p for p in db.query(SquareCardPosition).all()}

    entries = []
    seen = set()
    for user, card in _card_holders(db):
        if user.id in seen:
            continue
        seen.add(user.id)
        position = positions.get(user.id)
        entries.append({
            "userId": user.id,
            "userName": user.name,
            "persona": {
                "name": card.name or user.name,
                "affiliation": affiliations.get(user.id) or "Student",
                "academicBackground": card.academic_background,
                "researchInterest": card.research_interest,
                "recentReading": card.recent_reading,
                "learningGoal": card.learning_goal,
                "avatarColor": card.avatar_color or DEFAULT_AVATAR_COLOR,
                "introMessage": card.intro_message,
                "academicBackgroundSubBullets": card.academic_background_sub_bullets or [],
                "researchInterestSubBullets": card.research_interest_sub_bullets or [],
                "recentReadingSubBullets": card.recent_reading_sub_bullets or [],
                "learningGoalSubBullets": card.learning_goal_sub_bullets or [],
            },
            "position": {
                "x": position.x_position if position else None,
                "y": position.y_position if position else None,
                "rotation": position.rotation if position else 0,
                "zIndex": position.z_index if position else 0,
            },
        })

    return {
        "data": entries,
        "message": f"Found {len(entries)} users in The Square",
        "gridHeight": calculate_grid_height(len(entries)),
    }


def free_grid_positions(count: int, occupied) -> List[Dict[str, int]]:
    """The first `count` grid slots whose (x, y) is not in `occupied`."""
    positions = []
    index = 0
    while len(positions) < count:
        slot = generate_grid_positions(1, start=index)[0]
        if (slot["x"], slot["y"]) not in occupied:
            positions.append(slot)
        index += 1
    return positions


def _insert_positions(db: Session, user_ids: List[int], positions: List[Dict[str, int]]) -> List[SquareCardPosition]:
    rows = [
        SquareCardPosition(user_id=user_id, x_position=pos["x"], y_position=pos["y"], rotation=0, z_index=0)
        for user_id, pos in zip(user_ids, positions)
    ]
    db.add_all(rows)
    return rows


def initialize_positions(db: Session) -> List[Dict[str, int]]:
    """Place card holders that have no position yet. Existing cards stay put; new ones take free slots."""
    existing = db.query(SquareCardPosition).all()
    placed = {row.user_id for row in existing}
    occupied = {(row.x_position, row.y_position) for row in existing}
    pending = [user.id for user, _ in _card_holders(db) if user.id not in placed]
    if not pending:
        return []

    try:
        rows = _insert_positions(db, pending, free_grid_positions(len(pending), occupied))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to initialize Square positions")
        raise

    return [
        {"userId": r.user_id, "xPosition": r.x_position, "yPosition": r.y_position, "rotation": r.rotation, "zIndex": r.z_index}
        for r in rows
    ]


def reset_positions(db: Session) -> int:
    """Re-lay every card holder on the grid. Returns the number placed."""
    user_ids = [user.id for user, _ in _card_holders(db)]
    if not user_ids:
        return 0

    try:
        db.query(SquareCardPosition).delete(synchronize_session=False)
        rows = _insert_positions(db, user_ids, generate_grid_positions(len(user_ids)))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to reset Square positions")
        raise

    logger.info(f"✅ Reset positions for {len(rows)} users")
    return len(rows)
