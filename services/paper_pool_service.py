# services/paper_pool_service.py
"""Read access to the paper pool, stored selections and student profiles."""
from typing import Any, Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from database.models.paper_model import Paper, PersonalizedPaper
from database.models.profile_models import PersonaCard, StudentSurveyResponse


def list_all_papers(db: Session) -> List[Paper]:
    return db.query(Paper).order_by(Paper.id).all()


def get_existing_selections(db: Session, user_id: int, week_number: str) -> List[PersonalizedPaper]:
    return (
        db.query(PersonalizedPaper)
        .filter(PersonalizedPaper.user_id == user_id)
        .filter(PersonalizedPaper.week_number == week_number)
        .order_by(PersonalizedPaper.relevance_ranking, PersonalizedPaper.id)
        .all()
    )


def _week_sort_key(week_number: str) -> Tuple[int, Any]:
    return (0, int(week_number)) if week_number.isdigit() else (1, week_number)


def list_user_selections(db: Session, user_id: int) -> List[PersonalizedPaper]:
    """Every selection of a user, by week (numerically) then rank."""
    rows = db.query(PersonalizedPaper).filter(PersonalizedPaper.user_id == user_id).all()
    return sorted(rows, key=lambda r: (_week_sort_key(r.week_number), r.relevance_ranking, r.id))


def get_paper_ids_recommended_elsewhere(db: Session, user_id: int, week_number: str) -> Set[str]:
    """Paper ids already given to this user for weeks other than week_number."""
    rows = (
        db.query(PersonalizedPaper.paper_id)
        .filter(PersonalizedPaper.user_id == user_id)
        .filter(PersonalizedPaper.week_number != week_number)
        .all()
    )
    return {row.paper_id for row in rows}


def get_student_profile(db: Session, user_id: int) -> Tuple[Optional[PersonaCard], Optional[StudentSurveyResponse]]:
    persona = db.query(PersonaCard).filter(PersonaCard.user_id == user_id).first()
    survey = db.query(StudentSurveyResponse).filter(StudentSurveyResponse.user_id == user_id).first()
    return persona, survey


def paper_to_dict(paper) -> Dict[str, Any]:
    """Wire shape shared by pool papers and required papers."""
    data = {
        "id": paper.id,
        "paperID": paper.paper_id,
        "title": paper.title,
        "authors": paper.authors,
        "abstract": paper.abstract,
        "tldr": paper.tldr,
        "topics": paper.topics,
        "keywords": paper.keywords,
        "category": paper.category,
        "url": paper.url,
        "doi": paper.doi,
        "openAccessPdf": paper.open_access_pdf,
        "createdAt": paper.created_at,
        "updatedAt": paper.updated_at,
    }
    week_number = getattr(paper, "week_number", None)
    if week_number is not None:
        data["weekNumber"] = week_number
        data["weekTopic"] = paper.week_topic
    return data


def selection_to_dict(row: PersonalizedPaper) -> Dict[str, Any]:
    data = paper_to_dict(row)
    data.update({
        "userId": row.user_id,
        "relevanceRanking": row.relevance_ranking,
        "matchingReason": row.matching_reason,
    })
    return data
