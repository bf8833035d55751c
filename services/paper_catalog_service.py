# services/paper_catalog_service.py
"""Browsing the paper pool and the weekly required readings."""
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.models.paper_model import Paper, RequiredPaper
from services.course_info import list_weeks
from services.paper_pool_service import paper_to_dict


def _like(column, term: str):
    return column.ilike(f"%{term}%")


def search_papers(db: Session, topic: Optional[str] = None, keyword: Optional[str] = None,
                  author: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[Paper]:
    query = db.query(Paper)
    if topic:
        query = query.filter(or_(_like(Paper.topics, topic), _like(Paper.title, topic), _like(Paper.keywords, topic)))
    if keyword:
        query = query.filter(or_(_like(Paper.keywords, keyword), _like(Paper.title, keyword), _like(Paper.abstract, keyword)))
    if author:
        query = query.filter(_like(Paper.authors, author))
    return query.order_by(Paper.id).limit(limit).offset(offset).all()


def get_paper(db: Session, paper_pk: int) -> Optional[Paper]:
    return db.query(Paper).filter(Paper.id == paper_pk).first()


def _split_values(rows) -> List[str]:
    values = set()
    for (raw,) in rows:
        if raw:
            values.update(v.strip() for v in raw.split(",") if v.strip())
    return sorted(values)


def list_topics(db: Session) -> List[str]:
    return _split_values(db.query(Paper.topics).filter(Paper.topics.isnot(None)).all())


def list_keywords(db: Session) -> List[str]:
    return _split_values(db.query(Paper.keywords).filter(Paper.keywords.isnot(None)).all())


def list_required_papers(db: Session, week_number: Optional[str] = None,
                         limit: int = 50, offset: int = 0) -> Dict[str, Any]:
    query = db.query(RequiredPaper)
    if week_number:
        query = query.filter(RequiredPaper.week_number == week_number)
    papers = query.order_by(RequiredPaper.id).limit(limit).offset(offset).all()
    total = db.query(RequiredPaper).count()

    result = {
        "papers": [paper_to_dict(p) for p in papers],
        "count": len(papers),
        "total": total,
        "limit": limit,
        "offset": offset,
    }
    if week_number:
        result["weekNumber"] = week_number
    return result


def build_syllabus_schedule(db: Session) -> List[Dict[str, Any]]:
    """Weekly schedule with each week's required readings attached."""
    by_week: Dict[str, List[Dict[str, Any]]] = {}
    for paper in db.query(RequiredPaper).order_by(RequiredPaper.id).all():
        by_week.setdefault(paper.week_number, []).append(paper_to_dict(paper))

    schedule = []
    for week in list_weeks():
        week["requiredPapers"] = by_week.get(week["weekNumber"], [])
        schedule.append(week)
    return schedule
