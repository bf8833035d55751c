# api/routers/papers.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_db
from services import paper_catalog_service as catalog
from services.paper_pool_service import paper_to_dict

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/papers")
def list_papers(
    action: Optional[str] = None,
    topic: Optional[str] = None,
    keyword: Optional[str] = None,
    author: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> dict:
    try:
        if action == "topics":
            return {"topics": catalog.list_topics(db)}
        if action == "keywords":
            return {"keywords": catalog.list_keywords(db)}

        papers = catalog.search_papers(
            db,
            topic=topic,
            keyword=keyword or search,
            author=author,
            limit=limit,
            offset=offset,
        )
    except Exception:
        logger.error("Error in papers API", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"papers": [paper_to_dict(p) for p in papers], "count": len(papers), "limit": limit, "offset": offset}


@router.get("/papers/{paper_pk}")
def get_paper(paper_pk: int, db: Session = Depends(get_db)) -> dict:
    paper = catalog.get_paper(db, paper_pk)
    if paper is None:
        raise HTTPException(status_code=404, detail="Paper not found")
    return {"paper": paper_to_dict(paper)}


@router.get("/required-papers")
def list_required_papers(
    week: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> dict:
    try:
        result = catalog.list_required_papers(db, week_number=week, limit=limit, offset=offset)
    except Exception:
        logger.error("Error fetching required papers", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch required papers")

    return {"success": True, **result}
