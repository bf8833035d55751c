# api/routers/personalized_papers.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_completion_client, get_db
from api.models.paper_models import PersonalizedPaperRequest
from services.errors import CourseAppError
from services.llm_service import CompletionClient, LLMGenerationError
from services.personalized_paper_service import generate_personalized_papers, get_personalized_papers

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def list_personalized_papers(
    user_id: Optional[int] = Query(default=None, alias="userId"),
    week: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> dict:
    try:
        papers = get_personalized_papers(db, user_id, week)
    except CourseAppError:
        raise
    except Exception:
        logger.error("Error fetching personalized papers", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "papers": papers, "count": len(papers)}


@router.post("")
def create_personalized_papers(
    payload: PersonalizedPaperRequest,
    db: Session = Depends(get_db),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> dict:
    logger.info(f"Personalized papers requested: user={payload.user_id} week={payload.week_number} force={payload.force_regenerate}")
    try:
        result = generate_personalized_papers(
            db,
            completion_client,
            payload.user_id,
            payload.week_number,
            force_regenerate=payload.force_regenerate,
        )
    except (CourseAppError, LLMGenerationError):
        raise
    except Exception:
        logger.error("Error generating personalized papers", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "message": result["message"], "papers": result["papers"]}
