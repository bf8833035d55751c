# File: api/routers/syllabus.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies.db import get_db
from services.course_info import COURSE_INFO, get_context_for_week, get_week_topic
from services.paper_catalog_service import build_syllabus_schedule

router = APIRouter()


@router.get("")
def get_syllabus(db: Session = Depends(get_db)) -> dict:
    return {
        "success": True,
        "data": {
            "title": COURSE_INFO["title"],
            "overview": COURSE_INFO["course_overview"].strip(),
            "goals": COURSE_INFO["course_goals"].strip(),
            "essence": COURSE_INFO["course_essence"].strip(),
            "schedule": build_syllabus_schedule(db),
        },
    }


@router.get("/weeks/{week}/context")
def get_week_context(week: str) -> dict:
    return {
        "success": True,
        "weekNumber": week,
        "topic": get_week_topic(week),
        "context": get_context_for_week(week),
    }
