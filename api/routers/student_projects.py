# api/routers/student_projects.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_db
from api.models.profile_models import StudentProjectRequest
from services.errors import CourseAppError
from services.project_service import get_latest_project, project_to_dict, save_project

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def read_project(user_id: Optional[int] = Query(default=None, alias="userId"), db: Session = Depends(get_db)) -> dict:
    project = get_latest_project(db, user_id)
    return {"project": project_to_dict(project) if project else None}


@router.post("")
def submit_project(payload: StudentProjectRequest, db: Session = Depends(get_db)) -> dict:
    try:
        project = save_project(db, payload.user_id, payload.project_type, payload.project_description)
    except CourseAppError:
        raise
    except Exception:
        logger.error("Error saving student project", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "project": project_to_dict(project)}
