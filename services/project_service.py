# services/project_service.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from database.models.profile_models import StudentProject
from services.errors import InvalidRequestError

logger = logging.getLogger(__name__)


def project_to_dict(project: StudentProject) -> Dict[str, Any]:
    return {
        "id": project.id,
        "userId": project.user_id,
        "projectType": project.project_type,
        "projectDescription": project.project_description,
        "version": project.version,
        "isLatest": project.is_latest,
        "createdAt": project.created_at,
        "updatedAt": project.updated_at,
    }


def get_latest_project(db: Session, user_id: Optional[int]) -> Optional[StudentProject]:
    if not user_id:
        raise InvalidRequestError("User ID required")
    return (
        db.query(StudentProject)
        .filter(StudentProject.user_id == user_id)
        .filter(StudentProject.is_latest.is_(True))
        .first()
    )


def save_project(db: Session, user_id: Optional[int], project_type: Optional[str],
                 description: Optional[str] = None) -> StudentProject:
    """Every save is a new version; earlier versions are kept but no longer latest."""
    if not user_id or not project_type:
        raise InvalidRequestError("User ID and project type required")

    current = db.query(func.max(StudentProject.version)).filter(StudentProject.user_id == user_id).scalar()
    try:
        (
            db.query(StudentProject)
            .filter(StudentProject.user_id == user_id)
            .update({StudentProject.is_latest: False}, synchronize_session=False)
        )
        project = StudentProject(
            user_id=user_id,
            project_type=project_type,
            project_description=description or "",
            version=(current or 0) + 1,
            is_latest=True,
        )
        db.add(project)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Failed to save project for user {user_id}")
        raise

    db.refresh(project)
    return project
