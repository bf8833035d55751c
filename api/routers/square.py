# api/routers/square.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from api.dependencies.db import get_db
from services import square_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
def read_square(db: Session = Depends(get_db)) -> dict:
    try:
        square = square_service.get_square(db)
    except Exception:
        logger.error("Error loading The Square", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, **square}


@router.post("")
def place_cards(db: Session = Depends(get_db)) -> dict:
    try:
        placed = square_service.initialize_positions(db)
    except Exception:
        logger.error("Error initializing Square positions", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    if not placed:
        return {"success": True, "message": "All users already have positions", "data": []}
    return {"success": True, "message": f"Initialized positions for {len(placed)} users", "data": placed}


@router.post("/reset-positions")
def reset_cards(db: Session = Depends(get_db)) -> dict:
    try:
        count = square_service.reset_positions(db)
    except Exception:
        logger.error("Error resetting Square positions", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, "message": f"Reset positions for {count} users", "count": count}
