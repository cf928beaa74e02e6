from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from models.models import Harvest, FarmHarvest
from dataBase import get_db_session
from utils.response import create_response

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def list_harvests(db: Session = Depends(get_db_session)):
    """
    Lists every harvest ordered by year, with the number of farms linked to it.

    **Example**:
    {
        "status": "success",
        "message": "Harvests retrieved successfully",
        "data": [{"id": "...", "year": "2024", "description": "Safra 2024/2025", "farmCount": 3}]
    }
    """
    rows = (
        db.query(Harvest, func.count(FarmHarvest.id).label("farm_count"))
        .outerjoin(FarmHarvest, FarmHarvest.harvest_id == Harvest.id)
        .group_by(Harvest.id)
        .order_by(Harvest.year)
        .all()
    )
    return create_response("success", "Harvests retrieved successfully", [
        {
            "id": harvest.id,
            "year": harvest.year,
            "description": harvest.description,
            "farmCount": farm_count,
        }
        for harvest, farm_count in rows
    ])
