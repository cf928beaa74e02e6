from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime
from decimal import Decimal
import logging
import pytz

from models.models import Farm, Producer
from dataBase import get_db_session
from endpoints.cities import get_cities_grouped_by_state
from endpoints.farms import crops_distribution
from utils.response import create_response

logger = logging.getLogger(__name__)

router = APIRouter()

TOP_RECORDS_LIMIT = 5
TOP_CITIES_LIMIT = 10


def percentage(part, whole) -> float:
    if not whole:
        return 0.0
    return round(float(part) / float(whole) * 100, 2)


def ratio(numerator, denominator) -> float:
    if not denominator:
        return 0.0
    return round(float(numerator) / float(denominator), 2)


def build_dashboard_stats(db: Session) -> dict:
    """
    Aggregates totals, averages, distributions and rankings over all farms.

    An empty database yields zeros and empty lists.

    Args:
        db (Session): Database session.

    Returns:
        dict: totals, averages, distributions, topRecords, landUse and timestamp.
    """
    total_farms = db.query(func.count(Farm.id)).scalar() or 0
    total_producers = db.query(func.count(Producer.id)).scalar() or 0

    total_area, arable_area, vegetation_area = db.query(
        func.coalesce(func.sum(Farm.total_area), 0),
        func.coalesce(func.sum(Farm.arable_area), 0),
        func.coalesce(func.sum(Farm.vegetation_area), 0),
    ).one()
    total_area = Decimal(str(total_area or 0))
    arable_area = Decimal(str(arable_area or 0))
    vegetation_area = Decimal(str(vegetation_area or 0))
    unused_area = total_area - arable_area - vegetation_area

    by_state = (
        db.query(Farm.state, func.count(Farm.id))
        .group_by(Farm.state)
        .order_by(func.count(Farm.id).desc(), Farm.state)
        .all()
    )

    by_city = (
        db.query(Farm.city, Farm.state, func.count(Farm.id))
        .group_by(Farm.city, Farm.state)
        .order_by(func.count(Farm.id).desc(), Farm.city)
        .limit(TOP_CITIES_LIMIT)
        .all()
    )

    producers_by_state = (
        db.query(Farm.state, func.count(func.distinct(Farm.producer_id)))
        .group_by(Farm.state)
        .order_by(func.count(func.distinct(Farm.producer_id)).desc(), Farm.state)
        .all()
    )

    largest_farms = (
        db.query(Farm, Producer.name)
        .join(Producer, Farm.producer_id == Producer.id)
        .order_by(Farm.total_area.desc(), Farm.name)
        .limit(TOP_RECORDS_LIMIT)
        .all()
    )

    farm_count = func.count(Farm.id)
    farm_area = func.coalesce(func.sum(Farm.total_area), 0)
    top_producers = (
        db.query(Producer.id, Producer.name, farm_count.label("farm_count"), farm_area.label("total_area"))
        .join(Farm, Farm.producer_id == Producer.id)
        .group_by(Producer.id, Producer.name)
        .order_by(farm_count.desc(), farm_area.desc(), Producer.name)
        .limit(TOP_RECORDS_LIMIT)
        .all()
    )

    return {
        "totals": {
            "farms": total_farms,
            "producers": total_producers,
            "totalAreaHectares": total_area,
            "arableAreaHectares": arable_area,
            "vegetationAreaHectares": vegetation_area,
            "unusedAreaHectares": unused_area,
        },
        "averages": {
            "areaPerFarm": ratio(total_area, total_farms),
            "farmsPerProducer": ratio(total_farms, total_producers),
            "arablePercentage": percentage(arable_area, total_area),
            "vegetationPercentage": percentage(vegetation_area, total_area),
            "unusedPercentage": percentage(unused_area, total_area),
        },
        "distributions": {
            "byState": [{"state": state, "count": count} for state, count in by_state],
            "byCrop": crops_distribution(db),
            "byCityTop10": [{"city": city, "state": state, "count": count} for city, state, count in by_city],
            "producersByState": [{"state": state, "count": count} for state, count in producers_by_state],
        },
        "topRecords": {
            "largestFarms": [
                {
                    "id": farm.id,
                    "name": farm.name,
                    "city": farm.city,
                    "state": farm.state,
                    "totalArea": farm.total_area,
                    "producerName": producer_name,
                }
                for farm, producer_name in largest_farms
            ],
            "mostProductiveProducers": [
                {
                    "id": producer_id,
                    "name": name,
                    "farmCount": count,
                    "totalArea": float(area or 0),
                }
                for producer_id, name, count, area in top_producers
            ],
        },
        "landUse": {
            "arableArea": arable_area,
            "vegetationArea": vegetation_area,
        },
        "timestamp": datetime.now(pytz.utc).isoformat(),
    }


@router.get("/stats")
def get_dashboard_stats(db: Session = Depends(get_db_session)):
    stats = build_dashboard_stats(db)
    logger.info("Dashboard stats computed for %s farms", stats["totals"]["farms"])
    return create_response("success", "Dashboard statistics retrieved", stats)


@router.get("/cities-by-state")
def get_cities_by_state(db: Session = Depends(get_db_session)):
    return create_response("success", "Cities grouped by state", get_cities_grouped_by_state(db))
