from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Dict, List, Optional
import logging

from models.models import City
from dataBase import get_db_session
from utils.constants import BrazilianState, CitySortField, SortOrder
from utils.pagination import PaginationParams, paginate, build_page
from utils.response import create_response

logger = logging.getLogger(__name__)

router = APIRouter()

CITY_SORT_COLUMNS = {
    CitySortField.NAME: City.name,
    CitySortField.STATE: City.state,
    CitySortField.IBGE_CODE: City.ibge_code,
}


def serialize_city(city: City) -> dict:
    return {
        "id": city.id,
        "name": city.name,
        "state": city.state,
        "ibgeCode": city.ibge_code,
    }


def city_belongs_to_state(db: Session, city: str, state: str) -> bool:
    """
    Checks that a city exists in the given state, ignoring case.

    When no city of that state has been seeded the check is skipped and the
    city is accepted.

    Args:
        db (Session): Database session.
        city (str): City name as typed by the user.
        state (str): Two-letter state code.

    Returns:
        bool: False only when the state has cities and none of them matches.
    """
    names = [name for (name,) in db.query(City.name).filter(City.state == state).all()]
    if not names:
        logger.warning("No cities seeded for state %s, skipping city check for '%s'", state, city)
        return True

    wanted = city.strip().casefold()
    return any(name.casefold() == wanted for name in names)


def get_cities_grouped_by_state(db: Session) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for name, state in db.query(City.name, City.state).order_by(City.state, City.name).all():
        grouped.setdefault(state, []).append(name)
    return grouped


@router.get("")
def list_cities(
    pagination: PaginationParams = Depends(),
    state: Optional[BrazilianState] = Query(None, description="Filter by state (UF)"),
    search: Optional[str] = Query(None, description="Part of the city name"),
    sortBy: CitySortField = Query(CitySortField.NAME),
    sortOrder: SortOrder = Query(SortOrder.ASC),
    db: Session = Depends(get_db_session),
):
    """
    Lists cities with pagination, optional state filter and name search.

    **Responses**:
    - **200 OK**: {"items": [...], "total", "page", "limit", "totalPages"}
    - **400 Bad Request**: Invalid state, sort field or pagination values.
    """
    query = db.query(City)
    if state:
        query = query.filter(City.state == state.value)
    if search and search.strip():
        query = query.filter(or_(City.name.ilike(f"%{search.strip()}%"), City.ibge_code == search.strip()))

    column = CITY_SORT_COLUMNS[sortBy]
    query = query.order_by(column.desc() if sortOrder == SortOrder.DESC else column.asc(), City.id)

    cities, total = paginate(query, pagination)
    return create_response(
        "success",
        "Cities retrieved successfully",
        build_page([serialize_city(city) for city in cities], total, pagination),
    )


@router.get("/count")
def count_cities(db: Session = Depends(get_db_session)):
    return create_response("success", "City count retrieved", {"count": db.query(City).count()})


@router.get("/all/grouped-by-state")
def list_cities_grouped_by_state(db: Session = Depends(get_db_session)):
    """
    Returns every city name grouped by state code, e.g. {"SP": ["Campinas", ...]}.
    """
    return create_response("success", "Cities grouped by state", get_cities_grouped_by_state(db))


@router.get("/by-state/{state}")
def list_cities_by_state(state: BrazilianState, db: Session = Depends(get_db_session)):
    cities = db.query(City).filter(City.state == state.value).order_by(City.name).all()
    return create_response(
        "success",
        f"Cities of {state.value} retrieved successfully",
        [serialize_city(city) for city in cities],
    )


@router.get("/by-ibge-code/{ibgeCode}")
def get_city_by_ibge_code(ibgeCode: str, db: Session = Depends(get_db_session)):
    city = db.query(City).filter(City.ibge_code == ibgeCode).first()
    if not city:
        logger.warning("City with IBGE code %s not found", ibgeCode)
        return create_response("error", f"City with IBGE code {ibgeCode} not found", status_code=404)
    return create_response("success", "City retrieved successfully", serialize_city(city))
