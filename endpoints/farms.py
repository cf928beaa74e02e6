from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, or_
from decimal import Decimal
from typing import List, Optional
import logging
import uuid

from models.models import Farm, Producer, Harvest, FarmHarvest, FarmHarvestCrop
from dataBase import get_db_session
from endpoints.cities import city_belongs_to_state
from utils.constants import BrazilianState, CropType, FarmSortField, SortOrder
from utils.farm_area import validate_farm_area
from utils.pagination import PaginationParams, paginate, build_page
from utils.response import create_response, not_found_response

logger = logging.getLogger(__name__)

router = APIRouter()


class HarvestCropsRequest(BaseModel):
    """
    Crops planted on the farm during one harvest.

    **Attributes**:
    - **year**: Harvest label, e.g. "2024". The harvest is created on first use.
    - **crops**: Crops planted in that harvest (soy, corn, cotton, coffee, sugarcane).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    year: str = Field(min_length=4, max_length=20)
    crops: List[CropType] = []


class CreateFarmRequest(BaseModel):
    """
    Data needed to register a farm.

    **Attributes**:
    - **name**: Farm name (3 to 255 characters).
    - **city**: City name; must exist in **state** when that state's cities are loaded.
    - **state**: Two-letter state code (UF).
    - **totalArea**: Total area in hectares, greater than zero.
    - **arableArea** / **vegetationArea**: Non-negative hectares whose sum cannot exceed **totalArea**.
    - **producerId**: UUID of the owner producer.
    - **harvests**: Optional list of harvests with their crops.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=3, max_length=255)
    city: str = Field(min_length=2, max_length=100)
    state: BrazilianState
    totalArea: float = Field(allow_inf_nan=False)
    arableArea: float = Field(allow_inf_nan=False)
    vegetationArea: float = Field(allow_inf_nan=False)
    producerId: uuid.UUID
    harvests: Optional[List[HarvestCropsRequest]] = None


class UpdateFarmRequest(BaseModel):
    """
    Partial update of a farm. Only the fields sent are changed; the area rule
    is checked against the stored values merged with the new ones.
    Sending **harvests** replaces all the harvests of the farm.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=3, max_length=255)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    state: Optional[BrazilianState] = None
    totalArea: Optional[float] = Field(None, allow_inf_nan=False)
    arableArea: Optional[float] = Field(None, allow_inf_nan=False)
    vegetationArea: Optional[float] = Field(None, allow_inf_nan=False)
    producerId: Optional[uuid.UUID] = None
    harvests: Optional[List[HarvestCropsRequest]] = None


FARM_SORT_COLUMNS = {
    FarmSortField.NAME: Farm.name,
    FarmSortField.TOTAL_AREA: Farm.total_area,
    FarmSortField.ARABLE_AREA: Farm.arable_area,
    FarmSortField.VEGETATION_AREA: Farm.vegetation_area,
    FarmSortField.CITY: Farm.city,
    FarmSortField.STATE: Farm.state,
    FarmSortField.CREATED_AT: Farm.created_at,
}

# Request field -> model attribute for the plain columns
FARM_FIELDS = {
    "name": "name",
    "city": "city",
    "state": "state",
    "totalArea": "total_area",
    "arableArea": "arable_area",
    "vegetationArea": "vegetation_area",
}


def to_area(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def farm_crops(farm: Farm) -> List[str]:
    """
    Flattens the crops of every harvest of the farm, without repetitions.
    """
    crops = {crop.crop_type for farm_harvest in farm.farm_harvests for crop in farm_harvest.crops}
    return sorted(crops)


def serialize_farm(farm: Farm) -> dict:
    harvests = sorted(farm.farm_harvests, key=lambda fh: fh.harvest.year)
    return {
        "id": farm.id,
        "name": farm.name,
        "city": farm.city,
        "state": farm.state,
        "totalArea": farm.total_area,
        "arableArea": farm.arable_area,
        "vegetationArea": farm.vegetation_area,
        "producerId": farm.producer_id,
        "crops": farm_crops(farm),
        "harvests": [
            {
                "year": fh.harvest.year,
                "description": fh.harvest.description,
                "crops": sorted({crop.crop_type for crop in fh.crops}),
            }
            for fh in harvests
        ],
        "createdAt": farm.created_at,
        "updatedAt": farm.updated_at,
    }


def farm_query(db: Session):
    return db.query(Farm).options(
        selectinload(Farm.farm_harvests).selectinload(FarmHarvest.crops),
        selectinload(Farm.farm_harvests).selectinload(FarmHarvest.harvest),
    )


def get_or_create_harvest(db: Session, year: str) -> Harvest:
    year = year.strip()
    harvest = db.query(Harvest).filter(Harvest.year == year).first()
    if harvest:
        return harvest

    description = f"Safra {year}/{int(year) + 1}" if year.isdigit() else f"Safra {year}"
    harvest = Harvest(year=year, description=description)
    db.add(harvest)
    db.flush()
    logger.info("Harvest %s created", year)
    return harvest


def apply_harvests(db: Session, farm: Farm, harvests: List[HarvestCropsRequest]) -> None:
    """
    Replaces the harvests (and their crops) linked to the farm.
    """
    farm.farm_harvests.clear()
    db.flush()

    merged = {}
    for item in harvests:
        merged.setdefault(item.year, set()).update(crop.value for crop in item.crops)

    for year, crops in merged.items():
        harvest = get_or_create_harvest(db, year)
        farm_harvest = FarmHarvest(harvest=harvest)
        farm_harvest.crops = [FarmHarvestCrop(crop_type=crop) for crop in sorted(crops)]
        farm.farm_harvests.append(farm_harvest)


def check_city(db: Session, city: str, state: str):
    if not city_belongs_to_state(db, city, state):
        logger.warning("City '%s' does not exist in state '%s'", city, state)
        return create_response("error", f"City '{city}' does not exist in state '{state}'", status_code=400)
    return None


@router.post("", status_code=201)
def create_farm(request: CreateFarmRequest, db: Session = Depends(get_db_session)):
    """
    Registers a farm for an existing producer.

    **Responses**:
    - **201 Created**: Farm created.
    - **400 Bad Request**: Invalid areas, or the city does not belong to the state.
    - **404 Not Found**: The producer does not exist.
    """
    producer_id = str(request.producerId)
    if not db.query(Producer.id).filter(Producer.id == producer_id).first():
        return not_found_response("Producer", producer_id)

    total_area = to_area(request.totalArea)
    arable_area = to_area(request.arableArea)
    vegetation_area = to_area(request.vegetationArea)
    area_check = validate_farm_area(total_area, arable_area, vegetation_area)
    if not area_check.is_valid:
        logger.warning("Invalid farm areas: %s", area_check.error)
        return create_response("error", area_check.error, status_code=400)

    city_error = check_city(db, request.city, request.state.value)
    if city_error:
        return city_error

    try:
        farm = Farm(
            name=request.name,
            city=request.city,
            state=request.state.value,
            total_area=total_area,
            arable_area=arable_area,
            vegetation_area=vegetation_area,
            producer_id=producer_id,
        )
        db.add(farm)
        if request.harvests:
            apply_harvests(db, farm, request.harvests)
        db.commit()
        logger.info("Farm created with ID: %s", farm.id)
    except Exception as e:
        db.rollback()
        logger.error("Error creating farm: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Error creating farm: {str(e)}")

    farm = farm_query(db).filter(Farm.id == farm.id).one()
    return create_response("success", "Farm created successfully", serialize_farm(farm), status_code=201)


@router.get("")
def list_farms(
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Part of the farm or city name"),
    state: Optional[BrazilianState] = Query(None),
    city: Optional[str] = Query(None),
    producerId: Optional[uuid.UUID] = Query(None),
    sortBy: FarmSortField = Query(FarmSortField.NAME),
    sortOrder: SortOrder = Query(SortOrder.ASC),
    db: Session = Depends(get_db_session),
):
    """
    Lists farms with pagination, filters and sorting.
    """
    query = farm_query(db)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Farm.name.ilike(pattern), Farm.city.ilike(pattern)))
    if state:
        query = query.filter(Farm.state == state.value)
    if city and city.strip():
        query = query.filter(func.lower(Farm.city) == city.strip().lower())
    if producerId:
        query = query.filter(Farm.producer_id == str(producerId))

    column = FARM_SORT_COLUMNS[sortBy]
    query = query.order_by(column.desc() if sortOrder == SortOrder.DESC else column.asc(), Farm.id)

    farms, total = paginate(query, pagination)
    return create_response(
        "success",
        "Farms retrieved successfully",
        build_page([serialize_farm(farm) for farm in farms], total, pagination),
    )


@router.get("/stats/total-area")
def get_total_area(db: Session = Depends(get_db_session)):
    total = db.query(func.coalesce(func.sum(Farm.total_area), 0)).scalar()
    return create_response("success", "Total area retrieved", {"totalArea": float(total or 0)})


@router.get("/stats/by-state")
def count_farms_by_state(db: Session = Depends(get_db_session)):
    """
    Number of farms per state, largest first.
    """
    rows = (
        db.query(Farm.state, func.count(Farm.id).label("count"))
        .group_by(Farm.state)
        .order_by(func.count(Farm.id).desc(), Farm.state)
        .all()
    )
    return create_response("success", "Farms by state retrieved", [{"state": state, "count": count} for state, count in rows])


@router.get("/stats/land-use")
def get_land_use(db: Session = Depends(get_db_session)):
    arable, vegetation = db.query(
        func.coalesce(func.sum(Farm.arable_area), 0),
        func.coalesce(func.sum(Farm.vegetation_area), 0),
    ).one()
    return create_response("success", "Land use retrieved", {
        "arableArea": float(arable or 0),
        "vegetationArea": float(vegetation or 0),
    })


def crops_distribution(db: Session) -> List[dict]:
    """
    Counts distinct farms growing each crop, across every harvest.
    """
    rows = (
        db.query(FarmHarvestCrop.crop_type, func.count(func.distinct(FarmHarvest.farm_id)).label("count"))
        .join(FarmHarvest, FarmHarvestCrop.farm_harvest_id == FarmHarvest.id)
        .group_by(FarmHarvestCrop.crop_type)
        .order_by(func.count(func.distinct(FarmHarvest.farm_id)).desc(), FarmHarvestCrop.crop_type)
        .all()
    )
    return [{"cropType": crop_type, "count": count} for crop_type, count in rows]


@router.get("/stats/crops-distribution")
def get_crops_distribution(db: Session = Depends(get_db_session)):
    return create_response("success", "Crops distribution retrieved", crops_distribution(db))


@router.get("/producer/{producerId}")
def list_farms_by_producer(producerId: uuid.UUID, db: Session = Depends(get_db_session)):
    producer_id = str(producerId)
    if not db.query(Producer.id).filter(Producer.id == producer_id).first():
        return not_found_response("Producer", producer_id)

    farms = farm_query(db).filter(Farm.producer_id == producer_id).order_by(Farm.name).all()
    return create_response("success", "Farms retrieved successfully", [serialize_farm(farm) for farm in farms])


@router.get("/state/{state}")
def list_farms_by_state(state: BrazilianState, db: Session = Depends(get_db_session)):
    farms = farm_query(db).filter(Farm.state == state.value).order_by(Farm.name).all()
    return create_response("success", "Farms retrieved successfully", [serialize_farm(farm) for farm in farms])


@router.get("/{id}")
def get_farm(id: uuid.UUID, db: Session = Depends(get_db_session)):
    farm = farm_query(db).filter(Farm.id == str(id)).first()
    if not farm:
        return not_found_response("Farm", id)
    return create_response("success", "Farm retrieved successfully", serialize_farm(farm))


@router.patch("/{id}")
def update_farm(id: uuid.UUID, request: UpdateFarmRequest, db: Session = Depends(get_db_session)):
    """
    Partially updates a farm.

    **Responses**:
    - **200 OK**: Farm updated.
    - **400 Bad Request**: The merged areas break the area rule, or city/state mismatch.
    - **404 Not Found**: Farm or new producer not found.
    """
    farm = farm_query(db).filter(Farm.id == str(id)).first()
    if not farm:
        return not_found_response("Farm", id)

    changes = request.model_dump(exclude_unset=True)

    if changes.get("producerId") is not None:
        producer_id = str(changes["producerId"])
        if not db.query(Producer.id).filter(Producer.id == producer_id).first():
            return not_found_response("Producer", producer_id)

    # Rounded patch values merged over the stored ones
    for field in ("totalArea", "arableArea", "vegetationArea"):
        if changes.get(field) is not None:
            changes[field] = to_area(changes[field])
    total = changes.get("totalArea") if changes.get("totalArea") is not None else farm.total_area
    arable = changes.get("arableArea") if changes.get("arableArea") is not None else farm.arable_area
    vegetation = changes.get("vegetationArea") if changes.get("vegetationArea") is not None else farm.vegetation_area
    area_check = validate_farm_area(total, arable, vegetation)
    if not area_check.is_valid:
        logger.warning("Invalid farm areas for farm %s: %s", farm.id, area_check.error)
        return create_response("error", area_check.error, status_code=400)

    new_city = changes.get("city") or farm.city
    new_state = changes["state"].value if changes.get("state") else farm.state
    if "city" in changes or "state" in changes:
        city_error = check_city(db, new_city, new_state)
        if city_error:
            return city_error

    try:
        for field, attribute in FARM_FIELDS.items():
            value = changes.get(field)
            if value is None:
                continue
            if field == "state":
                value = value.value
            setattr(farm, attribute, value)

        if changes.get("producerId") is not None:
            farm.producer_id = str(changes["producerId"])

        if request.harvests is not None:
            apply_harvests(db, farm, request.harvests)

        db.commit()
        logger.info("Farm %s updated", farm.id)
    except Exception as e:
        db.rollback()
        logger.error("Error updating farm %s: %s", id, str(e))
        raise HTTPException(status_code=500, detail=f"Error updating farm: {str(e)}")

    db.expire_all()
    farm = farm_query(db).filter(Farm.id == str(id)).one()
    return create_response("success", "Farm updated successfully", serialize_farm(farm))


@router.delete("/{id}")
def delete_farm(id: uuid.UUID, db: Session = Depends(get_db_session)):
    """
    Deletes a farm together with its harvest links and crops.
    """
    farm = db.query(Farm).filter(Farm.id == str(id)).first()
    if not farm:
        return not_found_response("Farm", id)

    try:
        db.delete(farm)
        db.commit()
        logger.info("Farm %s deleted", id)
    except Exception as e:
        db.rollback()
        logger.error("Error deleting farm %s: %s", id, str(e))
        raise HTTPException(status_code=500, detail=f"Error deleting farm: {str(e)}")

    return create_response("success", "Farm deleted successfully", {"id": str(id)})
