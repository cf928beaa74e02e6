from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional
import logging
import uuid

from models.models import Producer, Farm, FarmHarvest
from dataBase import get_db_session
from endpoints.farms import serialize_farm
from utils.constants import ProducerSortField, SortOrder
from utils.documents import is_cpf, strip_document, validate_document
from utils.pagination import PaginationParams, paginate, build_page
from utils.response import create_response, not_found_response

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateProducerRequest(BaseModel):
    """
    Data needed to register a producer.

    **Attributes**:
    - **name**: Producer's name (3 to 255 characters).
    - **document**: CPF (11 digits) or CNPJ (14 digits), with or without punctuation.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=3, max_length=255)
    document: str = Field(min_length=11, max_length=18)


class UpdateProducerRequest(BaseModel):
    """
    Partial update of a producer. Only the fields sent are changed.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=3, max_length=255)
    document: Optional[str] = Field(None, min_length=11, max_length=18)


PRODUCER_SORT_COLUMNS = {
    ProducerSortField.NAME: Producer.name,
    ProducerSortField.DOCUMENT: Producer.document,
    ProducerSortField.CREATED_AT: Producer.created_at,
}


def serialize_producer(producer: Producer) -> dict:
    return {
        "id": producer.id,
        "name": producer.name,
        "document": producer.document,
        "farms": [serialize_farm(farm) for farm in sorted(producer.farms, key=lambda farm: farm.name)],
        "createdAt": producer.created_at,
        "updatedAt": producer.updated_at,
    }


def producer_query(db: Session):
    return db.query(Producer).options(
        selectinload(Producer.farms).selectinload(Farm.farm_harvests).selectinload(FarmHarvest.crops),
        selectinload(Producer.farms).selectinload(Farm.farm_harvests).selectinload(FarmHarvest.harvest),
    )


def invalid_document_response(document: str):
    message = "Invalid CPF format" if is_cpf(document) else "Invalid CNPJ format"
    logger.warning("%s: %s", message, document)
    return create_response("error", message, status_code=400)


def duplicate_document_response(document: str):
    logger.warning("Producer with document %s already exists", document)
    return create_response("error", f"Producer with document {document} already exists", status_code=409)


@router.post("", status_code=201)
def create_producer(request: CreateProducerRequest, db: Session = Depends(get_db_session)):
    """
    Registers a producer.

    The document is validated as CPF when it has 11 digits and as CNPJ
    otherwise, and is stored without punctuation.

    **Responses**:
    - **201 Created**: Producer created.
    - **400 Bad Request**: Invalid CPF/CNPJ or name.
    - **409 Conflict**: A producer with the same document already exists.

    **Example**:
    {
        "status": "success",
        "message": "Producer created successfully",
        "data": {"id": "...", "name": "João Silva", "document": "11144477735", "farms": []}
    }
    """
    if not validate_document(request.document):
        return invalid_document_response(request.document)

    document = strip_document(request.document)
    if db.query(Producer.id).filter(Producer.document == document).first():
        return duplicate_document_response(document)

    try:
        producer = Producer(name=request.name, document=document)
        db.add(producer)
        db.commit()
        logger.info("Producer created with ID: %s", producer.id)
    except IntegrityError:
        db.rollback()
        return duplicate_document_response(document)
    except Exception as e:
        db.rollback()
        logger.error("Error creating producer: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Error creating producer: {str(e)}")

    producer = producer_query(db).filter(Producer.id == producer.id).one()
    return create_response("success", "Producer created successfully", serialize_producer(producer), status_code=201)


@router.get("")
def list_producers(
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Part of the name or document"),
    sortBy: ProducerSortField = Query(ProducerSortField.NAME),
    sortOrder: SortOrder = Query(SortOrder.ASC),
    db: Session = Depends(get_db_session),
):
    """
    Lists producers with their farms, paginated and sorted.
    """
    query = producer_query(db)
    if search and search.strip():
        conditions = [Producer.name.ilike(f"%{search.strip()}%")]
        digits = strip_document(search)
        if digits:
            conditions.append(Producer.document.like(f"%{digits}%"))
        query = query.filter(or_(*conditions))

    column = PRODUCER_SORT_COLUMNS[sortBy]
    query = query.order_by(column.desc() if sortOrder == SortOrder.DESC else column.asc(), Producer.id)

    producers, total = paginate(query, pagination)
    return create_response(
        "success",
        "Producers retrieved successfully",
        build_page([serialize_producer(producer) for producer in producers], total, pagination),
    )


@router.get("/stats/count")
def count_producers(db: Session = Depends(get_db_session)):
    return create_response("success", "Producer count retrieved", {"count": db.query(Producer).count()})


@router.get("/{id}")
def get_producer(id: uuid.UUID, db: Session = Depends(get_db_session)):
    producer = producer_query(db).filter(Producer.id == str(id)).first()
    if not producer:
        return not_found_response("Producer", id)
    return create_response("success", "Producer retrieved successfully", serialize_producer(producer))


@router.patch("/{id}")
def update_producer(id: uuid.UUID, request: UpdateProducerRequest, db: Session = Depends(get_db_session)):
    """
    Partially updates a producer.

    **Responses**:
    - **200 OK**: Producer updated.
    - **400 Bad Request**: Invalid CPF/CNPJ.
    - **404 Not Found**: Producer not found.
    - **409 Conflict**: Another producer already has the new document.
    """
    producer = db.query(Producer).filter(Producer.id == str(id)).first()
    if not producer:
        return not_found_response("Producer", id)

    document = None
    if request.document is not None:
        if not validate_document(request.document):
            return invalid_document_response(request.document)

        document = strip_document(request.document)
        duplicate = db.query(Producer.id).filter(Producer.document == document, Producer.id != producer.id).first()
        if duplicate:
            return duplicate_document_response(document)
        producer.document = document

    if request.name is not None:
        producer.name = request.name

    try:
        db.commit()
        logger.info("Producer %s updated", producer.id)
    except IntegrityError:
        db.rollback()
        return duplicate_document_response(document)
    except Exception as e:
        db.rollback()
        logger.error("Error updating producer %s: %s", id, str(e))
        raise HTTPException(status_code=500, detail=f"Error updating producer: {str(e)}")

    producer = producer_query(db).filter(Producer.id == str(id)).one()
    return create_response("success", "Producer updated successfully", serialize_producer(producer))


@router.delete("/{id}")
def delete_producer(id: uuid.UUID, db: Session = Depends(get_db_session)):
    """
    Deletes a producer and every farm it owns.
    """
    producer = db.query(Producer).filter(Producer.id == str(id)).first()
    if not producer:
        return not_found_response("Producer", id)

    try:
        db.delete(producer)
        db.commit()
        logger.info("Producer %s deleted", id)
    except Exception as e:
        db.rollback()
        logger.error("Error deleting producer %s: %s", id, str(e))
        raise HTTPException(status_code=500, detail=f"Error deleting producer: {str(e)}")

    return create_response("success", "Producer deleted successfully", {"id": str(id)})
