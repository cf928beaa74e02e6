from sqlalchemy import Column, String, Numeric, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime
import uuid
import pytz

Base = declarative_base()


def get_utc_now():
    return datetime.now(pytz.utc)


def generate_uuid():
    return str(uuid.uuid4())


# Producers own farms; farms own their harvest links and crops
class Producer(Base):
    """
    Database model for a rural producer.

    Attributes:
    ----------
    id : str
        Unique identifier (UUID, primary key).
    name : str
        Producer's name.
    document : str
        CPF (11 digits) or CNPJ (14 digits), stored without punctuation.
    created_at : datetime
        Creation timestamp (UTC).
    updated_at : datetime
        Last update timestamp (UTC).
    """
    __tablename__ = 'producers'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    document = Column(String(14), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)

    # Relationships
    farms = relationship("Farm", back_populates="producer", cascade="all, delete-orphan", passive_deletes=True)


class Farm(Base):
    """
    Database model for a farm owned by a producer.

    Attributes:
    ----------
    id : str
        Unique identifier (UUID, primary key).
    name : str
        Farm name.
    city : str
        City where the farm is located.
    state : str
        Two-letter state code (UF).
    total_area : Numeric
        Total area in hectares.
    arable_area : Numeric
        Arable area in hectares.
    vegetation_area : Numeric
        Vegetation area in hectares.
    producer_id : str
        Owner producer (relation with Producer).
    """
    __tablename__ = 'farms'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False, index=True)
    total_area = Column(Numeric(10, 2), nullable=False)
    arable_area = Column(Numeric(10, 2), nullable=False)
    vegetation_area = Column(Numeric(10, 2), nullable=False)
    producer_id = Column(String(36), ForeignKey('producers.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)

    # Relationships
    producer = relationship("Producer", back_populates="farms")
    farm_harvests = relationship("FarmHarvest", back_populates="farm", cascade="all, delete-orphan", passive_deletes=True)


class Harvest(Base):
    """
    Database model for a harvest season.

    Attributes:
    ----------
    id : str
        Unique identifier (UUID, primary key).
    year : str
        Harvest label, e.g. "2024".
    description : str
        Human readable description, e.g. "Safra 2024/2025".
    """
    __tablename__ = 'harvests'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    year = Column(String(20), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)

    # Relationships
    farm_harvests = relationship("FarmHarvest", back_populates="harvest")


class FarmHarvest(Base):
    """
    Link between a farm and a harvest, owning the crops planted in it.

    Attributes:
    ----------
    id : str
        Unique identifier (UUID, primary key).
    farm_id : str
        Farm (relation with Farm).
    harvest_id : str
        Harvest (relation with Harvest).
    """
    __tablename__ = 'farm_harvests'
    __table_args__ = (UniqueConstraint('farm_id', 'harvest_id', name='uq_farm_harvest'),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    farm_id = Column(String(36), ForeignKey('farms.id', ondelete='CASCADE'), nullable=False, index=True)
    harvest_id = Column(String(36), ForeignKey('harvests.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)

    # Relationships
    farm = relationship("Farm", back_populates="farm_harvests")
    harvest = relationship("Harvest", back_populates="farm_harvests")
    crops = relationship("FarmHarvestCrop", back_populates="farm_harvest", cascade="all, delete-orphan", passive_deletes=True)


class FarmHarvestCrop(Base):
    """
    Crop planted on a farm during a harvest.

    Attributes:
    ----------
    id : str
        Unique identifier (UUID, primary key).
    farm_harvest_id : str
        Farm harvest (relation with FarmHarvest).
    crop_type : str
        One of the CropType values.
    """
    __tablename__ = 'farm_harvest_crops'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    farm_harvest_id = Column(String(36), ForeignKey('farm_harvests.id', ondelete='CASCADE'), nullable=False, index=True)
    crop_type = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)

    # Relationships
    farm_harvest = relationship("FarmHarvest", back_populates="crops")


class City(Base):
    """
    Brazilian municipality, seeded from the IBGE localities API.

    Attributes:
    ----------
    id : str
        Unique identifier (UUID, primary key).
    name : str
        City name.
    state : str
        Two-letter state code (UF).
    ibge_code : str
        Seven digit IBGE municipality code.
    """
    __tablename__ = 'cities'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    state = Column(String(2), nullable=False, index=True)
    ibge_code = Column(String(7), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=get_utc_now, onupdate=get_utc_now)
