"""
Demo data for local environments: producers with valid CPF/CNPJ, farms with
consistent areas spread over the agricultural states, and harvests with crops.
"""
import logging
import random
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

import pytz
from sqlalchemy.orm import Session

from models.models import City, Farm, FarmHarvest, FarmHarvestCrop, Harvest, Producer
from utils.config import SEED_DEMO_PRODUCERS, SEED_DEMO_FARMS, SEED_DEMO_HARVEST_YEARS
from utils.constants import BrazilianState, CropType
from utils.documents import generate_cpf, generate_cnpj
from utils.farm_area import assert_valid_farm_area

logger = logging.getLogger(__name__)

# Share of farms per state, by agricultural weight
STATE_WEIGHTS = {
    BrazilianState.MT: 0.15,
    BrazilianState.PR: 0.12,
    BrazilianState.RS: 0.12,
    BrazilianState.GO: 0.10,
    BrazilianState.MS: 0.08,
    BrazilianState.SP: 0.08,
    BrazilianState.MG: 0.07,
    BrazilianState.BA: 0.06,
    BrazilianState.SC: 0.05,
    BrazilianState.MA: 0.04,
    BrazilianState.TO: 0.03,
    BrazilianState.PI: 0.03,
    BrazilianState.PA: 0.02,
    BrazilianState.RO: 0.02,
    BrazilianState.CE: 0.01,
    BrazilianState.PE: 0.01,
    BrazilianState.SE: 0.005,
    BrazilianState.AL: 0.005,
    BrazilianState.RN: 0.005,
    BrazilianState.PB: 0.005,
    BrazilianState.ES: 0.005,
    BrazilianState.RJ: 0.005,
    BrazilianState.DF: 0.003,
    BrazilianState.AM: 0.002,
    BrazilianState.AC: 0.001,
    BrazilianState.RR: 0.001,
    BrazilianState.AP: 0.001,
}

# Used when the state has no seeded cities
STATE_CAPITALS = {
    BrazilianState.AC: "Rio Branco",
    BrazilianState.AL: "Maceió",
    BrazilianState.AP: "Macapá",
    BrazilianState.AM: "Manaus",
    BrazilianState.BA: "Salvador",
    BrazilianState.CE: "Fortaleza",
    BrazilianState.DF: "Brasília",
    BrazilianState.ES: "Vitória",
    BrazilianState.GO: "Goiânia",
    BrazilianState.MA: "São Luís",
    BrazilianState.MT: "Cuiabá",
    BrazilianState.MS: "Campo Grande",
    BrazilianState.MG: "Belo Horizonte",
    BrazilianState.PA: "Belém",
    BrazilianState.PB: "João Pessoa",
    BrazilianState.PR: "Curitiba",
    BrazilianState.PE: "Recife",
    BrazilianState.PI: "Teresina",
    BrazilianState.RJ: "Rio de Janeiro",
    BrazilianState.RN: "Natal",
    BrazilianState.RS: "Porto Alegre",
    BrazilianState.RO: "Porto Velho",
    BrazilianState.RR: "Boa Vista",
    BrazilianState.SC: "Florianópolis",
    BrazilianState.SP: "São Paulo",
    BrazilianState.SE: "Aracaju",
    BrazilianState.TO: "Palmas",
}

CROP_COMBINATIONS = [
    [CropType.SOY, CropType.CORN],
    [CropType.SOY],
    [CropType.CORN],
    [CropType.COTTON, CropType.SOY],
    [CropType.COFFEE],
    [CropType.SUGARCANE],
    [CropType.SOY, CropType.CORN, CropType.COTTON],
]

FIRST_NAMES = ["João", "Maria", "José", "Ana", "Antônio", "Francisca", "Carlos", "Juliana", "Paulo", "Luiza"]
LAST_NAMES = ["Silva", "Santos", "Oliveira", "Souza", "Pereira", "Costa", "Rodrigues", "Almeida", "Lima", "Ferreira"]
COMPANY_NAMES = ["Agro", "Grãos", "Agropecuária", "Cerrado", "Campo Verde", "Terra Roxa", "Horizonte"]
COMPANY_SUFFIXES = ["Ltda", "S.A.", "EIRELI"]
FARM_NAME_PREFIXES = ["Fazenda", "Sítio", "Chácara", "Rancho", "Estância"]
FARM_NAMES = ["Boa Vista", "Santa Luzia", "São José", "Bela Vista", "Esperança", "Água Limpa", "Três Irmãos", "Primavera"]

CENTS = Decimal("0.01")


def generate_farm_areas(rng: random.Random) -> Dict[str, Decimal]:
    """
    Random areas in hectares, rounded to two decimals, with
    arable + vegetation never above the total.
    """
    total = Decimal(str(rng.uniform(10, 5000))).quantize(CENTS)
    arable = (total * Decimal(str(rng.uniform(0.3, 0.85)))).quantize(CENTS)
    vegetation = ((total - arable) * Decimal(str(rng.uniform(0.15, 0.95)))).quantize(CENTS)
    if arable + vegetation > total:
        vegetation = total - arable
    assert_valid_farm_area(total, arable, vegetation)
    return {"total_area": total, "arable_area": arable, "vegetation_area": vegetation}


def random_producer_name(rng: random.Random, is_company: bool) -> str:
    if is_company:
        return f"{rng.choice(COMPANY_NAMES)} {rng.choice(LAST_NAMES)} {rng.choice(COMPANY_SUFFIXES)}"
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)} {rng.choice(LAST_NAMES)}"


def pick_state(rng: random.Random) -> BrazilianState:
    states = list(STATE_WEIGHTS)
    return rng.choices(states, weights=[STATE_WEIGHTS[state] for state in states])[0]


def pick_city(db: Session, rng: random.Random, state: BrazilianState) -> str:
    names = [name for (name,) in db.query(City.name).filter(City.state == state.value).limit(100)]
    return rng.choice(names) if names else STATE_CAPITALS[state]


def seed_harvests(db: Session, years: int) -> List[Harvest]:
    """
    Ensures one harvest per year for the last `years` years, current year included.
    """
    current_year = datetime.now(pytz.utc).year
    harvests = []
    for year in range(current_year - years + 1, current_year + 1):
        harvest = db.query(Harvest).filter(Harvest.year == str(year)).first()
        if harvest is None:
            harvest = Harvest(year=str(year), description=f"Safra {year}/{year + 1}")
            db.add(harvest)
        harvests.append(harvest)
    db.flush()
    return harvests


def seed_demo_data(
    db: Session,
    producers: int = SEED_DEMO_PRODUCERS,
    farms: int = SEED_DEMO_FARMS,
    harvest_years: int = SEED_DEMO_HARVEST_YEARS,
    rng: Optional[random.Random] = None,
) -> Dict[str, int]:
    """
    Fills an empty database with demo producers, farms and harvests.

    Does nothing when at least one producer exists. About 30% of the producers
    are companies (CNPJ), the rest individuals (CPF). Farms land in real
    seeded cities of their state when available.

    Args:
        db (Session): Database session.
        producers (int): Number of producers to create.
        farms (int): Number of farms to create.
        harvest_years (int): Number of harvest years, ending in the current one.
        rng (Optional[random.Random]): Random source, seedable for repeatable data.

    Returns:
        Dict[str, int]: Counts of created producers, farms, harvests and crop links.
    """
    created = {"producers": 0, "farms": 0, "harvests": 0, "crops": 0}
    if db.query(Producer.id).first() is not None:
        logger.info("Producers already exist, skipping demo data")
        return created

    rng = rng or random.Random()
    try:
        harvests = seed_harvests(db, harvest_years)

        documents = set()
        producer_rows = []
        while len(producer_rows) < producers:
            is_company = rng.random() < 0.3
            document = generate_cnpj() if is_company else generate_cpf()
            if document in documents:
                continue
            documents.add(document)
            producer_rows.append(Producer(name=random_producer_name(rng, is_company), document=document))
        db.add_all(producer_rows)
        db.flush()

        farm_rows = []
        for _ in range(farms if producer_rows else 0):
            state = pick_state(rng)
            farm = Farm(
                name=f"{rng.choice(FARM_NAME_PREFIXES)} {rng.choice(FARM_NAMES)}",
                city=pick_city(db, rng, state),
                state=state.value,
                producer_id=rng.choice(producer_rows).id,
                **generate_farm_areas(rng),
            )
            picked = rng.sample(harvests, rng.randint(1, len(harvests))) if harvests else []
            for harvest in picked:
                farm_harvest = FarmHarvest(harvest=harvest)
                farm_harvest.crops = [FarmHarvestCrop(crop_type=crop.value) for crop in rng.choice(CROP_COMBINATIONS)]
                farm.farm_harvests.append(farm_harvest)
                created["crops"] += len(farm_harvest.crops)
            farm_rows.append(farm)
        db.add_all(farm_rows)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error("Failed to seed demo data: %s", e)
        raise

    created["producers"] = len(producer_rows)
    created["farms"] = len(farm_rows)
    created["harvests"] = len(harvests)
    logger.info(
        "Demo data seeded: %s producers, %s farms, %s harvests, %s crop links",
        created["producers"], created["farms"], created["harvests"], created["crops"],
    )
    return created
