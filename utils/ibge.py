import logging
from typing import Callable, Dict, List

import requests
from sqlalchemy.orm import Session

from models.models import City
from utils.config import IBGE_API_BASE_URL, IBGE_TIMEOUT
from utils.constants import BrazilianState

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], List[Dict]]


def fetch_municipalities_by_state(state: str) -> List[Dict]:
    """
    Fetches every municipality of a state from the IBGE localities API.

    Args:
        state (str): Two-letter state code, e.g. "SP".

    Returns:
        List[Dict]: Raw IBGE records, each with at least "id" and "nome".

    Raises:
        requests.RequestException: On network errors or non-2xx answers.
    """
    url = f"{IBGE_API_BASE_URL}/estados/{state}/municipios"
    logger.debug("Fetching municipalities of %s from %s", state, url)
    resp = requests.get(url, timeout=IBGE_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def seed_cities(db: Session, fetcher: Fetcher = fetch_municipalities_by_state) -> int:
    """
    Loads the municipalities of all 27 states into the city table.

    Only states without any city row are fetched, so a state whose request
    failed on a previous run is retried on the next one. A failed state is
    logged and skipped; the remaining states still get seeded.

    Args:
        db (Session): Database session.
        fetcher (Fetcher): Returns the IBGE records of one state.

    Returns:
        int: Number of cities inserted.
    """
    seeded_states = {state for (state,) in db.query(City.state).distinct()}
    missing = [state for state in BrazilianState if state.value not in seeded_states]
    if not missing:
        logger.info("Cities already seeded for every state, skipping IBGE import")
        return 0

    inserted = 0
    seen_codes = {code for (code,) in db.query(City.ibge_code)}
    for state in missing:
        try:
            records = fetcher(state.value)
        except (requests.RequestException, ValueError) as e:
            logger.error("Failed to fetch municipalities of %s: %s", state.value, e)
            continue

        cities = []
        for record in records:
            ibge_code = str(record.get("id", ""))
            name = record.get("nome")
            if not name or not ibge_code or ibge_code in seen_codes:
                continue
            seen_codes.add(ibge_code)
            cities.append(City(name=name, state=state.value, ibge_code=ibge_code))

        try:
            db.add_all(cities)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error("Failed to store municipalities of %s: %s", state.value, e)
            raise

        inserted += len(cities)
        logger.info("Seeded %s cities for %s", len(cities), state.value)

    logger.info("City seeding finished: %s cities inserted", inserted)
    return inserted
