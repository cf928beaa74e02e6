import os
import sys

# In-memory database and no IBGE calls while testing
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_CITIES"] = "false"

# Add the project root to sys.path
sys.path.append(os.path.dirname(os.path.abspath(__file__)) + '/../')

import pytest

from dataBase import engine, SessionLocal, get_db_session
from main import app
from models.models import Base, Producer, Farm, City
from utils.config import DEMO_USER_ID, DEMO_USER_EMAIL
from utils.security import create_access_token


@pytest.fixture(scope="function")
def session_for_tests():
    """Creates a fresh schema for each test and drops it at the end."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def app_with_overrides(session_for_tests):
    # Override get_db_session so the app uses the test session
    def override_get_db_session():
        yield session_for_tests

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token(DEMO_USER_ID, DEMO_USER_EMAIL)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def producer(session_for_tests):
    producer = Producer(name="João da Silva", document="11144477735")
    session_for_tests.add(producer)
    session_for_tests.commit()
    return producer


@pytest.fixture
def farm(session_for_tests, producer):
    farm = Farm(
        name="Fazenda Boa Vista",
        city="Campinas",
        state="SP",
        total_area=100,
        arable_area=60,
        vegetation_area=30,
        producer_id=producer.id,
    )
    session_for_tests.add(farm)
    session_for_tests.commit()
    return farm


@pytest.fixture
def cities(session_for_tests):
    rows = [
        City(name="Campinas", state="SP", ibge_code="3509502"),
        City(name="São Paulo", state="SP", ibge_code="3550308"),
        City(name="Ribeirão Preto", state="SP", ibge_code="3543402"),
        City(name="Belo Horizonte", state="MG", ibge_code="3106200"),
        City(name="Uberlândia", state="MG", ibge_code="3170206"),
    ]
    session_for_tests.add_all(rows)
    session_for_tests.commit()
    return rows
