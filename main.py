from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from endpoints import auth, producers, farms, harvests, cities, dashboard, health
from dataBase import engine, SessionLocal
from models.models import Base
from utils.config import APP_NAME, APP_DESCRIPTION, APP_VERSION, API_BASE_PATH, LOG_LEVEL, SEED_CITIES, SEED_DEMO_DATA
from utils.ibge import seed_cities
from utils.request_logging import log_requests
from utils.response import create_response, validation_exception_handler, http_exception_handler
from utils.seed import seed_demo_data
from utils.security import get_current_user
import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create all the tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title=APP_NAME, description=APP_DESCRIPTION, version=APP_VERSION)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

# Correlation ID and access log for every request
app.middleware("http")(log_requests)

protected = [Depends(get_current_user)]

# Public routes
app.include_router(auth.router, prefix=f"{API_BASE_PATH}/auth", tags=["Auth"])
app.include_router(health.router, prefix=f"{API_BASE_PATH}/health", tags=["Health"])

# Routes that require a bearer token
app.include_router(producers.router, prefix=f"{API_BASE_PATH}/producers", tags=["Producers"], dependencies=protected)
app.include_router(farms.router, prefix=f"{API_BASE_PATH}/farms", tags=["Farms"], dependencies=protected)
app.include_router(harvests.router, prefix=f"{API_BASE_PATH}/harvests", tags=["Harvests"], dependencies=protected)
app.include_router(cities.router, prefix=f"{API_BASE_PATH}/cities", tags=["Cities"], dependencies=protected)
app.include_router(dashboard.router, prefix=f"{API_BASE_PATH}/dashboard", tags=["Dashboard"], dependencies=protected)


@app.get(API_BASE_PATH)
def read_root():
    """
    API root with the application name, version and description.
    """
    return create_response("success", f"Welcome to the {APP_NAME}", {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
    })


@app.on_event("startup")
def startup_event():
    db = SessionLocal()
    try:
        if SEED_CITIES:
            seed_cities(db)
        else:
            logger.info("City seeding disabled")
    except Exception as e:
        logger.error("City seeding failed: %s", e)

    try:
        if SEED_DEMO_DATA:
            seed_demo_data(db)
    except Exception as e:
        logger.error("Demo data seeding failed: %s", e)
    finally:
        db.close()
