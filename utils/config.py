import os
from dotenv import load_dotenv

# Load .env without overriding variables already set
load_dotenv()


def get_bool(name: str, default: bool) -> bool:
    """
    Reads a boolean flag from the environment.

    Accepts "1", "true", "yes" and "on" (case-insensitive) as true values.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def build_database_url() -> str:
    """
    Resolves the SQLAlchemy database URL.

    DATABASE_URL wins; otherwise a PostgreSQL URL is built from the PG* variables
    when PGHOST is present, and a local SQLite file is used as the last resort.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    if os.getenv("PGHOST"):
        db_host = os.getenv("PGHOST")
        db_port = os.getenv("PGPORT", "5432")
        db_name = os.getenv("PGDATABASE")
        db_user = os.getenv("PGUSER")
        db_password = os.getenv("PGPASSWORD")
        return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    return "sqlite:///./data/agro.db"


APP_NAME = "Brain Agriculture API"
APP_DESCRIPTION = "Rural producers, farms, harvests and crop distribution management"
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

DATABASE_URL = build_database_url()
DATABASE_ECHO = get_bool("DATABASE_ECHO", False)

API_BASE_PATH = os.getenv("API_BASE_PATH", "/api")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

JWT_SECRET = os.getenv("JWT_SECRET", "change-me-brain-agriculture-super-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_MINUTES = int(os.getenv("JWT_EXPIRATION_MINUTES", "1440"))

DEMO_USER_ID = "demo-user-id"
DEMO_USER_EMAIL = os.getenv("DEMO_USER_EMAIL", "admin@example.com")
DEMO_USER_PASSWORD = os.getenv("DEMO_USER_PASSWORD", "admin123")
DEMO_USER_PASSWORD_HASH = os.getenv("DEMO_USER_PASSWORD_HASH")

SEED_CITIES = get_bool("SEED_CITIES", True)
IBGE_API_BASE_URL = os.getenv("IBGE_API_BASE_URL", "https://servicodados.ibge.gov.br/api/v1/localidades")
IBGE_TIMEOUT = float(os.getenv("IBGE_TIMEOUT", "15"))

# Random producers, farms and harvests for demos; only on an empty producer table
SEED_DEMO_DATA = get_bool("SEED_DEMO_DATA", False)
SEED_DEMO_PRODUCERS = int(os.getenv("SEED_DEMO_PRODUCERS", "20"))
SEED_DEMO_FARMS = int(os.getenv("SEED_DEMO_FARMS", "40"))
SEED_DEMO_HARVEST_YEARS = int(os.getenv("SEED_DEMO_HARVEST_YEARS", "3"))

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
