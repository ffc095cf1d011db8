import logging
import os

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_PATH = "./timewise.db"
PRODUCTION_ENVS = ("prod", "production")


def resolve_database_url(environ=None) -> str:
    """Pick the database URL for this deployment.

    DATABASE_URL wins when set. Otherwise a local SQLite file at DATABASE_PATH
    is used, except in production where a missing DATABASE_URL is an error.
    Hosted Postgres URLs of the form postgres:// are rewritten to the
    postgresql:// scheme SQLAlchemy expects.
    """
    environ = os.environ if environ is None else environ
    url = environ.get("DATABASE_URL")
    if not url:
        env = environ.get("ENV", environ.get("RENDER", "").lower() or "dev")
        if env in PRODUCTION_ENVS or environ.get("RENDER"):
            raise RuntimeError(
                "DATABASE_URL missing in production; refusing to start with SQLite. "
                "Please configure DATABASE_URL environment variable."
            )
        url = f"sqlite:///{environ.get('DATABASE_PATH', DEFAULT_DATABASE_PATH)}"

    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def build_engine(url: str):
    """Create an engine; SQLite is opened for use from FastAPI's threadpool."""
    driver = url.split(":", 1)[0] if ":" in url else "unknown"
    logger.info(f"DB_URL_DRIVER={driver}")

    if driver != "sqlite":
        return create_engine(url, echo=False)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # Every connection to an in-memory database would otherwise get its own empty copy
        kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=False, **kwargs)


DATABASE_URL = resolve_database_url()
engine = build_engine(DATABASE_URL)


def create_db_and_tables(bind=None):
    """Create the user and entry tables if they don't exist; existing rows are kept."""
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Get database session."""
    with Session(engine) as session:
        yield session
