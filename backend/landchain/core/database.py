from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
import logging

logger = logging.getLogger(__name__)

# Base class for models - can be imported without connecting to DB
Base = declarative_base()

# Engine and SessionLocal are lazily created
_engine = None
_SessionLocal = None


def _engine_kwargs(url: str) -> dict:
    """Driver-specific engine options."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        # Connection timeout to avoid hanging forever
        "connect_args": {"connect_timeout": 10},
    }


def get_engine():
    """
    Lazy engine creation - only connects when first used.
    This prevents import-time failures if database is unreachable.
    """
    global _engine
    if _engine is None:
        from landchain.core.config import settings
        logger.info(f"Creating database engine for: {settings.DATABASE_URL[:50]}...")
        _engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
    return _engine


def get_session_local():
    """Get or create SessionLocal factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db():
    """Dependency to get database session."""
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(engine=None):
    """Create all tables on the given engine (defaults to the app engine)."""
    # Import models so they register on Base.metadata
    from landchain import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def check_database_connection() -> bool:
    """
    Check if database is reachable.
    Returns True if connected, False otherwise.
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
