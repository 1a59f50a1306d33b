from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")

if "sqlite" in DATABASE_URL.lower():
    # One shared connection so the in-memory database is visible to every session
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=30,
    )

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine
)


def get_db():
    """Request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def test_connection():
    """SELECT 1 against the engine; False instead of raising."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            return True
    except Exception as e:
        logger.warning(f"[WARN] Database connection failed (continuing): {e}")
        return False


def init_db():
    """Create all tables."""
    # Models must be imported before create_all sees them
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("[OK] Database tables initialized!")
    return True


def reset_db():
    """Drop and recreate every table (used by the test-suite)."""
    import app.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def close_db_connection():
    """Dispose of the engine (drops the in-memory database)."""
    try:
        engine.dispose()
        logger.info("[OK] Database connections closed")
    except Exception as e:
        logger.warning(f"[WARN] Error closing DB: {e}")
