import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from shared.core.config import SQLALCHEMY_DATABASE_URL, settings
from shared.core.exceptions import ConstraintViolation

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.DB_POOL_SIZE,        # max idle connections
        max_overflow=settings.DB_MAX_OVERFLOW,  # max temporary extra connections
        pool_timeout=settings.DB_POOL_TIMEOUT   # wait time before failing
    )


engine = build_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def scoped_transaction(db: Session):
    """
    Run a unit of work on ``db`` and commit it.

    Any exception rolls the session back before propagating. Integrity
    errors surface as ``ConstraintViolation``. A failing rollback is logged
    and never replaces the original error.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        _safe_rollback(db)
        raise ConstraintViolation(str(e.orig)) from e
    except Exception:
        _safe_rollback(db)
        raise


def _safe_rollback(db: Session):
    try:
        db.rollback()
    except Exception:
        logger.exception("Rollback failed")
