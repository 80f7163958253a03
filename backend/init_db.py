from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
import logging

from database import Base, SessionLocal
from exceptions import DatabaseError
from services.book_seed import seed_database_four_books
import models  # noqa: F401  registers the tables on Base.metadata

logger = logging.getLogger(__name__)


def init_database(engine: Engine, seed: bool = True, session_factory=SessionLocal):
    """
    Create any missing tables and, optionally, seed the demo books.

    Args:
        engine: Engine to create the tables on
        seed: Add the four demo books when the database has none
        session_factory: Session factory bound to the same engine

    Raises:
        DatabaseError: If the tables cannot be created or the seed fails
    """
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise DatabaseError("create tables", str(e)) from e
    logger.info(f"Database tables ready: {', '.join(sorted(Base.metadata.tables))}")

    if seed:
        db = session_factory()
        try:
            seed_database_four_books(db)
        except SQLAlchemyError as e:
            db.rollback()
            raise DatabaseError("seed database", str(e)) from e
        finally:
            db.close()
