"""
Demo data: four books with their authors, a promotion and two reviews.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from models import Author, Book, Review
from repositories.book_repository import AuthorRepository, BookRepository
from utils.logging_utils import log_operation

logger = logging.getLogger(__name__)

DDD_URL = "http://domaindrivendesign.org/"
QUANTUM_PROMOTION_PRICE = Decimal("219")
QUANTUM_PROMOTION_TEXT = "Save $1 if you order 40 years ahead!"


def create_four_books() -> List[Book]:
    martin_fowler = Author(name="Martin Fowler", email="martin@nospam.com")
    books = [
        Book(
            "Refactoring",
            "Improving the design of existing code",
            date(1999, 7, 8),
            "Addison-Wesley",
            Decimal("40"),
            None,
            [martin_fowler],
        ),
        Book(
            "Patterns of Enterprise Application Architecture",
            "Written in direct response to the stiff challenges",
            date(2002, 11, 15),
            "Addison-Wesley",
            Decimal("53"),
            None,
            [martin_fowler],
        ),
        Book(
            "Domain-Driven Design",
            "Linking business needs to software design",
            date(2003, 8, 30),
            "Addison-Wesley",
            Decimal("56"),
            DDD_URL,
            [Author(name="Eric Evans", email="eric@nospam.com")],
        ),
    ]

    quantum = Book(
        "Quantum Networking",
        "Entangled quantum networking provides faster-than-light data communications",
        date(2057, 1, 1),
        "Manning",
        Decimal("220"),
        None,
        [Author(name="Future Person")],
    )
    quantum.add_review(5, "I look forward to reading this book, if I am still alive!", "Jon P Smith")
    quantum.add_review(5, "I write this book if I was still alive!", "Albert Einstein")
    quantum.add_promotion(QUANTUM_PROMOTION_PRICE, QUANTUM_PROMOTION_TEXT)
    books.append(quantum)
    return books


@log_operation("seed_database")
def seed_database_four_books(db: Session) -> List[Book]:
    """
    Add the four demo books unless the database already has books.

    Returns:
        The books added (empty if nothing was seeded)
    """
    if BookRepository(db).count() > 0:
        logger.info("Database already has books - not seeding")
        return []
    books = create_four_books()
    db.add_all(books)
    db.commit()
    logger.info(
        f"Seeded {len(books)} books, {AuthorRepository(db).count()} authors and {db.query(Review).count()} reviews"
    )
    return books
