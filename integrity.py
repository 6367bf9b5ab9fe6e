"""
Referential integrity guard for deletes.

Authors and genres may not be deleted while a book references them, and a
book may not be deleted while copies of it exist. Nothing cascades: the
delete is refused and the blocking records are reported.

The check and the delete are a single ``DELETE ... WHERE NOT EXISTS (...)``
statement, so a dependent created by a concurrent request cannot be orphaned.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Tuple

import sqlalchemy as sa

from data_models import Author, Book, BookInstance, Genre, book_genres
from errors import IntegrityViolation, NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dependency:
    dependent: type
    # ORM criterion selecting the dependents of a record id.
    references: Callable
    # Core EXISTS clause that is true while any dependent remains.
    blockers: Callable
    # Association rows owned by the record, removed together with it.
    links: Tuple = field(default_factory=tuple)


RULES = {
    Author: Dependency(
        dependent=Book,
        references=lambda record_id: Book.author_id == record_id,
        blockers=lambda record_id: sa.exists().where(Book.author_id == record_id),
    ),
    Genre: Dependency(
        dependent=Book,
        references=lambda record_id: Book.genre.any(Genre.id == record_id),
        blockers=lambda record_id: sa.exists().where(book_genres.c.genre_id == record_id),
    ),
    Book: Dependency(
        dependent=BookInstance,
        references=lambda record_id: BookInstance.book_id == record_id,
        blockers=lambda record_id: sa.exists().where(BookInstance.book_id == record_id),
        links=(book_genres.c.book_id,),
    ),
}


class IntegrityGuard:
    def __init__(self, store):
        self.store = store

    def dependents(self, model, record_id, options=()):
        """
        List the records that prevent ``record_id`` from being deleted.
        """
        rule = RULES.get(model)
        if rule is None:
            return []
        return self.store.find_all(rule.dependent, rule.references(record_id), options=options)

    def delete(self, model, record_id):
        """
        Delete the record if nothing depends on it.

        Raises IntegrityViolation (carrying the dependents) when blocked and
        NotFound when the record does not exist.
        """
        rule = RULES.get(model)
        if rule is None:
            if not self.store.delete_by_id(model, record_id):
                raise NotFound(model, record_id)
            return

        session = self.store.session
        for column in rule.links:
            session.execute(sa.delete(column.table).where(column == record_id))

        stmt = (
            sa.delete(model)
            .where(model.id == record_id, ~rule.blockers(record_id))
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)

        if result.rowcount == 1:
            session.commit()
            logger.info("Deleted %s %s", model.__name__, record_id)
            return

        session.rollback()
        record = self.store.find_by_id(model, record_id)
        if record is None:
            raise NotFound(model, record_id)

        dependents = self.dependents(model, record_id)
        logger.info(
            "Refused to delete %s %s: %d dependent %s record(s)",
            model.__name__, record_id, len(dependents), rule.dependent.__name__,
        )
        raise IntegrityViolation(record, dependents)

    def delete_author(self, author_id):
        self.delete(Author, author_id)

    def delete_genre(self, genre_id):
        self.delete(Genre, genre_id)

    def delete_book(self, book_id):
        self.delete(Book, book_id)
