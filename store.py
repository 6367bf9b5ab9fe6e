"""
Entity store: the only place that reads and writes catalog records.

The store is constructed once per application with a session (normally the
Flask-SQLAlchemy scoped session) and registered on the app, so handlers ask
for it via get_store() instead of reaching for a module-level connection.
"""

import logging
from dataclasses import asdict, is_dataclass

import sqlalchemy as sa
from flask import current_app
from sqlalchemy.exc import IntegrityError

from data_models import Author, Book, BookInstance, Genre
from errors import CatalogError, DuplicateKeyError, NotFound, ValidationError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "catalog_store"

DEFAULT_ORDER = {
    Author: (Author.family_name.asc(), Author.first_name.asc(), Author.id.asc()),
    Genre: (Genre.name.asc(), Genre.id.asc()),
    Book: (Book.title.asc(), Book.id.asc()),
    BookInstance: (BookInstance.id.asc(),),
}


class CatalogStore:
    def __init__(self, session):
        self.session = session

    # --- Reads ---

    def find_by_id(self, model, record_id):
        """
        Return the record, or None when no record has this id.
        """
        return self.session.get(model, record_id)

    def find_all(self, model, *criteria, order_by=None, options=()):
        """
        Return every record matching ``criteria``, in a deterministic order.

        ``options`` takes loader options, e.g. load_only() to project a few
        columns or selectinload() to expand references.
        """
        stmt = (
            sa.select(model)
            .where(*criteria)
            .options(*options)
            .order_by(*(order_by or DEFAULT_ORDER[model]))
        )
        return self.session.scalars(stmt).unique().all()

    def count(self, model, *criteria):
        stmt = sa.select(sa.func.count()).select_from(model).where(*criteria)
        return self.session.scalar(stmt)

    # --- Writes ---

    def create(self, model, payload):
        record = model()
        self._apply(record, payload)
        self.session.add(record)
        self._commit(model)
        logger.info("Created %r", record)
        return record

    def update_by_id(self, model, record_id, payload):
        """
        Replace every field of the record with the payload's values.
        The id is preserved.
        """
        record = self.find_by_id(model, record_id)
        if record is None:
            raise NotFound(model, record_id)
        self._apply(record, payload)
        self._commit(model)
        logger.info("Updated %r", record)
        return record

    def delete_by_id(self, model, record_id):
        """
        Remove the record unconditionally. Returns False if it did not exist.
        """
        record = self.find_by_id(model, record_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.commit()
        logger.info("Deleted %s %s", model.__name__, record_id)
        return True

    def close(self):
        self.session.remove()

    # --- Helpers ---

    def _apply(self, record, payload):
        """
        Copy payload values onto the record and check required fields.
        On failure the session is rolled back so no partial change lingers.
        """
        try:
            for key, value in self._resolve(type(record), payload).items():
                setattr(record, key, value)
            self._check_required(record)
        except CatalogError:
            self.session.rollback()
            raise

    def _resolve(self, model, payload):
        """
        Turn a payload into attribute values.

        Relationship fields carry ids (a sequence for collections) and are
        resolved to records here, so payloads never hold ORM objects.
        """
        mapper = sa.inspect(model)
        resolved = {}
        values = asdict(payload) if is_dataclass(payload) else dict(payload)

        for key, value in values.items():
            if key in mapper.relationships:
                rel = mapper.relationships[key]
                if rel.uselist:
                    value = self._resolve_many(rel.mapper.class_, value or [])
                elif value is not None:
                    value = self._resolve_one(rel.mapper.class_, value)
            elif key in mapper.columns:
                column = mapper.columns[key]
                if value is None and column.default is not None and column.default.is_scalar:
                    value = column.default.arg
            else:
                raise AttributeError(f"{model.__name__} has no field '{key}'")
            resolved[key] = value
        return resolved

    def _resolve_one(self, model, record_id):
        record = self.find_by_id(model, record_id)
        if record is None:
            raise NotFound(model, record_id)
        return record

    def _resolve_many(self, model, record_ids):
        ids = list(dict.fromkeys(record_ids))
        if not ids:
            return []
        records = self.find_all(model, model.id.in_(ids))
        missing = set(ids) - {r.id for r in records}
        if missing:
            raise NotFound(model, min(missing))
        return records

    def _check_required(self, record):
        mapper = sa.inspect(type(record))
        # Foreign keys are only populated at flush; a set reference counts.
        referenced = {
            column.key
            for rel in mapper.relationships
            if not rel.uselist and getattr(record, rel.key) is not None
            for column in rel.local_columns
        }
        missing = []
        for attr in mapper.column_attrs:
            column = attr.columns[0]
            if column.primary_key or column.nullable or column.key in referenced:
                continue
            value = getattr(record, attr.key)
            if value is None or (isinstance(value, str) and not value.strip()):
                if column.default is None:
                    missing.append(attr.key)
        if missing:
            raise ValidationError(type(record), missing)

    def _commit(self, model):
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if "unique" in str(exc.orig).lower() or "duplicate" in str(exc.orig).lower():
                raise DuplicateKeyError(model, f"{model.__name__} already exists") from exc
            raise


def init_store(app, session):
    """
    Build the store for ``app`` and register it. The session is removed when
    each app context ends.
    """
    store = CatalogStore(session)
    app.extensions[EXTENSION_KEY] = store
    return store


def get_store() -> CatalogStore:
    return current_app.extensions[EXTENSION_KEY]
