# tests/conftest.py
import pytest

from app import create_app, shutdown
from data_models import Author, Book, BookInstance, Genre
from forms import AuthorData, BookData, BookInstanceData, GenreData
from store import get_store


@pytest.fixture
def app(tmp_path):
    # A fresh SQLite file per test
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'catalog.sqlite'}",
        "WTF_CSRF_ENABLED": False,
        "ENABLE_SUMMARY_LOOKUP": False,
        "ENVIRONMENT": "testing",
        "SECRET_KEY": "test-secret",
    })
    yield app
    shutdown(app)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    with app.app_context():
        yield get_store()


class RecordFactory:
    """
    Shortcuts for creating catalog records through the store.
    """

    def __init__(self, store):
        self.store = store

    def author(self, first_name="Jane", family_name="Austen", **dates):
        return self.store.create(Author, AuthorData(first_name, family_name, **dates))

    def genre(self, name="Fiction"):
        return self.store.create(Genre, GenreData(name))

    def book(self, author, genres=(), title="Emma", summary="A novel.", isbn="9780141439587"):
        return self.store.create(Book, BookData(
            title=title,
            author=author.id,
            summary=summary,
            isbn=isbn,
            genre=[g.id for g in genres],
        ))

    def copy(self, book, imprint="Penguin, 2003", status="Available", due_back=None):
        return self.store.create(BookInstance, BookInstanceData(book.id, imprint, status, due_back))


@pytest.fixture
def make(store):
    return RecordFactory(store)
