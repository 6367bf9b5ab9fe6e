"""
View assembly: gathers the records each page needs and flattens the joins
(a book's author and genres, a copy's book title, ...) for the templates.

Every function returns None when the primary record does not exist; the
handler decides what that means for its route.
"""

from dataclasses import dataclass

from sqlalchemy.orm import joinedload, load_only, selectinload

from data_models import Author, Book, BookInstance, Genre
from integrity import IntegrityGuard


@dataclass
class GenreOption:
    id: int
    name: str
    checked: bool


def dashboard_counts(store):
    return {
        "book_count": store.count(Book),
        "book_instance_count": store.count(BookInstance),
        "book_instance_available_count": store.count(BookInstance, BookInstance.status == "Available"),
        "author_count": store.count(Author),
        "genre_count": store.count(Genre),
    }


def _brief_books():
    return (load_only(Book.title, Book.summary),)


def book_list(store, q=""):
    """
    All books by title with their authors, optionally filtered by a
    case-insensitive match on title or author name.
    """
    criteria = []
    if q:
        like = f"%{q}%"
        criteria.append(
            Book.title.ilike(like)
            | Book.author.has(Author.first_name.ilike(like) | Author.family_name.ilike(like))
        )
    return store.find_all(Book, *criteria, options=(joinedload(Book.author),))


def bookinstance_list(store):
    return store.find_all(BookInstance, options=(joinedload(BookInstance.book),))


def author_detail(store, author_id):
    author = store.find_by_id(Author, author_id)
    if author is None:
        return None
    books = IntegrityGuard(store).dependents(Author, author_id, options=_brief_books())
    return {"author": author, "author_books": books}


def genre_detail(store, genre_id):
    genre = store.find_by_id(Genre, genre_id)
    if genre is None:
        return None
    books = IntegrityGuard(store).dependents(Genre, genre_id, options=_brief_books())
    return {"genre": genre, "genre_books": books}


def book_detail(store, book_id):
    books = store.find_all(
        Book,
        Book.id == book_id,
        options=(joinedload(Book.author), selectinload(Book.genre)),
    )
    if not books:
        return None
    instances = IntegrityGuard(store).dependents(Book, book_id)
    return {"book": books[0], "book_instances": instances}


def bookinstance_detail(store, instance_id):
    instances = store.find_all(
        BookInstance,
        BookInstance.id == instance_id,
        options=(joinedload(BookInstance.book),),
    )
    if not instances:
        return None
    return {"bookinstance": instances[0]}


def genre_options(genres, selected_ids):
    """
    Mark each genre as checked when its id is in ``selected_ids``.
    """
    selected = set(selected_ids or [])
    return [GenreOption(id=g.id, name=g.name, checked=g.id in selected) for g in genres]


def book_form_context(store, form):
    """
    Load author and genre choices onto a BookForm and return the template
    context, with genres checked per the form's current genre data.
    """
    authors = store.find_all(Author)
    genres = store.find_all(Genre)
    form.with_choices(authors, genres)
    return {
        "form": form,
        "authors": authors,
        "genres": genre_options(genres, form.genre.data),
    }


def bookinstance_form_context(store, form):
    books = store.find_all(Book, options=(load_only(Book.title),))
    form.with_choices(books)
    return {"form": form, "book_list": books}
