from datetime import date

import pytest

from data_models import Author, Book, BookInstance, Genre, format_date, genre_name_key


def test_author_name_is_family_then_first():
    author = Author(first_name="Jane", family_name="Austen")
    assert author.name == "Austen, Jane"
    assert str(author) == "Austen, Jane"


@pytest.mark.parametrize("birth, death, expected", [
    (date(1775, 12, 16), date(1817, 7, 18), "Dec 16, 1775 - Jul 18, 1817"),
    (date(1947, 9, 21), None, "Sep 21, 1947 -"),
    (None, date(1616, 4, 23), "? - Apr 23, 1616"),
    (None, None, "Unknown"),
])
def test_author_lifespan(birth, death, expected):
    author = Author(first_name="A", family_name="B", date_of_birth=birth, date_of_death=death)
    assert author.lifespan == expected


def test_urls_use_record_ids():
    assert Author(id=3).url == "/catalog/author/3"
    assert Genre(id=4).url == "/catalog/genre/4"
    assert Book(id=5).url == "/catalog/book/5"
    assert BookInstance(id=6).url == "/catalog/bookinstance/6"


def test_due_back_formatted():
    copy = BookInstance(imprint="Penguin", status="Loaned", due_back=date(2024, 1, 5))
    assert copy.due_back_formatted == "Jan 05, 2024"
    assert BookInstance(imprint="Penguin").due_back_formatted == ""


def test_format_date_unknown():
    assert format_date(None) == ""


def test_genre_name_key_follows_name():
    genre = Genre(name="Éthique")
    assert genre.name_key == "éthique"

    genre.name = "  Science   FICTION "
    assert genre.name_key == "science fiction"
    assert genre_name_key("Straße") == genre_name_key("STRASSE")
