import re

from data_models import Book
import openlibrary


def book_form(author, **overrides):
    data = {
        "title": "Emma",
        "author": str(author.id),
        "summary": "A novel.",
        "isbn": "9780141439587",
    }
    data.update(overrides)
    return data


def checked_genre_ids(html):
    return {int(i) for i in re.findall(r'name="genre" id="genre-\d+" value="(\d+)" checked', html)}


def test_create_book_with_single_genre_stores_list(client, store, make):
    author = make.author()
    fiction = make.genre("Fiction")
    make.genre("Poetry")

    response = client.post("/catalog/book/create", data=book_form(author, genre=str(fiction.id)))

    books = store.find_all(Book)
    assert len(books) == 1
    assert response.status_code == 302
    assert response.headers["Location"].endswith(f"/catalog/book/{books[0].id}")
    assert isinstance(books[0].genre, list)
    assert [g.id for g in books[0].genre] == [fiction.id]


def test_create_book_then_edit_form_checks_its_genres(client, store, make):
    author = make.author()
    g1, g2, g3 = make.genre("Fiction"), make.genre("Poetry"), make.genre("Romance")

    client.post("/catalog/book/create", data=book_form(author, genre=[str(g1.id), str(g2.id)]))
    book = store.find_all(Book)[0]

    html = client.get(f"/catalog/book/{book.id}/update").get_data(as_text=True)
    assert checked_genre_ids(html) == {g1.id, g2.id}
    assert f'value="{g3.id}">' in html


def test_create_book_missing_fields_rerenders_form(client, store, make):
    author = make.author()
    fiction = make.genre("Fiction")

    response = client.post("/catalog/book/create", data=book_form(author, summary="", isbn="", genre=str(fiction.id)))
    html = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "Summary required." in html
    assert "ISBN required." in html
    assert checked_genre_ids(html) == {fiction.id}
    assert store.count(Book) == 0


def test_create_book_form_lists_authors_and_genres(client, make):
    make.author("Mark", "Twain")
    make.genre("Satire")

    html = client.get("/catalog/book/create").get_data(as_text=True)
    assert "Twain, Mark" in html
    assert "Satire" in html


def test_create_book_prefills_summary_from_isbn(app, client, monkeypatch):
    app.config["ENABLE_SUMMARY_LOOKUP"] = True
    lookups = []

    def fake_fetch(isbn, timeout):
        lookups.append(isbn)
        return "Looked up summary."

    monkeypatch.setattr("routes.books.fetch_summary_by_isbn", fake_fetch)

    html = client.get("/catalog/book/create?isbn=978-0141439587").get_data(as_text=True)
    assert lookups == ["978-0141439587"]
    assert "Looked up summary." in html
    assert 'value="978-0141439587"' in html


def test_summary_lookup_disabled_makes_no_request(client, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("no lookup expected")

    monkeypatch.setattr(openlibrary.SESSION, "get", fail)

    response = client.get("/catalog/book/create?isbn=9780141439587")
    assert response.status_code == 200
    assert 'value="9780141439587"' in response.get_data(as_text=True)


def test_book_list_and_search(client, make):
    austen, twain = make.author("Jane", "Austen"), make.author("Mark", "Twain")
    make.book(austen, title="Persuasion")
    make.book(twain, title="Tom Sawyer")

    html = client.get("/catalog/books").get_data(as_text=True)
    assert html.index("Persuasion") < html.index("Tom Sawyer")

    html = client.get("/catalog/books?q=sawyer").get_data(as_text=True)
    assert "Tom Sawyer" in html
    assert "Persuasion" not in html


def test_book_detail_shows_author_genres_and_copies(client, make):
    fiction = make.genre("Fiction")
    book = make.book(make.author(), genres=[fiction])
    make.copy(book, imprint="Penguin Classics", status="Loaned")

    html = client.get(f"/catalog/book/{book.id}").get_data(as_text=True)
    assert "Austen, Jane" in html
    assert "Fiction" in html
    assert "Penguin Classics" in html
    assert "Loaned" in html


def test_book_detail_missing_is_404(client):
    assert client.get("/catalog/book/999").status_code == 404


def test_update_book(client, store, make):
    author = make.author()
    fiction, poetry = make.genre("Fiction"), make.genre("Poetry")
    book_id = make.book(author, genres=[fiction]).id

    response = client.post(
        f"/catalog/book/{book_id}/update",
        data=book_form(author, title="Emma (Revised)", genre=str(poetry.id)),
    )

    assert response.status_code == 302
    book = store.find_by_id(Book, book_id)
    assert book.title == "Emma (Revised)"
    assert [g.id for g in book.genre] == [poetry.id]


def test_update_book_without_genres_clears_them(client, store, make):
    author = make.author()
    book_id = make.book(author, genres=[make.genre("Fiction")]).id

    client.post(f"/catalog/book/{book_id}/update", data=book_form(author))

    assert store.find_by_id(Book, book_id).genre == []


def test_update_missing_book_is_404(client):
    assert client.get("/catalog/book/999/update").status_code == 404


def test_delete_book_with_copies_is_refused(client, store, make):
    book = make.book(make.author())
    make.copy(book, imprint="Penguin Classics")
    book_id = book.id

    response = client.post(f"/catalog/book/{book_id}/delete")

    assert response.status_code == 409
    assert "Penguin Classics" in response.get_data(as_text=True)
    assert store.find_by_id(Book, book_id) is not None


def test_delete_book_without_copies(client, store, make):
    book_id = make.book(make.author(), genres=[make.genre("Fiction")]).id

    response = client.post(f"/catalog/book/{book_id}/delete")

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/catalog/books")
    assert store.find_by_id(Book, book_id) is None
