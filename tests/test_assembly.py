from types import SimpleNamespace

import assembly


def test_genre_options_marks_selected_genres():
    genres = [SimpleNamespace(id=i, name=f"Genre {i}") for i in (1, 2, 3)]
    options = assembly.genre_options(genres, [1, 3])

    assert [(o.id, o.checked) for o in options] == [(1, True), (2, False), (3, True)]
    assert not any(o.checked for o in assembly.genre_options(genres, None))


def test_dashboard_counts(make, store):
    author = make.author()
    make.genre("Fiction")
    book = make.book(author)
    make.copy(book, status="Available")
    make.copy(book, status="Maintenance")

    assert assembly.dashboard_counts(store) == {
        "book_count": 1,
        "book_instance_count": 2,
        "book_instance_available_count": 1,
        "author_count": 1,
        "genre_count": 1,
    }


def test_book_list_search(make, store):
    austen = make.author("Jane", "Austen")
    twain = make.author("Mark", "Twain")
    make.book(austen, title="Persuasion")
    make.book(austen, title="Emma")
    make.book(twain, title="Tom Sawyer")

    assert [b.title for b in assembly.book_list(store)] == ["Emma", "Persuasion", "Tom Sawyer"]
    assert [b.title for b in assembly.book_list(store, "emma")] == ["Emma"]
    assert [b.title for b in assembly.book_list(store, "twain")] == ["Tom Sawyer"]


def test_book_detail_gathers_author_genres_and_copies(make, store):
    author = make.author()
    fiction = make.genre("Fiction")
    book = make.book(author, genres=[fiction])
    other = make.book(author, title="Persuasion")
    copy = make.copy(book)
    make.copy(other)

    context = assembly.book_detail(store, book.id)
    assert context["book"].author.name == "Austen, Jane"
    assert [g.name for g in context["book"].genre] == ["Fiction"]
    assert [c.id for c in context["book_instances"]] == [copy.id]


def test_detail_views_return_none_when_missing(store):
    assert assembly.author_detail(store, 1) is None
    assert assembly.genre_detail(store, 1) is None
    assert assembly.book_detail(store, 1) is None
    assert assembly.bookinstance_detail(store, 1) is None


def test_author_detail_lists_only_their_books(make, store):
    austen = make.author()
    twain = make.author("Mark", "Twain")
    emma = make.book(austen, title="Emma")
    make.book(twain, title="Tom Sawyer")

    context = assembly.author_detail(store, austen.id)
    assert [b.id for b in context["author_books"]] == [emma.id]
