"""
routes/books.py
Book pages: list (with search), detail, create, delete, update.
"""

from flask import (
    Blueprint, abort, current_app, flash, redirect, render_template, request, url_for
)

import assembly
from data_models import Book
from errors import IntegrityViolation, NotFound
from forms import BookForm
from integrity import IntegrityGuard
from openlibrary import fetch_summary_by_isbn
from store import get_store

books_bp = Blueprint('books', __name__, url_prefix='/catalog')


@books_bp.route("/books")
def book_list():
    """
    All books sorted by title; ?q= filters by title or author name.
    """
    q = request.args.get("q", "").strip()
    books = assembly.book_list(get_store(), q)
    return render_template("book_list.html", title="All Books", book_list=books, q=q)


@books_bp.route("/book/<int:book_id>")
def book_detail(book_id):
    context = assembly.book_detail(get_store(), book_id)
    if context is None:
        abort(404, description="Book not found")
    return render_template("book_detail.html", title=context["book"].title, **context)


def _prefill_from_isbn(form):
    """
    Prefill ISBN (and, if enabled, a summary from Open Library) from ?isbn=.
    """
    isbn = request.args.get("isbn", "").strip()
    if not isbn:
        return
    form.isbn.data = isbn
    if current_app.config.get("ENABLE_SUMMARY_LOOKUP"):
        summary = fetch_summary_by_isbn(isbn, timeout=current_app.config.get("OPENLIBRARY_TIMEOUT", 8))
        if summary:
            form.summary.data = summary
        else:
            flash("No summary found on Open Library for this ISBN.", "info")


@books_bp.route("/book/create", methods=["GET", "POST"])
def book_create():
    store = get_store()
    form = BookForm()
    if request.method == "GET":
        _prefill_from_isbn(form)

    context = assembly.book_form_context(store, form)

    if form.validate_on_submit():
        book = store.create(Book, form.to_data())
        flash(f"Book '{form.title.data}' was added successfully.", "success")
        return redirect(book.url)

    return render_template("book_form.html", title="New Book", **context)


@books_bp.route("/book/<int:book_id>/delete", methods=["GET", "POST"])
def book_delete(book_id):
    """
    GET shows the book and its copies; POST deletes it unless copies exist.
    """
    store = get_store()

    if request.method == "POST":
        try:
            IntegrityGuard(store).delete_book(book_id)
        except NotFound:
            return redirect(url_for("books.book_list"))
        except IntegrityViolation as exc:
            return render_template(
                "book_delete.html",
                title="Cannot Delete Book",
                book=exc.record,
                book_instances=exc.dependents,
            ), 409
        flash("Book was deleted successfully.", "success")
        return redirect(url_for("books.book_list"))

    context = assembly.book_detail(store, book_id)
    if context is None:
        return redirect(url_for("books.book_list"))
    return render_template("book_delete.html", title="Delete Book", **context)


@books_bp.route("/book/<int:book_id>/update", methods=["GET", "POST"])
def book_update(book_id):
    store = get_store()
    book = store.find_by_id(Book, book_id)
    if book is None:
        abort(404, description="Book not found")

    form = BookForm() if request.method == "POST" else BookForm.from_record(book)
    context = assembly.book_form_context(store, form)

    if form.validate_on_submit():
        book = store.update_by_id(Book, book_id, form.to_data())
        flash(f"Book '{form.title.data}' was updated successfully.", "success")
        return redirect(book.url)

    return render_template("book_form.html", title="Edit Book", book=book, **context)
