"""
routes/authors.py
Author pages: list, detail, create, delete, update.
"""

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

import assembly
from data_models import Author
from errors import IntegrityViolation, NotFound
from forms import AuthorForm
from integrity import IntegrityGuard
from store import get_store

authors_bp = Blueprint('authors', __name__, url_prefix='/catalog')


@authors_bp.route("/authors")
def author_list():
    authors = get_store().find_all(Author)
    return render_template("author_list.html", title="List of Authors", author_list=authors)


@authors_bp.route("/author/<int:author_id>")
def author_detail(author_id):
    context = assembly.author_detail(get_store(), author_id)
    if context is None:
        abort(404, description="Author not found")
    return render_template("author_detail.html", title="Author Detail", **context)


@authors_bp.route("/author/create", methods=["GET", "POST"])
def author_create():
    form = AuthorForm()

    if form.validate_on_submit():
        author = get_store().create(Author, form.to_data())
        flash(f"Author '{author.name}' was added successfully.", "success")
        return redirect(author.url)

    return render_template("author_form.html", title="Add New Author", form=form)


@authors_bp.route("/author/<int:author_id>/delete", methods=["GET", "POST"])
def author_delete(author_id):
    """
    GET shows the author and any books that block deletion.
    POST deletes the author unless books still reference it.
    """
    store = get_store()

    if request.method == "POST":
        try:
            IntegrityGuard(store).delete_author(author_id)
        except NotFound:
            return redirect(url_for("authors.author_list"))
        except IntegrityViolation as exc:
            return render_template(
                "author_delete.html",
                title="Cannot Delete Author",
                author=exc.record,
                author_books=exc.dependents,
            ), 409
        flash("Author was deleted successfully.", "success")
        return redirect(url_for("authors.author_list"))

    context = assembly.author_detail(store, author_id)
    if context is None:
        return redirect(url_for("authors.author_list"))
    return render_template("author_delete.html", title="Delete Author", **context)


@authors_bp.route("/author/<int:author_id>/update", methods=["GET", "POST"])
def author_update(author_id):
    store = get_store()
    author = store.find_by_id(Author, author_id)
    if author is None:
        abort(404, description="Author not found")

    form = AuthorForm() if request.method == "POST" else AuthorForm.from_record(author)

    if form.validate_on_submit():
        author = store.update_by_id(Author, author_id, form.to_data())
        flash(f"Author '{author.name}' was updated successfully.", "success")
        return redirect(author.url)

    return render_template("author_form.html", title="Edit Author", form=form, author=author)
